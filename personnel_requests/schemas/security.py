from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from personnel_requests.authz import NodeType, RoleType


class OrganizationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    organization_type: NodeType
    code: str
    name: str
    parent_id: int | None


class RoleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    role_type: RoleType
    organization: OrganizationOut | None


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    cas_directory_id: str
    name: str
    is_active: bool
    roles: list[RoleOut]


class MeOut(UserOut):
    # Set while an admin acts as this user.
    impersonator_id: int | None = None
