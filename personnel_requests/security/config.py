from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

from personnel_requests.authz import RoleType

_ROLE_CODES = frozenset(r.value for r in RoleType)


def _check_role_codes(roles: list[str]) -> list[str]:
    unknown = sorted(set(roles) - _ROLE_CODES)
    if unknown:
        raise ValueError(f"unknown role types {unknown}; expected some of {sorted(_ROLE_CODES)}")
    return roles


class AuthConfig(BaseModel):
    provider: str = "dummy"
    authorization_header: str = "Authorization"
    bearer_prefix: str = "Bearer"
    impersonate_header: str = "X-Impersonate-User"


class DefaultRule(BaseModel):
    auth_required: bool = True
    required_roles: list[str] = Field(default_factory=list)
    scope_requests: bool = False

    @field_validator("required_roles")
    @classmethod
    def known_roles(cls, value: list[str]) -> list[str]:
        return _check_role_codes(value)


class RouteRule(BaseModel):
    """
    One entry under ``routes``.

    ``auth_required`` and ``scope_requests`` left unset fall back to the
    default rule; ``required_roles`` holds role type codes.
    """

    path: str
    methods: list[str] = Field(default_factory=lambda: ["GET"])

    auth_required: bool | None = None
    required_roles: list[str] = Field(default_factory=list)
    scope_requests: bool | None = None

    @field_validator("required_roles")
    @classmethod
    def known_roles(cls, value: list[str]) -> list[str]:
        return _check_role_codes(value)

    @field_validator("methods")
    @classmethod
    def upper_methods(cls, value: list[str]) -> list[str]:
        return [m.upper() for m in value]

    @property
    def is_template(self) -> bool:
        return "{" in self.path


class SecurityConfigModel(BaseModel):
    auth: AuthConfig = Field(default_factory=AuthConfig)
    default: DefaultRule = Field(default_factory=DefaultRule)
    routes: list[RouteRule] = Field(default_factory=list)


@dataclass(frozen=True)
class EffectiveRule:
    """Rule for one (path, method) with defaults applied."""

    auth_required: bool
    required_roles: frozenset[str]
    scope_requests: bool


def _path_pattern(template: str) -> re.Pattern[str]:
    # "/reports/{id}" matches "/reports/12" but not "/reports/12/extra".
    return re.compile("^" + re.sub(r"\{[^/]+\}", "[^/]+", template) + "$")


class SecurityConfig:
    """
    Validated route rules plus path matching.

    Literal paths are tried before templated ones, each in file order.
    """

    def __init__(self, model: SecurityConfigModel):
        self.model = model
        literal = [r for r in model.routes if not r.is_template]
        templated = [r for r in model.routes if r.is_template]
        self._ordered: list[tuple[re.Pattern[str], RouteRule]] = [
            (_path_pattern(r.path), r) for r in literal + templated
        ]

    @property
    def auth(self) -> AuthConfig:
        return self.model.auth

    def match(self, path: str, method: str) -> EffectiveRule:
        method = method.upper()
        default = self.model.default

        for pattern, rule in self._ordered:
            if method in rule.methods and pattern.match(path):
                return _effective(rule, default)

        return EffectiveRule(
            auth_required=default.auth_required,
            required_roles=frozenset(default.required_roles),
            scope_requests=default.scope_requests,
        )


def _effective(rule: RouteRule, default: DefaultRule) -> EffectiveRule:
    # Requiring roles or a listing scope implies authentication even when the
    # default rule is public.
    implied_auth = default.auth_required or bool(rule.required_roles) or bool(rule.scope_requests)

    return EffectiveRule(
        auth_required=implied_auth if rule.auth_required is None else rule.auth_required,
        required_roles=frozenset(rule.required_roles or default.required_roles),
        scope_requests=default.scope_requests if rule.scope_requests is None else rule.scope_requests,
    )


def load_security_config(path: Path) -> SecurityConfig:
    raw: dict[str, Any] = yaml.safe_load(path.read_text(encoding="utf-8")) or {}

    if "security" not in raw:
        raise ValueError(f"Missing top-level 'security' key in config: {path}")

    return SecurityConfig(SecurityConfigModel.model_validate(raw["security"]))
