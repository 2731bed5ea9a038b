from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from personnel_requests.authz import NodeType, RequestVariant, RoleType
from personnel_requests.db.base import Base
from personnel_requests.db.session import SessionLocal, engine
from personnel_requests.models.report import Report  # noqa: F401
from personnel_requests.models.enums import EmployeeType, RequestType
from personnel_requests.models.organization import Organization
from personnel_requests.models.requests import UNDER_REVIEW, ArchivedRequest, PersonnelRequest, ReviewStatus
from personnel_requests.models.security import Role, RoleCutoff, User

REVIEW_STATUSES = (
    (UNDER_REVIEW, "Under Review"),
    ("Approved", "Approved"),
    ("NotApproved", "Not Approved"),
    ("Contingent", "Contingent"),
)


def init_db(seed: bool = True) -> None:
    """
    Create tables + seed demo data.

    Small and deterministic so the authorization rules can be tried without
    additional setup.
    """

    Base.metadata.create_all(bind=engine)

    with SessionLocal() as db:
        ensure_review_statuses(db)
        if seed and not _has_seed_data(db):
            _seed(db)
        db.commit()


def ensure_review_statuses(db: Session) -> None:
    existing = set(db.scalars(select(ReviewStatus.code)).all())
    db.add_all(ReviewStatus(code=code, name=name) for code, name in REVIEW_STATUSES if code not in existing)
    db.flush()


def _has_seed_data(db: Session) -> bool:
    return db.execute(select(Organization.id).limit(1)).first() is not None


def _seed(db: Session) -> None:
    # Organizations
    ssdr = Organization(organization_type=NodeType.DIVISION, code="SSDR", name="Digital Systems and Stewardship")
    pss = Organization(organization_type=NodeType.DIVISION, code="PSS", name="Public Services")
    db.add_all([ssdr, pss])
    db.flush()

    prg = Organization(organization_type=NodeType.DEPARTMENT, code="PRG", name="Programming", parent_id=ssdr.id)
    dcr = Organization(organization_type=NodeType.DEPARTMENT, code="DCR", name="Digital Conversion", parent_id=ssdr.id)
    ref = Organization(organization_type=NodeType.DEPARTMENT, code="REF", name="Reference", parent_id=pss.id)
    db.add_all([prg, dcr, ref])
    db.flush()

    prg_a = Organization(organization_type=NodeType.UNIT, code="PRG-A", name="Applications", parent_id=prg.id)
    prg_b = Organization(organization_type=NodeType.UNIT, code="PRG-B", name="Backend Services", parent_id=prg.id)
    db.add_all([prg_a, prg_b])
    db.flush()

    # Users and roles
    admin = User(cas_directory_id="test_admin", name="Admin User")
    admin.roles.append(Role(role_type=RoleType.ADMIN))

    division_user = User(cas_directory_id="division1", name="Division User")
    division_user.roles.append(Role(role_type=RoleType.DIVISION, organization_id=ssdr.id))

    department_user = User(cas_directory_id="prg_dept", name="Programming Department User")
    department_user.roles.append(Role(role_type=RoleType.DEPARTMENT, organization_id=prg.id))

    unit_user = User(cas_directory_id="prg_a_unit", name="Applications Unit User")
    unit_user.roles.append(Role(role_type=RoleType.UNIT, organization_id=prg_a.id))

    no_roles = User(cas_directory_id="test_not_admin", name="No Roles User")

    db.add_all([admin, division_user, department_user, unit_user, no_roles])
    db.flush()

    # Cutoffs: unit-tier editing closes at the end of the fiscal year.
    db.add(RoleCutoff(role_type=RoleType.UNIT, organization_id=None, cutoff_date=date(2099, 6, 30)))

    under_review = db.scalars(select(ReviewStatus).where(ReviewStatus.code == UNDER_REVIEW)).one()

    db.add_all(
        [
            PersonnelRequest(
                request_model_type=RequestVariant.STAFF,
                position_title="Software Developer",
                employee_type=EmployeeType.EXEMPT,
                request_type=RequestType.NEW,
                employee_name="Pat Example",
                annual_base_pay=Decimal("85000.00"),
                nonop_funds=Decimal("0.00"),
                justification="Maintain the request tracking applications.",
                department_id=prg.id,
                unit_id=prg_a.id,
                review_status_id=under_review.id,
                user_id=unit_user.id,
            ),
            PersonnelRequest(
                request_model_type=RequestVariant.LABOR,
                position_title="Student Assistant",
                employee_type=EmployeeType.STUDENT,
                request_type=RequestType.RENEWAL,
                contractor_name="Campus Staffing",
                hourly_rate=Decimal("15.50"),
                hours_per_week=Decimal("20.00"),
                number_of_weeks=30,
                number_of_positions=2,
                justification="Scanning backlog for the digitization program.",
                department_id=dcr.id,
                review_status_id=under_review.id,
                user_id=division_user.id,
            ),
            PersonnelRequest(
                request_model_type=RequestVariant.CONTRACTOR,
                position_title="Reference Consultant",
                employee_type=EmployeeType.CONTINGENT_2,
                request_type=RequestType.BACKFILL,
                contractor_name="Library Consulting LLC",
                annual_base_pay=Decimal("40000.00"),
                justification="Cover the reference desk during a vacancy.",
                department_id=ref.id,
                review_status_id=under_review.id,
                user_id=admin.id,
            ),
            ArchivedRequest(
                fiscal_year="FY2016",
                request_model_type=RequestVariant.STAFF,
                position_title="Archivist",
                employee_type=EmployeeType.EXEMPT,
                request_type=RequestType.NEW,
                employee_name="Former Employee",
                annual_base_pay=Decimal("60000.00"),
                justification="Archived request kept for the FY2016 budget cycle.",
                department_id=prg.id,
                unit_id=prg_b.id,
                review_status_id=under_review.id,
            ),
        ]
    )
    db.flush()
