"""
Pytest fixtures for the test suite.

Data-layer and API tests use an in-memory SQLite engine and a session that
rolls back after each test, so tests do not affect each other. Kernel tests
use the small organization tree below and never touch a database.
"""
from __future__ import annotations

from datetime import date

import pytest
from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from personnel_requests.authz import (
    AuthorizationEngine,
    CutoffRules,
    NodeType,
    OrganizationNode,
    OrganizationTree,
    ScopeResolver,
)


TEST_DB_URL = "sqlite:///:memory:"

TODAY = date(2024, 3, 15)

# Division SSDR (1) -> departments PRG (10), DCR (11) -> units PRG-A (100), PRG-B (101)
# Division PSS (2) -> department REF (20) -> unit REF-X (200)
NODES = [
    OrganizationNode(1, NodeType.DIVISION, "SSDR", "Digital Systems"),
    OrganizationNode(2, NodeType.DIVISION, "PSS", "Public Services"),
    OrganizationNode(10, NodeType.DEPARTMENT, "PRG", "Programming", parent_id=1),
    OrganizationNode(11, NodeType.DEPARTMENT, "DCR", "Digital Conversion", parent_id=1),
    OrganizationNode(20, NodeType.DEPARTMENT, "REF", "Reference", parent_id=2),
    OrganizationNode(100, NodeType.UNIT, "PRG-A", "Applications", parent_id=10),
    OrganizationNode(101, NodeType.UNIT, "PRG-B", "Backend Services", parent_id=10),
    OrganizationNode(200, NodeType.UNIT, "REF-X", "Reference Desk", parent_id=20),
]


@pytest.fixture
def tree():
    return OrganizationTree(NODES)


@pytest.fixture
def make_engine(tree):
    """Build an engine over ``tree`` with the given cutoffs, pinned to ``TODAY``."""

    def factory(*cutoffs):
        return AuthorizationEngine(tree, CutoffRules(cutoffs, tree), today=lambda: TODAY)

    return factory


@pytest.fixture
def make_resolver(tree):
    def factory(*cutoffs):
        return ScopeResolver(tree, CutoffRules(cutoffs, tree), today=lambda: TODAY)

    return factory


@pytest.fixture
def engine():
    """Create a fresh in-memory SQLite engine for each test."""
    return create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        echo=False,
    )


@pytest.fixture
def tables(engine):
    """Create all ORM tables on the test engine."""
    from personnel_requests.db.base import Base
    from personnel_requests.models import organization, report, requests, security  # noqa: F401

    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture
def db_session(tables):
    """
    Provide a Session bound to the test DB; roll back after each test.

    The transaction is rolled back so the next test gets a clean state.
    """
    connection = tables.connect()
    transaction = connection.begin()
    TestSession = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        class_=Session,
    )
    session = TestSession()
    yield session
    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture
def seeded(db_session):
    """``db_session`` holding the demo data that ``init_db`` seeds."""
    from personnel_requests.db.init_db import _seed, ensure_review_statuses

    ensure_review_statuses(db_session)
    _seed(db_session)
    db_session.commit()
    return db_session


@pytest.fixture
def user_named(seeded):
    """Look up a seeded user by directory id."""
    from sqlalchemy import select

    from personnel_requests.models.security import User

    def lookup(cas_directory_id):
        return seeded.scalars(select(User).where(User.cas_directory_id == cas_directory_id)).one()

    return lookup


@pytest.fixture
def org(seeded):
    """Look up a seeded organization by code."""
    from sqlalchemy import select

    from personnel_requests.models.organization import Organization

    def lookup(code):
        return seeded.scalars(select(Organization).where(Organization.code == code)).one()

    return lookup


@pytest.fixture
def client(seeded):
    """
    TestClient over the app, sharing the ``seeded`` session.

    ``Request`` is imported at module level so FastAPI can resolve the
    override's annotation.

    The lifespan (and so ``init_db``) does not run; the security config is
    loaded directly.
    """
    from pathlib import Path

    from fastapi.testclient import TestClient

    from personnel_requests.db.session import bind_authz, get_db
    from personnel_requests.main import app
    from personnel_requests.security.config import load_security_config

    def override_get_db(request: Request):
        bind_authz(seeded, request)
        yield seeded

    config_path = Path(__file__).resolve().parents[1] / "config" / "security_config.yaml"
    app.state.security_config = load_security_config(config_path)
    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth(user_named):
    """Authorization header for a seeded user."""

    def headers(cas_directory_id, impersonate=None):
        result = {"Authorization": f"Bearer {user_named(cas_directory_id).id}"}
        if impersonate is not None:
            result["X-Impersonate-User"] = str(impersonate)
        return result

    return headers
