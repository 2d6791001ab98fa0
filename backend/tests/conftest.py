"""Pytest fixtures: SQLite database for fast, isolated tests.

Google token verification is replaced with a dictionary of fake ID tokens;
``register_user`` signs a user in through the real auth route and hands
back the headers to act as that user.
"""
import uuid
from decimal import Decimal
from typing import Optional

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from kajishare.database import Base, get_db
from kajishare.dependencies import get_token_verifier
from kajishare.errors import DomainError, ErrorKind
from kajishare.main import app
from kajishare.services.identity_service import IdentityClaims, UserIdentity

# Import all models so they register with Base.metadata
from kajishare.models.user import User
from kajishare.models.group import Group, GroupRole, Membership
from kajishare.models.task import Task                      # noqa: F401
from kajishare.models.assignment import Assignment          # noqa: F401
from kajishare.models.evaluation import Evaluation          # noqa: F401

SQLITE_URL = "sqlite:///./test.db"

ID_TOKENS: dict[str, IdentityClaims] = {}


def fake_verify(token: str) -> IdentityClaims:
    claims = ID_TOKENS.get(token)
    if claims is None:
        raise DomainError(ErrorKind.not_authenticated, "Invalid token")
    return claims


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(db_engine):
    """Yield a database session, closed after the test."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(db_engine):
    """FastAPI TestClient with the database and token verifier overridden."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def _override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_token_verifier] = lambda: fake_verify
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    ID_TOKENS.clear()


# ---------------------------------------------------------------------------
# API helpers: each returns the response JSON
# ---------------------------------------------------------------------------
def issue_token(name: str, sub: Optional[str] = None) -> str:
    """Register a fake Google ID token and return it."""
    sub = sub or f"sub-{uuid.uuid4().hex[:12]}"
    token = f"token-{sub}"
    ID_TOKENS[token] = IdentityClaims(sub=sub, email=f"{sub}@example.com", name=name)
    return token


def register_user(client: TestClient, name: str = "Test User") -> dict:
    """Sign in a new user; the returned dict carries ``headers`` to act as them."""
    token = issue_token(name)
    resp = client.post("/api/v1/auth/google", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200, resp.text
    user = resp.json()["user"]
    user["headers"] = {"Authorization": f"Bearer {token}"}
    return user


def create_test_group(client: TestClient, owner: dict, name: str = "Test Group") -> dict:
    """Helper: POST /api/v1/groups as ``owner`` (who becomes admin)."""
    resp = client.post("/api/v1/groups/", json={"name": name}, headers=owner["headers"])
    assert resp.status_code == 201, resp.text
    return resp.json()


def add_member(
    client: TestClient,
    admin: dict,
    group: dict,
    user: dict,
    role: str = "member",
    workload_ratio=None,
) -> dict:
    """Helper: POST /api/v1/memberships as ``admin``."""
    payload = {"user_id": user["user_id"], "group_id": group["group_id"], "role": role}
    if workload_ratio is not None:
        payload["workload_ratio"] = workload_ratio
    resp = client.post("/api/v1/memberships/", json=payload, headers=admin["headers"])
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_test_task(client: TestClient, admin: dict, group: dict, name: str = "Dishes", point: int = 2) -> dict:
    """Helper: POST a task into ``group`` as ``admin``."""
    resp = client.post(
        f"/api/v1/groups/{group['group_id']}/tasks",
        json={"name": name, "description": "After dinner", "point": point},
        headers=admin["headers"],
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def membership_of(client: TestClient, actor: dict, group: dict, user: dict) -> dict:
    resp = client.get(
        f"/api/v1/memberships/?group_id={group['group_id']}", headers=actor["headers"]
    )
    assert resp.status_code == 200, resp.text
    return next(m for m in resp.json() if m["user_id"] == user["user_id"])


# ---------------------------------------------------------------------------
# Direct-to-database helpers for rule-engine tests
# ---------------------------------------------------------------------------
def make_user(db, name: str = "User") -> User:
    sub = uuid.uuid4().hex[:12]
    user = User(google_sub=sub, name=name, email=f"{sub}@example.com")
    db.add(user)
    db.flush()
    return user


def make_group(db, name: str = "Household") -> Group:
    group = Group(name=name)
    db.add(group)
    db.flush()
    return group


def make_membership(
    db,
    user: User,
    group: Group,
    role: GroupRole = GroupRole.member,
    ratio=None,
    active: bool = True,
) -> Membership:
    membership = Membership(
        user_id=user.user_id,
        group_id=group.group_id,
        role=role,
        workload_ratio=Decimal(str(ratio)) if ratio is not None else None,
        active=active,
    )
    db.add(membership)
    db.flush()
    return membership


def identity_of(user: User) -> UserIdentity:
    return UserIdentity(user_id=user.user_id, name=user.name)
