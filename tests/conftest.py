import itertools
import os
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import text

TESTS_DIR = Path(__file__).resolve().parent

# Must be set before agencyhub.config is imported anywhere
os.environ["DATABASE_URL"] = f"sqlite:///{TESTS_DIR / 'test_agencyhub.db'}"
os.environ.setdefault("SECRET_KEY", "ci-test-secret")
os.environ["ENVIRONMENT"] = "test"
os.environ["AUTO_MIGRATE"] = "true"

from agencyhub.main import app  # noqa: E402
from agencyhub.database import Base, SessionLocal, engine, init_db  # noqa: E402
from agencyhub.core.context import CallerContext  # noqa: E402
from agencyhub.core.security import create_user_token  # noqa: E402
from agencyhub.services.tenant_store import TenantStore  # noqa: E402


def make_auth_headers(user, agency_id=None) -> dict:
    headers = {"Authorization": f"Bearer {create_user_token(user)}"}
    if agency_id:
        headers["X-Agency-Id"] = agency_id
    return headers


def context_for(user) -> CallerContext:
    return CallerContext.for_user(user)


def reset_schema():
    Base.metadata.drop_all(bind=engine)
    with engine.begin() as connection:
        connection.execute(text("DROP TABLE IF EXISTS alembic_version"))


@pytest.fixture(autouse=True)
def prepare_database():
    reset_schema()
    init_db()
    yield
    reset_schema()


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store(db):
    return TenantStore(db)


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_agency(store):
    counter = itertools.count(1)

    def factory(name=None, slug=None, **extra):
        n = next(counter)
        return store.create_agency({
            "name": name or f"Agency {n}",
            "slug": slug or f"agency-{n}",
            **extra,
        })

    return factory


@pytest.fixture
def make_user(store):
    """Users without a password unless one is given; hashing is slow."""
    counter = itertools.count(1)

    def factory(agency=None, role="team_member", email=None, password=None, **extra):
        n = next(counter)
        data = {
            "email": email or f"user{n}@example.com",
            "full_name": f"User {n}",
            "role": role,
            **extra,
        }
        if password:
            data["password"] = password
        return store.create_user(agency.id if agency is not None else None, data)

    return factory
