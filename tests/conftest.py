"""Pytest configuration and fixtures."""

import os
from pathlib import Path

# Use test database - PostgreSQL in Docker, SQLite locally
if os.getenv("DATABASE_URL"):
    # Running in Docker - use PostgreSQL test database
    SQLALCHEMY_DATABASE_URL = os.environ["DATABASE_URL"].replace(
        "/taskmanagement", "/taskmanagement_test"
    )
else:
    # Running locally - use SQLite, a file so direct connections see the same data
    SQLALCHEMY_DATABASE_URL = f"sqlite:///{Path(__file__).parent / 'test.db'}"

# Settings are read on first import of the application
os.environ["DATABASE_URL"] = SQLALCHEMY_DATABASE_URL
os.environ.pop("DIRECT_DATABASE_URL", None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.exc import NotSupportedError  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from taskboard.data.direct import DirectConnector  # noqa: E402
from taskboard.data.tasks import TaskStore  # noqa: E402
from taskboard.data.users import UserStore  # noqa: E402
from taskboard.database import Base, Database, get_db  # noqa: E402
from taskboard.main import app  # noqa: E402


def capability_error() -> NotSupportedError:
    """The error a store without multi-statement transactions raises."""
    return NotSupportedError(
        "SAVEPOINT sa_savepoint_1",
        None,
        Exception("transactions are not supported by this deployment"),
    )


class CapabilityLimitedSession(Session):
    """Session whose statements all fail with a capability error."""

    def execute(self, *args, **kwargs):
        raise capability_error()

    def flush(self, objects=None):
        raise capability_error()


class AuthHeaders(dict):
    """Dict subclass that also stores user_id and username."""

    def __init__(self, *args, user_id: str | None = None, username: str | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.username = username


database = Database(SQLALCHEMY_DATABASE_URL)
limited_database = Database(SQLALCHEMY_DATABASE_URL, session_class=CapabilityLimitedSession)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    if "postgresql" in SQLALCHEMY_DATABASE_URL:
        # For PostgreSQL, create the test database
        from sqlalchemy_utils import create_database, database_exists

        # Create test database if it doesn't exist
        if not database_exists(SQLALCHEMY_DATABASE_URL):
            create_database(SQLALCHEMY_DATABASE_URL)

    database.init_schema()
    yield
    database.dispose()
    limited_database.dispose()


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = database.session()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture
def limited_db():
    """Session that forces every operation onto the direct driver path."""
    session = limited_database.session()
    yield session
    session.close()


@pytest.fixture
def connector():
    """Direct driver connector for the test database."""
    return DirectConnector(SQLALCHEMY_DATABASE_URL)


@pytest.fixture(params=["orm", "direct"])
def path(request):
    """Which persistence path serves the stores under test."""
    return request.param


@pytest.fixture
def users(path, db, limited_db, connector):
    """User store served by the ORM or, with a limited session, by the driver."""
    return UserStore(db if path == "orm" else limited_db, connector)


@pytest.fixture
def tasks(path, db, limited_db, connector):
    """Task store served by the same path as ``users``."""
    return TaskStore(db if path == "orm" else limited_db, connector)


def make_client(session):
    def override_get_db():
        try:
            yield session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def client(db):
    """Create a test client with database override."""
    yield from make_client(db)


@pytest.fixture(scope="function")
def fallback_client(limited_db):
    """Test client whose requests can only be served by the direct driver."""
    yield from make_client(limited_db)


def register_and_login(client, username: str, password: str = "testpass123") -> AuthHeaders:
    response = client.post(
        "/api/auth/register", json={"username": username, "password": password}
    )
    assert response.status_code == 201
    user_id = response.json()["user"]["id"]

    response = client.post("/api/auth/login", json={"username": username, "password": password})
    assert response.status_code == 200
    token = response.json()["token"]

    return AuthHeaders({"Authorization": f"Bearer {token}"}, user_id=user_id, username=username)


@pytest.fixture
def auth_headers(client):
    """Create a user and return auth headers with user info."""
    return register_and_login(client, "testuser")
