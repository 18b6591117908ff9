# ruff: noqa: E402
import os
from typing import Any

import pytest
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker

# Set testing environment flags before importing the app or settings
os.environ["APP_ENV"] = "test"
os.environ.setdefault("TEST_DATABASE_URL", "sqlite:///./tests/test.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from tests.testclient import TestClient

import app.models.registry  # noqa: F401
from app.core.config import settings
from app.core.database import Base, build_engine, get_db
from app.main import app
from app.modules.notifications import registry
from app.modules.users.models import User, UserRole
from app.oauth2 import create_access_token


class AttrDict(dict):
    """Dict with attribute-style access for fixtures."""

    def __getattr__(self, item: str) -> Any:
        try:
            return self[item]
        except KeyError as exc:
            raise AttributeError(item) from exc


class FakeSocket:
    """Stand-in for a WebSocket that records every JSON frame it is sent."""

    def __init__(self, *, fail: bool = False):
        self.sent = []
        self.fail = fail

    async def send_json(self, data):
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(data)

    def events(self, name=None):
        return [frame for frame in self.sent if name is None or frame["event"] == name]


test_db_url = settings.get_database_url(use_test=True)

# Safety: never run tests against a non-test Postgres database.
parsed_url = make_url(test_db_url)
if parsed_url.drivername.startswith("postgresql") and parsed_url.database:
    if not parsed_url.database.endswith("_test"):
        raise RuntimeError(
            f"Refusing to run tests against non-test database '{parsed_url.database}'. "
            "Set TEST_DATABASE_URL to a dedicated *_test database."
        )

engine = build_engine(test_db_url)
Base.metadata.drop_all(bind=engine)
Base.metadata.create_all(bind=engine)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def _truncate_all():
    with engine.begin() as connection:
        if engine.dialect.name == "sqlite":
            for table in reversed(Base.metadata.sorted_tables):
                connection.execute(table.delete())
        else:
            table_names = ", ".join(f'"{tbl.name}"' for tbl in Base.metadata.sorted_tables)
            if table_names:
                connection.execute(text(f"TRUNCATE {table_names} RESTART IDENTITY CASCADE"))


# Autouse cleanup to keep DB and socket state isolated across all tests.
@pytest.fixture(autouse=True, scope="function")
def _clean_state_between_tests():
    _truncate_all()
    registry.clear()
    yield
    registry.clear()


@pytest.fixture(scope="function")
def session():
    """Fresh database session for each test."""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def session_factory():
    """Session maker for tests that need independent connections."""
    return TestingSessionLocal


@pytest.fixture(scope="function")
def client(session):
    def override_get_db():
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        try:
            yield test_client
        finally:
            app.dependency_overrides.clear()


def _register(client, email: str, name: str, password: str = "password123") -> AttrDict:
    res = client.post(
        "/api/auth/register",
        json={"email": email, "password": password, "name": name},
    )
    assert res.status_code == 201, res.text
    new_user = res.json()["user"]
    new_user["password"] = password
    return AttrDict(new_user)


@pytest.fixture(scope="function")
def test_user(client):
    return _register(client, "learner@example.com", "Amina Learner")


@pytest.fixture(scope="function")
def test_user2(client):
    return _register(client, "donor@example.com", "Brian Donor")


@pytest.fixture(scope="function")
def admin_user(client):
    admin = _register(client, "admin@example.com", "Grace Admin")
    with TestingSessionLocal() as db:
        db.query(User).filter(User.id == admin["id"]).update({"role": UserRole.ADMIN})
        db.commit()
    admin["role"] = UserRole.ADMIN.value
    return admin


def _headers_for(user) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'user_id': user['id']})}"}


@pytest.fixture(scope="function")
def token(test_user):
    return create_access_token({"user_id": test_user["id"]})


@pytest.fixture(scope="function")
def user_headers(test_user):
    return _headers_for(test_user)


@pytest.fixture(scope="function")
def user2_headers(test_user2):
    return _headers_for(test_user2)


@pytest.fixture(scope="function")
def admin_headers(admin_user):
    return _headers_for(admin_user)


@pytest.fixture(scope="function")
def authorized_client(client, token):
    client.headers.update({"Authorization": f"Bearer {token}"})
    return client


@pytest.fixture(scope="function")
def test_project(client, user_headers):
    res = client.post(
        "/api/projects",
        json={
            "title": "Solar Classrooms",
            "description": "Solar panels for rural schools",
            "sdg_id": 4,
            "target_amount": 1000,
        },
        headers=user_headers,
    )
    assert res.status_code == 201, res.text
    return AttrDict(res.json())


@pytest.fixture(scope="function")
def paid_course(client, user2_headers):
    res = client.post(
        "/api/courses",
        json={
            "title": "Python for Data Science",
            "description": "Hands-on data analysis",
            "category": "digital",
            "subject": "Programming",
            "level": "beginner",
            "price": 1500,
            "lessons": 12,
        },
        headers=user2_headers,
    )
    assert res.status_code == 201, res.text
    return AttrDict(res.json())


@pytest.fixture(scope="function")
def free_course(client, user2_headers):
    res = client.post(
        "/api/courses",
        json={
            "title": "Kiswahili Basics",
            "description": "Greetings and everyday phrases",
            "category": "language",
            "subject": "Kiswahili",
            "price": 0,
            "lessons": 5,
        },
        headers=user2_headers,
    )
    assert res.status_code == 201, res.text
    return AttrDict(res.json())


@pytest.fixture
def fake_socket_factory():
    return FakeSocket
