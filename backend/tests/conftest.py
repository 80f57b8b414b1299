import pytest
from datetime import date, datetime, timedelta
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from taskboard.config import settings
from taskboard.database import Base, get_db
from taskboard.main import app
from taskboard.utils import helpers

TEST_DB_URL = "sqlite:///./test_taskboard.db"

ADMIN_EMAIL = "a@x.com"
MEMBER_EMAIL = "b@x.com"
OUTSIDER_EMAIL = "c@x.com"
TEAM_NAME = "Alpha"
TEAM_PASSWORD = "s3cret"

engine = create_engine(TEST_DB_URL, connect_args={"check_same_thread": False})
TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def today(monkeypatch):
    """Pin the sweep's notion of today so due dates are deterministic."""
    fixed = date(2025, 1, 5)
    monkeypatch.setattr(helpers, "today_local", lambda: fixed)
    return fixed


@pytest.fixture
def seed_team(client):
    created = client.post(
        "/api/teams/create",
        json={"name": TEAM_NAME, "password": TEAM_PASSWORD},
        headers=auth_headers(ADMIN_EMAIL),
    )
    assert created.status_code == 201, created.text
    joined = client.post(
        "/api/teams/join",
        json={"name": TEAM_NAME, "password": TEAM_PASSWORD},
        headers=auth_headers(MEMBER_EMAIL),
    )
    assert joined.status_code == 200, joined.text
    return {"id": created.json()["teamId"], "name": TEAM_NAME}


def make_token(email: str | None, name: str = "Test User", expires_in: timedelta = timedelta(hours=1), secret: str | None = None) -> str:
    claims = {"id": "1234567890", "name": name, "exp": datetime.utcnow() + expires_in}
    if email is not None:
        claims["email"] = email
    return jwt.encode(claims, secret or settings.SECRET_KEY, algorithm=settings.TOKEN_ALGORITHM)


def auth_headers(email: str) -> dict:
    return {"Authorization": f"Bearer {make_token(email)}"}
