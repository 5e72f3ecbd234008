import os

# Settings are read at import time, so the environment has to be in place first.
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "testing")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from untrivially.core.database import Base, get_db
from untrivially.core.security import create_access_token
from untrivially.models.user_db.user_db_crud import create_user
from untrivially.schemas.auth.auth_base import GoogleUserInfo
from untrivially.services.google_oauth import GoogleOAuthClient, OAuthError, get_oauth_client


class FakeOAuthClient(GoogleOAuthClient):
    """Stands in for Google: returns a fixed profile, or fails when told to."""

    def __init__(self):
        super().__init__("client-id", "client-secret", "http://testserver/auth/google/callback")
        self.user_info = GoogleUserInfo(
            id="google-123",
            email="ada@gmail.com",
            name="Ada Lovelace",
            picture="https://lh3.googleusercontent.com/ada.png",
        )
        self.fail = False

    def exchange_code(self, code: str) -> str:
        if self.fail:
            raise OAuthError("Token exchange with Google failed")
        return f"google-token-for-{code}"

    def fetch_user_info(self, access_token: str) -> GoogleUserInfo:
        return self.user_info


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def user(db):
    return create_user(db, "ada@gmail.com", "Ada Lovelace", "https://lh3.googleusercontent.com/ada.png")


@pytest.fixture
def other_user(db):
    return create_user(db, "grace@gmail.com", "Grace Hopper")


@pytest.fixture
def oauth_client():
    return FakeOAuthClient()


@pytest.fixture
def client(db, oauth_client):
    def override_get_db():
        # each request starts from what is in the database, like a fresh session would
        db.expire_all()
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_oauth_client] = lambda: oauth_client
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def headers(user):
    return {"Authorization": f"Bearer {create_access_token(user)}"}


@pytest.fixture
def other_headers(other_user):
    return {"Authorization": f"Bearer {create_access_token(other_user)}"}
