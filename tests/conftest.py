# tests/conftest.py
import pytest
import os

# Must be set before the app modules build their engine and settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["FIREBASE_SERVICE_ACCOUNT_JSON"] = ""
os.environ["FIREBASE_SERVICE_ACCOUNT_PATH"] = ""

from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from spending_api.main import create_app, get_db
from spending_api.database import Base, build_engine
from spending_api.errors import AuthenticationError
from spending_api.insights import InsightsCache
from spending_api.service import SpendingService
from spending_api.transactions import TransactionStore
from spending_api.users import UserStore

# Clean, in-memory SQLite database shared by one StaticPool connection
test_engine = build_engine("sqlite://")
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

TOKENS = {
    "token-u1": "u1",
    "token-u2": "u2",
}


class FakeTokenVerifier:
    """Accepts the tokens in TOKENS and records every token it was asked about."""

    def __init__(self, tokens=None):
        self.tokens = dict(TOKENS if tokens is None else tokens)
        self.calls = []

    def verify(self, token):
        self.calls.append(token)
        if token not in self.tokens:
            raise AuthenticationError("Invalid token: unknown test token")
        return self.tokens[token]


def auth_header(token="token-u1"):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="function")
def db_session():
    """
    Creates a fresh database session for a single test.
    """
    Base.metadata.create_all(bind=test_engine)

    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture(scope="function")
def verifier():
    return FakeTokenVerifier()


@pytest.fixture(scope="function")
def app(verifier):
    return create_app(token_verifier=verifier)


@pytest.fixture(scope="function")
def client(app, db_session):
    """
    Overrides the session dependency to use our test database.
    """
    def get_test_db_override():
        yield db_session

    app.dependency_overrides[get_db] = get_test_db_override

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def registered_client(client):
    """A client whose user u1 is already registered."""
    response = client.post("/users/register", json={"email": "a@b.com"}, headers=auth_header())
    assert response.status_code == 200
    return client


@pytest.fixture(scope="function")
def service(db_session):
    return SpendingService(TransactionStore(db_session), UserStore(db_session), InsightsCache())
