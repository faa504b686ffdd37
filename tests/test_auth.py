# tests/test_auth.py
import pytest
from fastapi.testclient import TestClient
from firebase_admin import auth as firebase_auth

from spending_api import auth
from spending_api.config import Settings
from spending_api.errors import AuthConfigurationError, AuthenticationError
from spending_api.main import create_app
from tests.conftest import auth_header


def test_unconfigured_firebase_returns_none(monkeypatch):
    def no_default_app():
        raise ValueError("The default Firebase app does not exist.")

    monkeypatch.setattr(auth.firebase_admin, "get_app", no_default_app)
    settings = Settings(FIREBASE_SERVICE_ACCOUNT_JSON=None, FIREBASE_SERVICE_ACCOUNT_PATH=None)
    assert auth.init_firebase_app(settings) is None


def test_unconfigured_verifier_raises_configuration_error():
    with pytest.raises(AuthConfigurationError):
        auth.FirebaseTokenVerifier(None).verify("any")


def test_verifier_returns_uid(monkeypatch):
    app = object()
    seen = {}

    def fake_verify(token, app=None):
        seen["token"], seen["app"] = token, app
        return {"uid": "u1", "email": "a@b.com"}

    monkeypatch.setattr(auth.firebase_auth, "verify_id_token", fake_verify)
    assert auth.FirebaseTokenVerifier(app).verify("tok") == "u1"
    assert seen == {"token": "tok", "app": app}


def test_verifier_maps_firebase_errors(monkeypatch):
    def expired(token, app=None):
        raise firebase_auth.ExpiredIdTokenError("Token expired", cause=None)

    monkeypatch.setattr(auth.firebase_auth, "verify_id_token", expired)
    with pytest.raises(AuthenticationError):
        auth.FirebaseTokenVerifier(object()).verify("tok")


def test_verifier_maps_malformed_token(monkeypatch):
    def malformed(token, app=None):
        raise ValueError("Illegal ID token provided.")

    monkeypatch.setattr(auth.firebase_auth, "verify_id_token", malformed)
    with pytest.raises(AuthenticationError):
        auth.FirebaseTokenVerifier(object()).verify("tok")


class UnconfiguredVerifier:
    def verify(self, token):
        raise AuthConfigurationError("Firebase not configured")


def test_unconfigured_provider_is_a_server_error():
    app = create_app(token_verifier=UnconfiguredVerifier())
    with TestClient(app) as client:
        response = client.get("/spending", headers=auth_header())
    assert response.status_code == 500
    assert response.json() == {"error": "Firebase not configured"}


def test_custom_interceptor_chain_runs_in_order():
    order = []

    async def first(request):
        order.append("first")
        return None

    async def stop(request):
        order.append("stop")
        return auth.PROCEED

    async def never(request):
        order.append("never")
        return None

    app = create_app(token_verifier=object(), interceptors=[first, stop, never])
    with TestClient(app) as client:
        response = client.get("/health")
    assert response.status_code == 200
    assert order == ["first", "stop"]
