# spending_api/auth.py
import json
import logging
from typing import Awaitable, Callable, List, Optional, Protocol, Union

import firebase_admin
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials, exceptions as firebase_exceptions
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.responses import Response

from .config import Settings
from .errors import AuthConfigurationError, AuthenticationError

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "
HEALTH_PATH = "/health"
# Reached without a token, but still bound to one when it is sent
IDENTITY_OPTIONAL_PATHS = frozenset({"/users/register"})


class TokenVerifier(Protocol):
    def verify(self, token: str) -> str:
        """Returns the uid the token was issued for."""
        ...


def init_firebase_app(settings: Settings) -> Optional[firebase_admin.App]:
    """
    Initializes the default Firebase app from the configured service account.

    Inline JSON wins over a key file path. Returns None when neither is
    set; the server still starts, but authenticated requests fail until
    credentials are provided.
    """
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    if settings.FIREBASE_SERVICE_ACCOUNT_JSON and settings.FIREBASE_SERVICE_ACCOUNT_JSON.strip():
        cred = credentials.Certificate(json.loads(settings.FIREBASE_SERVICE_ACCOUNT_JSON))
    elif settings.FIREBASE_SERVICE_ACCOUNT_PATH and settings.FIREBASE_SERVICE_ACCOUNT_PATH.strip():
        cred = credentials.Certificate(settings.FIREBASE_SERVICE_ACCOUNT_PATH)
    else:
        logger.warning("Firebase service account not configured; auth will fail until configured.")
        return None

    app = firebase_admin.initialize_app(cred)
    logger.info("Firebase initialized successfully.")
    return app


class FirebaseTokenVerifier:
    """Checks ID tokens against Firebase's current signing keys on every call."""

    def __init__(self, app: Optional[firebase_admin.App]):
        self.app = app

    @classmethod
    def from_settings(cls, settings: Settings) -> "FirebaseTokenVerifier":
        return cls(init_firebase_app(settings))

    def verify(self, token: str) -> str:
        if self.app is None:
            raise AuthConfigurationError("Firebase not configured")
        try:
            decoded = firebase_auth.verify_id_token(token, app=self.app)
        except (ValueError, firebase_exceptions.FirebaseError) as e:
            # Covers bad signatures, expiry and unreachable key servers; revocation is not checked
            raise AuthenticationError(f"Invalid token: {e}")
        return decoded["uid"]


# --- Interceptor chain ---
# Each interceptor returns None to hand over to the next one, PROCEED to
# dispatch the request without running the rest, or a terminal response.

PROCEED = object()
InterceptorResult = Union[None, object, Response]
Interceptor = Callable[[Request], Awaitable[InterceptorResult]]


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _describe(request: Request) -> str:
    return f"{request.method} {request.url.path}"


async def skip_preflight(request: Request) -> InterceptorResult:
    if request.method == "OPTIONS":
        return PROCEED
    return None


async def skip_health(request: Request) -> InterceptorResult:
    if request.url.path == HEALTH_PATH:
        return PROCEED
    return None


async def resolve_identity(request: Request) -> InterceptorResult:
    header = request.headers.get("authorization")
    if not header or not header.startswith(BEARER_PREFIX):
        logger.debug("Missing or invalid Authorization header for %s", _describe(request))
        return None

    verifier: TokenVerifier = request.app.state.token_verifier
    token = header[len(BEARER_PREFIX):].strip()
    try:
        uid = await run_in_threadpool(verifier.verify, token)
    except AuthConfigurationError as e:
        logger.error("Rejecting %s: %s", _describe(request), e.message)
        return _error(e.status_code, e.message)
    except AuthenticationError as e:
        logger.warning("Rejecting %s: %s", _describe(request), e.message)
        return _error(e.status_code, "Invalid token")

    logger.debug("Authenticated user %s for %s", uid, _describe(request))
    request.state.uid = uid
    return None


async def require_identity(request: Request) -> InterceptorResult:
    if request.url.path in IDENTITY_OPTIONAL_PATHS:
        return None
    if getattr(request.state, "uid", None) is None:
        return _error(401, "Authentication required")
    return None


DEFAULT_INTERCEPTORS: List[Interceptor] = [
    skip_preflight,
    skip_health,
    resolve_identity,
    require_identity,
]


async def run_interceptors(request: Request, interceptors: List[Interceptor]) -> Optional[Response]:
    """Runs the chain in order; returns the terminal response, if any."""
    for interceptor in interceptors:
        result = await interceptor(request)
        if result is PROCEED:
            return None
        if result is not None:
            return result
    return None


def current_uid(request: Request) -> str:
    """Dependency for routes that act on behalf of the caller."""
    uid = getattr(request.state, "uid", None)
    if uid is None:
        raise AuthenticationError("User not authenticated")
    return uid
