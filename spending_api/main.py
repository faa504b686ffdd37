# spending_api/main.py
import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.orm import Session

from .auth import (
    DEFAULT_INTERCEPTORS,
    FirebaseTokenVerifier,
    Interceptor,
    TokenVerifier,
    current_uid,
    run_interceptors,
)
from .config import settings
from .database import Base, SessionLocal, engine
from .errors import SpendingAppError
from .insights import InsightsCache
from .schemas import (
    CreateSpendingRequest,
    InsightsResponse,
    RegisterRequest,
    RegisterResponse,
    SpendingItem,
    SuccessResponse,
)
from .service import SpendingService
from .transactions import TransactionStore
from .users import UserStore
from .validation import require_text, validate_new_transaction

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

router = APIRouter()


# Dependency function for database session
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_spending_service(request: Request, db: Session = Depends(get_db)) -> SpendingService:
    return SpendingService(
        transactions=TransactionStore(db),
        users=UserStore(db),
        cache=request.app.state.insights_cache,
    )


async def spending_app_error_handler(request: Request, exc: SpendingAppError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first["loc"] if part != "body")
    message = f"{location}: {first['msg']}" if location else first["msg"]
    return JSONResponse(status_code=400, content={"error": f"Malformed request: {message}"})


@router.get("/health", response_class=PlainTextResponse)
def health():
    return "ok"


@router.post("/users/register", response_model=RegisterResponse)
def register(
    body: RegisterRequest,
    uid: str = Depends(current_uid),
    service: SpendingService = Depends(get_spending_service),
):
    """
    Creates the account for the caller's Firebase identity.
    - **email**: The address to store on the account
    """
    email = require_text(body.email, "Email")
    service.register_user(uid, email)
    return RegisterResponse(success=True, message="Account created successfully")


@router.get("/spending", response_model=List[SpendingItem])
def list_spending(
    uid: str = Depends(current_uid),
    service: SpendingService = Depends(get_spending_service),
):
    """Returns the caller's transactions, most recent date first."""
    return [SpendingItem.from_record(record) for record in service.list_transactions(uid)]


@router.post("/spending", response_model=SuccessResponse)
def create_spending(
    body: CreateSpendingRequest,
    uid: str = Depends(current_uid),
    service: SpendingService = Depends(get_spending_service),
):
    """
    Records a transaction for the caller.
    - **amount**: Positive decimal string with up to 2 decimal places
    - **category**, **merchant**: Free text labels
    - **transactionDate**: ISO date (YYYY-MM-DD), not in the future
    """
    new = validate_new_transaction(body)
    service.create_transaction(uid, new)
    return SuccessResponse(success=True)


@router.get("/insights", response_model=InsightsResponse)
def get_insights(
    uid: str = Depends(current_uid),
    service: SpendingService = Depends(get_spending_service),
):
    """Returns total spend, transaction count and per-category totals."""
    return InsightsResponse.from_snapshot(service.get_insights(uid))


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    if app.state.token_verifier is None:
        app.state.token_verifier = FirebaseTokenVerifier.from_settings(settings)
    yield


def create_app(
    token_verifier: Optional[TokenVerifier] = None,
    interceptors: Optional[List[Interceptor]] = None,
) -> FastAPI:
    """
    Builds the API. Tests pass their own token verifier; otherwise the
    Firebase verifier is created at startup.
    """
    app = FastAPI(
        title="Spending API",
        description="API for recording spending and summarising it per category.",
        lifespan=lifespan,
    )
    app.state.token_verifier = token_verifier
    app.state.insights_cache = InsightsCache()
    chain = list(interceptors if interceptors is not None else DEFAULT_INTERCEPTORS)

    @app.middleware("http")
    async def authenticate(request: Request, call_next):
        rejection = await run_interceptors(request, chain)
        if rejection is not None:
            return rejection
        return await call_next(request)

    # Added last so it wraps the auth middleware and 401s still carry CORS headers
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Authorization", "Content-Type"],
        max_age=3600,
    )

    app.add_exception_handler(SpendingAppError, spending_app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)

    app.include_router(router)
    return app


app = create_app()
