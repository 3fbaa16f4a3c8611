"""HTTP route definitions for user accounts."""

from __future__ import annotations

import logging

import redis
from fastapi import APIRouter, Depends, HTTPException, Path, Request, Response, status
from fastapi.responses import PlainTextResponse
from prometheus_client import Counter
from redis.exceptions import RedisError

from schemas import AccountRequest, AccountResponse, LoginRequest, ProfileUpdateRequest

from ..config import get_settings
from ..domain.account import Account
from ..domain.contracts import AccountDraft, ProfileUpdate
from ..domain.errors import InvalidCredentialsError
from ..domain.service import AccountService
from ..domain.validation import MAX_RECORD_ID
from ..security.rate_limiter import SlidingWindowRateLimiter
from ..security.redis_rate_limiter import RedisSlidingWindowRateLimiter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])

LOGIN_ATTEMPTS = Counter(
    "library_login_attempts_total",
    "Login attempts by outcome.",
    ["outcome"],
)

settings = get_settings()


def _build_rate_limiter() -> SlidingWindowRateLimiter | RedisSlidingWindowRateLimiter:
    """Instantiate the configured rate limiter backend, preferring Redis when available."""
    if settings.rate_limit_backend == "redis" and settings.redis_url:
        try:
            client = redis.from_url(settings.redis_url)
            client.ping()
            logger.info("rate limiter configured for redis backend at %s", settings.redis_url)
            return RedisSlidingWindowRateLimiter(
                client,
                max_requests=settings.rate_limit_requests,
                window_seconds=settings.rate_limit_window_seconds,
            )
        except RedisError as exc:
            logger.warning("redis rate limiter unavailable, falling back to in-memory: %s", exc)

    logger.info("rate limiter using in-memory backend")
    return SlidingWindowRateLimiter(
        max_requests=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )


rate_limiter = _build_rate_limiter()


def get_service(request: Request) -> AccountService:
    """Resolve the `AccountService` stored on the FastAPI application state."""
    service: AccountService = request.app.state.account_service
    return service


def _throttle(key: str) -> None:
    if not rate_limiter.allow(key):
        logger.warning("rate limit exceeded for %s", key)
        raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail="rate limited")


def _to_response(account: Account) -> AccountResponse:
    return AccountResponse(
        id=account.account_id,
        full_name=account.full_name,
        email=account.email,
        phone=account.phone,
        register_date=account.register_date,
        role=account.role.value,
    )


def _to_draft(payload: AccountRequest) -> AccountDraft:
    return AccountDraft(
        full_name=payload.full_name,
        email=payload.email,
        role=payload.role,
        password=payload.password,
        phone=payload.phone,
        register_date=payload.register_date,
    )


@router.get("", response_model=list[AccountResponse])
def list_accounts(service: AccountService = Depends(get_service)) -> list[AccountResponse]:
    """Return every account ordered by id."""
    return [_to_response(account) for account in service.list_accounts()]


@router.post("", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
def create_account(
    payload: AccountRequest,
    service: AccountService = Depends(get_service),
) -> AccountResponse:
    """Administrative account creation."""
    return _to_response(service.create(_to_draft(payload)))


@router.get("/email/{email}", response_model=AccountResponse)
def get_account_by_email(email: str, service: AccountService = Depends(get_service)) -> AccountResponse:
    """Look an account up by email, ignoring case."""
    return _to_response(service.get_by_email(email))


@router.get(
    "/role/{role}",
    response_model=list[AccountResponse],
    responses={204: {"description": "No account holds the role"}},
)
def list_accounts_by_role(role: str, service: AccountService = Depends(get_service)):
    """List accounts holding a role, answering 204 when there are none."""
    accounts = service.list_by_role(role)
    if not accounts:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return [_to_response(account) for account in accounts]


@router.post("/register", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
def register_account(
    request: Request,
    payload: AccountRequest,
    service: AccountService = Depends(get_service),
) -> AccountResponse:
    """Self-service sign-up from the web client."""
    host = request.client.host if request.client else "unknown"
    _throttle(f"register:{host}")
    return _to_response(service.register(_to_draft(payload)))


@router.post("/login", response_model=AccountResponse)
def login(payload: LoginRequest, service: AccountService = Depends(get_service)) -> AccountResponse:
    """Check credentials and return the matching account."""
    rate_key = f"login:{payload.email.lower()}"
    _throttle(rate_key)
    try:
        account = service.authenticate(payload.email, payload.password)
    except InvalidCredentialsError:
        LOGIN_ATTEMPTS.labels(outcome="rejected").inc()
        raise
    LOGIN_ATTEMPTS.labels(outcome="success").inc()
    rate_limiter.reset(rate_key)
    return _to_response(account)


@router.get("/recover/{email}", response_class=PlainTextResponse)
def recover_password(email: str, service: AccountService = Depends(get_service)) -> PlainTextResponse:
    """Issue a temporary password and return it as plain text for one-time display."""
    _throttle(f"recover:{email.lower()}")
    return PlainTextResponse(service.recover(email))


@router.put("/profile/{account_id}", response_model=AccountResponse)
def update_profile(
    payload: ProfileUpdateRequest,
    account_id: int = Path(ge=1, le=MAX_RECORD_ID),
    service: AccountService = Depends(get_service),
) -> AccountResponse:
    """Self-service edit of name, phone, role and password; the email stays as registered."""
    update = ProfileUpdate(
        full_name=payload.full_name,
        phone=payload.phone,
        role=payload.role,
        password=payload.password,
    )
    return _to_response(service.profile_update(account_id, update))


@router.get("/{account_id}", response_model=AccountResponse)
def get_account(
    account_id: int = Path(ge=1, le=MAX_RECORD_ID),
    service: AccountService = Depends(get_service),
) -> AccountResponse:
    """Return one account; ids outside the store's key range are rejected with 400."""
    return _to_response(service.get_by_id(account_id))


@router.put("/{account_id}", response_model=AccountResponse)
def update_account(
    payload: AccountRequest,
    account_id: int = Path(ge=1, le=MAX_RECORD_ID),
    service: AccountService = Depends(get_service),
) -> AccountResponse:
    """Replace the account's fields; the password is not changed by this route."""
    return _to_response(service.update(account_id, _to_draft(payload)))


@router.delete("/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_account(
    account_id: int = Path(ge=1, le=MAX_RECORD_ID),
    service: AccountService = Depends(get_service),
) -> Response:
    """Remove an account, answering 404 when no row was deleted."""
    service.delete(account_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
