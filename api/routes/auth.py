"""
api/routes/auth.py -- Onboarding and login endpoints.

Routes:
  POST /user/new           -- self-registration (public, rate limited)
  POST /user/authenticate  -- email/password login; returns a JWT (public, rate limited)
  GET  /user/welcome       -- public greeting, handy as an unauthenticated probe
  GET  /user/me            -- the authenticated principal (requires auth)

Security:
  POST /user/authenticate uses authenticate_user(), which equalizes timing
  between unknown emails and wrong passwords. Do NOT inline get_by_email() +
  verify_password().
  Login responses carry Cache-Control: no-store.
  Registration always creates a disabled account; enabling it is outside
  this service.
"""

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from api.limiter import limiter
from api.models import ErrorResponse, LoginRequest, LoginResponse, MessageResponse, UserRegister, UserResponse
from auth.dependencies import get_current_user
from auth.tokens import authenticate_user, create_access_token, hash_password
from core.config import get_settings
from users.exceptions import DuplicateEmailError
from users.models import User
from users.service import UserService

# Auth policy:
# - POST /user/new:          public -- onboarding
# - POST /user/authenticate: public -- login endpoint must be unauthenticated
# - GET  /user/welcome:      public
# - GET  /user/me:           requires auth (get_current_user)
router = APIRouter(prefix="/user")

_settings = get_settings()


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------


@router.post("/new", response_model=UserResponse, status_code=201)
@limiter.limit(_settings.register_rate_limit)
def register(request: Request, body: UserRegister) -> UserResponse:
    """Create a new, disabled account with roleId defaulting to 1.

    409 when the email is already registered (compared case-insensitively),
    403 when self-registration is switched off.
    """
    if not _settings.self_registration_enabled:
        raise HTTPException(status_code=403, detail="Self-registration is disabled.")

    service: UserService = request.app.state.user_service
    new_user = body.to_domain(password_hash=hash_password(body.password))
    try:
        created = service.register_user(new_user)
    except (DuplicateEmailError, IntegrityError) as exc:
        # IntegrityError: a concurrent registration won the race past the
        # case-insensitive pre-check.
        raise HTTPException(status_code=409, detail="A user with that email already exists.") from exc
    return UserResponse.from_domain(created)


@router.post("/authenticate", response_model=LoginResponse)
@limiter.limit(_settings.login_rate_limit)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Exchange email and password for a bearer token.

    The same 401 message covers unknown email and wrong password so the
    response does not reveal which accounts exist.
    """
    user = authenticate_user(request.app.state.user_store, body.email, body.password)
    if user is None:
        resp = JSONResponse(
            status_code=401,
            content=ErrorResponse.build(401, "Invalid email or password.").model_dump(),
        )
        resp.headers["Cache-Control"] = "no-store"
        return resp

    token = create_access_token(user.id, user.email, user.role_id)
    resp = JSONResponse(
        status_code=200,
        content=LoginResponse(
            access_token=token,
            token_type="bearer",  # noqa: S106 # nosec B106 -- OAuth token type, not a password
            expires_in=_settings.token_expire_seconds,
        ).model_dump(by_alias=True),
    )
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.get("/welcome", response_model=MessageResponse)
def welcome() -> MessageResponse:
    return MessageResponse(message="Welcome, this endpoint is not secure.")


# ---------------------------------------------------------------------------
# Authenticated endpoints
# ---------------------------------------------------------------------------


@router.get("/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)) -> UserResponse:
    """Return the user the bearer token resolves to."""
    return UserResponse.from_domain(current_user)
