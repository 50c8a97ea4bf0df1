"""Users API routes — register, login, password reset, own profile."""

from typing import Union

from fastapi import APIRouter, Depends

from app.application.services.auth_service import AuthService
from app.application.services.profile_service import ProfileService
from app.domain.models.account_flags import AccountStatus
from app.domain.models.user import User
from app.domain.schemas.auth import (
    InactiveResponse,
    LoginRequest,
    NeedsResetResponse,
    PasswordResetRequest,
    TokenResponse,
    UserCreate,
)
from app.domain.schemas.user import UserRead, UserUpdate
from app.interfaces.api.deps import get_auth_service, get_current_user, get_profile_service

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.post("/register", response_model=TokenResponse)
def register(body: UserCreate, auth: AuthService = Depends(get_auth_service)):
    """Create an account and sign a week-long session token."""
    user, tokens = auth.register(body)
    return TokenResponse(
        message="you're signed up!",
        token=tokens.token,
        user=UserRead.model_validate(user),
    )


@router.post(
    "/login",
    response_model=Union[TokenResponse, InactiveResponse, NeedsResetResponse],
)
def login(body: LoginRequest, auth: AuthService = Depends(get_auth_service)):
    """Log in, or report a pending reset or deactivated account without a token."""
    outcome = auth.login(body.email, body.password)

    if outcome.status is AccountStatus.PENDING_RESET:
        return NeedsResetResponse(user_id=outcome.user.id)
    if outcome.status is AccountStatus.INACTIVE:
        return InactiveResponse(user_id=outcome.user.id)

    return TokenResponse(
        message="you're logged in!",
        token=outcome.tokens.token,
        admin_token=outcome.tokens.admin_token,
        user=UserRead.model_validate(outcome.user),
    )


@router.delete("/password_reset/{user_id}", response_model=TokenResponse)
def consume_password_reset(
    user_id: int,
    body: PasswordResetRequest,
    auth: AuthService = Depends(get_auth_service),
):
    """Set a new password for an account with a pending reset and log it in."""
    user, tokens = auth.consume_reset(user_id, body.password)
    return TokenResponse(
        message="you're logged in!",
        token=tokens.token,
        admin_token=tokens.admin_token,
        user=UserRead.model_validate(user),
    )


@router.get("/me", response_model=UserRead)
def get_me(
    user: User = Depends(get_current_user),
    profile: ProfileService = Depends(get_profile_service),
):
    """Return the caller's own record."""
    return UserRead.model_validate(profile.get_self(user))


@router.patch("/me", response_model=UserRead)
def update_me(
    body: UserUpdate,
    user: User = Depends(get_current_user),
    profile: ProfileService = Depends(get_profile_service),
):
    """Update the caller's record; addresses already on file are kept."""
    return UserRead.model_validate(profile.update_self(user.id, body))
