"""Auth service — registration, login, password reset and token management."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import structlog
from jose import JWTError, jwt

from app.config import Settings, SigningKeys
from app.core.exceptions import (
    EmailInUseError,
    IncorrectCredentialsError,
    PasswordTooShortError,
    UnauthorizedException,
    UserNotFoundError,
)
from app.core.security import hash_password
from app.domain.models.account_flags import AccountStatus
from app.domain.models.user import User
from app.domain.repositories.user_repository import UserRepository
from app.domain.schemas.auth import UserCreate
from app.domain.schemas.user import AddressBase

logger = structlog.get_logger(__name__)


def create_access_token(
    data: dict,
    key: str,
    algorithm: str = "HS256",
    expires_delta: Optional[timedelta] = None,
) -> str:
    to_encode = data.copy()
    if expires_delta is not None:
        to_encode.update({"exp": datetime.now(timezone.utc) + expires_delta})
    return jwt.encode(to_encode, key, algorithm=algorithm)


def decode_access_token(token: str, key: str, algorithm: str = "HS256") -> Optional[dict]:
    try:
        return jwt.decode(token, key, algorithms=[algorithm])
    except JWTError:
        return None


def _address_fields(address: Optional[AddressBase]) -> Optional[dict]:
    """Fields actually sent for an address; an empty object counts as no address."""
    if address is None:
        return None
    return address.model_dump(exclude_unset=True) or None


@dataclass
class IssuedTokens:
    token: str
    admin_token: Optional[str] = None


@dataclass
class LoginOutcome:
    """Result of a login attempt with valid credentials.

    Only a NORMAL outcome carries tokens.
    """

    status: AccountStatus
    user: User
    tokens: Optional[IssuedTokens] = None


class AuthService:
    def __init__(self, users: UserRepository, keys: SigningKeys, settings: Settings):
        self.users = users
        self.keys = keys
        self.settings = settings

    def _check_password_length(self, password: str) -> None:
        if len(password) < self.settings.PASSWORD_MIN_LENGTH:
            raise PasswordTooShortError()

    def issue_tokens(
        self,
        user: User,
        is_admin: bool,
        expires_delta: Optional[timedelta] = None,
    ) -> IssuedTokens:
        """Sign a session token, plus an elevated one for admins."""
        if expires_delta is None:
            expires_delta = timedelta(minutes=self.settings.JWT_EXPIRATION_MINUTES)
        claims = {"id": user.id, "email": user.email}

        token = create_access_token(claims, self.keys.standard, self.keys.algorithm, expires_delta)
        admin_token = None
        if is_admin:
            admin_token = create_access_token(
                claims, self.keys.elevated, self.keys.algorithm, expires_delta
            )
        return IssuedTokens(token=token, admin_token=admin_token)

    def register(self, data: UserCreate) -> tuple[User, IssuedTokens]:
        self._check_password_length(data.password)
        if self.users.get_by_email(data.email):
            raise EmailInUseError(f"{data.email} is already registered.")

        user = self.users.create_with_addresses(
            {
                "first_name": data.first_name,
                "last_name": data.last_name,
                "email": data.email,
                "phone": data.phone,
                "password_hash": hash_password(data.password),
            },
            shipping_address=_address_fields(data.shipping_address),
            billing_address=_address_fields(data.billing_address),
        )
        logger.info("user_registered", user_id=user.id)

        # A brand-new account holds no markers
        tokens = self.issue_tokens(
            user,
            is_admin=False,
            expires_delta=timedelta(days=self.settings.REGISTER_TOKEN_EXPIRATION_DAYS),
        )
        return user, tokens

    def login(self, email: str, password: str) -> LoginOutcome:
        user = self.users.get_by_credentials(email, password)
        if user is None:
            logger.info("login_failed")
            raise IncorrectCredentialsError()

        state = self.users.get_account_state(user.id)
        if state.status is not AccountStatus.NORMAL:
            logger.info("login_blocked", user_id=user.id, status=state.status.value)
            return LoginOutcome(status=state.status, user=user)

        logger.info("login_succeeded", user_id=user.id, admin=state.is_admin)
        return LoginOutcome(
            status=AccountStatus.NORMAL,
            user=user,
            tokens=self.issue_tokens(user, state.is_admin),
        )

    def consume_reset(self, user_id: int, new_password: str) -> tuple[User, IssuedTokens]:
        user = self.users.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError()
        self._check_password_length(new_password)

        user = self.users.consume_password_reset(user, new_password)
        state = self.users.get_account_state(user.id)
        logger.info("password_reset_consumed", user_id=user.id)
        return user, self.issue_tokens(user, state.is_admin)

    def authenticate(self, token: str) -> User:
        """Resolve a bearer token signed with the standard key to its user."""
        payload = decode_access_token(token, self.keys.standard, self.keys.algorithm)
        if payload is None:
            raise UnauthorizedException("Invalid or expired token")

        user_id = payload.get("id")
        if user_id is None:
            raise UnauthorizedException("Invalid token")

        user = self.users.get_by_id(user_id)
        if user is None:
            raise UnauthorizedException("User not found")
        return user
