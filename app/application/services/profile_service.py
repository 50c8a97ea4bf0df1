"""Profile service — the authenticated user's own record."""

import structlog
from fastapi import status

from app.config import Settings
from app.core.exceptions import (
    EmailInUseError,
    PasswordTooShortError,
    UserNotFoundError,
    UserUpdateError,
)
from app.core.security import hash_password
from app.domain.models.user import User
from app.domain.repositories.address_repository import AddressRepository
from app.domain.repositories.user_repository import UserRepository
from app.domain.schemas.user import UserUpdate

logger = structlog.get_logger(__name__)


class ProfileService:
    def __init__(self, users: UserRepository, addresses: AddressRepository, settings: Settings):
        self.users = users
        self.addresses = addresses
        self.settings = settings

    def get_self(self, user: User) -> User:
        return user

    def update_self(self, user_id: int, changes: UserUpdate) -> User:
        """Apply profile changes.

        Addresses are insert-or-ignore: one already on file is kept as is.
        Address inserts and field changes commit together.
        """
        fields = changes.model_dump(exclude_unset=True)
        shipping_address = fields.pop("shipping_address", None)
        billing_address = fields.pop("billing_address", None)

        user = self.users.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError()

        if fields.get("email"):
            owner = self.users.get_by_email(fields["email"])
            if owner is not None and owner.id != user_id:
                raise EmailInUseError(status_code=status.HTTP_400_BAD_REQUEST)

        if "password" in fields:
            password = fields.pop("password") or ""
            if len(password) < self.settings.PASSWORD_MIN_LENGTH:
                raise PasswordTooShortError()
            fields["password_hash"] = hash_password(password)

        # Required columns cannot be cleared
        for column in ("first_name", "last_name", "email"):
            if column in fields and not fields[column]:
                fields.pop(column)

        if shipping_address:
            self.addresses.add_shipping_address(user_id, shipping_address)
        if billing_address:
            self.addresses.add_billing_address(user_id, billing_address)

        if fields:
            updated = self.users.update(user, fields)
            if updated is None:
                raise UserUpdateError()
        elif shipping_address or billing_address:
            self.users.commit()
            updated = user
        else:
            raise UserUpdateError()

        logger.info("profile_updated", user_id=user_id, fields=sorted(fields))
        return updated
