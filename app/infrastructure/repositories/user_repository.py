"""
SQLAlchemy Implementation of User Repository.
"""

from typing import Any, Dict, Optional

from fastapi import status
from sqlalchemy import exists, select
from sqlalchemy.exc import IntegrityError

from app.core.exceptions import (
    EmailInUseError,
    InfrastructureError,
    ResetNotPendingError,
    SamePasswordError,
)
from app.core.security import dummy_verify, hash_password, verify_password
from app.domain.models.account_flags import AccountState, Admin, InactiveUser, ResetUser
from app.domain.models.address import BillingAddress, ShippingAddress
from app.domain.models.user import User
from app.domain.repositories.user_repository import UserRepository
from app.infrastructure.database import store_errors
from app.infrastructure.repositories.base_repository import SQLAlchemyRepository, insert_or_ignore


class SQLAlchemyUserRepository(SQLAlchemyRepository[User], UserRepository):
    """User repository implementation using SQLAlchemy."""

    def get_by_email(self, email: str) -> Optional[User]:
        with store_errors(self.db, "get_by_email:users"):
            return self.db.query(User).filter(User.email == email).first()

    def get_by_credentials(self, email: str, password: str) -> Optional[User]:
        user = self.get_by_email(email)
        if user is None:
            dummy_verify()
            return None
        if not verify_password(password, user.password_hash):
            return None
        return user

    def create_with_addresses(
        self,
        obj_in: Dict[str, Any],
        shipping_address: Optional[Dict[str, Any]] = None,
        billing_address: Optional[Dict[str, Any]] = None,
    ) -> User:
        user = User(**obj_in)
        if shipping_address:
            user.shipping_address = ShippingAddress(**shipping_address)
        if billing_address:
            user.billing_address = BillingAddress(**billing_address)

        with store_errors(self.db, "create:users"):
            self.db.add(user)
            try:
                self.db.commit()
            except IntegrityError as exc:
                # Lost a race with a concurrent registration for the same email
                self.db.rollback()
                raise EmailInUseError(f"{user.email} is already registered.") from exc
            self.db.refresh(user)
        return user

    def update(self, db_obj: User, obj_in: Any) -> Optional[User]:
        try:
            return super().update(db_obj, obj_in)
        except InfrastructureError as exc:
            # The only unique column a profile update can collide on is email
            if isinstance(exc.__cause__, IntegrityError):
                raise EmailInUseError(
                    status_code=status.HTTP_400_BAD_REQUEST
                ) from exc.__cause__
            raise

    def get_account_state(self, user_id: int) -> AccountState:
        stmt = select(
            exists().where(ResetUser.user_id == user_id).label("pending_reset"),
            exists().where(InactiveUser.user_id == user_id).label("inactive"),
            exists().where(Admin.user_id == user_id).label("admin"),
        )
        with store_errors(self.db, "get_account_state"):
            row = self.db.execute(stmt).one()
        return AccountState.from_markers(row.pending_reset, row.inactive, row.admin)

    def consume_password_reset(self, user: User, new_password: str) -> User:
        with store_errors(self.db, "consume_password_reset"):
            deleted = (
                self.db.query(ResetUser)
                .filter(ResetUser.user_id == user.id)
                .delete(synchronize_session=False)
            )
            if not deleted:
                self.db.rollback()
                raise ResetNotPendingError()
            if verify_password(new_password, user.password_hash):
                self.db.rollback()
                raise SamePasswordError()

            user.password_hash = hash_password(new_password)
            self.db.commit()
            self.db.refresh(user)
        return user

    def mark_password_reset(self, user_id: int) -> None:
        insert_or_ignore(self.db, ResetUser, {"user_id": user_id})
        self.commit()

    def mark_inactive(self, user_id: int) -> None:
        insert_or_ignore(self.db, InactiveUser, {"user_id": user_id})
        self.commit()

    def reactivate(self, user_id: int) -> None:
        with store_errors(self.db, "reactivate"):
            self.db.query(InactiveUser).filter(InactiveUser.user_id == user_id).delete()
            self.db.commit()

    def grant_admin(self, user_id: int) -> None:
        insert_or_ignore(self.db, Admin, {"user_id": user_id})
        self.commit()
