"""
User Repository Interface.
Defines the account lookups and account-state operations the services rely on.
"""

from typing import Any, Dict, Optional

from app.domain.repositories.base import BaseRepository
from app.domain.models.account_flags import AccountState
from app.domain.models.user import User


class UserRepository(BaseRepository[User]):
    """Interface for User-specific operations."""

    def get_by_email(self, email: str) -> Optional[User]:
        """Get the user owning an email, if any."""
        ...

    def get_by_credentials(self, email: str, password: str) -> Optional[User]:
        """Get the user whose email and password both match."""
        ...

    def create_with_addresses(
        self,
        obj_in: Dict[str, Any],
        shipping_address: Optional[Dict[str, Any]] = None,
        billing_address: Optional[Dict[str, Any]] = None,
    ) -> User:
        """Create a user and its addresses in one transaction."""
        ...

    def get_account_state(self, user_id: int) -> AccountState:
        """Read the reset, inactive and admin markers in one lookup."""
        ...

    def consume_password_reset(self, user: User, new_password: str) -> User:
        """Replace the password and drop the reset marker atomically."""
        ...

    def mark_password_reset(self, user_id: int) -> None:
        ...

    def mark_inactive(self, user_id: int) -> None:
        ...

    def reactivate(self, user_id: int) -> None:
        ...

    def grant_admin(self, user_id: int) -> None:
        ...

    def commit(self) -> None:
        """Commit writes staged by this repository and its siblings."""
        ...
