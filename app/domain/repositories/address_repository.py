"""
Address Repository Interface.
Addresses are insert-or-ignore: the first address stored for a user sticks.
"""

from typing import Any, Dict, Optional, Protocol

from app.domain.models.address import BillingAddress, ShippingAddress


class AddressRepository(Protocol):
    """Interface for shipping and billing address storage."""

    def add_shipping_address(self, user_id: int, address: Dict[str, Any]) -> Optional[ShippingAddress]:
        """Insert the user's shipping address unless one exists. Does not commit."""
        ...

    def add_billing_address(self, user_id: int, address: Dict[str, Any]) -> Optional[BillingAddress]:
        """Insert the user's billing address unless one exists. Does not commit."""
        ...

    def get_shipping_address(self, user_id: int) -> Optional[ShippingAddress]:
        ...

    def get_billing_address(self, user_id: int) -> Optional[BillingAddress]:
        ...
