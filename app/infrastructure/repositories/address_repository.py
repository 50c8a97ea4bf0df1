"""
SQLAlchemy Implementation of Address Repository.
"""

from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from app.domain.models.address import BillingAddress, ShippingAddress
from app.domain.repositories.address_repository import AddressRepository
from app.infrastructure.database import store_errors
from app.infrastructure.repositories.base_repository import insert_or_ignore

ADDRESS_FIELDS = ("street", "city", "state", "zip")


class SQLAlchemyAddressRepository(AddressRepository):
    """Address repository implementation using SQLAlchemy."""

    def __init__(self, db: Session):
        self.db = db

    def _values(self, user_id: int, address: Dict[str, Any]) -> Dict[str, Any]:
        values = {field: address.get(field) for field in ADDRESS_FIELDS}
        values["user_id"] = user_id
        return values

    def add_shipping_address(self, user_id: int, address: Dict[str, Any]) -> Optional[ShippingAddress]:
        return insert_or_ignore(self.db, ShippingAddress, self._values(user_id, address))

    def add_billing_address(self, user_id: int, address: Dict[str, Any]) -> Optional[BillingAddress]:
        return insert_or_ignore(self.db, BillingAddress, self._values(user_id, address))

    def get_shipping_address(self, user_id: int) -> Optional[ShippingAddress]:
        with store_errors(self.db, "get:shipping_addresses"):
            return (
                self.db.query(ShippingAddress)
                .filter(ShippingAddress.user_id == user_id)
                .first()
            )

    def get_billing_address(self, user_id: int) -> Optional[BillingAddress]:
        with store_errors(self.db, "get:billing_addresses"):
            return (
                self.db.query(BillingAddress)
                .filter(BillingAddress.user_id == user_id)
                .first()
            )
