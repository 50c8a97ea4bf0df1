"""Shipping and billing addresses — at most one of each per user."""

from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship

from app.infrastructure.database import Base


class AddressMixin:
    id = Column(Integer, primary_key=True, autoincrement=True)
    street = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(50), nullable=True)
    zip = Column(String(20), nullable=True)


class ShippingAddress(AddressMixin, Base):
    __tablename__ = "shipping_addresses"

    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    user = relationship("User", back_populates="shipping_address")

    def __repr__(self):
        return f"<ShippingAddress user={self.user_id}>"


class BillingAddress(AddressMixin, Base):
    __tablename__ = "billing_addresses"

    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    user = relationship("User", back_populates="billing_address")

    def __repr__(self):
        return f"<BillingAddress user={self.user_id}>"
