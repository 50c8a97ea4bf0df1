"""Pydantic schemas for users and their addresses."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AddressBase(CamelModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None


class AddressRead(AddressBase):
    model_config = ConfigDict(from_attributes=True)


class UserRead(CamelModel):
    id: int
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    shipping_address: Optional[AddressRead] = None
    billing_address: Optional[AddressRead] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class UserUpdate(CamelModel):
    """Fields a user may change on their own record. Unknown keys are ignored."""

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    password: Optional[str] = None
    shipping_address: Optional[AddressBase] = None
    billing_address: Optional[AddressBase] = None
