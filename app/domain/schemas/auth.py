"""Pydantic schemas for registration, login and password reset."""

from typing import Literal, Optional

from pydantic import ConfigDict, model_serializer

from app.domain.schemas.user import AddressBase, CamelModel, UserRead


class UserCreate(CamelModel):
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    password: str
    shipping_address: Optional[AddressBase] = None
    billing_address: Optional[AddressBase] = None


class LoginRequest(CamelModel):
    email: str
    password: str


class PasswordResetRequest(CamelModel):
    password: str


class TokenResponse(CamelModel):
    message: str
    token: str
    admin_token: Optional[str] = None
    user: UserRead

    @model_serializer(mode="wrap")
    def _omit_missing_admin_token(self, handler):
        data = handler(self)
        if self.admin_token is None:
            data.pop("adminToken", None)
            data.pop("admin_token", None)
        return data


class InactiveResponse(CamelModel):
    model_config = ConfigDict(extra="forbid")

    message: str = "Your account has been deactivated"
    user_id: int
    status: Literal["inactive"] = "inactive"


class NeedsResetResponse(CamelModel):
    model_config = ConfigDict(extra="forbid")

    message: str = "Please reset your password"
    user_id: int
    needs_reset: Literal[True] = True
