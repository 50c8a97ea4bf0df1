"""Account marker tables and the status derived from them.

A marker row's existence is the whole signal: a pending password reset,
a deactivated account, or admin privilege.
"""

import enum
from dataclasses import dataclass

from sqlalchemy import Column, Integer, DateTime, ForeignKey
from sqlalchemy.sql import func

from app.infrastructure.database import Base


class ResetUser(Base):
    __tablename__ = "reset_users"

    user_id = Column(Integer, ForeignKey("users.id"), primary_key=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class InactiveUser(Base):
    __tablename__ = "inactive_users"

    user_id = Column(Integer, ForeignKey("users.id"), primary_key=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Admin(Base):
    __tablename__ = "admins"

    user_id = Column(Integer, ForeignKey("users.id"), primary_key=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class AccountStatus(str, enum.Enum):
    NORMAL = "normal"
    INACTIVE = "inactive"
    PENDING_RESET = "pending_reset"


@dataclass(frozen=True)
class AccountState:
    status: AccountStatus
    is_admin: bool = False

    @classmethod
    def from_markers(cls, pending_reset: bool, inactive: bool, admin: bool) -> "AccountState":
        # A pending reset wins over deactivation.
        if pending_reset:
            status = AccountStatus.PENDING_RESET
        elif inactive:
            status = AccountStatus.INACTIVE
        else:
            status = AccountStatus.NORMAL
        return cls(status=status, is_admin=bool(admin))
