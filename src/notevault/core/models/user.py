"""
User account model.
"""

from enum import Enum
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import BaseModel, TimestampMixin


class UserRole(str, Enum):
    """Account roles."""

    USER = "USER"
    ADMIN = "ADMIN"


class User(TimestampMixin, BaseModel):
    """Account identified by e-mail; soft-disabled through `is_active`."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    role: Mapped[str] = mapped_column(String(20), default=UserRole.USER.value, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # opaque URL handed back by the file storage provider
    profile_picture: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    __table_args__ = (
        CheckConstraint("length(email) <= 255", name="ck_users_email_len"),
        CheckConstraint("length(name) <= 100", name="ck_users_name_len"),
        CheckConstraint("role IN ('USER', 'ADMIN')", name="ck_users_role"),
        Index("idx_users_email", "email"),
        Index("idx_users_active", "is_active"),
        Index("idx_users_role", "role"),
    )

    def __repr__(self) -> str:
        return f"<User(email='{self.email}', role={self.role})>"

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    def can_login(self) -> bool:
        """Disabled accounts keep their data but cannot authenticate."""
        return self.is_active
