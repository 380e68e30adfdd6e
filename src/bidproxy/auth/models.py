"""
SQLAlchemy models for user accounts.
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from bidproxy.shared.database import Base, new_id, utcnow


class UserRole(str, Enum):
    CUSTOMER = "customer"
    EMPLOYEE = "employee"
    SUPER_ADMIN = "super_admin"


class AccountState(str, Enum):
    """Soft-delete state of an account. Deactivation is one-way."""

    ACTIVE = "active"
    DEACTIVATED = "deactivated"


class User(Base):
    """Account created on first successful authentication.

    Never hard-deleted: admins flip `is_active` instead.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(255),
        primary_key=True,
        default=new_id,
    )
    email: Mapped[str | None] = mapped_column(
        String(255),
        unique=True,
        nullable=True,
        index=True,
    )
    first_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    profile_image_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=UserRole.CUSTOMER.value,
        index=True,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )
    # Employees only
    company_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    # Customers only
    id_document_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    address_document_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    is_verified: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )
    stripe_customer_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    @property
    def account_state(self) -> AccountState:
        return AccountState.ACTIVE if self.is_active else AccountState.DEACTIVATED

    @property
    def onboarding_completed(self) -> bool:
        """Onboarding verifies the account; after that the role is fixed."""
        return self.is_verified

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
