"""
Identity ORM Models
users, tenants and the engineer ↔ tenant assignment table
"""
from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from adminportal.shared.database.base_model import Base, utcnow


class TenantModel(Base):
    """SQLAlchemy model for the tenants (clients) table."""

    __tablename__ = "tenants"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # lower-cased, whitespace-collapsed name; carries the case-insensitive uniqueness
    name_normalized: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    company_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    active_subscription_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    credit_balance: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0"))
    pipeline_phase: Mapped[str | None] = mapped_column(String(64), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )


class UserModel(Base):
    """
    SQLAlchemy model for the users table.

    Role-specific columns are only meaningful for their role:
    tenant_id / is_org_admin / has_billing_access for CLIENT_USER.
    Engineer assignments live in engineer_assignments.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False, index=True)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    password_hash: Mapped[str | None] = mapped_column(Text, nullable=True)
    password_salt: Mapped[str | None] = mapped_column(String(64), nullable=True)
    role: Mapped[str] = mapped_column(String(32), nullable=False, index=True)

    tenant_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    is_org_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    has_billing_access: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )


class EngineerAssignmentModel(Base):
    """One row per (tenant, engineer) pair; position orders a tenant's engineers (0 = lead)."""

    __tablename__ = "engineer_assignments"

    tenant_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("tenants.id", ondelete="CASCADE"), primary_key=True
    )
    engineer_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
