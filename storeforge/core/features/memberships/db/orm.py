# (c) Copyright Datacraft, 2026
"""Local user, membership and credential bookkeeping."""
import uuid
from datetime import datetime
from uuid import UUID
from enum import Enum

from sqlalchemy import String, Integer, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from storeforge.core.db.base import Base
from storeforge.core.utils.tz import utc_now


class MembershipRole(str, Enum):
	OWNER = "owner"
	ADMIN = "admin"
	MEMBER = "member"


class User(Base):
	"""Local mirror of an identity provider account.

	``id`` is the identifier issued by the identity provider.
	"""
	__tablename__ = "users"

	id: Mapped[UUID] = mapped_column(primary_key=True)
	email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
	first_name: Mapped[str | None] = mapped_column(String(100))
	last_name: Mapped[str | None] = mapped_column(String(100))
	phone: Mapped[str | None] = mapped_column(String(50))
	status: Mapped[str] = mapped_column(String(20), default="active")

	created_at: Mapped[datetime] = mapped_column(
		DateTime(timezone=True), default=utc_now, nullable=False
	)
	updated_at: Mapped[datetime] = mapped_column(
		DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
	)


class Membership(Base):
	__tablename__ = "memberships"
	__table_args__ = (UniqueConstraint("user_id", "tenant_id", name="uq_membership_user_tenant"),)

	id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
	user_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
	tenant_id: Mapped[UUID] = mapped_column(ForeignKey("tenants.id"), nullable=False)
	role: Mapped[str] = mapped_column(String(20), nullable=False)
	is_default: Mapped[bool] = mapped_column(Boolean, default=False)
	is_active: Mapped[bool] = mapped_column(Boolean, default=True)
	staff_id: Mapped[UUID | None] = mapped_column()
	accepted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

	created_at: Mapped[datetime] = mapped_column(
		DateTime(timezone=True), default=utc_now, nullable=False
	)


class TenantCredential(Base):
	"""Per-tenant login state. Passwords live in the identity provider only."""
	__tablename__ = "tenant_credentials"
	__table_args__ = (UniqueConstraint("user_id", "tenant_id", name="uq_credential_user_tenant"),)

	id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
	user_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
	tenant_id: Mapped[UUID] = mapped_column(ForeignKey("tenants.id"), nullable=False)
	mfa_enabled: Mapped[bool] = mapped_column(Boolean, default=False)
	failed_login_attempts: Mapped[int] = mapped_column(Integer, default=0)
	created_by: Mapped[UUID | None] = mapped_column()

	created_at: Mapped[datetime] = mapped_column(
		DateTime(timezone=True), default=utc_now, nullable=False
	)


class TenantAuthPolicy(Base):
	__tablename__ = "tenant_auth_policies"

	id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
	tenant_id: Mapped[UUID] = mapped_column(ForeignKey("tenants.id"), unique=True, nullable=False)
	password_min_length: Mapped[int] = mapped_column(Integer, default=8)
	max_login_attempts: Mapped[int] = mapped_column(Integer, default=5)
	lockout_minutes: Mapped[int] = mapped_column(Integer, default=15)
	require_mfa: Mapped[bool] = mapped_column(Boolean, default=False)

	created_at: Mapped[datetime] = mapped_column(
		DateTime(timezone=True), default=utc_now, nullable=False
	)
