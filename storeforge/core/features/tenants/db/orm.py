# (c) Copyright Datacraft, 2026
"""Tenant ORM model."""
import uuid
from datetime import datetime
from uuid import UUID
from enum import Enum

from sqlalchemy import String, Integer, Text, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from storeforge.core.db.base import Base
from storeforge.core.utils.tz import utc_now


class TenantStatus(str, Enum):
	CREATING = "creating"
	ACTIVE = "active"
	INACTIVE = "inactive"
	FAILED = "failed"


class Tenant(Base):
	"""A store on the platform, provisioned by the onboarding saga."""
	__tablename__ = "tenants"

	id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
	slug: Mapped[str] = mapped_column(String(63), unique=True, nullable=False)
	name: Mapped[str] = mapped_column(String(255), nullable=False)
	display_name: Mapped[str] = mapped_column(String(255), nullable=False)
	subdomain: Mapped[str] = mapped_column(String(63), nullable=False)
	status: Mapped[str] = mapped_column(String(20), default=TenantStatus.CREATING.value)
	mode: Mapped[str] = mapped_column(String(20), default="development")

	owner_user_id: Mapped[UUID | None] = mapped_column()
	onboarding_session_id: Mapped[UUID | None] = mapped_column()

	# Billing and locale defaults
	billing_email: Mapped[str | None] = mapped_column(String(255))
	business_model: Mapped[str] = mapped_column(String(20), default="ONLINE_STORE")
	default_timezone: Mapped[str] = mapped_column(String(64), default="UTC")
	default_currency: Mapped[str] = mapped_column(String(3), default="USD")

	# Saga bookkeeping
	last_completed_step: Mapped[str | None] = mapped_column(String(40))
	reconcile_attempts: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
	last_reconciled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
	failure_reason: Mapped[str | None] = mapped_column(Text)

	# Downstream resources
	vendor_id: Mapped[UUID | None] = mapped_column()
	storefront_id: Mapped[UUID | None] = mapped_column()

	# Feature flags organisation
	feature_flags_org_id: Mapped[str | None] = mapped_column(String(100))
	feature_flags_sdk_key: Mapped[str | None] = mapped_column(String(255))
	feature_flags_provisioned_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

	created_at: Mapped[datetime] = mapped_column(
		DateTime(timezone=True), default=utc_now, nullable=False
	)
	updated_at: Mapped[datetime] = mapped_column(
		DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
	)

	def __repr__(self):
		return f"Tenant(id={self.id}, slug={self.slug!r}, status={self.status})"
