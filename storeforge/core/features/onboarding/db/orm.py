# (c) Copyright Datacraft, 2026
"""Onboarding session ORM model."""
import uuid
from datetime import datetime
from uuid import UUID
from enum import Enum

from sqlalchemy import String, Integer, Boolean, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from storeforge.core.db.base import Base
from storeforge.core.utils.tz import utc_now


class SessionStatus(str, Enum):
	IN_PROGRESS = "in_progress"
	COMPLETED = "completed"
	FAILED = "failed"


class OnboardingSession(Base):
	"""Signup wizard state consumed by the provisioning saga."""
	__tablename__ = "onboarding_sessions"

	id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
	status: Mapped[str] = mapped_column(String(20), default=SessionStatus.IN_PROGRESS.value)
	progress_percentage: Mapped[int] = mapped_column(Integer, default=0)
	application_type: Mapped[str] = mapped_column(String(50), default="marketplace")

	# Set once the saga has created the tenant
	tenant_id: Mapped[UUID | None] = mapped_column()
	completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

	# Business information
	business_name: Mapped[str | None] = mapped_column(String(255))
	business_type: Mapped[str | None] = mapped_column(String(100))
	industry: Mapped[str | None] = mapped_column(String(100))

	# Primary contact
	contact_first_name: Mapped[str | None] = mapped_column(String(100))
	contact_last_name: Mapped[str | None] = mapped_column(String(100))
	contact_email: Mapped[str | None] = mapped_column(String(255))
	contact_phone: Mapped[str | None] = mapped_column(String(50))

	# Store setup
	tenant_slug: Mapped[str | None] = mapped_column(String(63))
	storefront_slug: Mapped[str | None] = mapped_column(String(63))
	store_timezone: Mapped[str | None] = mapped_column(String(64))
	store_currency: Mapped[str | None] = mapped_column(String(3))
	business_model: Mapped[str | None] = mapped_column(String(20))

	# Custom domain
	use_custom_domain: Mapped[bool] = mapped_column(Boolean, default=False)
	custom_domain: Mapped[str | None] = mapped_column(String(255))
	custom_admin_subdomain: Mapped[str | None] = mapped_column(String(63))
	custom_storefront_subdomain: Mapped[str | None] = mapped_column(String(63))

	created_at: Mapped[datetime] = mapped_column(
		DateTime(timezone=True), default=utc_now, nullable=False
	)
	updated_at: Mapped[datetime] = mapped_column(
		DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
	)

	@property
	def contact_name(self) -> str:
		name = f"{self.contact_first_name or ''} {self.contact_last_name or ''}".strip()
		return name or "Owner"
