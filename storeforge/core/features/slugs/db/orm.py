# (c) Copyright Datacraft, 2026
"""Slug reservation ORM model."""
import uuid
from datetime import datetime
from uuid import UUID
from enum import Enum

from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from storeforge.core.db.base import Base
from storeforge.core.utils.tz import utc_now


class ReservationStatus(str, Enum):
	PENDING = "pending"
	ACTIVE = "active"
	RELEASED = "released"


class SlugReservation(Base):
	"""Claim on a slug.

	There is one row per slug value; a released row is reclaimed by the next
	reservation, so the unique constraint on ``slug`` guarantees at most one
	pending or active claim.
	"""
	__tablename__ = "slug_reservations"

	id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
	slug: Mapped[str] = mapped_column(String(63), unique=True, nullable=False)
	status: Mapped[str] = mapped_column(String(20), default=ReservationStatus.PENDING.value)
	session_id: Mapped[UUID | None] = mapped_column(index=True)
	tenant_id: Mapped[UUID | None] = mapped_column(index=True)
	reserved_by: Mapped[str | None] = mapped_column(String(255))
	expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
	released_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

	created_at: Mapped[datetime] = mapped_column(
		DateTime(timezone=True), default=utc_now, nullable=False
	)
	updated_at: Mapped[datetime] = mapped_column(
		DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
	)
