# (c) Copyright Datacraft, 2026
"""Onboarding session database API."""
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from storeforge.core.utils.tz import utc_now
from .orm import OnboardingSession, SessionStatus


async def get_session(db: AsyncSession, session_id: UUID) -> OnboardingSession | None:
	return await db.get(OnboardingSession, session_id)


async def set_session_status(
	db: AsyncSession,
	session_id: UUID,
	status: SessionStatus,
) -> None:
	"""Record the saga outcome on the session and commit."""
	values = {"status": status.value, "updated_at": utc_now()}
	if status == SessionStatus.COMPLETED:
		values["completed_at"] = utc_now()
		values["progress_percentage"] = 100
	stmt = update(OnboardingSession).where(OnboardingSession.id == session_id).values(**values)
	await db.execute(stmt)
	await db.commit()
