# (c) Copyright Datacraft, 2026
"""Slug reservation database API.

Every mutation is a conditional UPDATE or an INSERT guarded by the unique
constraint on ``slug``, so two concurrent callers can never both end up
holding the same slug. Updates do not synchronise loaded instances;
``get_reservation`` always reads the current row.
"""
from datetime import datetime
from uuid import UUID

from sqlalchemy import select, update, or_, and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from .orm import SlugReservation, ReservationStatus

PENDING = ReservationStatus.PENDING.value
ACTIVE = ReservationStatus.ACTIVE.value
RELEASED = ReservationStatus.RELEASED.value


async def get_reservation(db: AsyncSession, slug: str) -> SlugReservation | None:
	stmt = select(SlugReservation).where(SlugReservation.slug == slug).execution_options(
		populate_existing=True
	)
	return await db.scalar(stmt)


async def claimed_slugs(
	db: AsyncSession,
	slugs: list[str],
	now: datetime,
	exclude_session_id: UUID | None = None,
) -> set[str]:
	"""Return the subset of ``slugs`` held by a live reservation.

	Expired pending reservations count as free. A pending reservation held
	by ``exclude_session_id`` is ignored.
	"""
	if not slugs:
		return set()
	live_pending = and_(
		SlugReservation.status == PENDING,
		or_(SlugReservation.expires_at.is_(None), SlugReservation.expires_at >= now),
	)
	if exclude_session_id is not None:
		live_pending = and_(
			live_pending,
			or_(
				SlugReservation.session_id.is_(None),
				SlugReservation.session_id != exclude_session_id,
			),
		)
	stmt = select(SlugReservation.slug).where(
		SlugReservation.slug.in_(slugs),
		or_(SlugReservation.status == ACTIVE, live_pending),
	)
	result = await db.execute(stmt)
	return set(result.scalars().all())


async def claim(
	db: AsyncSession,
	slug: str,
	session_id: UUID,
	reserved_by: str | None,
	expires_at: datetime,
	now: datetime,
) -> bool:
	"""Create or renew a pending reservation for ``session_id``.

	Reclaims released rows, expired pending rows and the session's own
	pending row. Returns False when somebody else holds the slug.
	"""
	stmt = (
		update(SlugReservation)
		.where(
			SlugReservation.slug == slug,
			or_(
				SlugReservation.status == RELEASED,
				and_(
					SlugReservation.status == PENDING,
					or_(
						SlugReservation.session_id == session_id,
						SlugReservation.expires_at < now,
					),
				),
			),
		)
		.values(
			status=PENDING,
			session_id=session_id,
			tenant_id=None,
			reserved_by=reserved_by,
			expires_at=expires_at,
			released_at=None,
			updated_at=now,
		)
		.execution_options(synchronize_session=False)
	)
	result = await db.execute(stmt)
	if result.rowcount == 1:
		await _release_other_session_claims(db, session_id, keep=slug, now=now)
		await db.commit()
		return True

	if await get_reservation(db, slug) is not None:
		await db.rollback()
		return False

	db.add(SlugReservation(
		slug=slug,
		status=PENDING,
		session_id=session_id,
		reserved_by=reserved_by,
		expires_at=expires_at,
	))
	try:
		await db.flush()
	except IntegrityError:
		# Lost the insert race to a concurrent reservation
		await db.rollback()
		return False
	await _release_other_session_claims(db, session_id, keep=slug, now=now)
	await db.commit()
	return True


async def _release_other_session_claims(
	db: AsyncSession,
	session_id: UUID,
	keep: str,
	now: datetime,
) -> None:
	stmt = (
		update(SlugReservation)
		.where(
			SlugReservation.session_id == session_id,
			SlugReservation.status == PENDING,
			SlugReservation.slug != keep,
		)
		.values(status=RELEASED, released_at=now, updated_at=now)
		.execution_options(synchronize_session=False)
	)
	await db.execute(stmt)


async def activate(
	db: AsyncSession,
	slug: str,
	tenant_id: UUID,
	now: datetime,
) -> bool:
	"""Bind the slug's reservation to ``tenant_id``.

	Inserts an active reservation when none exists. Returns False when the
	slug is bound to a different tenant.
	"""
	stmt = (
		update(SlugReservation)
		.where(
			SlugReservation.slug == slug,
			or_(
				SlugReservation.status.in_([PENDING, RELEASED]),
				SlugReservation.tenant_id == tenant_id,
			),
		)
		.values(
			status=ACTIVE,
			tenant_id=tenant_id,
			expires_at=None,
			released_at=None,
			updated_at=now,
		)
		.execution_options(synchronize_session=False)
	)
	result = await db.execute(stmt)
	if result.rowcount == 1:
		await db.commit()
		return True

	if await get_reservation(db, slug) is not None:
		await db.rollback()
		return False

	db.add(SlugReservation(slug=slug, status=ACTIVE, tenant_id=tenant_id))
	try:
		await db.commit()
	except IntegrityError:
		await db.rollback()
		return False
	return True


async def release_for_tenant(db: AsyncSession, tenant_id: UUID, now: datetime) -> int:
	stmt = (
		update(SlugReservation)
		.where(
			SlugReservation.tenant_id == tenant_id,
			SlugReservation.status == ACTIVE,
		)
		.values(status=RELEASED, released_at=now, updated_at=now)
		.execution_options(synchronize_session=False)
	)
	result = await db.execute(stmt)
	await db.commit()
	return result.rowcount


async def release_expired(db: AsyncSession, now: datetime) -> int:
	stmt = (
		update(SlugReservation)
		.where(
			SlugReservation.status == PENDING,
			SlugReservation.expires_at < now,
		)
		.values(status=RELEASED, released_at=now, updated_at=now)
		.execution_options(synchronize_session=False)
	)
	result = await db.execute(stmt)
	await db.commit()
	return result.rowcount
