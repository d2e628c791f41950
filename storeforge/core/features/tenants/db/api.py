# (c) Copyright Datacraft, 2026
"""Tenant database API."""
from datetime import datetime
from uuid import UUID

from sqlalchemy import select, update, or_
from sqlalchemy.ext.asyncio import AsyncSession

from storeforge.core.utils.tz import utc_now
from .orm import Tenant, TenantStatus


async def get_tenant(db: AsyncSession, tenant_id: UUID) -> Tenant | None:
	"""Get tenant by ID."""
	return await db.get(Tenant, tenant_id)


async def slugs_in_use(db: AsyncSession, slugs: list[str]) -> set[str]:
	"""Return the subset of ``slugs`` already owned by a tenant."""
	if not slugs:
		return set()
	stmt = select(Tenant.slug).where(Tenant.slug.in_(slugs))
	result = await db.execute(stmt)
	return set(result.scalars().all())


async def create_tenant(
	db: AsyncSession,
	*,
	slug: str,
	name: str,
	display_name: str,
	billing_email: str | None,
	onboarding_session_id: UUID | None,
	business_model: str,
	default_timezone: str,
	default_currency: str,
	step: str,
) -> Tenant:
	"""Insert a tenant in ``creating`` state.

	The caller owns the transaction: the row is flushed, not committed, so
	the onboarding session back-reference can be written atomically with it.
	"""
	tenant = Tenant(
		slug=slug,
		name=name,
		display_name=display_name,
		subdomain=slug,
		status=TenantStatus.CREATING.value,
		billing_email=billing_email,
		onboarding_session_id=onboarding_session_id,
		business_model=business_model,
		default_timezone=default_timezone,
		default_currency=default_currency,
		last_completed_step=step,
	)
	db.add(tenant)
	await db.flush()
	return tenant


async def update_tenant(
	db: AsyncSession,
	tenant_id: UUID,
	**kwargs
) -> None:
	"""Update tenant columns and commit."""
	kwargs["updated_at"] = utc_now()
	stmt = update(Tenant).where(Tenant.id == tenant_id).values(**kwargs)
	await db.execute(stmt)
	await db.commit()


async def transition_status(
	db: AsyncSession,
	tenant_id: UUID,
	from_status: TenantStatus,
	to_status: TenantStatus,
	**values,
) -> bool:
	"""Move a tenant between statuses with a compare-and-set.

	Returns False when the tenant is no longer in ``from_status`` (another
	writer got there first). Activation additionally requires both the
	vendor and the storefront to be recorded. Loaded instances are not
	updated; refresh them afterwards.
	"""
	stmt = (
		update(Tenant)
		.where(Tenant.id == tenant_id, Tenant.status == from_status.value)
		.values(status=to_status.value, updated_at=utc_now(), **values)
	)
	if to_status == TenantStatus.ACTIVE:
		stmt = stmt.where(
			Tenant.vendor_id.is_not(None),
			Tenant.storefront_id.is_not(None),
		)
	stmt = stmt.execution_options(synchronize_session=False)
	result = await db.execute(stmt)
	await db.commit()
	return result.rowcount == 1


async def get_stuck_tenants(
	db: AsyncSession,
	created_before: datetime,
	limit: int = 100,
) -> list[Tenant]:
	"""Tenants still ``creating`` that were created before the cutoff."""
	stmt = (
		select(Tenant)
		.where(
			Tenant.status == TenantStatus.CREATING.value,
			Tenant.created_at < created_before,
		)
		.order_by(Tenant.created_at)
		.limit(limit)
	)
	result = await db.execute(stmt)
	return list(result.scalars().all())


async def claim_for_reconciliation(
	db: AsyncSession,
	tenant_id: UUID,
	now: datetime,
	not_attempted_since: datetime,
) -> bool:
	"""Take the reconciliation lease on a stuck tenant.

	Stamps ``last_reconciled_at`` only when the tenant is still creating and
	was not attempted after ``not_attempted_since``. Concurrent sweepers race
	on this update and exactly one of them wins.
	"""
	stmt = (
		update(Tenant)
		.where(
			Tenant.id == tenant_id,
			Tenant.status == TenantStatus.CREATING.value,
			or_(
				Tenant.last_reconciled_at.is_(None),
				Tenant.last_reconciled_at < not_attempted_since,
			),
		)
		.values(last_reconciled_at=now)
		.execution_options(synchronize_session=False)
	)
	result = await db.execute(stmt)
	await db.commit()
	return result.rowcount == 1
