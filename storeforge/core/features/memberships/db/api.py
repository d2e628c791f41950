# (c) Copyright Datacraft, 2026
"""Membership and credential database API."""
import logging
from uuid import UUID

from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from storeforge.core.utils.tz import utc_now
from .orm import User, Membership, MembershipRole, TenantCredential, TenantAuthPolicy

logger = logging.getLogger(__name__)


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
	stmt = select(User).where(func.lower(User.email) == email.lower())
	return await db.scalar(stmt)


async def upsert_user(
	db: AsyncSession,
	identity_id: UUID,
	email: str,
	first_name: str | None = None,
	last_name: str | None = None,
	phone: str | None = None,
) -> User:
	"""Create or update the local user keyed by the identity provider id.

	A local user registered under the same email but a different id has
	drifted from the identity provider. Its memberships and credentials are
	moved to the provider id and the stale row is replaced.
	"""
	user = await db.get(User, identity_id)
	stale = await get_user_by_email(db, email)

	if stale is not None and stale.id != identity_id:
		logger.warning(
			f"Local user {stale.id} for {email} diverges from identity id {identity_id}; re-keying"
		)
		await db.execute(
			update(Membership)
			.where(Membership.user_id == stale.id)
			.values(user_id=identity_id)
			.execution_options(synchronize_session=False)
		)
		await db.execute(
			update(TenantCredential)
			.where(TenantCredential.user_id == stale.id)
			.values(user_id=identity_id)
			.execution_options(synchronize_session=False)
		)
		first_name = first_name or stale.first_name
		last_name = last_name or stale.last_name
		phone = phone or stale.phone
		await db.delete(stale)
		await db.flush()

	if user is None:
		user = User(
			id=identity_id,
			email=email,
			first_name=first_name,
			last_name=last_name,
			phone=phone,
		)
		db.add(user)
	else:
		user.email = email
		user.first_name = first_name or user.first_name
		user.last_name = last_name or user.last_name
		user.phone = phone or user.phone

	await db.commit()
	return user


async def get_membership(
	db: AsyncSession,
	user_id: UUID,
	tenant_id: UUID,
) -> Membership | None:
	stmt = select(Membership).where(
		Membership.user_id == user_id,
		Membership.tenant_id == tenant_id,
	)
	return await db.scalar(stmt)


async def ensure_owner_membership(
	db: AsyncSession,
	user_id: UUID,
	tenant_id: UUID,
) -> tuple[Membership, bool]:
	"""Create the owner membership once; the first one for a user is default.

	Returns the membership and whether it was created. An existing
	membership keeps its role.
	"""
	membership = await get_membership(db, user_id, tenant_id)
	if membership is not None:
		return membership, False

	existing = await db.scalar(
		select(func.count(Membership.id)).where(Membership.user_id == user_id)
	)
	membership = Membership(
		user_id=user_id,
		tenant_id=tenant_id,
		role=MembershipRole.OWNER.value,
		is_default=existing == 0,
		is_active=True,
		accepted_at=utc_now(),
	)
	db.add(membership)
	await db.commit()
	return membership, True


async def set_membership_active(
	db: AsyncSession,
	user_id: UUID,
	tenant_id: UUID,
	is_active: bool,
) -> None:
	stmt = (
		update(Membership)
		.where(Membership.user_id == user_id, Membership.tenant_id == tenant_id)
		.values(is_active=is_active)
	)
	await db.execute(stmt)
	await db.commit()


async def set_membership_staff(
	db: AsyncSession,
	user_id: UUID,
	tenant_id: UUID,
	staff_id: UUID,
) -> None:
	stmt = (
		update(Membership)
		.where(Membership.user_id == user_id, Membership.tenant_id == tenant_id)
		.values(staff_id=staff_id)
	)
	await db.execute(stmt)
	await db.commit()


async def ensure_credentials(
	db: AsyncSession,
	user_id: UUID,
	tenant_id: UUID,
	password_min_length: int = 8,
) -> None:
	"""Create the credential row and the tenant's default auth policy if missing."""
	credential = await db.scalar(
		select(TenantCredential).where(
			TenantCredential.user_id == user_id,
			TenantCredential.tenant_id == tenant_id,
		)
	)
	if credential is None:
		db.add(TenantCredential(user_id=user_id, tenant_id=tenant_id, created_by=user_id))

	policy = await db.scalar(
		select(TenantAuthPolicy).where(TenantAuthPolicy.tenant_id == tenant_id)
	)
	if policy is None:
		db.add(TenantAuthPolicy(tenant_id=tenant_id, password_min_length=password_min_length))

	await db.commit()


async def get_tenant_user_ids(db: AsyncSession, tenant_id: UUID) -> set[UUID]:
	"""User ids referenced by the tenant's memberships and credentials."""
	memberships = await db.execute(
		select(Membership.user_id).where(Membership.tenant_id == tenant_id)
	)
	credentials = await db.execute(
		select(TenantCredential.user_id).where(TenantCredential.tenant_id == tenant_id)
	)
	return set(memberships.scalars().all()) | set(credentials.scalars().all())
