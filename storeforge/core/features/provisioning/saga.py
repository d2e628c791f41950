# (c) Copyright Datacraft, 2026
"""
Tenant provisioning saga.

Turns a completed onboarding session into a live tenant across the identity
provider, the staff service and the vendor service. Every step that
succeeds is checkpointed on the tenant row (``last_completed_step``) so the
reconciliation loop can pick up a crashed run where it stopped.

Fault classes:
- identity registration and the RBAC bootstrap fail fast and mark the
  tenant ``failed``;
- vendor/storefront creation is retried with backoff and marks the tenant
  ``inactive`` once retries are exhausted;
- membership, credentials, slug activation, event delivery and
  notifications are best-effort.
"""
import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from storeforge.core.clients.base import ServiceError
from storeforge.core.clients.keycloak import TokenSet
from storeforge.core.features.events.schema import TenantCreatedEvent
from storeforge.core.features.memberships.db import api as memberships_api
from storeforge.core.features.onboarding.db import api as onboarding_api
from storeforge.core.features.onboarding.db.orm import OnboardingSession, SessionStatus
from storeforge.core.features.slugs.service import SlugRegistry
from storeforge.core.features.tenants.db import api as tenants_api
from storeforge.core.features.tenants.db.orm import Tenant, TenantStatus
from .errors import (
	IdentityRegistrationError,
	InvalidTransitionError,
	OwnerBootstrapError,
	ProvisioningError,
	SessionNotReadyError,
	SlugUnavailableError,
)
from .hosts import TenantHosts, resolve_hosts
from .metrics import PROVISIONING_TOTAL
from .schema import ProvisioningResult
from .services import ProvisioningServices
from .state import SagaStep, TERMINAL_STATUSES, check_transition, is_done, step_index

logger = logging.getLogger(__name__)

MIN_PROGRESS_FOR_SETUP = 75


@dataclass
class SagaContext:
	tenant: Tenant
	session: OnboardingSession | None
	email: str
	first_name: str
	last_name: str
	phone: str | None
	business_name: str
	hosts: TenantHosts

	@property
	def contact_name(self) -> str:
		return f"{self.first_name} {self.last_name}".strip() or "Owner"


class ProvisioningSaga:
	"""One saga run bound to a database session."""

	def __init__(self, db: AsyncSession, services: ProvisioningServices):
		self.db = db
		self.services = services
		self.settings = services.settings
		self.slugs = SlugRegistry(db, services.settings)

	async def complete(self, session_id: UUID, password: str) -> ProvisioningResult:
		"""Provision the tenant for an onboarding session.

		Calling this again for a session that already has a tenant only
		re-links the owner identity and issues fresh login tokens.
		"""
		session = await onboarding_api.get_session(self.db, session_id)
		if session is None:
			raise SessionNotReadyError(f"Onboarding session {session_id} not found")
		if session.tenant_id is not None:
			return await self._reenter(session, password)

		self._validate(session, password)
		slug = await self.slugs.resolve_for_session(
			session.id, session.tenant_slug, session.business_name,
		)
		tenant = await self._create_tenant(session, slug)
		if tenant is None:
			# A concurrent request for the same session created the tenant
			return await self._reenter(session, password)

		ctx = self._context(tenant, session)
		logger.info(f"Provisioning tenant {tenant.slug} ({tenant.id}) for session {session.id}")
		try:
			await self._link_identity(ctx, password)
			await self._finish(ctx)
		except ProvisioningError as e:
			await self._abort(ctx, e)
			PROVISIONING_TOTAL.labels("failed").inc()
			raise

		self._announce(ctx)
		tokens = await self._issue_tokens(ctx.email, password)
		PROVISIONING_TOTAL.labels("success").inc()
		logger.info(f"Tenant {tenant.slug} is active")
		message = "Account created" if tokens else "Account created; please log in"
		return self._result(ctx, tokens, message)

	async def resume(self, tenant: Tenant, session: OnboardingSession | None) -> None:
		"""Continue a stuck tenant from its last checkpoint.

		Raises ProvisioningError without marking the tenant; the caller
		decides whether the failure is terminal.
		"""
		ctx = self._context(tenant, session)
		logger.info(f"Resuming tenant {tenant.slug} after step {tenant.last_completed_step}")
		await self._finish(ctx)
		self._announce(ctx)

	async def fail(
		self,
		tenant: Tenant,
		session: OnboardingSession | None,
		status: TenantStatus,
		reason: str,
	) -> bool:
		"""Terminally fail a creating tenant and its session."""
		return await self._mark_terminal(self._context(tenant, session), status, reason)

	async def _reenter(self, session: OnboardingSession, password: str) -> ProvisioningResult:
		tenant = await tenants_api.get_tenant(self.db, session.tenant_id)
		if tenant is None:
			raise ProvisioningError(
				f"Session {session.id} references missing tenant {session.tenant_id}",
				tenant_id=session.tenant_id,
			)
		if TenantStatus(tenant.status) in TERMINAL_STATUSES:
			raise ProvisioningError(
				f"Provisioning of {tenant.slug} failed: {tenant.failure_reason or 'unknown reason'}",
				tenant_id=tenant.id,
			)

		self._validate(session, password, require_progress=False)
		ctx = self._context(tenant, session)
		logger.info(f"Session {session.id} already provisioned tenant {tenant.slug}; re-linking owner")
		await self._link_identity(ctx, password)
		tokens = await self.services.identity.issue_tokens(ctx.email, password)
		return self._result(ctx, tokens, "Account already provisioned")

	def _validate(
		self,
		session: OnboardingSession,
		password: str | None,
		require_progress: bool = True,
	) -> None:
		missing = []
		if not session.business_name:
			missing.append("business name")
		if not session.contact_email:
			missing.append("contact email")
		if not session.contact_first_name or not session.contact_last_name:
			missing.append("contact name")
		if missing:
			raise SessionNotReadyError(f"Onboarding session is missing {', '.join(missing)}")

		if (
			require_progress
			and session.status != SessionStatus.COMPLETED.value
			and (session.progress_percentage or 0) < MIN_PROGRESS_FOR_SETUP
		):
			raise SessionNotReadyError("Onboarding session is not ready for account setup")

		if not password or len(password) < self.settings.password_min_length:
			raise SessionNotReadyError(
				f"Password must be at least {self.settings.password_min_length} characters"
			)

	async def _create_tenant(self, session: OnboardingSession, slug: str) -> Tenant | None:
		try:
			tenant = await tenants_api.create_tenant(
				self.db,
				slug=slug,
				name=session.business_name,
				display_name=session.business_name,
				billing_email=session.contact_email,
				onboarding_session_id=session.id,
				business_model=session.business_model or "ONLINE_STORE",
				default_timezone=session.store_timezone or self.settings.default_timezone,
				default_currency=session.store_currency or self.settings.default_currency,
				step=SagaStep.TENANT_CREATED.value,
			)
			session.tenant_id = tenant.id
			await self.db.commit()
		except IntegrityError as e:
			await self.db.rollback()
			await self.db.refresh(session)
			if session.tenant_id is not None:
				return None
			raise SlugUnavailableError(
				f"Slug {slug} was claimed by another tenant", step=SagaStep.TENANT_CREATED.value,
			) from e
		return tenant

	def _context(self, tenant: Tenant, session: OnboardingSession | None) -> SagaContext:
		if session is not None:
			email = session.contact_email or tenant.billing_email or ""
			first_name = session.contact_first_name or ""
			last_name = session.contact_last_name or ""
			phone = session.contact_phone
			business_name = session.business_name or tenant.display_name
		else:
			email = tenant.billing_email or ""
			first_name = last_name = ""
			phone = None
			business_name = tenant.display_name
		return SagaContext(
			tenant=tenant,
			session=session,
			email=email,
			first_name=first_name,
			last_name=last_name,
			phone=phone,
			business_name=business_name,
			hosts=resolve_hosts(tenant.slug, self.services.base_domain, session),
		)

	async def _checkpoint(self, ctx: SagaContext, step: SagaStep, **values) -> None:
		"""Persist ``values`` and advance ``last_completed_step``, never backwards."""
		if step_index(step) > step_index(ctx.tenant.last_completed_step):
			values["last_completed_step"] = step.value
		if values:
			await tenants_api.update_tenant(self.db, ctx.tenant.id, **values)

	async def _recover(self, ctx: SagaContext) -> None:
		await self.db.rollback()
		await self.db.refresh(ctx.tenant)
		if ctx.session is not None:
			await self.db.refresh(ctx.session)

	async def _link_identity(self, ctx: SagaContext, password: str | None) -> None:
		owner_id = await self.services.identity.register_or_link_owner(
			ctx.email,
			password,
			ctx.first_name,
			ctx.last_name,
			ctx.tenant.id,
			ctx.tenant.slug,
		)
		if ctx.tenant.owner_user_id is not None and ctx.tenant.owner_user_id != owner_id:
			logger.warning(
				f"Tenant {ctx.tenant.slug} owner changes from {ctx.tenant.owner_user_id} "
				f"to identity {owner_id}"
			)
		await self._checkpoint(ctx, SagaStep.IDENTITY_LINKED, owner_user_id=owner_id)

	async def _finish(self, ctx: SagaContext) -> None:
		"""Steps after identity linking, up to and including activation."""
		tenant = ctx.tenant
		if tenant.owner_user_id is None:
			raise ProvisioningError(
				f"Owner identity of tenant {tenant.slug} was never linked",
				tenant_id=tenant.id,
				step=SagaStep.IDENTITY_LINKED.value,
			)

		await self._ensure_membership(ctx)
		await self._ensure_credentials(ctx)

		if not is_done(tenant.last_completed_step, SagaStep.OWNER_BOOTSTRAPPED):
			await self._bootstrap_owner(ctx)

		if is_done(tenant.last_completed_step, SagaStep.VENDOR_ENSURED) and tenant.vendor_id:
			vendor_id = tenant.vendor_id
		else:
			vendor_id = await self.services.resources.ensure_vendor(
				tenant.id, ctx.business_name, ctx.email, ctx.contact_name,
			)
			await self._checkpoint(ctx, SagaStep.VENDOR_ENSURED, vendor_id=vendor_id)

		if not (is_done(tenant.last_completed_step, SagaStep.STOREFRONT_ENSURED) and tenant.storefront_id):
			storefront_slug = (ctx.session.storefront_slug if ctx.session else None) or tenant.slug
			storefront_id = await self.services.resources.ensure_storefront(
				tenant.id, vendor_id, f"{tenant.display_name} Store", storefront_slug, is_default=True,
			)
			await self._checkpoint(ctx, SagaStep.STOREFRONT_ENSURED, storefront_id=storefront_id)

		await self._activate_slug(ctx)
		await self._activate_tenant(ctx)

	async def _ensure_membership(self, ctx: SagaContext) -> None:
		owner_id = ctx.tenant.owner_user_id
		try:
			await memberships_api.upsert_user(
				self.db, owner_id, ctx.email, ctx.first_name, ctx.last_name, ctx.phone,
			)
			_, created = await memberships_api.ensure_owner_membership(self.db, owner_id, ctx.tenant.id)
		except SQLAlchemyError as e:
			logger.warning(f"Owner membership for tenant {ctx.tenant.slug} not recorded: {e}")
			await self._recover(ctx)
			return
		if created:
			logger.info(f"Created owner membership for {owner_id} in tenant {ctx.tenant.slug}")
		await self._checkpoint(ctx, SagaStep.MEMBERSHIP_CREATED)

	async def _ensure_credentials(self, ctx: SagaContext) -> None:
		try:
			await memberships_api.ensure_credentials(
				self.db,
				ctx.tenant.owner_user_id,
				ctx.tenant.id,
				password_min_length=self.settings.password_min_length,
			)
		except SQLAlchemyError as e:
			logger.warning(f"Credentials for tenant {ctx.tenant.slug} not recorded: {e}")
			await self._recover(ctx)
			return
		await self._checkpoint(ctx, SagaStep.CREDENTIALS_CREATED)

	async def _bootstrap_owner(self, ctx: SagaContext) -> None:
		tenant = ctx.tenant
		try:
			result = await self.services.staff.bootstrap_owner(
				tenant.id, tenant.owner_user_id, ctx.email, ctx.first_name, ctx.last_name,
			)
		except ServiceError as e:
			raise OwnerBootstrapError(
				f"Owner authorization bootstrap failed: {e.message}",
				tenant_id=tenant.id,
				step=SagaStep.OWNER_BOOTSTRAPPED.value,
			) from e
		await self._checkpoint(ctx, SagaStep.OWNER_BOOTSTRAPPED)
		try:
			await memberships_api.set_membership_staff(
				self.db, tenant.owner_user_id, tenant.id, result.staff_id,
			)
		except SQLAlchemyError as e:
			logger.warning(f"Staff id {result.staff_id} not stored on membership: {e}")
			await self._recover(ctx)

	async def _activate_slug(self, ctx: SagaContext) -> None:
		try:
			activated = await self.slugs.activate(ctx.tenant.slug, ctx.tenant.id)
		except SQLAlchemyError as e:
			logger.warning(f"Slug {ctx.tenant.slug} not activated: {e}")
			await self._recover(ctx)
			return
		if activated:
			await self._checkpoint(ctx, SagaStep.SLUG_ACTIVATED)

	async def _activate_tenant(self, ctx: SagaContext) -> None:
		tenant = ctx.tenant
		if tenant.status != TenantStatus.ACTIVE.value:
			check_transition(tenant.status, TenantStatus.ACTIVE)
			moved = await tenants_api.transition_status(
				self.db,
				tenant.id,
				TenantStatus.CREATING,
				TenantStatus.ACTIVE,
				last_completed_step=SagaStep.ACTIVATED.value,
				failure_reason=None,
			)
			await self.db.refresh(tenant)
			if not moved:
				if tenant.status != TenantStatus.ACTIVE.value:
					raise InvalidTransitionError(
						f"Tenant {tenant.slug} could not be activated from {tenant.status}",
						tenant_id=tenant.id,
						step=SagaStep.ACTIVATED.value,
					)
				logger.info(f"Tenant {tenant.slug} was activated by a concurrent run")

		if ctx.session is not None:
			await onboarding_api.set_session_status(self.db, ctx.session.id, SessionStatus.COMPLETED)

	async def _abort(self, ctx: SagaContext, error: ProvisioningError) -> None:
		if isinstance(error, (IdentityRegistrationError, OwnerBootstrapError)):
			status = TenantStatus.FAILED
		else:
			status = TenantStatus.INACTIVE

		if isinstance(error, OwnerBootstrapError):
			try:
				await memberships_api.set_membership_active(
					self.db, ctx.tenant.owner_user_id, ctx.tenant.id, False,
				)
			except SQLAlchemyError as e:
				logger.warning(f"Could not deactivate owner membership of {ctx.tenant.slug}: {e}")
				await self._recover(ctx)

		await self._mark_terminal(ctx, status, error.message)

	async def _mark_terminal(self, ctx: SagaContext, status: TenantStatus, reason: str) -> bool:
		check_transition(TenantStatus.CREATING, status)
		moved = await tenants_api.transition_status(
			self.db,
			ctx.tenant.id,
			TenantStatus.CREATING,
			status,
			failure_reason=reason,
		)
		await self.db.refresh(ctx.tenant)
		if not moved:
			logger.warning(
				f"Tenant {ctx.tenant.slug} left in {ctx.tenant.status}; could not mark {status.value}"
			)
			return False

		logger.error(f"Tenant {ctx.tenant.slug} marked {status.value}: {reason}")
		if ctx.session is not None:
			await onboarding_api.set_session_status(self.db, ctx.session.id, SessionStatus.FAILED)
		return True

	def _announce(self, ctx: SagaContext) -> None:
		"""Launch event delivery, the welcome email and feature flags in the background."""
		tenant = ctx.tenant
		background = self.services.background
		event = TenantCreatedEvent(
			tenant_id=tenant.id,
			session_id=ctx.session.id if ctx.session else None,
			product=(ctx.session.application_type if ctx.session else None) or self.services.product,
			business_name=ctx.business_name,
			slug=tenant.slug,
			email=ctx.email,
			admin_host=ctx.hosts.admin_host,
			storefront_host=ctx.hosts.storefront_host,
			base_domain=self.services.base_domain,
		)
		background.spawn(
			self.services.events.announce_tenant_created(event),
			name=f"announce-{tenant.slug}",
		)
		background.spawn(
			self.services.notifications.send_welcome_pack(
				email=ctx.email,
				first_name=ctx.first_name,
				business_name=ctx.business_name,
				tenant_slug=tenant.slug,
				admin_url=ctx.hosts.admin_url,
				storefront_url=ctx.hosts.storefront_url,
				dashboard_url=ctx.hosts.dashboard_url,
			),
			name=f"welcome-{tenant.slug}",
		)
		if self.services.feature_flags is not None:
			background.spawn(
				self.services.feature_flags.provision(tenant.id, tenant.slug, tenant.display_name),
				name=f"feature-flags-{tenant.slug}",
			)

	async def _issue_tokens(self, email: str, password: str) -> TokenSet | None:
		try:
			return await self.services.identity.issue_tokens(email, password)
		except IdentityRegistrationError as e:
			logger.warning(f"Tenant created but login tokens for {email} were not issued: {e}")
			return None

	def _result(
		self,
		ctx: SagaContext,
		tokens: TokenSet | None,
		message: str,
	) -> ProvisioningResult:
		return ProvisioningResult(
			tenant_id=ctx.tenant.id,
			tenant_slug=ctx.tenant.slug,
			status=ctx.tenant.status,
			user_id=ctx.tenant.owner_user_id,
			email=ctx.email,
			business_name=ctx.business_name,
			admin_url=ctx.hosts.admin_url,
			storefront_url=ctx.hosts.storefront_url,
			access_token=tokens.access_token if tokens else None,
			refresh_token=tokens.refresh_token if tokens else None,
			expires_in=tokens.expires_in if tokens else None,
			message=message,
		)
