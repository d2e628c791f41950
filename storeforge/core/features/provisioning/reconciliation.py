# (c) Copyright Datacraft, 2026
"""
Reconciliation of tenants stuck mid-saga.

A tenant still ``creating`` after the stuck threshold was abandoned by a
crashed or timed-out saga run. Each pass either resumes it from its last
checkpoint or, once it is too old or has used up its attempts, fails it
for good. Failed and inactive tenants are never selected again.
"""
import asyncio
import logging
from datetime import datetime, timedelta
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from storeforge.core.config.provisioning import ProvisioningSettings
from storeforge.core.features.onboarding.db import api as onboarding_api
from storeforge.core.features.slugs.service import SlugRegistry
from storeforge.core.features.tenants.db import api as tenants_api
from storeforge.core.features.tenants.db.orm import TenantStatus
from storeforge.core.utils.tz import as_utc, utc_now
from .errors import ProvisioningError
from .metrics import RECONCILIATION_TOTAL
from .saga import ProvisioningSaga
from .schema import ReconciliationResult
from .services import ProvisioningServices

logger = logging.getLogger(__name__)

RECONCILED = "reconciled"
FAILED = "failed"
RETRYING = "retrying"
SKIPPED = "skipped"


class ReconciliationService:
	"""Runs reconciliation passes; each tenant gets its own database session."""

	def __init__(
		self,
		db_session_factory,
		services: ProvisioningServices,
		settings: ProvisioningSettings | None = None,
	):
		self.db_session_factory = db_session_factory
		self.services = services
		self.settings = settings or services.settings

	async def run_once(self, now: datetime | None = None) -> ReconciliationResult:
		"""One sweep over all stuck tenants."""
		now = now or utc_now()
		result = ReconciliationResult()

		async with self.db_session_factory() as db:
			result.expired_reservations_released = await SlugRegistry(db, self.settings).release_expired()
			cutoff = now - timedelta(seconds=self.settings.stuck_threshold_seconds)
			stuck_ids = [tenant.id for tenant in await tenants_api.get_stuck_tenants(db, cutoff)]

		result.tenants_checked = len(stuck_ids)
		for tenant_id in stuck_ids:
			try:
				outcome, error = await self._reconcile(tenant_id, now)
			except SQLAlchemyError as e:
				logger.exception(f"Database error reconciling tenant {tenant_id}: {e}")
				outcome, error = RETRYING, f"{tenant_id}: {e}"

			RECONCILIATION_TOTAL.labels(outcome).inc()
			if outcome == RECONCILED:
				result.reconciled += 1
			elif outcome == FAILED:
				result.failed += 1
			elif outcome == RETRYING:
				result.retrying += 1
			else:
				result.skipped += 1
			if error:
				result.errors.append(error)

		if result.tenants_checked:
			logger.info(
				f"Reconciliation pass: checked={result.tenants_checked} "
				f"reconciled={result.reconciled} failed={result.failed} "
				f"retrying={result.retrying} skipped={result.skipped}"
			)
		return result

	async def _reconcile(self, tenant_id: UUID, now: datetime) -> tuple[str, str | None]:
		backoff = timedelta(seconds=self.settings.reconcile_retry_backoff_seconds)
		async with self.db_session_factory() as db:
			if not await tenants_api.claim_for_reconciliation(db, tenant_id, now, now - backoff):
				return SKIPPED, None

			tenant = await tenants_api.get_tenant(db, tenant_id)
			session = None
			if tenant.onboarding_session_id is not None:
				session = await onboarding_api.get_session(db, tenant.onboarding_session_id)
			saga = ProvisioningSaga(db, self.services)

			age = now - as_utc(tenant.created_at)
			if age > timedelta(seconds=self.settings.max_stuck_age_seconds):
				reason = f"Stuck in creating for {age}; giving up"
				return await self._fail(saga, tenant, session, reason)

			try:
				await saga.resume(tenant, session)
			except ProvisioningError as e:
				attempts = tenant.reconcile_attempts + 1
				if attempts > self.settings.reconcile_max_retries:
					reason = f"Reconciliation failed {attempts} times: {e.message}"
					await tenants_api.update_tenant(db, tenant.id, reconcile_attempts=attempts)
					return await self._fail(saga, tenant, session, reason)

				await tenants_api.update_tenant(
					db, tenant.id, reconcile_attempts=attempts, failure_reason=e.message,
				)
				logger.warning(
					f"Reconciliation attempt {attempts}/{self.settings.reconcile_max_retries} "
					f"for tenant {tenant.slug} failed: {e.message}"
				)
				return RETRYING, f"{tenant.slug}: {e.message}"

			logger.info(f"Reconciled tenant {tenant.slug}")
			return RECONCILED, None

	async def _fail(
		self, saga: ProvisioningSaga, tenant, session, reason: str,
	) -> tuple[str, str | None]:
		if not await saga.fail(tenant, session, TenantStatus.INACTIVE, reason):
			# Settled by another writer in the meantime
			return SKIPPED, None
		email = (session.contact_email if session else None) or tenant.billing_email
		await self.services.notifications.send_onboarding_failed(
			email, tenant.display_name, reason,
		)
		return FAILED, f"{tenant.slug}: {reason}"


class ReconciliationPoller:
	"""
	Background loop running reconciliation passes on an interval.

	Started from the application lifespan.
	"""

	def __init__(self, service: ReconciliationService, interval: float | None = None):
		self.service = service
		self.running = False
		self.poll_interval = interval or service.settings.reconcile_interval_seconds

	async def start(self):
		"""Start the background polling loop."""
		self.running = True
		logger.info(f"Starting reconciliation poller (interval={self.poll_interval}s)")

		while self.running:
			try:
				await self.service.run_once()
			except Exception as e:
				logger.exception(f"Error in reconciliation pass: {e}")

			await asyncio.sleep(self.poll_interval)

	async def stop(self):
		"""Stop the polling loop."""
		self.running = False
		logger.info("Stopping reconciliation poller")
