# (c) Copyright Datacraft, 2026
"""Per-tenant feature flag organisation, provisioned after activation."""
import logging
from uuid import UUID

from storeforge.core.clients.base import ServiceError
from storeforge.core.clients.growthbook import GrowthBookClient
from storeforge.core.features.tenants.db import api as tenants_api
from storeforge.core.utils.tz import utc_now

logger = logging.getLogger(__name__)


class FeatureFlagProvisioner:
	def __init__(self, client: GrowthBookClient | None, session_factory):
		self.client = client
		self.session_factory = session_factory

	async def provision(self, tenant_id: UUID, slug: str, name: str) -> bool:
		if self.client is None:
			logger.debug(f"Feature flags not configured; skipping org for {slug}")
			return False
		try:
			org = await self.client.provision_org(slug, name)
		except ServiceError as e:
			logger.warning(f"Feature flag org provisioning failed for {slug}: {e}")
			return False

		async with self.session_factory() as db:
			await tenants_api.update_tenant(
				db,
				tenant_id,
				feature_flags_org_id=org.org_id,
				feature_flags_sdk_key=org.sdk_key,
				feature_flags_provisioned_at=utc_now(),
			)
		logger.info(f"Provisioned feature flag org {org.org_id} for tenant {slug}")
		return True
