# (c) Copyright Datacraft, 2026
"""
Downstream resources owned by a tenant: the owner vendor and its default
storefront.

Both operations list before they create, and the whole check-then-create
runs inside the retry loop, so a retry after a timed-out create finds the
record the first attempt made instead of creating a second one.
"""
import logging
from uuid import UUID

from storeforge.core.clients.base import ServiceError
from storeforge.core.clients.vendor import Storefront, Vendor, VendorClient
from storeforge.core.features.provisioning.errors import (
	DataIntegrityError,
	ResourceProvisioningError,
)
from storeforge.core.features.provisioning.retry import (
	RetryExhaustedError,
	RetryPolicy,
	retry_with_backoff,
)

logger = logging.getLogger(__name__)


class ResourceProvisioner:
	def __init__(self, client: VendorClient, policy: RetryPolicy | None = None):
		self.client = client
		self.policy = policy or RetryPolicy()

	async def ensure_vendor(
		self,
		tenant_id: UUID,
		business_name: str,
		contact_email: str,
		contact_name: str,
	) -> UUID:
		async def attempt() -> Vendor:
			vendors = await self.client.get_vendors_for_tenant(tenant_id)
			if vendors:
				logger.info(f"Reusing vendor {vendors[0].id} for tenant {tenant_id}")
				return vendors[0]
			return await self.client.create_vendor_for_tenant(
				tenant_id, business_name, contact_email, contact_name,
			)

		vendor = await self._run("ensure vendor", attempt, tenant_id, "vendor_ensured")
		if vendor.tenant_id != tenant_id:
			raise DataIntegrityError(
				f"Vendor {vendor.id} belongs to tenant {vendor.tenant_id}, expected {tenant_id}",
				tenant_id=tenant_id,
				step="vendor_ensured",
			)
		return vendor.id

	async def ensure_storefront(
		self,
		tenant_id: UUID,
		vendor_id: UUID,
		name: str,
		slug: str,
		is_default: bool = True,
	) -> UUID:
		async def attempt() -> Storefront:
			storefronts = await self.client.get_storefronts_for_vendor(tenant_id, vendor_id)
			if storefronts:
				existing = next((s for s in storefronts if s.is_default), storefronts[0])
				logger.info(f"Reusing storefront {existing.id} for tenant {tenant_id}")
				return existing
			return await self.client.create_storefront(tenant_id, vendor_id, name, slug, is_default)

		storefront = await self._run("ensure storefront", attempt, tenant_id, "storefront_ensured")
		return storefront.id

	async def _run(self, operation, attempt, tenant_id: UUID, step: str):
		try:
			return await retry_with_backoff(operation, attempt, self.policy)
		except RetryExhaustedError as e:
			raise ResourceProvisioningError(str(e), tenant_id=tenant_id, step=step) from e
		except ServiceError as e:
			raise ResourceProvisioningError(
				f"{operation} failed: {e}", tenant_id=tenant_id, step=step,
			) from e
