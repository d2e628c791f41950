# (c) Copyright Datacraft, 2026
"""Tenant router service client (synchronous host provisioning)."""
import logging
from uuid import UUID

from .base import ServiceClient

logger = logging.getLogger(__name__)


class TenantRouterClient(ServiceClient):
	service_name = "tenant-router"

	async def provision_host(
		self,
		slug: str,
		tenant_id: UUID,
		admin_host: str,
		storefront_host: str,
		**extra: str,
	) -> None:
		"""Ask the router to create gateway routes and certificates for a tenant."""
		payload = {
			"slug": slug,
			"tenant_id": str(tenant_id),
			"admin_host": admin_host,
			"storefront_host": storefront_host,
			**extra,
		}
		await self._request("POST", "/hosts", json=payload, expected=(200, 201, 202))
		logger.info(f"Router accepted hosts for tenant {slug}: {admin_host}, {storefront_host}")
