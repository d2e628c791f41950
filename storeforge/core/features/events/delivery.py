# (c) Copyright Datacraft, 2026
"""Dual-path announcement of tenant lifecycle events.

The bus publish and the router's ``POST /hosts`` are independent,
best-effort calls; the router call guarantees routing exists for an active
tenant even when the bus is degraded.
"""
import logging

from prometheus_client import Counter

from storeforge.core.clients.base import ServiceError
from storeforge.core.clients.router import TenantRouterClient
from .publisher import EventPublisher
from .schema import (
	DeliveryReport,
	TENANT_CREATED,
	TENANT_DELETED,
	TenantCreatedEvent,
	TenantDeletedEvent,
)

logger = logging.getLogger(__name__)

EVENT_DELIVERY_TOTAL = Counter(
	"storeforge_event_delivery_total",
	"Tenant lifecycle event deliveries by path and outcome",
	["path", "outcome"],
)


class TenantEventDelivery:
	def __init__(self, publisher: EventPublisher, router: TenantRouterClient | None):
		self.publisher = publisher
		self.router = router

	async def announce_tenant_created(self, event: TenantCreatedEvent) -> DeliveryReport:
		bus_ok = await self.publisher.publish(TENANT_CREATED, event)
		EVENT_DELIVERY_TOTAL.labels("bus", "ok" if bus_ok else "error").inc()

		http_ok = await self._provision_hosts(event)
		EVENT_DELIVERY_TOTAL.labels("http", "ok" if http_ok else "error").inc()

		if not bus_ok and not http_ok:
			logger.critical(
				f"Tenant {event.slug} ({event.tenant_id}) is active but neither the event bus "
				f"nor the router accepted it; hosts {event.admin_host}, {event.storefront_host} "
				f"need manual provisioning"
			)
		return DeliveryReport(bus=bus_ok, http=http_ok)

	async def announce_tenant_deleted(self, event: TenantDeletedEvent) -> bool:
		delivered = await self.publisher.publish(TENANT_DELETED, event)
		EVENT_DELIVERY_TOTAL.labels("bus", "ok" if delivered else "error").inc()
		return delivered

	async def _provision_hosts(self, event: TenantCreatedEvent) -> bool:
		if self.router is None:
			return False
		try:
			await self.router.provision_host(
				slug=event.slug,
				tenant_id=event.tenant_id,
				admin_host=event.admin_host,
				storefront_host=event.storefront_host,
				product=event.product,
				business_name=event.business_name,
				email=event.email,
			)
		except ServiceError as e:
			logger.warning(f"Router fallback failed for tenant {event.slug}: {e}")
			return False
		return True
