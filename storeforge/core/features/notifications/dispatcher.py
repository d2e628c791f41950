# (c) Copyright Datacraft, 2026
"""Outcome emails. Delivery failures are logged and never reach the caller."""
import logging
from typing import Any

from storeforge.core.clients.base import ServiceError
from storeforge.core.clients.notification import NotificationClient

logger = logging.getLogger(__name__)

WELCOME_PACK_TEMPLATE = "welcome_pack"
ONBOARDING_FAILED_TEMPLATE = "onboarding_failed"


class NotificationDispatcher:
	def __init__(self, client: NotificationClient | None):
		self.client = client

	async def send(self, template: str, recipient: str, data: dict[str, Any]) -> bool:
		if self.client is None or not recipient:
			logger.debug(f"Skipping {template} notification: no client or recipient")
			return False
		try:
			await self.client.send(template, recipient, data)
		except ServiceError as e:
			logger.warning(f"Failed to send {template} to {recipient}: {e}")
			return False
		logger.info(f"Sent {template} notification to {recipient}")
		return True

	async def send_welcome_pack(
		self,
		email: str,
		first_name: str,
		business_name: str,
		tenant_slug: str,
		admin_url: str,
		storefront_url: str,
		dashboard_url: str,
	) -> bool:
		return await self.send(WELCOME_PACK_TEMPLATE, email, {
			"firstName": first_name,
			"businessName": business_name,
			"tenantSlug": tenant_slug,
			"adminUrl": admin_url,
			"storefrontUrl": storefront_url,
			"dashboardUrl": dashboard_url,
		})

	async def send_onboarding_failed(self, email: str, business_name: str, reason: str) -> bool:
		return await self.send(ONBOARDING_FAILED_TEMPLATE, email, {
			"businessName": business_name,
			"reason": reason,
		})
