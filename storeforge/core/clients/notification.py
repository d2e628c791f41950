# (c) Copyright Datacraft, 2026
"""Notification service client."""
from typing import Any

from .base import ServiceClient


class NotificationClient(ServiceClient):
	service_name = "notification-service"

	async def send(
		self,
		template: str,
		recipient: str,
		data: dict[str, Any],
		channel: str = "EMAIL",
	) -> None:
		payload = {
			"channel": channel,
			"recipient": recipient,
			"templateName": template,
			"variables": data,
		}
		await self._request(
			"POST", "/api/v1/notifications/send", json=payload, expected=(200, 201, 202),
		)
