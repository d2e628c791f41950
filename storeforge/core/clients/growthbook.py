# (c) Copyright Datacraft, 2026
"""GrowthBook admin API client for per-tenant feature flag organisations."""
import logging
from typing import Any

import httpx
from pydantic import BaseModel

from .base import ServiceClient, ServiceError

logger = logging.getLogger(__name__)

SDK_LANGUAGES = ["javascript", "nocode-other", "react"]


class FeatureFlagOrg(BaseModel):
	org_id: str
	sdk_key: str


class GrowthBookClient(ServiceClient):
	service_name = "growthbook"

	def __init__(
		self,
		base_url: str,
		token: str,
		timeout: float = 30.0,
		transport: httpx.AsyncBaseTransport | None = None,
	):
		super().__init__(base_url, timeout=timeout, transport=transport)
		self._token = token

	def _headers(self, org_id: str | None = None) -> dict[str, str]:
		headers = {"Authorization": f"Bearer {self._token}"}
		if org_id:
			headers["X-Organization"] = org_id
		return headers

	async def provision_org(self, slug: str, name: str) -> FeatureFlagOrg:
		"""Create an organisation named after the tenant slug plus an SDK connection."""
		org_id = await self._create_organization(slug, name)
		sdk_key = await self._create_sdk_connection(org_id, f"{name} SDK")
		return FeatureFlagOrg(org_id=org_id, sdk_key=sdk_key)

	async def _create_organization(self, slug: str, name: str) -> str:
		response = await self._request(
			"POST",
			"/organization",
			json={"company": name, "name": slug},
			headers=self._headers(),
		)
		body: dict[str, Any] = self._json(response)
		org_id = body.get("orgId") or (body.get("organization") or {}).get("id")
		if not org_id:
			raise ServiceError(self.service_name, "no organization id returned")
		return org_id

	async def _create_sdk_connection(self, org_id: str, name: str) -> str:
		payload = {
			"name": name,
			"languages": SDK_LANGUAGES,
			"environment": "production",
			"projects": [],
			"encryptPayload": False,
		}
		response = await self._request(
			"POST", "/sdk-connections", json=payload, headers=self._headers(org_id),
		)
		body: dict[str, Any] = self._json(response)
		sdk_key = (body.get("sdkConnection") or {}).get("key") or body.get("key")
		if not sdk_key:
			raise ServiceError(self.service_name, "no SDK key returned")
		return sdk_key
