# (c) Copyright Datacraft, 2026
"""Vendor service client: owner vendor and storefront records."""
import logging
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from .base import ServiceClient

logger = logging.getLogger(__name__)


class Vendor(BaseModel):
	model_config = ConfigDict(populate_by_name=True, extra="ignore")

	id: UUID
	tenant_id: UUID = Field(alias="tenantId")
	name: str
	email: str | None = None
	status: str | None = None
	is_active: bool = Field(default=True, alias="isActive")


class Storefront(BaseModel):
	model_config = ConfigDict(populate_by_name=True, extra="ignore")

	id: UUID
	vendor_id: UUID | None = Field(default=None, alias="vendorId")
	name: str
	slug: str
	is_default: bool = Field(default=False, alias="isDefault")


class VendorClient(ServiceClient):
	"""Internal (service-to-service) endpoints of the vendor service."""

	service_name = "vendor-service"

	@staticmethod
	def _headers(tenant_id: UUID, vendor_id: UUID | None = None) -> dict[str, str]:
		return {
			"X-Tenant-ID": str(tenant_id),
			"X-Vendor-ID": str(vendor_id or tenant_id),
		}

	async def create_vendor_for_tenant(
		self,
		tenant_id: UUID,
		name: str,
		email: str,
		contact: str,
	) -> Vendor:
		payload = {
			"name": name,
			"primaryContact": contact,
			"email": email,
			"commissionRate": 0,
			"isOwnerVendor": True,
		}
		response = await self._request(
			"POST", "/internal/vendors", json=payload, headers=self._headers(tenant_id),
		)
		return Vendor.model_validate(self._unwrap(response))

	async def get_vendors_for_tenant(self, tenant_id: UUID) -> list[Vendor]:
		response = await self._request(
			"GET", "/internal/vendors", headers=self._headers(tenant_id),
		)
		return [Vendor.model_validate(item) for item in self._unwrap(response) or []]

	async def create_storefront(
		self,
		tenant_id: UUID,
		vendor_id: UUID,
		name: str,
		slug: str,
		is_default: bool = True,
	) -> Storefront:
		payload = {
			"vendorId": str(vendor_id),
			"name": name,
			"slug": slug,
			"isDefault": is_default,
		}
		response = await self._request(
			"POST",
			"/internal/storefronts",
			json=payload,
			headers=self._headers(tenant_id, vendor_id),
		)
		return Storefront.model_validate(self._unwrap(response))

	async def get_storefronts_for_vendor(self, tenant_id: UUID, vendor_id: UUID) -> list[Storefront]:
		response = await self._request(
			"GET",
			"/internal/storefronts",
			params={"vendorId": str(vendor_id)},
			headers=self._headers(tenant_id, vendor_id),
		)
		return [Storefront.model_validate(item) for item in self._unwrap(response) or []]
