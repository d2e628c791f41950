# (c) Copyright Datacraft, 2026
"""Staff/RBAC service client."""
from uuid import UUID

from pydantic import BaseModel

from .base import ServiceClient, ServiceError


class OwnerBootstrap(BaseModel):
	staff_id: UUID
	role_id: UUID | None = None


class StaffClient(ServiceClient):
	service_name = "staff-service"

	async def bootstrap_owner(
		self,
		tenant_id: UUID,
		user_id: UUID,
		email: str,
		first_name: str,
		last_name: str,
	) -> OwnerBootstrap:
		"""Create the owner staff record and grant it the owner role.

		The staff service treats a repeated call for the same tenant and
		user as a no-op that returns the existing records.
		"""
		payload = {
			"user_id": str(user_id),
			"email": email,
			"first_name": first_name,
			"last_name": last_name,
		}
		response = await self._request(
			"POST",
			"/api/v1/internal/bootstrap-owner",
			json=payload,
			headers={"X-Tenant-ID": str(tenant_id)},
		)
		body = self._json(response)
		if not body.get("success"):
			raise ServiceError(
				self.service_name,
				str(body.get("error") or "owner bootstrap was not successful"),
				status_code=response.status_code,
			)
		return OwnerBootstrap(staff_id=body["staff_id"], role_id=body.get("role_id"))
