# (c) Copyright Datacraft, 2026
"""Tenant lifecycle event payloads."""
from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field
from uuid_extensions import uuid7str

from storeforge.core.utils.tz import utc_now

TENANT_CREATED = "tenant.created"
TENANT_DELETED = "tenant.deleted"


class TenantEvent(BaseModel):
	"""Consumers deduplicate on ``tenant_id``; delivery is at-least-once."""
	event_id: str = Field(default_factory=uuid7str)
	tenant_id: UUID
	slug: str
	admin_host: str
	storefront_host: str
	timestamp: datetime = Field(default_factory=utc_now)


class TenantCreatedEvent(TenantEvent):
	event_type: Literal["tenant.created"] = TENANT_CREATED
	session_id: UUID | None = None
	product: str
	business_name: str
	email: str
	base_domain: str


class TenantDeletedEvent(TenantEvent):
	event_type: Literal["tenant.deleted"] = TENANT_DELETED


class DeliveryReport(BaseModel):
	bus: bool
	http: bool

	@property
	def delivered(self) -> bool:
		return self.bus or self.http
