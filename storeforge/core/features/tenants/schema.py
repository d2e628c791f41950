# (c) Copyright Datacraft, 2026
"""Tenant Pydantic schemas."""
from uuid import UUID
from datetime import datetime
from pydantic import BaseModel, ConfigDict


class TenantInfo(BaseModel):
	"""Basic tenant information."""
	id: UUID
	name: str
	slug: str
	status: str
	created_at: datetime | None = None

	model_config = ConfigDict(from_attributes=True)


class TenantDetail(TenantInfo):
	"""Tenant with its provisioning state."""
	display_name: str
	owner_user_id: UUID | None = None
	billing_email: str | None = None
	default_timezone: str
	default_currency: str
	last_completed_step: str | None = None
	reconcile_attempts: int = 0
	failure_reason: str | None = None
	vendor_id: UUID | None = None
	storefront_id: UUID | None = None
	feature_flags_org_id: str | None = None
	updated_at: datetime | None = None
