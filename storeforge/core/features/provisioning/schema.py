# (c) Copyright Datacraft, 2026
"""Provisioning Pydantic schemas."""
from uuid import UUID

from pydantic import BaseModel, Field


class CompleteOnboardingRequest(BaseModel):
	password: str = Field(min_length=1)


class ProvisioningResult(BaseModel):
	"""Returned to the client after the saga, including on the re-entrant path."""
	tenant_id: UUID
	tenant_slug: str
	status: str
	user_id: UUID | None = None
	email: str
	business_name: str
	admin_url: str
	storefront_url: str
	access_token: str | None = None
	refresh_token: str | None = None
	expires_in: int | None = None
	message: str


class ReconciliationResult(BaseModel):
	"""Summary of one reconciliation pass."""
	tenants_checked: int = 0
	reconciled: int = 0
	failed: int = 0
	retrying: int = 0
	skipped: int = 0
	expired_reservations_released: int = 0
	errors: list[str] = Field(default_factory=list)
