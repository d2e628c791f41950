# (c) Copyright Datacraft, 2026
"""Tenant lifecycle state machine and saga step order."""
from enum import Enum

from storeforge.core.features.tenants.db.orm import TenantStatus
from .errors import InvalidTransitionError


class SagaStep(str, Enum):
	"""Durable checkpoints, in execution order."""
	TENANT_CREATED = "tenant_created"
	IDENTITY_LINKED = "identity_linked"
	MEMBERSHIP_CREATED = "membership_created"
	CREDENTIALS_CREATED = "credentials_created"
	OWNER_BOOTSTRAPPED = "owner_bootstrapped"
	VENDOR_ENSURED = "vendor_ensured"
	STOREFRONT_ENSURED = "storefront_ensured"
	SLUG_ACTIVATED = "slug_activated"
	ACTIVATED = "activated"


STEP_ORDER: list[SagaStep] = list(SagaStep)

ALLOWED_TRANSITIONS: dict[TenantStatus, frozenset[TenantStatus]] = {
	TenantStatus.CREATING: frozenset({
		TenantStatus.ACTIVE,
		TenantStatus.FAILED,
		TenantStatus.INACTIVE,
	}),
	TenantStatus.ACTIVE: frozenset(),
	TenantStatus.INACTIVE: frozenset(),
	TenantStatus.FAILED: frozenset(),
}

TERMINAL_STATUSES = frozenset({TenantStatus.FAILED, TenantStatus.INACTIVE})


def step_index(step: str | SagaStep | None) -> int:
	"""Position of ``step`` in the saga; -1 before the first checkpoint."""
	if step is None:
		return -1
	return STEP_ORDER.index(SagaStep(step))


def is_done(last_completed: str | None, step: SagaStep) -> bool:
	return step_index(last_completed) >= step_index(step)


def check_transition(current: str | TenantStatus, target: TenantStatus) -> None:
	current = TenantStatus(current)
	if target not in ALLOWED_TRANSITIONS[current]:
		raise InvalidTransitionError(
			f"Tenant cannot move from {current.value} to {target.value}"
		)
