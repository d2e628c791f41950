# (c) Copyright Datacraft, 2026
"""Provisioning fault taxonomy.

Expected business outcomes (a slug already taken) are returned as results
and never raised. Everything here aborts the operation that raised it.
"""
from uuid import UUID


class ProvisioningError(Exception):
	"""Base class for saga faults."""

	def __init__(
		self,
		message: str,
		tenant_id: UUID | None = None,
		step: str | None = None,
	):
		super().__init__(message)
		self.message = message
		self.tenant_id = tenant_id
		self.step = step


class SessionNotReadyError(ProvisioningError):
	"""The onboarding session is missing data the saga needs."""


class InvalidSlugError(ProvisioningError):
	pass


class SlugUnavailableError(ProvisioningError):
	"""No free slug could be derived for the session."""


class IdentityRegistrationError(ProvisioningError):
	pass


class OwnerBootstrapError(ProvisioningError):
	pass


class ResourceProvisioningError(ProvisioningError):
	"""Vendor or storefront creation failed after all retries."""


class DataIntegrityError(ProvisioningError):
	"""A peer service returned data that contradicts the request."""


class InvalidTransitionError(ProvisioningError):
	pass
