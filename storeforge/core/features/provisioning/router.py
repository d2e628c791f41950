# (c) Copyright Datacraft, 2026
"""Onboarding completion and reconciliation endpoints."""
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from storeforge.core.db.engine import AsyncSessionLocal, get_db
from . import schema
from .dependencies import get_provisioning_services
from .errors import (
	DataIntegrityError,
	IdentityRegistrationError,
	InvalidSlugError,
	OwnerBootstrapError,
	ProvisioningError,
	ResourceProvisioningError,
	SessionNotReadyError,
	SlugUnavailableError,
)
from .reconciliation import ReconciliationService
from .saga import ProvisioningSaga
from .services import ProvisioningServices

router = APIRouter(
	tags=["provisioning"],
)

logger = logging.getLogger(__name__)


def _http_error(error: ProvisioningError) -> HTTPException:
	if isinstance(error, SessionNotReadyError):
		return HTTPException(status_code=400, detail=error.message)
	if isinstance(error, InvalidSlugError):
		return HTTPException(status_code=422, detail=error.message)
	if isinstance(error, SlugUnavailableError):
		return HTTPException(status_code=409, detail=error.message)
	if isinstance(error, (
		IdentityRegistrationError,
		OwnerBootstrapError,
		ResourceProvisioningError,
		DataIntegrityError,
	)):
		return HTTPException(status_code=502, detail=error.message)
	return HTTPException(status_code=409, detail=error.message)


@router.post("/onboarding/{session_id}/complete")
async def complete_onboarding(
	session_id: UUID,
	request: schema.CompleteOnboardingRequest,
	db_session: AsyncSession = Depends(get_db),
	services: ProvisioningServices = Depends(get_provisioning_services),
) -> schema.ProvisioningResult:
	"""Create the tenant for a finished onboarding session.

	Safe to retry: a session that already has a tenant gets fresh login
	tokens instead of a second tenant.
	"""
	saga = ProvisioningSaga(db_session, services)
	try:
		return await saga.complete(session_id, request.password)
	except ProvisioningError as e:
		logger.warning(f"Onboarding completion for session {session_id} failed: {e.message}")
		raise _http_error(e) from e


@router.post("/provisioning/reconcile")
async def reconcile(
	services: ProvisioningServices = Depends(get_provisioning_services),
) -> schema.ReconciliationResult:
	"""Run one reconciliation pass now."""
	service = ReconciliationService(AsyncSessionLocal, services)
	return await service.run_once()
