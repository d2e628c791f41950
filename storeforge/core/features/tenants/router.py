# (c) Copyright Datacraft, 2026
"""Tenant read API."""
import logging
from uuid import UUID

from fastapi import APIRouter, HTTPException, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storeforge.core.db.engine import get_db
from . import schema
from .db import api as tenants_api

router = APIRouter(
	prefix="/tenants",
	tags=["tenants"],
)

logger = logging.getLogger(__name__)


@router.get("/{tenant_id}")
async def get_tenant(
	tenant_id: UUID,
	db_session: AsyncSession = Depends(get_db),
) -> schema.TenantDetail:
	"""Get a tenant with its provisioning state."""
	tenant = await tenants_api.get_tenant(db_session, tenant_id)
	if not tenant:
		raise HTTPException(status_code=404, detail="Tenant not found")
	return schema.TenantDetail.model_validate(tenant)
