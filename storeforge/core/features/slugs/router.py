# (c) Copyright Datacraft, 2026
"""Slug availability and reservation endpoints."""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storeforge.core.db.engine import get_db
from . import schema
from .service import SlugRegistry

router = APIRouter(
	prefix="/slugs",
	tags=["slugs"],
)


@router.post("/check")
async def check_slug(
	request: schema.SlugCheckRequest,
	db_session: AsyncSession = Depends(get_db),
) -> schema.SlugCheckResult:
	return await SlugRegistry(db_session).check(request.slug, request.session_id)


@router.post("/reserve")
async def reserve_slug(
	request: schema.SlugReserveRequest,
	db_session: AsyncSession = Depends(get_db),
) -> schema.SlugCheckResult:
	"""Reserve a slug for an onboarding session.

	A taken slug is not an error: the response has ``available: false``
	and a list of free alternatives.
	"""
	return await SlugRegistry(db_session).reserve(
		request.slug, request.session_id, request.claimant,
	)
