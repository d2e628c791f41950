# (c) Copyright Datacraft, 2026
"""Slug registry Pydantic schemas."""
from uuid import UUID

from pydantic import BaseModel, Field


class SlugCheckResult(BaseModel):
	"""Outcome of an availability check or reservation attempt."""
	slug: str
	available: bool
	message: str | None = None
	suggestions: list[str] = Field(default_factory=list)


class SlugCheckRequest(BaseModel):
	slug: str
	session_id: UUID | None = None


class SlugReserveRequest(BaseModel):
	slug: str
	session_id: UUID
	claimant: str | None = None
