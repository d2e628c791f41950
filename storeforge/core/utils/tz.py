# (c) Copyright Datacraft, 2026
from datetime import datetime, timezone


def utc_now() -> datetime:
	return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
	"""Attach UTC to naive datetimes (SQLite drops tzinfo on read)."""
	if value is None:
		return None
	if value.tzinfo is None:
		return value.replace(tzinfo=timezone.utc)
	return value.astimezone(timezone.utc)
