# (c) Copyright Datacraft, 2026
"""
Slug registry.

Allocates the human-readable identifier a tenant is reachable by. The
registry answers availability questions, hands out pending reservations to
onboarding sessions and binds them to tenants once those exist. The unique
constraints on ``slug_reservations.slug`` and ``tenants.slug`` decide races;
the availability queries here only keep the common path cheap.
"""
import logging
import re
from datetime import timedelta
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from storeforge.core.config.provisioning import ProvisioningSettings, get_provisioning_settings
from storeforge.core.features.provisioning.errors import InvalidSlugError, SlugUnavailableError
from storeforge.core.features.tenants.db import api as tenants_api
from storeforge.core.utils.tz import utc_now
from .db import api as slugs_api
from .schema import SlugCheckResult

logger = logging.getLogger(__name__)

SLUG_PATTERN = re.compile(r"^[a-z][a-z0-9]*(-[a-z0-9]+)*$")
SUGGESTION_SUFFIXES = ("store", "shop", "hub", "online", "app", "hq")
GENERATED_SLUG_MAX_LENGTH = 45
_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def normalize_slug(value: str) -> str:
	return value.strip().lower()


def slugify(value: str) -> str:
	"""Lowercase, turn every run of non-alphanumerics into a single hyphen."""
	return _NON_ALNUM.sub("-", value.strip().lower()).strip("-")


def validate_slug(slug: str, settings: ProvisioningSettings) -> str | None:
	"""Return a human-readable reason when ``slug`` is not acceptable."""
	if len(slug) < settings.slug_min_length:
		return f"Slug must be at least {settings.slug_min_length} characters"
	if len(slug) > settings.slug_max_length:
		return f"Slug must be at most {settings.slug_max_length} characters"
	if "--" in slug:
		return "Slug cannot contain consecutive hyphens"
	if not SLUG_PATTERN.match(slug):
		return (
			"Slug must start with a letter, contain only lowercase letters, "
			"numbers and hyphens, and not end with a hyphen"
		)
	if slug in settings.reserved_slugs:
		return f"'{slug}' is reserved"
	return None


def generate_slug(business_name: str) -> str:
	"""Derive a slug from a business name."""
	slug = slugify(business_name)[:GENERATED_SLUG_MAX_LENGTH].strip("-")
	if slug and not slug[0].isalpha():
		slug = f"store-{slug}"
	if len(slug) < 3:
		slug = f"store-{slug}" if slug else "store"
	return slug.strip("-")


def candidate_suggestions(slug: str, settings: ProvisioningSettings) -> list[str]:
	"""Alternatives for ``slug`` in preference order, before availability."""
	year = utc_now().year
	suffixes = [str(n) for n in range(1, 100)]
	suffixes += list(SUGGESTION_SUFFIXES)
	suffixes.append(str(year))

	candidates = []
	for suffix in suffixes:
		base = slug[:settings.slug_max_length - len(suffix) - 1].rstrip("-")
		candidate = f"{base}-{suffix}"
		if validate_slug(candidate, settings) is None:
			candidates.append(candidate)
	return candidates


class SlugRegistry:
	"""Slug availability and reservation for one database session."""

	def __init__(
		self,
		db: AsyncSession,
		settings: ProvisioningSettings | None = None,
	):
		self.db = db
		self.settings = settings or get_provisioning_settings()

	async def check(self, slug: str, session_id: UUID | None = None) -> SlugCheckResult:
		"""Read-only availability check."""
		slug = normalize_slug(slug)
		reason = validate_slug(slug, self.settings)
		if reason:
			return await self._invalid(slug, reason, session_id)

		if slug in await self._taken([slug], session_id):
			return SlugCheckResult(
				slug=slug,
				available=False,
				message="This slug is already taken",
				suggestions=await self.suggest(slug, session_id),
			)
		return SlugCheckResult(slug=slug, available=True, message="Slug is available")

	async def reserve(
		self,
		slug: str,
		session_id: UUID,
		claimant: str | None = None,
	) -> SlugCheckResult:
		"""Claim ``slug`` for an onboarding session.

		Re-reserving by the same session renews the hold. A conflicting
		claim reserves nothing and comes back with suggestions.
		"""
		slug = normalize_slug(slug)
		reason = validate_slug(slug, self.settings)
		if reason:
			return await self._invalid(slug, reason, session_id)

		if slug not in await self._taken([slug], session_id):
			now = utc_now()
			expires_at = now + timedelta(minutes=self.settings.slug_reservation_ttl_minutes)
			if await slugs_api.claim(self.db, slug, session_id, claimant, expires_at, now):
				logger.info(f"Reserved slug {slug} for session {session_id}")
				return SlugCheckResult(slug=slug, available=True, message="Slug reserved")
			message = "This slug was just taken"
		else:
			message = "This slug is already taken"

		return SlugCheckResult(
			slug=slug,
			available=False,
			message=message,
			suggestions=await self.suggest(slug, session_id),
		)

	async def activate(self, slug: str, tenant_id: UUID) -> bool:
		"""Bind the reservation to a committed tenant. Never raises on a miss."""
		if await slugs_api.get_reservation(self.db, slug) is None:
			logger.warning(f"No reservation found for slug {slug}; recording it for tenant {tenant_id}")
		activated = await slugs_api.activate(self.db, slug, tenant_id, utc_now())
		if not activated:
			logger.warning(f"Slug {slug} could not be activated for tenant {tenant_id}")
		return activated

	async def release(self, tenant_id: UUID) -> int:
		released = await slugs_api.release_for_tenant(self.db, tenant_id, utc_now())
		if released:
			logger.info(f"Released {released} slug reservation(s) of tenant {tenant_id}")
		return released

	async def release_expired(self) -> int:
		released = await slugs_api.release_expired(self.db, utc_now())
		if released:
			logger.info(f"Released {released} expired slug reservation(s)")
		return released

	async def suggest(self, slug: str, session_id: UUID | None = None) -> list[str]:
		"""Up to ``slug_suggestion_count`` free alternatives for ``slug``."""
		limit = self.settings.slug_suggestion_count
		candidates = candidate_suggestions(slug, self.settings)
		free: list[str] = []
		batch_size = max(limit * 4, 20)
		for start in range(0, len(candidates), batch_size):
			batch = candidates[start:start + batch_size]
			taken = await self._taken(batch, session_id)
			free.extend(c for c in batch if c not in taken)
			if len(free) >= limit:
				break
		return free[:limit]

	async def resolve_for_session(
		self,
		session_id: UUID,
		reserved_slug: str | None,
		business_name: str,
	) -> str:
		"""Pick the slug a new tenant is created with.

		The session's reservation wins when still free; a slug taken in the
		meantime falls back to its first free variant. Sessions without a
		reservation get one derived from the business name.
		"""
		if reserved_slug:
			slug = normalize_slug(reserved_slug)
			reason = validate_slug(slug, self.settings)
			if reason:
				raise InvalidSlugError(reason, step="slug_resolved")
		else:
			slug = generate_slug(business_name)
			if validate_slug(slug, self.settings) is not None:
				slug = f"{slug}-store"

		if validate_slug(slug, self.settings) is None and slug not in await self._taken([slug], session_id):
			return slug

		suggestions = await self.suggest(slug, session_id)
		if not suggestions:
			raise SlugUnavailableError(f"No free slug derived from '{slug}'", step="slug_resolved")
		logger.info(f"Slug {slug} unavailable for session {session_id}, using {suggestions[0]}")
		return suggestions[0]

	async def _taken(self, slugs: list[str], session_id: UUID | None) -> set[str]:
		taken = await tenants_api.slugs_in_use(self.db, slugs)
		taken |= await slugs_api.claimed_slugs(
			self.db, slugs, utc_now(), exclude_session_id=session_id,
		)
		return taken

	async def _invalid(
		self,
		slug: str,
		reason: str,
		session_id: UUID | None,
	) -> SlugCheckResult:
		suggestions = []
		cleaned = slugify(slug)
		if cleaned and cleaned != slug and validate_slug(cleaned, self.settings) is None:
			if cleaned not in await self._taken([cleaned], session_id):
				suggestions.append(cleaned)
		return SlugCheckResult(slug=slug, available=False, message=reason, suggestions=suggestions)
