# (c) Copyright Datacraft, 2026
"""Provisioning saga and reconciliation configuration."""
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_RESERVED_SLUGS = [
	"admin", "api", "www", "app", "login", "signup", "register",
	"dashboard", "settings", "help", "support", "billing", "account",
	"auth", "oauth", "static", "assets", "public", "private",
]


class ProvisioningSettings(BaseSettings):
	"""
	Configuration for the tenant provisioning saga.

	Environment variables are prefixed with SF_PROVISIONING_.
	"""

	# Retry policy for vendor/storefront creation
	retry_max_attempts: int = Field(
		default=3,
		gt=0,
		description="Attempts per retryable step, including the first",
	)
	retry_base_delay_seconds: float = Field(
		default=0.5,
		description="Delay before the second attempt; doubles afterwards",
	)
	retry_max_delay_seconds: float = Field(
		default=5.0,
		description="Upper bound for a single backoff delay",
	)

	# Reconciliation
	reconciliation_enabled: bool = Field(
		default=True,
		description="Run the stuck-tenant sweep in the API process",
	)
	reconcile_interval_seconds: int = Field(
		default=300,
		description="How often the reconciliation sweep runs",
	)
	stuck_threshold_seconds: int = Field(
		default=300,
		description="Age after which a creating tenant counts as stuck",
	)
	max_stuck_age_seconds: int = Field(
		default=86400,
		description="Age after which a stuck tenant is failed without retry",
	)
	reconcile_max_retries: int = Field(
		default=3,
		description="Failed resume attempts tolerated; the next failure fails the tenant",
	)
	reconcile_retry_backoff_seconds: int = Field(
		default=30,
		description="Minimum gap between two resume attempts of one tenant",
	)

	# Slugs
	slug_min_length: int = 3
	slug_max_length: int = 50
	slug_reservation_ttl_minutes: int = Field(
		default=30,
		description="Lifetime of a pending slug reservation",
	)
	slug_suggestion_count: int = 5
	reserved_slugs: list[str] = Field(default_factory=lambda: list(DEFAULT_RESERVED_SLUGS))

	# Tenant defaults
	default_timezone: str = "UTC"
	default_currency: str = "USD"
	owner_role: str = Field(
		default="store_owner",
		description="Identity provider realm role granted to tenant owners",
	)
	password_min_length: int = 8

	model_config = SettingsConfigDict(
		env_prefix="SF_PROVISIONING_",
		extra="ignore",
	)


@lru_cache(maxsize=1)
def get_provisioning_settings() -> ProvisioningSettings:
	"""Get the provisioning configuration singleton."""
	return ProvisioningSettings()
