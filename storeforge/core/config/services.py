# (c) Copyright Datacraft, 2026
"""Endpoints and credentials of the services a tenant is provisioned in."""
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServiceSettings(BaseSettings):
	"""
	Outbound collaborator configuration.

	Environment variables are prefixed with SF_SERVICES_.
	"""

	http_timeout_seconds: float = Field(
		default=30.0,
		description="Timeout applied to every outbound HTTP call",
	)

	# Identity provider (Keycloak)
	keycloak_url: str = "http://keycloak:8080"
	keycloak_realm: str = "tesserix"
	keycloak_admin_client_id: str = "tenant-service"
	keycloak_admin_client_secret: str = ""
	keycloak_login_client_id: str = "storefront-admin"
	keycloak_login_client_secret: str | None = None

	# Peer services
	vendor_service_url: str = "http://vendor-service:8080"
	staff_service_url: str = "http://staff-service:8080"
	router_service_url: str = Field(
		default="http://tenant-router-service:8080/api/v1",
		description="Base URL of the routing fallback; /hosts is appended",
	)
	notification_service_url: str = "http://notification-service:8080"

	# Feature flags (GrowthBook)
	growthbook_url: str = "http://growthbook:3100/api/v1"
	growthbook_token: str | None = Field(
		default=None,
		description="Admin token; feature-flag provisioning is skipped without it",
	)

	# Event bus (Redis Streams)
	event_stream_prefix: str = "storeforge:"
	event_stream_maxlen: int = 100_000
	event_publish_attempts: int = 3

	model_config = SettingsConfigDict(
		env_prefix="SF_SERVICES_",
		extra="ignore",
	)


@lru_cache(maxsize=1)
def get_service_settings() -> ServiceSettings:
	return ServiceSettings()
