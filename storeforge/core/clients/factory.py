# (c) Copyright Datacraft, 2026
"""Factory for the outbound service clients."""
from dataclasses import dataclass

from storeforge.core.config.services import ServiceSettings, get_service_settings
from .growthbook import GrowthBookClient
from .keycloak import KeycloakClient
from .notification import NotificationClient
from .router import TenantRouterClient
from .staff import StaffClient
from .vendor import VendorClient


@dataclass
class ServiceClients:
	keycloak: KeycloakClient
	vendor: VendorClient
	staff: StaffClient
	router: TenantRouterClient
	notification: NotificationClient
	growthbook: GrowthBookClient | None = None


def get_service_clients(settings: ServiceSettings | None = None) -> ServiceClients:
	"""Build every client from configuration."""
	if settings is None:
		settings = get_service_settings()
	timeout = settings.http_timeout_seconds

	growthbook = None
	if settings.growthbook_token:
		growthbook = GrowthBookClient(
			settings.growthbook_url,
			token=settings.growthbook_token,
			timeout=timeout,
		)

	return ServiceClients(
		keycloak=KeycloakClient(
			settings.keycloak_url,
			realm=settings.keycloak_realm,
			admin_client_id=settings.keycloak_admin_client_id,
			admin_client_secret=settings.keycloak_admin_client_secret,
			login_client_id=settings.keycloak_login_client_id,
			login_client_secret=settings.keycloak_login_client_secret,
			timeout=timeout,
		),
		vendor=VendorClient(settings.vendor_service_url, timeout=timeout),
		staff=StaffClient(settings.staff_service_url, timeout=timeout),
		router=TenantRouterClient(settings.router_service_url, timeout=timeout),
		notification=NotificationClient(settings.notification_service_url, timeout=timeout),
		growthbook=growthbook,
	)
