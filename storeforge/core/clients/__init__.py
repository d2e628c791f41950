# (c) Copyright Datacraft, 2026
"""Clients for the services a tenant is provisioned in."""
from .base import ServiceClient, ServiceError, TransientServiceError
from .factory import ServiceClients, get_service_clients
from .growthbook import FeatureFlagOrg, GrowthBookClient
from .keycloak import IdentityUser, KeycloakClient, TokenSet
from .notification import NotificationClient
from .router import TenantRouterClient
from .staff import OwnerBootstrap, StaffClient
from .vendor import Storefront, Vendor, VendorClient

__all__ = [
	"ServiceClient",
	"ServiceError",
	"TransientServiceError",
	"ServiceClients",
	"get_service_clients",
	"FeatureFlagOrg",
	"GrowthBookClient",
	"IdentityUser",
	"KeycloakClient",
	"TokenSet",
	"NotificationClient",
	"TenantRouterClient",
	"OwnerBootstrap",
	"StaffClient",
	"Storefront",
	"Vendor",
	"VendorClient",
]
