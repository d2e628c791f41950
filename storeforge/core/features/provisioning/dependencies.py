# (c) Copyright Datacraft, 2026
"""Wiring of the provisioning collaborators from configuration."""
import logging

from storeforge.core.clients.factory import ServiceClients, get_service_clients
from storeforge.core.config import (
	get_provisioning_settings,
	get_service_settings,
	get_settings,
)
from storeforge.core.features.events.delivery import TenantEventDelivery
from storeforge.core.features.events.publisher import EventPublisher
from storeforge.core.features.feature_flags.service import FeatureFlagProvisioner
from storeforge.core.features.identity.registrar import IdentityRegistrar
from storeforge.core.features.notifications.dispatcher import NotificationDispatcher
from storeforge.core.features.resources.provisioner import ResourceProvisioner
from storeforge.core.utils.background import BackgroundTasks
from .retry import RetryPolicy
from .services import ProvisioningServices

logger = logging.getLogger(__name__)

_services: ProvisioningServices | None = None
_publisher: EventPublisher | None = None


def get_event_publisher() -> EventPublisher:
	global _publisher
	if _publisher is None:
		settings = get_settings()
		service_settings = get_service_settings()
		_publisher = EventPublisher(
			str(settings.redis_url) if settings.redis_url else None,
			stream_prefix=service_settings.event_stream_prefix,
			maxlen=service_settings.event_stream_maxlen,
			publish_attempts=service_settings.event_publish_attempts,
		)
	return _publisher


def build_provisioning_services(
	db_session_factory,
	clients: ServiceClients | None = None,
	publisher: EventPublisher | None = None,
) -> ProvisioningServices:
	settings = get_settings()
	provisioning_settings = get_provisioning_settings()
	clients = clients or get_service_clients()
	publisher = publisher or get_event_publisher()

	return ProvisioningServices(
		identity=IdentityRegistrar(clients.keycloak, owner_role=provisioning_settings.owner_role),
		staff=clients.staff,
		resources=ResourceProvisioner(
			clients.vendor, RetryPolicy.from_settings(provisioning_settings),
		),
		events=TenantEventDelivery(publisher, clients.router),
		notifications=NotificationDispatcher(clients.notification),
		feature_flags=FeatureFlagProvisioner(clients.growthbook, db_session_factory),
		background=BackgroundTasks(),
		settings=provisioning_settings,
		base_domain=settings.base_domain,
		product=settings.product,
	)


def get_provisioning_services() -> ProvisioningServices:
	"""Process-wide collaborators, built on first use."""
	global _services
	if _services is None:
		from storeforge.core.db.engine import AsyncSessionLocal
		_services = build_provisioning_services(AsyncSessionLocal)
	return _services
