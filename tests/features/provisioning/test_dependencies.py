"""
Tests for wiring the provisioning collaborators from configuration.
"""
from unittest.mock import MagicMock

from storeforge.core.clients.factory import get_service_clients
from storeforge.core.config.services import ServiceSettings
from storeforge.core.features.events.publisher import EventPublisher
from storeforge.core.features.provisioning.dependencies import build_provisioning_services


def test_growthbook_optional():
    clients = get_service_clients(ServiceSettings())
    assert clients.growthbook is None

    clients = get_service_clients(ServiceSettings(growthbook_token="gb-token"))
    assert clients.growthbook is not None


def test_build_services():
    session_factory = MagicMock()
    publisher = EventPublisher(None)
    clients = get_service_clients(ServiceSettings(http_timeout_seconds=5))

    services = build_provisioning_services(session_factory, clients=clients, publisher=publisher)

    assert services.identity.client is clients.keycloak
    assert services.events.publisher is publisher
    assert services.events.router is clients.router
    assert services.resources.policy.max_attempts == services.settings.retry_max_attempts
    assert services.feature_flags.session_factory is session_factory
    assert clients.vendor.timeout == 5
    assert services.base_domain == "tesserix.app"
