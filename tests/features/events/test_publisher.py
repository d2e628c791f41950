"""
Tests for the Redis Streams publisher and dual-path delivery.
"""
import json
import uuid
from unittest.mock import AsyncMock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from storeforge.core.clients.base import ServiceError
from storeforge.core.features.events.delivery import TenantEventDelivery
from storeforge.core.features.events.publisher import EventPublisher
from storeforge.core.features.events.schema import (
    TENANT_CREATED,
    TenantCreatedEvent,
    TenantDeletedEvent,
)


@pytest.fixture
def event():
    return TenantCreatedEvent(
        tenant_id=uuid.uuid4(),
        session_id=uuid.uuid4(),
        product="marketplace",
        business_name="Acme Goods",
        slug="acme",
        email="ada@example.com",
        admin_host="acme-admin.tesserix.app",
        storefront_host="acme.tesserix.app",
        base_domain="tesserix.app",
    )


@pytest.fixture
def redis_client():
    client = AsyncMock()
    client.ping.return_value = True
    client.xadd.return_value = "1700000000000-0"
    return client


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def publisher(redis_client, sleeps):
    async def sleep(delay):
        sleeps.append(delay)

    return EventPublisher("redis://localhost:6379/0", client=redis_client, sleep=sleep)


class TestEventPublisher:
    """Publishing tenant events to streams."""

    @pytest.mark.asyncio
    async def test_publish_appends_to_topic_stream(self, publisher, redis_client, event):
        assert await publisher.publish(TENANT_CREATED, event)

        stream, fields = redis_client.xadd.await_args.args
        assert stream == "storeforge:tenant.created"
        assert fields["event_id"] == event.event_id
        assert fields["event_type"] == "tenant.created"
        assert fields["tenant_id"] == str(event.tenant_id)
        payload = json.loads(fields["payload"])
        assert payload["slug"] == "acme"
        assert payload["admin_host"] == "acme-admin.tesserix.app"
        assert redis_client.xadd.await_args.kwargs["maxlen"] == 100_000

    @pytest.mark.asyncio
    async def test_publish_retries_then_succeeds(self, publisher, redis_client, sleeps, event):
        redis_client.xadd.side_effect = [RedisConnectionError("reset"), "1700000000000-1"]

        assert await publisher.publish(TENANT_CREATED, event)
        assert redis_client.xadd.await_count == 2
        assert sleeps == [1]
        assert publisher.connected

    @pytest.mark.asyncio
    async def test_publish_gives_up(self, publisher, redis_client, sleeps, event):
        redis_client.xadd.side_effect = RedisConnectionError("down")

        assert not await publisher.publish(TENANT_CREATED, event)
        assert redis_client.xadd.await_count == 3
        assert sleeps == [1, 2]
        assert not publisher.connected

    @pytest.mark.asyncio
    async def test_unreachable_bus_does_not_raise(self, publisher, redis_client, event):
        redis_client.ping.side_effect = RedisConnectionError("refused")

        assert not await publisher.connect()
        assert not await publisher.publish(TENANT_CREATED, event)
        redis_client.xadd.assert_not_called()
        assert await publisher.health() == {"connected": False, "stream_prefix": "storeforge:"}

    @pytest.mark.asyncio
    async def test_unconfigured_bus(self, event, sleeps):
        async def sleep(delay):
            sleeps.append(delay)

        publisher = EventPublisher(None, sleep=sleep)

        assert not await publisher.connect()
        assert not await publisher.publish(TENANT_CREATED, event)

    @pytest.mark.asyncio
    async def test_close(self, publisher, redis_client):
        await publisher.connect()
        await publisher.close()

        redis_client.aclose.assert_awaited_once()
        assert not publisher.connected


class TestTenantEventDelivery:
    """Bus and router are both attempted."""

    @pytest.mark.asyncio
    async def test_both_paths(self, event):
        publisher, router = AsyncMock(), AsyncMock()
        publisher.publish.return_value = True

        report = await TenantEventDelivery(publisher, router).announce_tenant_created(event)

        assert report.bus and report.http
        router.provision_host.assert_awaited_once()
        kwargs = router.provision_host.await_args.kwargs
        assert kwargs["slug"] == "acme"
        assert kwargs["storefront_host"] == "acme.tesserix.app"

    @pytest.mark.asyncio
    async def test_router_covers_bus_outage(self, event):
        publisher, router = AsyncMock(), AsyncMock()
        publisher.publish.return_value = False

        report = await TenantEventDelivery(publisher, router).announce_tenant_created(event)

        assert not report.bus
        assert report.http
        assert report.delivered

    @pytest.mark.asyncio
    async def test_both_paths_down_is_critical(self, event):
        publisher, router = AsyncMock(), AsyncMock()
        publisher.publish.return_value = False
        router.provision_host.side_effect = ServiceError("tenant-router", "unavailable", 503)

        with patch("storeforge.core.features.events.delivery.logger") as logger:
            report = await TenantEventDelivery(publisher, router).announce_tenant_created(event)

        assert not report.delivered
        logger.critical.assert_called_once()
        assert "manual provisioning" in logger.critical.call_args.args[0]

    @pytest.mark.asyncio
    async def test_deleted_event_uses_bus_only(self):
        publisher, router = AsyncMock(), AsyncMock()
        publisher.publish.return_value = True
        deleted = TenantDeletedEvent(
            tenant_id=uuid.uuid4(),
            slug="acme",
            admin_host="acme-admin.tesserix.app",
            storefront_host="acme.tesserix.app",
        )

        assert await TenantEventDelivery(publisher, router).announce_tenant_deleted(deleted)
        assert publisher.publish.await_args.args[0] == "tenant.deleted"
        router.provision_host.assert_not_called()
