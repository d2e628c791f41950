"""
Tests for per-tenant feature flag organisations.
"""
from unittest.mock import AsyncMock

import pytest

from storeforge.core.clients.base import ServiceError
from storeforge.core.clients.growthbook import FeatureFlagOrg
from storeforge.core.features.feature_flags.service import FeatureFlagProvisioner
from storeforge.core.features.tenants.db.orm import Tenant


@pytest.mark.asyncio
async def test_org_recorded_on_tenant(session_factory, make_tenant):
    tenant = await make_tenant(slug="acme")
    client = AsyncMock()
    client.provision_org.return_value = FeatureFlagOrg(org_id="org_123", sdk_key="sdk-abc")

    assert await FeatureFlagProvisioner(client, session_factory).provision(tenant.id, "acme", "Acme Goods")

    async with session_factory() as db:
        stored = await db.get(Tenant, tenant.id)
    assert stored.feature_flags_org_id == "org_123"
    assert stored.feature_flags_sdk_key == "sdk-abc"
    assert stored.feature_flags_provisioned_at is not None


@pytest.mark.asyncio
async def test_failure_leaves_tenant_untouched(session_factory, make_tenant):
    tenant = await make_tenant(slug="acme")
    client = AsyncMock()
    client.provision_org.side_effect = ServiceError("growthbook", "unauthorized", 401)

    assert not await FeatureFlagProvisioner(client, session_factory).provision(tenant.id, "acme", "Acme")

    async with session_factory() as db:
        stored = await db.get(Tenant, tenant.id)
    assert stored.feature_flags_org_id is None


@pytest.mark.asyncio
async def test_not_configured(session_factory):
    assert not await FeatureFlagProvisioner(None, session_factory).provision(None, "acme", "Acme")
