"""
Tests for the outbound HTTP clients against an in-process transport.
"""
import json
import uuid

import httpx
import pytest

from storeforge.core.clients.base import ServiceError, TransientServiceError
from storeforge.core.clients.growthbook import GrowthBookClient
from storeforge.core.clients.keycloak import KeycloakClient
from storeforge.core.clients.router import TenantRouterClient
from storeforge.core.clients.staff import StaffClient
from storeforge.core.clients.vendor import VendorClient

TENANT_ID = uuid.uuid4()
VENDOR_ID = uuid.uuid4()


class Recorder:
    """MockTransport handler replaying canned responses in order."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def transport(self):
        return httpx.MockTransport(self)


def envelope(data, status_code=200):
    return httpx.Response(status_code, json={"success": True, "data": data})


class TestVendorClient:
    """Internal vendor and storefront endpoints."""

    @pytest.mark.asyncio
    async def test_create_vendor(self):
        recorder = Recorder(envelope({
            "id": str(VENDOR_ID),
            "tenantId": str(TENANT_ID),
            "name": "Acme Goods",
            "email": "ada@example.com",
        }, status_code=201))
        client = VendorClient("http://vendors/", transport=recorder.transport)

        vendor = await client.create_vendor_for_tenant(TENANT_ID, "Acme Goods", "ada@example.com", "Ada")

        assert vendor.id == VENDOR_ID
        assert vendor.tenant_id == TENANT_ID
        request = recorder.requests[0]
        assert request.url == "http://vendors/internal/vendors"
        assert request.headers["X-Tenant-ID"] == str(TENANT_ID)
        assert request.headers["X-Vendor-ID"] == str(TENANT_ID)
        body = json.loads(request.content)
        assert body["isOwnerVendor"] is True
        assert body["primaryContact"] == "Ada"

    @pytest.mark.asyncio
    async def test_list_storefronts(self):
        recorder = Recorder(envelope([{
            "id": str(uuid.uuid4()),
            "vendorId": str(VENDOR_ID),
            "name": "Acme Store",
            "slug": "acme",
            "isDefault": True,
        }]))
        client = VendorClient("http://vendors", transport=recorder.transport)

        storefronts = await client.get_storefronts_for_vendor(TENANT_ID, VENDOR_ID)

        assert storefronts[0].is_default
        request = recorder.requests[0]
        assert request.url.params["vendorId"] == str(VENDOR_ID)
        assert request.headers["X-Vendor-ID"] == str(VENDOR_ID)

    @pytest.mark.asyncio
    async def test_error_envelope(self):
        recorder = Recorder(httpx.Response(200, json={
            "success": False,
            "error": {"code": "DUPLICATE", "message": "vendor exists"},
        }))
        client = VendorClient("http://vendors", transport=recorder.transport)

        with pytest.raises(ServiceError) as exc_info:
            await client.get_vendors_for_tenant(TENANT_ID)

        assert exc_info.value.code == "DUPLICATE"
        assert not isinstance(exc_info.value, TransientServiceError)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("response, transient", [
        (httpx.Response(503, text="unavailable"), True),
        (httpx.Response(429, text="slow down"), True),
        (httpx.Response(400, text="bad request"), False),
        (httpx.ConnectError("connection refused"), True),
    ])
    async def test_failure_classification(self, response, transient):
        client = VendorClient("http://vendors", transport=Recorder(response).transport)

        with pytest.raises(ServiceError) as exc_info:
            await client.get_vendors_for_tenant(TENANT_ID)

        assert isinstance(exc_info.value, TransientServiceError) is transient
        assert exc_info.value.service == "vendor-service"


class TestKeycloakClient:
    """Admin API calls and the password grant."""

    def client(self, recorder):
        return KeycloakClient(
            "http://keycloak",
            realm="tenants",
            admin_client_id="admin-cli",
            admin_client_secret="secret",
            login_client_id="storefront",
            transport=recorder.transport,
        )

    @pytest.mark.asyncio
    async def test_create_user_reads_location(self):
        user_id = str(uuid.uuid4())
        recorder = Recorder(
            httpx.Response(200, json={"access_token": "admin", "expires_in": 300}),
            httpx.Response(201, headers={"Location": f"http://keycloak/admin/realms/tenants/users/{user_id}"}),
            httpx.Response(204),
        )
        client = self.client(recorder)

        assert await client.create_user("ada@example.com", "Ada", "Lovelace", {"tenant_id": ["t"]}) == user_id
        await client.set_password(user_id, "correct-horse")

        # Admin token fetched once and reused
        token_requests = [r for r in recorder.requests if r.url.path.endswith("/token")]
        assert len(token_requests) == 1
        create = recorder.requests[1]
        assert create.headers["Authorization"] == "Bearer admin"
        assert json.loads(create.content)["emailVerified"] is True

    @pytest.mark.asyncio
    async def test_get_user_by_email_is_exact(self):
        recorder = Recorder(
            httpx.Response(200, json={"access_token": "admin", "expires_in": 300}),
            httpx.Response(200, json=[
                {"id": "1", "email": "ada@example.com.au"},
                {"id": "2", "email": "Ada@Example.com", "attributes": {"tenant_id": ["t"]}},
            ]),
        )

        user = await self.client(recorder).get_user_by_email("ada@example.com")

        assert user.id == "2"
        assert user.attributes == {"tenant_id": ["t"]}

    @pytest.mark.asyncio
    async def test_password_grant_rejected(self):
        recorder = Recorder(httpx.Response(401, json={"error": "invalid_grant"}))

        with pytest.raises(ServiceError) as exc_info:
            await self.client(recorder).password_grant("ada@example.com", "wrong")

        assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_staff_bootstrap():
    staff_id = uuid.uuid4()
    recorder = Recorder(httpx.Response(200, json={"success": True, "staff_id": str(staff_id)}))
    client = StaffClient("http://staff", transport=recorder.transport)

    result = await client.bootstrap_owner(TENANT_ID, uuid.uuid4(), "ada@example.com", "Ada", "Lovelace")

    assert result.staff_id == staff_id
    assert recorder.requests[0].headers["X-Tenant-ID"] == str(TENANT_ID)


@pytest.mark.asyncio
async def test_staff_bootstrap_unsuccessful():
    recorder = Recorder(httpx.Response(200, json={"success": False, "error": "role missing"}))
    client = StaffClient("http://staff", transport=recorder.transport)

    with pytest.raises(ServiceError, match="role missing"):
        await client.bootstrap_owner(TENANT_ID, uuid.uuid4(), "ada@example.com", "Ada", "Lovelace")


@pytest.mark.asyncio
async def test_router_accepts_202():
    recorder = Recorder(httpx.Response(202))
    client = TenantRouterClient("http://router", transport=recorder.transport)

    await client.provision_host("acme", TENANT_ID, "acme-admin.tesserix.app", "acme.tesserix.app")

    body = json.loads(recorder.requests[0].content)
    assert body == {
        "slug": "acme",
        "tenant_id": str(TENANT_ID),
        "admin_host": "acme-admin.tesserix.app",
        "storefront_host": "acme.tesserix.app",
    }


@pytest.mark.asyncio
async def test_growthbook_org():
    recorder = Recorder(
        httpx.Response(200, json={"orgId": "org_123"}),
        httpx.Response(200, json={"sdkConnection": {"key": "sdk-abc"}}),
    )
    client = GrowthBookClient("http://growthbook/api/v1", token="gb-token", transport=recorder.transport)

    org = await client.provision_org("acme", "Acme Goods")

    assert (org.org_id, org.sdk_key) == ("org_123", "sdk-abc")
    assert recorder.requests[1].headers["X-Organization"] == "org_123"
    assert recorder.requests[0].headers["Authorization"] == "Bearer gb-token"
