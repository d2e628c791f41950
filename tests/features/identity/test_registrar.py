"""
Tests for owner identity registration and linking.
"""
import uuid
from unittest.mock import AsyncMock

import pytest

from storeforge.core.clients.base import ServiceError
from storeforge.core.clients.keycloak import IdentityUser, TokenSet
from storeforge.core.features.identity.registrar import IdentityRegistrar, merge_tenant_attributes
from storeforge.core.features.provisioning.errors import IdentityRegistrationError

TENANT_ID = uuid.UUID("7d1f8a52-9f4e-4a8e-9a43-1f2b3c4d5e6f")
USER_ID = "0b7c5d2e-3f41-4c55-8a9b-6e7f8091a2b3"


@pytest.fixture
def keycloak():
    client = AsyncMock()
    client.get_user_by_email.return_value = None
    client.create_user.return_value = USER_ID
    client.password_grant.return_value = TokenSet(access_token="token")
    return client


async def register(registrar, password="correct-horse"):
    return await registrar.register_or_link_owner(
        "ada@example.com", password, "Ada", "Lovelace", TENANT_ID, "acme",
    )


def test_merge_appends_new_tenant():
    merged = merge_tenant_attributes(
        {"tenant_id": ["t-1"], "tenant_slug": ["first"], "locale": ["en"]},
        TENANT_ID,
        "acme",
    )
    assert merged == {
        "tenant_id": ["t-1", str(TENANT_ID)],
        "tenant_slug": ["first", "acme"],
    }


def test_merge_is_idempotent():
    attributes = {"tenant_id": [str(TENANT_ID)], "tenant_slug": ["acme"]}
    assert merge_tenant_attributes(attributes, TENANT_ID, "acme") == attributes


@pytest.mark.asyncio
async def test_registers_new_owner(keycloak):
    owner_id = await register(IdentityRegistrar(keycloak, owner_role="store_owner"))

    assert owner_id == uuid.UUID(USER_ID)
    email, first, last, attributes = keycloak.create_user.await_args.args
    assert email == "ada@example.com"
    assert attributes == {"tenant_id": [str(TENANT_ID)], "tenant_slug": ["acme"]}
    keycloak.set_password.assert_awaited_once_with(USER_ID, "correct-horse")
    keycloak.assign_role.assert_awaited_once_with(USER_ID, "store_owner")


@pytest.mark.asyncio
async def test_new_owner_requires_password(keycloak):
    with pytest.raises(IdentityRegistrationError):
        await register(IdentityRegistrar(keycloak), password=None)
    keycloak.create_user.assert_not_called()


@pytest.mark.asyncio
async def test_half_created_user_is_removed(keycloak):
    keycloak.set_password.side_effect = ServiceError("keycloak", "policy violation", 400)

    with pytest.raises(IdentityRegistrationError) as exc_info:
        await register(IdentityRegistrar(keycloak))

    keycloak.delete_user.assert_awaited_once_with(USER_ID)
    assert exc_info.value.tenant_id == TENANT_ID
    assert exc_info.value.step == "identity_linked"


@pytest.mark.asyncio
async def test_links_existing_owner(keycloak):
    """An owner of another store keeps its id and gains the new tenant."""
    keycloak.get_user_by_email.return_value = IdentityUser(
        id=USER_ID,
        email="ada@example.com",
        attributes={"tenant_id": ["other-tenant"], "tenant_slug": ["other"]},
    )

    owner_id = await register(IdentityRegistrar(keycloak))

    assert owner_id == uuid.UUID(USER_ID)
    keycloak.create_user.assert_not_called()
    keycloak.password_grant.assert_awaited_once_with("ada@example.com", "correct-horse")
    keycloak.update_attributes.assert_awaited_once_with(USER_ID, {
        "tenant_id": ["other-tenant", str(TENANT_ID)],
        "tenant_slug": ["other", "acme"],
    })


@pytest.mark.asyncio
async def test_relinking_same_tenant_skips_update(keycloak):
    keycloak.get_user_by_email.return_value = IdentityUser(
        id=USER_ID,
        email="ada@example.com",
        attributes={"tenant_id": [str(TENANT_ID)], "tenant_slug": ["acme"]},
    )

    await register(IdentityRegistrar(keycloak))

    keycloak.update_attributes.assert_not_called()


@pytest.mark.asyncio
async def test_wrong_password_for_existing_owner(keycloak):
    keycloak.get_user_by_email.return_value = IdentityUser(id=USER_ID, email="ada@example.com")
    keycloak.password_grant.side_effect = ServiceError("keycloak", "invalid_grant", 401)

    with pytest.raises(IdentityRegistrationError, match="does not match"):
        await register(IdentityRegistrar(keycloak))

    keycloak.update_attributes.assert_not_called()


@pytest.mark.asyncio
async def test_issue_tokens_wraps_errors(keycloak):
    keycloak.password_grant.side_effect = ServiceError("keycloak", "unavailable", 503)

    with pytest.raises(IdentityRegistrationError):
        await IdentityRegistrar(keycloak).issue_tokens("ada@example.com", "correct-horse")
