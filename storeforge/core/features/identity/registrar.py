# (c) Copyright Datacraft, 2026
"""
Owner identity registration.

The identity provider is the single source of truth for the owner's user
id. One person may own several tenants, so tenant membership is kept in
the multi-valued ``tenant_id``/``tenant_slug`` attributes and only ever
appended to.
"""
import logging
from uuid import UUID

from storeforge.core.clients.base import ServiceError
from storeforge.core.clients.keycloak import IdentityUser, KeycloakClient, TokenSet
from storeforge.core.features.provisioning.errors import IdentityRegistrationError

logger = logging.getLogger(__name__)

STEP = "identity_linked"


def merge_tenant_attributes(
	attributes: dict[str, list[str]],
	tenant_id: UUID,
	tenant_slug: str,
) -> dict[str, list[str]]:
	"""Append the tenant pair unless the tenant id is already listed."""
	tenant_ids = list(attributes.get("tenant_id", []))
	tenant_slugs = list(attributes.get("tenant_slug", []))
	if str(tenant_id) in tenant_ids:
		return {"tenant_id": tenant_ids, "tenant_slug": tenant_slugs}
	tenant_ids.append(str(tenant_id))
	if tenant_slug not in tenant_slugs:
		tenant_slugs.append(tenant_slug)
	return {"tenant_id": tenant_ids, "tenant_slug": tenant_slugs}


class IdentityRegistrar:
	def __init__(self, client: KeycloakClient, owner_role: str = "store_owner"):
		self.client = client
		self.owner_role = owner_role

	async def register_or_link_owner(
		self,
		email: str,
		password: str | None,
		first_name: str,
		last_name: str,
		tenant_id: UUID,
		tenant_slug: str,
	) -> UUID:
		"""Create the owner account or attach the tenant to an existing one.

		Returns the identity provider's user id. Any failure raises
		IdentityRegistrationError; nothing is retried.
		"""
		try:
			user = await self.client.get_user_by_email(email)
			if user is None:
				return await self._register(email, password, first_name, last_name, tenant_id, tenant_slug)
			return await self._link(user, email, password, tenant_id, tenant_slug)
		except ServiceError as e:
			raise IdentityRegistrationError(
				f"Identity provider rejected owner {email}: {e.message}",
				tenant_id=tenant_id,
				step=STEP,
			) from e

	async def _register(
		self,
		email: str,
		password: str | None,
		first_name: str,
		last_name: str,
		tenant_id: UUID,
		tenant_slug: str,
	) -> UUID:
		if not password:
			raise IdentityRegistrationError(
				"A password is required to create the owner account",
				tenant_id=tenant_id,
				step=STEP,
			)
		attributes = merge_tenant_attributes({}, tenant_id, tenant_slug)
		user_id = await self.client.create_user(email, first_name, last_name, attributes)
		try:
			await self.client.set_password(user_id, password)
			await self.client.assign_role(user_id, self.owner_role)
		except ServiceError:
			# Remove the half-configured account
			try:
				await self.client.delete_user(user_id)
			except ServiceError as cleanup_error:
				logger.error(f"Failed to remove partially created user {user_id}: {cleanup_error}")
			raise
		logger.info(f"Registered owner {email} as {user_id} for tenant {tenant_slug}")
		return UUID(user_id)

	async def _link(
		self,
		user: IdentityUser,
		email: str,
		password: str | None,
		tenant_id: UUID,
		tenant_slug: str,
	) -> UUID:
		if password:
			await self._verify_password(email, password, tenant_id)

		attributes = merge_tenant_attributes(user.attributes, tenant_id, tenant_slug)
		if attributes["tenant_id"] != user.attributes.get("tenant_id", []):
			await self.client.update_attributes(user.id, attributes)
			logger.info(f"Linked tenant {tenant_slug} to existing owner {user.id}")
		await self.client.assign_role(user.id, self.owner_role)
		return UUID(user.id)

	async def _verify_password(self, email: str, password: str, tenant_id: UUID) -> None:
		try:
			await self.client.password_grant(email, password)
		except ServiceError as e:
			if e.status_code in (400, 401):
				raise IdentityRegistrationError(
					"Password does not match the existing account for this email",
					tenant_id=tenant_id,
					step=STEP,
				) from e
			raise

	async def issue_tokens(self, email: str, password: str) -> TokenSet:
		try:
			return await self.client.password_grant(email, password)
		except ServiceError as e:
			raise IdentityRegistrationError(f"Could not issue login tokens: {e.message}") from e
