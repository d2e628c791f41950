# (c) Copyright Datacraft, 2026
"""Keycloak admin REST client for owner accounts."""
import logging
import time
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field

from .base import ServiceClient, ServiceError

logger = logging.getLogger(__name__)

# Refresh the admin token this many seconds before Keycloak expires it
TOKEN_EXPIRY_MARGIN = 30


class IdentityUser(BaseModel):
	"""Subset of a Keycloak user representation."""
	model_config = ConfigDict(populate_by_name=True)

	id: str
	email: str | None = None
	first_name: str | None = Field(default=None, alias="firstName")
	last_name: str | None = Field(default=None, alias="lastName")
	enabled: bool = True
	attributes: dict[str, list[str]] = Field(default_factory=dict)


class TokenSet(BaseModel):
	access_token: str
	refresh_token: str | None = None
	expires_in: int = 0
	token_type: str = "Bearer"


class KeycloakClient(ServiceClient):
	"""Realm user management plus the password grant used for owner login."""

	service_name = "keycloak"

	def __init__(
		self,
		base_url: str,
		realm: str,
		admin_client_id: str,
		admin_client_secret: str,
		login_client_id: str,
		login_client_secret: str | None = None,
		timeout: float = 30.0,
		transport: httpx.AsyncBaseTransport | None = None,
	):
		super().__init__(base_url, timeout=timeout, transport=transport)
		self.realm = realm
		self.admin_client_id = admin_client_id
		self.admin_client_secret = admin_client_secret
		self.login_client_id = login_client_id
		self.login_client_secret = login_client_secret
		self._admin_token: str | None = None
		self._admin_token_expires: float = 0.0

	@property
	def _token_path(self) -> str:
		return f"/realms/{self.realm}/protocol/openid-connect/token"

	@property
	def _admin_path(self) -> str:
		return f"/admin/realms/{self.realm}"

	async def _get_admin_token(self) -> str:
		if self._admin_token and time.monotonic() < self._admin_token_expires:
			return self._admin_token

		response = await self._request(
			"POST",
			self._token_path,
			data={
				"grant_type": "client_credentials",
				"client_id": self.admin_client_id,
				"client_secret": self.admin_client_secret,
			},
		)
		data = self._json(response)
		self._admin_token = data["access_token"]
		expires_in = int(data.get("expires_in", 60))
		self._admin_token_expires = time.monotonic() + max(expires_in - TOKEN_EXPIRY_MARGIN, 0)
		return self._admin_token

	async def _admin_request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
		token = await self._get_admin_token()
		headers = {"Authorization": f"Bearer {token}"}
		return await self._request(method, f"{self._admin_path}{path}", headers=headers, **kwargs)

	async def get_user_by_email(self, email: str) -> IdentityUser | None:
		response = await self._admin_request(
			"GET", "/users", params={"email": email, "exact": "true"},
		)
		users = self._json(response)
		for user in users:
			if (user.get("email") or "").lower() == email.lower():
				return IdentityUser.model_validate(user)
		return None

	async def get_user(self, user_id: str) -> dict[str, Any]:
		response = await self._admin_request("GET", f"/users/{user_id}")
		return self._json(response)

	async def create_user(
		self,
		email: str,
		first_name: str,
		last_name: str,
		attributes: dict[str, list[str]],
	) -> str:
		"""Create an enabled, email-verified user and return its id."""
		payload = {
			"username": email,
			"email": email,
			"firstName": first_name,
			"lastName": last_name,
			"enabled": True,
			"emailVerified": True,
			"attributes": attributes,
		}
		response = await self._admin_request("POST", "/users", json=payload, expected=(201,))
		location = response.headers.get("Location", "")
		user_id = location.rstrip("/").rsplit("/", 1)[-1]
		if not user_id:
			raise ServiceError(self.service_name, "user created without a Location header")
		logger.info(f"Created identity user {user_id} for {email}")
		return user_id

	async def set_password(self, user_id: str, password: str) -> None:
		payload = {"type": "password", "value": password, "temporary": False}
		await self._admin_request(
			"PUT", f"/users/{user_id}/reset-password", json=payload, expected=(200, 204),
		)

	async def update_attributes(self, user_id: str, attributes: dict[str, list[str]]) -> None:
		"""Merge ``attributes`` into the user's attributes.

		Keycloak replaces the whole attribute map on PUT, so the current
		representation is read first.
		"""
		representation = await self.get_user(user_id)
		merged = dict(representation.get("attributes") or {})
		merged.update(attributes)
		representation["attributes"] = merged
		await self._admin_request(
			"PUT", f"/users/{user_id}", json=representation, expected=(200, 204),
		)

	async def assign_role(self, user_id: str, role: str) -> None:
		"""Grant a realm role; granting an already held role is a no-op."""
		response = await self._admin_request("GET", f"/roles/{role}")
		role_representation = self._json(response)
		await self._admin_request(
			"POST",
			f"/users/{user_id}/role-mappings/realm",
			json=[role_representation],
			expected=(200, 204, 409),
		)

	async def delete_user(self, user_id: str) -> None:
		await self._admin_request("DELETE", f"/users/{user_id}", expected=(200, 204, 404))

	async def password_grant(self, username: str, password: str) -> TokenSet:
		data = {
			"grant_type": "password",
			"client_id": self.login_client_id,
			"username": username,
			"password": password,
			"scope": "openid",
		}
		if self.login_client_secret:
			data["client_secret"] = self.login_client_secret
		response = await self._request("POST", self._token_path, data=data)
		return TokenSet.model_validate(self._json(response))
