# (c) Copyright Datacraft, 2026
"""Base HTTP client for the services a tenant is provisioned in."""
import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class ServiceError(Exception):
	"""A peer service rejected a call or returned an unusable response."""

	def __init__(
		self,
		service: str,
		message: str,
		status_code: int | None = None,
		code: str | None = None,
	):
		super().__init__(f"{service}: {message}")
		self.service = service
		self.message = message
		self.status_code = status_code
		self.code = code


class TransientServiceError(ServiceError):
	"""Failure worth retrying: transport error, timeout, 5xx or 429."""


class ServiceClient:
	"""Thin async JSON client over httpx.

	``transport`` is handed to every ``httpx.AsyncClient`` this client opens,
	which lets tests plug in an ``httpx.MockTransport``.
	"""

	service_name = "service"

	def __init__(
		self,
		base_url: str,
		timeout: float = 30.0,
		transport: httpx.AsyncBaseTransport | None = None,
	):
		self._base_url = base_url.rstrip("/")
		self.timeout = timeout
		self._transport = transport

	async def _request(
		self,
		method: str,
		path: str,
		*,
		expected: tuple[int, ...] = (200, 201),
		**kwargs: Any,
	) -> httpx.Response:
		url = path if path.startswith("http") else f"{self._base_url}{path}"
		try:
			async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
				response = await client.request(method, url, **kwargs)
		except httpx.TransportError as e:
			raise TransientServiceError(self.service_name, f"{method} {path} failed: {e}") from e

		if response.status_code in expected:
			return response

		message = f"{method} {path} returned {response.status_code}: {response.text[:200]}"
		if response.status_code >= 500 or response.status_code == 429:
			raise TransientServiceError(self.service_name, message, status_code=response.status_code)
		raise ServiceError(self.service_name, message, status_code=response.status_code)

	def _json(self, response: httpx.Response) -> Any:
		try:
			return response.json()
		except ValueError as e:
			raise ServiceError(self.service_name, f"invalid JSON body: {e}", status_code=response.status_code) from e

	def _unwrap(self, response: httpx.Response) -> Any:
		"""Return ``data`` from a ``{success, data, error}`` envelope."""
		body = self._json(response)
		if not body.get("success", False):
			error = body.get("error") or {}
			raise ServiceError(
				self.service_name,
				error.get("message", "request was not successful"),
				status_code=response.status_code,
				code=error.get("code"),
			)
		return body.get("data")

	async def health_check(self) -> bool:
		"""Check if the service is reachable."""
		try:
			await self._request("GET", "/health")
			return True
		except ServiceError as e:
			logger.warning(f"{self.service_name} health check failed: {e}")
			return False
