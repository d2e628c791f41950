# (c) Copyright Datacraft, 2026
"""
Tenant lifecycle events over Redis Streams.

Each topic is a stream (``{prefix}{topic}``); subscribers read it with
consumer groups. The publisher connects lazily and keeps an explicit
connected flag, so a bus that is down at startup degrades the health check
instead of preventing the service from starting.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable

import redis.asyncio as redis
from redis.exceptions import RedisError

from .schema import TenantEvent

logger = logging.getLogger(__name__)


class EventPublisher:
	def __init__(
		self,
		redis_url: str | None,
		stream_prefix: str = "storeforge:",
		maxlen: int = 100_000,
		publish_attempts: int = 3,
		client: redis.Redis | None = None,
		sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
	):
		self.redis_url = redis_url
		self.stream_prefix = stream_prefix
		self.maxlen = maxlen
		self.publish_attempts = publish_attempts
		self._client = client
		self._sleep = sleep
		self._connected = False

	@property
	def connected(self) -> bool:
		return self._connected

	def stream(self, topic: str) -> str:
		return f"{self.stream_prefix}{topic}"

	async def connect(self) -> bool:
		"""Open the connection if needed. Returns the connected state; never raises."""
		if self._client is None:
			if not self.redis_url:
				logger.warning("Event bus not configured; tenant events use the HTTP fallback only")
				return False
			self._client = redis.from_url(self.redis_url, decode_responses=True)
		try:
			await self._client.ping()
		except (RedisError, OSError) as e:
			self._connected = False
			logger.warning(f"Event bus unavailable: {e}")
			return False
		if not self._connected:
			logger.info(f"Connected to event bus (streams prefixed {self.stream_prefix!r})")
		self._connected = True
		return True

	async def close(self) -> None:
		if self._client is not None:
			await self._client.aclose()
		self._connected = False

	async def publish(self, topic: str, event: TenantEvent) -> bool:
		"""Append ``event`` to the topic stream.

		Retries with 1s, 2s, 4s... between attempts. Returns whether the bus
		acknowledged the entry; failures are logged, not raised.
		"""
		fields = {
			"event_id": event.event_id,
			"event_type": topic,
			"tenant_id": str(event.tenant_id),
			"payload": event.model_dump_json(),
		}
		for attempt in range(1, self.publish_attempts + 1):
			if self._connected or await self.connect():
				try:
					entry_id = await self._client.xadd(
						self.stream(topic), fields, maxlen=self.maxlen, approximate=True,
					)
					logger.info(f"Published {topic} for tenant {event.tenant_id} as {entry_id}")
					return True
				except (RedisError, OSError) as e:
					self._connected = False
					logger.warning(f"Publishing {topic} attempt {attempt} failed: {e}")
			if attempt < self.publish_attempts:
				await self._sleep(2 ** (attempt - 1))

		logger.error(f"Giving up on {topic} for tenant {event.tenant_id} after {self.publish_attempts} attempts")
		return False

	async def health(self) -> dict[str, Any]:
		if self._client is not None:
			await self.connect()
		return {"connected": self._connected, "stream_prefix": self.stream_prefix}
