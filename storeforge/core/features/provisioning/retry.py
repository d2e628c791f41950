# (c) Copyright Datacraft, 2026
"""Bounded exponential backoff for retryable provisioning calls."""
import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from storeforge.core.clients.base import TransientServiceError
from storeforge.core.config.provisioning import ProvisioningSettings

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
	max_attempts: int = 3
	base_delay: float = 0.5
	max_delay: float = 5.0

	@classmethod
	def from_settings(cls, settings: ProvisioningSettings) -> "RetryPolicy":
		return cls(
			max_attempts=settings.retry_max_attempts,
			base_delay=settings.retry_base_delay_seconds,
			max_delay=settings.retry_max_delay_seconds,
		)

	def delay_after(self, attempt: int) -> float:
		"""Wait before the attempt following ``attempt`` (1-based)."""
		return min(self.base_delay * (2 ** (attempt - 1)), self.max_delay)


class RetryExhaustedError(Exception):
	def __init__(self, operation: str, attempts: int, last_error: Exception):
		super().__init__(f"{operation} failed after {attempts} attempts: {last_error}")
		self.operation = operation
		self.attempts = attempts
		self.last_error = last_error


async def retry_with_backoff(
	operation: str,
	fn: Callable[[], Awaitable[T]],
	policy: RetryPolicy,
	retry_on: tuple[type[Exception], ...] = (TransientServiceError,),
	sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
	"""
	Call ``fn`` until it succeeds or ``policy.max_attempts`` is reached.

	Only exceptions listed in ``retry_on`` are retried; anything else
	propagates from the first attempt. There is no wait after the last
	attempt. The wait is an ordinary ``asyncio.sleep``, so cancelling the
	calling task or wrapping the call in ``asyncio.timeout`` stops it.

	Raises:
		RetryExhaustedError: every attempt failed with a retryable error
	"""
	last_error: Exception | None = None
	for attempt in range(1, policy.max_attempts + 1):
		try:
			return await fn()
		except retry_on as e:
			last_error = e
			if attempt == policy.max_attempts:
				break
			delay = policy.delay_after(attempt)
			logger.warning(
				f"{operation} attempt {attempt}/{policy.max_attempts} failed: {e}; "
				f"retrying in {delay:.2f}s"
			)
			await sleep(delay)

	raise RetryExhaustedError(operation, policy.max_attempts, last_error) from last_error
