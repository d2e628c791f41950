# (c) Copyright Datacraft, 2026
"""Tracked fire-and-forget asyncio tasks."""
import asyncio
import logging
from typing import Coroutine, Any

logger = logging.getLogger(__name__)


class BackgroundTasks:
	"""Keeps references to detached tasks until they finish.

	A task that raises is logged; nothing is propagated to the spawner.
	"""

	def __init__(self):
		self._tasks: set[asyncio.Task] = set()

	def spawn(self, coro: Coroutine[Any, Any, Any], name: str | None = None) -> asyncio.Task:
		task = asyncio.create_task(coro, name=name)
		self._tasks.add(task)
		task.add_done_callback(self._on_done)
		return task

	def _on_done(self, task: asyncio.Task) -> None:
		self._tasks.discard(task)
		if task.cancelled():
			return
		error = task.exception()
		if error is not None:
			logger.error(f"Background task {task.get_name()} failed: {error!r}")

	def __len__(self) -> int:
		return len(self._tasks)

	async def drain(self) -> None:
		"""Wait for every task spawned so far."""
		while self._tasks:
			await asyncio.gather(*list(self._tasks), return_exceptions=True)
