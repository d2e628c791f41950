import asyncio
import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from logging.config import dictConfig

import yaml
from fastapi import FastAPI

from storeforge.core.router_loader import discover_routers
from storeforge.core.version import __version__
from storeforge.core.config import get_settings, get_provisioning_settings

logger = logging.getLogger(__name__)
config = get_settings()
prefix = config.api_prefix

# Background task references
_reconciliation_task = None
_reconciliation_poller = None


@asynccontextmanager
async def lifespan(app: FastAPI):
	"""Application lifespan handler for startup/shutdown events."""
	global _reconciliation_task, _reconciliation_poller

	from storeforge.core.db.engine import AsyncSessionLocal, dispose_engine
	from storeforge.core.features.provisioning.dependencies import (
		get_event_publisher,
		get_provisioning_services,
	)
	from storeforge.core.features.provisioning.reconciliation import (
		ReconciliationPoller,
		ReconciliationService,
	)

	# Startup
	logger.info("Starting storeforge API server...")

	# A bus that is down only degrades health; publishing reconnects lazily
	publisher = get_event_publisher()
	await publisher.connect()

	services = get_provisioning_services()
	if get_provisioning_settings().reconciliation_enabled:
		_reconciliation_poller = ReconciliationPoller(
			ReconciliationService(AsyncSessionLocal, services)
		)
		_reconciliation_task = asyncio.create_task(_reconciliation_poller.start())
		logger.info("Reconciliation poller started")

	yield

	# Shutdown
	logger.info("Shutting down storeforge API server...")

	if _reconciliation_poller:
		await _reconciliation_poller.stop()
	if _reconciliation_task:
		_reconciliation_task.cancel()
		try:
			await _reconciliation_task
		except asyncio.CancelledError:
			pass
		logger.info("Reconciliation poller stopped")

	await services.background.drain()
	await publisher.close()
	await dispose_engine()


app = FastAPI(
	title="storeforge tenant provisioning API",
	version=__version__,
	lifespan=lifespan,
)

# Auto-discover and register all feature routers
core_path = Path(__file__).parent / "core"
routers = discover_routers(core_path)

for router, feature_name in routers:
	app.include_router(router, prefix=prefix)


logging_config_path = Path(
	os.environ.get("SF_LOG_CONFIG", str(config.log_config or ""))
)
if not (logging_config_path.exists() and logging_config_path.is_file()):
	logging_config_path = Path(__file__).parent / "logging.yaml"

with open(logging_config_path, "r") as stream:
	logging_config = yaml.load(stream, Loader=yaml.FullLoader)

dictConfig(logging_config)
