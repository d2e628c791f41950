# (c) Copyright Datacraft, 2026
"""Discovery of feature routers."""
import importlib
import logging
from pathlib import Path

from fastapi import APIRouter

logger = logging.getLogger(__name__)


def discover_routers(core_path: Path) -> list[tuple[APIRouter, str]]:
	"""Import ``features/<name>/router.py`` for every feature that has one."""
	routers = []
	features_path = core_path / "features"
	for router_file in sorted(features_path.glob("*/router.py")):
		feature_name = router_file.parent.name
		module = importlib.import_module(f"storeforge.core.features.{feature_name}.router")
		router = getattr(module, "router", None)
		if router is None:
			logger.warning(f"Feature {feature_name} has router.py without a router")
			continue
		routers.append((router, feature_name))
		logger.debug(f"Registered router for feature {feature_name}")
	return routers
