# (c) Copyright Datacraft, 2026
import importlib.metadata

__version__ = importlib.metadata.version("storeforge")
