# (c) Copyright Datacraft, 2026
"""Configuration module for storeforge."""
from .provisioning import (
	ProvisioningSettings,
	get_provisioning_settings,
)
from .services import ServiceSettings, get_service_settings
from .settings import Settings, get_settings

__all__ = [
	'ProvisioningSettings',
	'get_provisioning_settings',
	'ServiceSettings',
	'get_service_settings',
	'Settings',
	'get_settings',
]
