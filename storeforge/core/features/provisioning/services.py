# (c) Copyright Datacraft, 2026
"""Collaborators shared by the saga and the reconciliation loop."""
from dataclasses import dataclass

from storeforge.core.clients.staff import StaffClient
from storeforge.core.config.provisioning import ProvisioningSettings
from storeforge.core.features.events.delivery import TenantEventDelivery
from storeforge.core.features.feature_flags.service import FeatureFlagProvisioner
from storeforge.core.features.identity.registrar import IdentityRegistrar
from storeforge.core.features.notifications.dispatcher import NotificationDispatcher
from storeforge.core.features.resources.provisioner import ResourceProvisioner
from storeforge.core.utils.background import BackgroundTasks


@dataclass
class ProvisioningServices:
	identity: IdentityRegistrar
	staff: StaffClient
	resources: ResourceProvisioner
	events: TenantEventDelivery
	notifications: NotificationDispatcher
	feature_flags: FeatureFlagProvisioner | None
	background: BackgroundTasks
	settings: ProvisioningSettings
	base_domain: str = "tesserix.app"
	product: str = "marketplace"
