# (c) Copyright Datacraft, 2026
from .orm import Tenant, TenantStatus
from .api import (
	get_tenant,
	slugs_in_use,
	create_tenant,
	update_tenant,
	transition_status,
	get_stuck_tenants,
	claim_for_reconciliation,
)

__all__ = [
	"Tenant",
	"TenantStatus",
	"get_tenant",
	"slugs_in_use",
	"create_tenant",
	"update_tenant",
	"transition_status",
	"get_stuck_tenants",
	"claim_for_reconciliation",
]
