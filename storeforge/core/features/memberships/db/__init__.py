# (c) Copyright Datacraft, 2026
from .orm import User, Membership, MembershipRole, TenantCredential, TenantAuthPolicy
from .api import (
	get_user_by_email,
	upsert_user,
	get_membership,
	ensure_owner_membership,
	set_membership_active,
	set_membership_staff,
	ensure_credentials,
	get_tenant_user_ids,
)

__all__ = [
	"User",
	"Membership",
	"MembershipRole",
	"TenantCredential",
	"TenantAuthPolicy",
	"get_user_by_email",
	"upsert_user",
	"get_membership",
	"ensure_owner_membership",
	"set_membership_active",
	"set_membership_staff",
	"ensure_credentials",
	"get_tenant_user_ids",
]
