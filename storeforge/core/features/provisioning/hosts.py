# (c) Copyright Datacraft, 2026
"""Public hostnames and URLs of a provisioned tenant."""
from dataclasses import dataclass

from storeforge.core.features.onboarding.db.orm import OnboardingSession


@dataclass(frozen=True, slots=True)
class TenantHosts:
	admin_host: str
	storefront_host: str

	@property
	def admin_url(self) -> str:
		return f"https://{self.admin_host}"

	@property
	def storefront_url(self) -> str:
		return f"https://{self.storefront_host}"

	@property
	def dashboard_url(self) -> str:
		return f"{self.admin_url}/dashboard"


def resolve_hosts(
	slug: str,
	base_domain: str,
	session: OnboardingSession | None = None,
) -> TenantHosts:
	if session is not None and session.use_custom_domain and session.custom_domain:
		domain = session.custom_domain.strip().lower()
		admin = session.custom_admin_subdomain or "admin"
		storefront = session.custom_storefront_subdomain or "www"
		return TenantHosts(
			admin_host=f"{admin}.{domain}",
			storefront_host=f"{storefront}.{domain}",
		)
	return TenantHosts(
		admin_host=f"{slug}-admin.{base_domain}",
		storefront_host=f"{slug}.{base_domain}",
	)
