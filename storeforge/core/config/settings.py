# (c) Copyright Datacraft, 2026
"""Application settings configuration."""
from pathlib import Path

from pydantic import PostgresDsn, RedisDsn, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
	db_url: PostgresDsn
	db_ssl: bool = False
	log_config: Path | None = Path("/app/logging.yaml")
	api_prefix: str = ''

	# Redis (event bus + health)
	redis_url: RedisDsn | None = None

	# Public addressing of provisioned tenants
	base_domain: str = 'tesserix.app'
	product: str = 'marketplace'

	@computed_field
	@property
	def async_db_url(self) -> str:
		url = str(self.db_url)
		if "postgresql+psycopg://" in url:
			return url.replace("postgresql+psycopg://", "postgresql+asyncpg://", 1)
		elif "postgresql://" in url:
			return url.replace("postgresql://", "postgresql+asyncpg://", 1)
		return url

	model_config = SettingsConfigDict(
		env_prefix='sf_',
		env_file='.env',
		env_file_encoding='utf-8',
		extra='ignore',
	)


_settings: Settings | None = None


def get_settings() -> Settings:
	global _settings
	if _settings is None:
		_settings = Settings()
	return _settings
