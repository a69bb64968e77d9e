from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings

from cds_client import AsyncStoreConfig
from content_dual_store.coordinator import PolicyResolver


class Settings(BaseSettings):
    PRIMARY_DATABASE_URL: str
    SECONDARY_DATABASE_URL: str
    APP_ENV: str = "development"
    APP_NAME: str = "content-dual-store"
    DUAL_STORAGE_STRICT: Optional[bool] = None
    STATEMENT_TIMEOUT_MS: int = 5000
    STORE_TIMEOUT_SEC: float = 5.0
    POOL_MAX: int = 10
    LOG_LEVEL: str = "INFO"
    ALEMBIC_INI: str = "alembic.ini"

    @property
    def database_url(self) -> str:
        return self.PRIMARY_DATABASE_URL

    def policy_resolver(self) -> PolicyResolver:
        return PolicyResolver(strict=self.DUAL_STORAGE_STRICT, environment=self.APP_ENV)

    def _store_config(self, dsn: str, role: str) -> AsyncStoreConfig:
        return {
            "dsn": dsn,
            "app_name": f"{self.APP_NAME}-{role}",
            "statement_timeout_ms": self.STATEMENT_TIMEOUT_MS,
            "timeout_sec": self.STORE_TIMEOUT_SEC,
            "pool_max": self.POOL_MAX,
        }

    def primary_config(self) -> AsyncStoreConfig:
        return self._store_config(self.PRIMARY_DATABASE_URL, "primary")

    def secondary_config(self) -> AsyncStoreConfig:
        return self._store_config(self.SECONDARY_DATABASE_URL, "secondary")

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    return Settings()
