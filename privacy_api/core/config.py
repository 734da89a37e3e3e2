"""Application configuration using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application environment
    env: Literal["dev", "test", "staging", "prod"] = "dev"

    # Server
    host: str = "0.0.0.0"
    port: int = 3000

    # Route prefix for the basic and verify endpoints
    api_prefix: str = "/v1.0"

    # Logging
    log_level: str = "INFO"
    request_logging_enabled: bool = True

    # Consent defaults
    default_consent_duration_seconds: int = 31_536_000  # one year

    # Purpose/document catalog (bundled catalog.yaml when unset)
    catalog_path: str | None = None

    # Delegated consent-management tenant
    verify_tenant_url: str = "https://example.verify.ibm.com"
    verify_client_id: str = "your-client-id"
    verify_client_secret: str = "your-client-secret"
    verify_timeout_seconds: float = 10.0
    verify_assessment_path: str = "/v1.0/privacy/data-usage-approval"
    verify_metadata_path: str = "/v1.0/privacy/consent-metadata"
    verify_consents_path: str = "/v1.0/privacy/consents"

    @property
    def verify_base_url(self) -> str:
        """Tenant URL without a trailing slash."""
        return self.verify_tenant_url.rstrip("/")

    @property
    def is_dev(self) -> bool:
        """Check if running in development mode."""
        return self.env == "dev"

    @property
    def is_prod(self) -> bool:
        """Check if running in production mode."""
        return self.env == "prod"

    @property
    def is_test(self) -> bool:
        """Check if running in test mode."""
        return self.env == "test"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
