"""
Application configuration using pydantic-settings.
"""
import logging
from pathlib import Path
from typing import Optional

from pydantic import field_validator, model_validator, ValidationInfo
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_STACKEXCHANGE_TAGS_URL = "https://api.stackexchange.com/2.3/tags"
# StackExchange rejects pagesize values above 100
STACKEXCHANGE_MAX_PAGE_SIZE = 100
IMPORT_STRATEGIES = ("parallel", "sequential")
SNAPSHOT_CACHE_KEY = "TagsList"

# Define the project root directory
PROJECT_ROOT = Path(__file__).parent.parent.parent.resolve()


class Settings(BaseSettings):
    """Application settings."""

    # Application
    app_name: str = "Tag Stats Service"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"

    # API
    api_v1_prefix: str = "/api/v1"
    app_port: int = 8000

    # Upstream StackExchange API
    stackexchange_base_url: str = DEFAULT_STACKEXCHANGE_TAGS_URL
    stackexchange_site: str = "stackoverflow"
    stackexchange_key: Optional[str] = None  # Optional app key, raises the daily request quota
    http_timeout_seconds: float = 10.0

    # Import
    import_page_size: int = 100
    import_page_count: int = 10
    import_strategy: str = "parallel"  # "parallel" fetches every page at once, "sequential" stops at the first empty page
    import_max_concurrency: int = 5
    import_on_startup: bool = True

    # Query
    query_max_page_size: int = 1000

    # Logging
    log_level: str = "INFO"
    log_dir: str = str(PROJECT_ROOT / "logs")

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator('stackexchange_base_url')
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Validate the upstream URL has a scheme and no query string."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(
                "STACKEXCHANGE_BASE_URL must start with http:// or https://. "
                f"Got: {v}"
            )
        if "?" in v:
            raise ValueError("STACKEXCHANGE_BASE_URL must not contain a query string")
        return v.rstrip("/")

    @field_validator('stackexchange_site')
    @classmethod
    def validate_site(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("STACKEXCHANGE_SITE cannot be empty")
        return v

    @field_validator('http_timeout_seconds')
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Validate timeout settings are reasonable."""
        if v <= 0:
            raise ValueError("Timeout must be positive")
        if v > 300:
            raise ValueError("Timeout cannot exceed 300 seconds")
        return v

    @field_validator('import_page_size')
    @classmethod
    def validate_import_page_size(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("IMPORT_PAGE_SIZE must be positive")
        if v > STACKEXCHANGE_MAX_PAGE_SIZE:
            raise ValueError(
                f"IMPORT_PAGE_SIZE cannot exceed {STACKEXCHANGE_MAX_PAGE_SIZE} "
                "(StackExchange API limit)"
            )
        return v

    @field_validator('import_page_count', 'import_max_concurrency', 'query_max_page_size')
    @classmethod
    def validate_positive(cls, v: int, info: ValidationInfo) -> int:
        if v <= 0:
            raise ValueError(f"{info.field_name.upper()} must be positive")
        return v

    @field_validator('import_strategy')
    @classmethod
    def validate_import_strategy(cls, v: str) -> str:
        """Validate IMPORT_STRATEGY is either parallel or sequential."""
        v = v.lower().strip()
        if v not in IMPORT_STRATEGIES:
            raise ValueError(
                "IMPORT_STRATEGY must be either 'parallel' or 'sequential'. "
                f"Got: {v}"
            )
        return v

    @model_validator(mode='after')
    def validate_production_settings(self) -> 'Settings':
        """Production sanity checks."""
        if self.environment != "production":
            return self

        if self.debug:
            raise ValueError("Production configuration validation failed:\n  - DEBUG must be False in production.")

        if self.import_max_concurrency > self.import_page_count:
            logger.warning(
                "Production configuration warning: IMPORT_MAX_CONCURRENCY (%s) exceeds "
                "IMPORT_PAGE_COUNT (%s); extra slots are never used.",
                self.import_max_concurrency,
                self.import_page_count,
            )
        return self


# Create settings instance
settings = Settings()
