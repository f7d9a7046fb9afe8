"""
Application configuration using pydantic-settings.
"""
import logging
import secrets
from typing import List, Optional

from pydantic import field_validator, model_validator, ValidationInfo
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_SQLITE_URL = "sqlite:///./brigade.db"
DEFAULT_ENTRIES_TABLE = "journal_entries_chef_brigade"
KNOWN_TIERS = ("free", "brigade", "fraternity", "guild")
RECORD_STORE_BACKENDS = ("database", "supabase")


class Settings(BaseSettings):
    """Application settings."""

    # Application
    app_name: str = "Chef Brigade Journal Service"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"

    # API
    api_v1_prefix: str = "/api/v1"
    enable_cors: bool = False
    cors_origins: Optional[List[str]] = None

    # Database holding users and, for the "database" backend, journal entries
    database_url: str = DEFAULT_SQLITE_URL

    # Remote record store for journal entries
    record_store_backend: str = "database"
    supabase_url: Optional[str] = None
    supabase_service_key: Optional[str] = None
    supabase_table: str = DEFAULT_ENTRIES_TABLE
    remote_timeout_seconds: float = 10.0

    # Fallback cache (in-memory when unset)
    redis_url: Optional[str] = None

    # Security
    secret_key: str = ""
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    # Membership
    journal_required_tier: str = "free"

    # Logging
    log_level: str = "INFO"
    log_dir: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def database_type(self) -> str:
        """Detect database type from the configured URL."""
        if self.database_url.startswith(("postgresql", "postgres")):
            return "postgresql"
        return "sqlite"

    @field_validator('secret_key')
    @classmethod
    def validate_secret_key(cls, v: str, info: ValidationInfo) -> str:
        """Require SECRET_KEY in production, generate one elsewhere."""
        if not v:
            if info.data.get('environment', 'development') == 'production':
                raise ValueError("SECRET_KEY must be set in production!")
            logger.warning(
                "SECRET_KEY not set! Using auto-generated key; issued tokens "
                "will stop validating after a restart."
            )
            return secrets.token_urlsafe(32)
        if len(v) < 32:
            logger.warning(f"SECRET_KEY is only {len(v)} characters long. Recommend at least 32.")
        return v

    @field_validator('cors_origins', mode='before')
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS origins from a comma separated string or a list."""
        if v is None:
            return []
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(',') if origin.strip()]
        if isinstance(v, list):
            return v
        return []

    @field_validator('database_url')
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        if not v or not v.strip():
            logger.info("DATABASE_URL not provided; defaulting to SQLite at %s", DEFAULT_SQLITE_URL)
            return DEFAULT_SQLITE_URL
        return v.strip()

    @field_validator('record_store_backend')
    @classmethod
    def validate_record_store_backend(cls, v: str) -> str:
        backend = v.lower().strip()
        if backend not in RECORD_STORE_BACKENDS:
            raise ValueError(
                f"RECORD_STORE_BACKEND must be one of {', '.join(RECORD_STORE_BACKENDS)}. Got: {v}"
            )
        return backend

    @field_validator('supabase_url')
    @classmethod
    def strip_supabase_url(cls, v: Optional[str]) -> Optional[str]:
        if not v or not v.strip():
            return None
        return v.strip().rstrip("/")

    @field_validator('remote_timeout_seconds')
    @classmethod
    def validate_remote_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Timeout must be positive")
        if v > 120:
            raise ValueError("Timeout cannot exceed 120 seconds")
        return v

    @field_validator('journal_required_tier')
    @classmethod
    def validate_tier(cls, v: str) -> str:
        tier = v.lower().strip()
        if tier not in KNOWN_TIERS:
            raise ValueError(f"Unknown membership tier '{v}'. Expected one of {', '.join(KNOWN_TIERS)}")
        return tier

    @model_validator(mode='after')
    def validate_supabase_backend(self) -> 'Settings':
        """The supabase backend needs both the project URL and a service key."""
        if self.record_store_backend == "supabase":
            if not self.supabase_url or not self.supabase_service_key:
                raise ValueError(
                    "RECORD_STORE_BACKEND=supabase requires SUPABASE_URL and SUPABASE_SERVICE_KEY"
                )
        return self

    @model_validator(mode='after')
    def validate_production_settings(self) -> 'Settings':
        """Production validation."""
        if self.environment != "production":
            return self

        errors = []
        if self.debug:
            errors.append("DEBUG must be False in production.")
        if self.enable_cors and not self.cors_origins:
            errors.append("CORS_ORIGINS must be configured when CORS is enabled.")
        if self.enable_cors and '*' in (self.cors_origins or []):
            errors.append("Wildcard (*) CORS origin not allowed in production.")

        if self.database_type == "sqlite":
            logger.warning(
                "Production configuration warning: using SQLite in production. "
                "Configure regular backups."
            )
        if not self.redis_url:
            logger.warning(
                "Production configuration warning: REDIS_URL not set, the journal "
                "fallback cache is per-process and lost on restart."
            )

        if errors:
            raise ValueError(
                "Production configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )
        return self


settings = Settings()


def get_settings() -> Settings:
    """Get settings instance."""
    return settings
