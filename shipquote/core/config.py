"""
Application configuration

Defaults are safe for local development; production is validated at startup.
- Provider deadlines and the fragile surcharge are configurable per deployment
- The quote cache backend is chosen at runtime (memory, redis, database, none)
- Redis and the database are optional; the engine degrades without them
"""
import json
import logging
import os
from typing import List, Union

from pydantic import ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# Default CORS origins
DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
]

CACHE_BACKENDS = ("memory", "redis", "database", "none")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # App
    APP_NAME: str = "ShipQuote"
    API_PREFIX: str = "/api"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # CORS - accepts JSON array or comma-separated string
    CORS_ORIGINS: Union[str, List[str]] = DEFAULT_CORS_ORIGINS

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, list):
            return v
        if isinstance(v, str):
            if not v or v.strip() == "":
                return DEFAULT_CORS_ORIGINS
            if v.startswith("["):
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    pass
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        return str(v).upper() if v else "INFO"

    # Provider dispatch
    QUOTE_TIMEOUT_MS: int = 5000
    HEALTH_PROBE_TIMEOUT_MS: int = 5000
    HEALTH_MIN_RESPONSE_MS: int = 50
    FRAGILE_SURCHARGE: float = 1.15
    NO_PROVIDERS_RETRY_AFTER_SECONDS: int = 30

    # Scheduled health checks
    HEALTH_CHECK_ENABLED: bool = False
    HEALTH_CHECK_INTERVAL_SECONDS: int = 60

    # Quote cache (cache-aside in front of the provider fan-out)
    QUOTE_CACHE_BACKEND: str = "memory"
    QUOTE_CACHE_TTL_SECONDS: int = 300  # 5 minutes
    QUOTE_CACHE_MAX_ENTRIES: int = 1000

    @field_validator("QUOTE_CACHE_BACKEND", mode="before")
    @classmethod
    def validate_cache_backend(cls, v):
        backend = str(v or "memory").strip().lower()
        if backend not in CACHE_BACKENDS:
            raise ValueError(
                f"QUOTE_CACHE_BACKEND must be one of {', '.join(CACHE_BACKENDS)}, got {v!r}"
            )
        return backend

    # Redis (quote cache backend)
    REDIS_URL: str = ""

    # Database (quote cache backend) - optional, no default
    DATABASE_URL: str = ""
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_RECYCLE: int = 3600  # 1 hour

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def convert_database_url(cls, v):
        """Convert plain postgres:// URLs to the asyncpg driver."""
        if not v:
            return v
        if v.startswith("postgres://"):
            v = v.replace("postgres://", "postgresql+asyncpg://", 1)
        elif v.startswith("postgresql://") and "+asyncpg" not in v:
            v = v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    # Distance-priced carrier
    ROUTE_HUB_CITY: str = "Bogota"
    ROUTE_PRICING_ENABLED: bool = True

    @model_validator(mode="after")
    def validate_production_config(self):
        """Runtime validation to catch broken production configurations."""
        errors = []

        if self.QUOTE_CACHE_BACKEND == "redis" and not self.REDIS_URL:
            errors.append("QUOTE_CACHE_BACKEND=redis requires REDIS_URL")

        if self.QUOTE_CACHE_BACKEND == "database" and not self.DATABASE_URL:
            errors.append("QUOTE_CACHE_BACKEND=database requires DATABASE_URL")

        if self.QUOTE_TIMEOUT_MS <= 0 or self.HEALTH_PROBE_TIMEOUT_MS <= 0:
            errors.append("Provider timeouts must be positive")

        if self.FRAGILE_SURCHARGE < 1.0:
            errors.append("FRAGILE_SURCHARGE must be >= 1.0")

        if self.QUOTE_CACHE_MAX_ENTRIES <= 0:
            errors.append("QUOTE_CACHE_MAX_ENTRIES must be positive")

        if self.QUOTE_CACHE_TTL_SECONDS <= 0:
            errors.append("QUOTE_CACHE_TTL_SECONDS must be positive")

        if self.HEALTH_CHECK_INTERVAL_SECONDS <= 0:
            errors.append("HEALTH_CHECK_INTERVAL_SECONDS must be positive")

        if self.HEALTH_MIN_RESPONSE_MS < 0:
            errors.append("HEALTH_MIN_RESPONSE_MS must not be negative")

        if self.ENVIRONMENT == "production":
            if self.DEBUG:
                errors.append(
                    "DEBUG=True is forbidden in production. "
                    "Set DEBUG=false or ENVIRONMENT=development"
                )
            for origin in self.CORS_ORIGINS:
                if origin == "*":
                    errors.append("Wildcard '*' CORS origin is forbidden in production")

        if errors:
            raise ValueError(
                "CONFIGURATION ERRORS:\n" + "\n".join(f"  - {e}" for e in errors)
            )

        return self


def load_settings() -> Settings:
    """
    Build settings from the environment.

    In development a broken cache backend setting falls back to the in-memory
    cache. Anything the fallback does not fix is raised as one readable error.
    """
    try:
        return Settings()
    except ValidationError as e:
        if os.getenv("ENVIRONMENT", "development") != "development":
            raise
        logger.warning(
            f"Settings validation failed ({e}), falling back to the in-memory quote cache. "
            "Check QUOTE_CACHE_BACKEND, REDIS_URL and DATABASE_URL in the .env file."
        )
        try:
            return Settings(QUOTE_CACHE_BACKEND="memory")
        except ValidationError as retry_error:
            raise RuntimeError(
                f"Invalid configuration; the in-memory cache fallback did not fix it:\n{retry_error}"
            ) from e


settings = load_settings()
