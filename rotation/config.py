"""
Configuration management with environment variable support and validation.

Design principles:
- Environment-specific configs (dev, staging, prod)
- Validation at startup (fail fast)
- Type safety with Pydantic
- Defaults that work with no .env file at all
"""

import os
from functools import lru_cache
from typing import Literal, cast
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator, model_validator

from rotation.domain.models import RotationSettings
from rotation.domain.sites import DEFAULT_STARTING_SITE, DefaultSite

# Load environment variables from .env file
load_dotenv()

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class RotationConfig(BaseModel):
    """Rotation engine configuration."""

    minimum_rest_days: int = Field(
        default=3, gt=0, description="Days a site should rest before it is reused"
    )
    timezone: str = Field(default="UTC", description="IANA zone used for calendar days")
    default_starting_site: str = Field(
        default=DEFAULT_STARTING_SITE.value, description="Recommended site for the first placement"
    )
    show_disabled_sites_in_history: bool = Field(
        default=True, description="Include disabled sites in historical views"
    )

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Invalid timezone '{v}'. Use IANA timezone identifiers.") from None
        return v

    @field_validator("default_starting_site")
    @classmethod
    def validate_starting_site(cls, v: str) -> str:
        if v not in {site.value for site in DefaultSite}:
            raise ValueError(f"default_starting_site must be a default site, got '{v}'")
        return v

    def to_settings(self) -> RotationSettings:
        return RotationSettings(
            minimum_rest_days=self.minimum_rest_days,
            show_disabled_sites_in_history=self.show_disabled_sites_in_history,
        )


class StorageConfig(BaseModel):
    """Placement log location."""

    placement_log_path: str = Field(
        default="./data/placements.jsonl", description="Path to the append-only placement log"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(default="INFO", description="Logging level")
    format: Literal["json", "console"] = Field(default="json", description="Logging format")


class AppConfig(BaseModel):
    """Main application configuration combining all subsystems."""

    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Environment"
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    rotation: RotationConfig = Field(default_factory=RotationConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def debug_only_in_dev(self) -> "AppConfig":
        """Ensure debug mode is only allowed in development environment."""
        if self.debug and self.environment != "development":
            raise ValueError("debug mode is only allowed in development environment")
        return self


def load_config_from_env() -> AppConfig:
    """Load configuration from environment variables with validation."""

    def _env_to_literal(val: str) -> Literal["development", "staging", "production"]:
        v = val.strip().lower()
        if v in {"dev", "development"}:
            return "development"
        if v in {"stage", "staging"}:
            return "staging"
        return "production"

    def _level_to_literal(val: str) -> LogLevel:
        v = val.strip().upper()
        known = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        return cast(LogLevel, v if v in known else "INFO")

    def _parse_bool(val: str | None, default: bool) -> bool:
        if val is None:
            return default
        return val.strip().lower() in {"1", "true", "yes", "on"}

    environment = _env_to_literal(os.getenv("ENVIRONMENT", "development"))
    debug = environment == "development"

    rotation_config = RotationConfig(
        minimum_rest_days=int(os.getenv("MINIMUM_REST_DAYS", "3")),
        timezone=os.getenv("ROTATION_TIMEZONE", "UTC"),
        default_starting_site=os.getenv("DEFAULT_STARTING_SITE", DEFAULT_STARTING_SITE.value),
        show_disabled_sites_in_history=_parse_bool(
            os.getenv("SHOW_DISABLED_SITES_IN_HISTORY"), True
        ),
    )

    storage_config = StorageConfig(
        placement_log_path=os.getenv("PLACEMENT_LOG_PATH", "./data/placements.jsonl"),
    )

    logging_config = LoggingConfig(
        level=_level_to_literal(os.getenv("LOG_LEVEL", "INFO")),
        format="console" if debug else "json",
    )

    return AppConfig(
        environment=environment,
        debug=debug,
        rotation=rotation_config,
        storage=storage_config,
        logging=logging_config,
    )


@lru_cache
def get_config() -> AppConfig:
    """Get cached application configuration."""
    return load_config_from_env()


def config_summary(config: AppConfig) -> dict[str, dict[str, object]]:
    """Grouped, display-ready view of the configuration."""
    return {
        "application": {
            "environment": config.environment,
            "debug": config.debug,
            "log_level": config.logging.level,
            "log_format": config.logging.format,
        },
        "rotation": {
            "minimum_rest_days": config.rotation.minimum_rest_days,
            "timezone": config.rotation.timezone,
            "default_starting_site": config.rotation.default_starting_site,
            "show_disabled_sites_in_history": config.rotation.show_disabled_sites_in_history,
        },
        "storage": {
            "placement_log_path": config.storage.placement_log_path,
        },
    }
