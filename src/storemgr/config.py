"""Configuration management for the store manager."""

import logging
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

import pycountry

logger = logging.getLogger(__name__)

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class StoreConfig(BaseSettings):
    """Configuration for the store manager CLI and API."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    currency: str = Field(
        default="USD",
        description="ISO 4217 currency code printed on invoices",
    )

    top_sellers_limit: int = Field(
        default=3,
        ge=1,
        le=100,
        description="Default number of products in the best sellers report",
    )

    seed_sample_data: bool = Field(
        default=True,
        description="Register the sample Laptop/T-Shirt products on a fresh store",
    )

    state_file: Path = Field(
        default=Path.cwd() / "store_state.json",
        description="Snapshot file the CLI loads and saves between commands",
    )

    api_host: str = Field(
        default="0.0.0.0",
        description="API host address",
    )

    api_port: int = Field(
        default=8000,
        description="API port",
    )

    rate_limit: str = Field(
        default="60/minute",
        description="Default per-client rate limit for API routes",
    )

    rate_limit_enabled: bool = Field(
        default=True,
        description="Disable to turn off API rate limiting (tests, local runs)",
    )

    log_level: str = Field(
        default="INFO",
        description="Root log level for CLI and API",
    )

    @field_validator("currency")
    @classmethod
    def validate_currency_format(cls, v: str) -> str:
        """Validate currency is a known ISO 4217 code."""
        code = v.strip().upper()
        if len(code) != 3 or not code.isalpha():
            raise ValueError(
                f"Invalid currency code format: '{v}'. "
                f"Must be a 3-letter ISO 4217 code (e.g., USD, EUR)."
            )

        valid_iso_codes = {c.alpha_3 for c in pycountry.currencies}
        if code not in valid_iso_codes:
            raise ValueError(
                f"Invalid ISO 4217 code: {code}. "
                f"See https://en.wikipedia.org/wiki/ISO_4217"
            )

        return code

    def validate_config(self) -> None:
        """Validate configuration at startup. Raises ValueError if invalid."""
        errors = []

        if self.log_level.upper() not in _LOG_LEVELS:
            errors.append(
                f"LOG_LEVEL must be one of {', '.join(sorted(_LOG_LEVELS))}"
            )

        if self.api_port < 1 or self.api_port > 65535:
            errors.append("API_PORT must be between 1 and 65535")

        if self.rate_limit_enabled and "/" not in self.rate_limit:
            errors.append("RATE_LIMIT must look like '<count>/<period>'")

        if self.state_file.exists() and self.state_file.is_dir():
            errors.append("STATE_FILE points to a directory")

        if errors:
            raise ValueError(
                "Configuration validation failed:\n"
                + "\n".join(f"  - {e}" for e in errors)
            )


_config_instance = None


def get_config() -> StoreConfig:
    """Get or create global configuration instance."""
    global _config_instance
    if _config_instance is None:
        _config_instance = StoreConfig()
        _config_instance.validate_config()
        logger.info("Configuration validated successfully")
    return _config_instance


def reload_config() -> StoreConfig:
    """Reload configuration (useful for testing)."""
    global _config_instance
    _config_instance = StoreConfig()
    return _config_instance
