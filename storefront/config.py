"""
Centralized configuration with environment variable overrides.

The checkout bucketing window and the idempotency record lifetime are
product decisions, so they live here rather than in the services. The
services take them as constructor arguments; this module only supplies
the defaults.
"""

import logging
import os
from dataclasses import dataclass, field
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_bool(env_var: str, default: str) -> bool:
    """Parse a boolean flag such as ``1``/``true``/``yes`` from an env var."""
    raw = os.getenv(env_var, default).strip().lower()
    if raw in ("1", "true", "yes", "on"):
        return True
    if raw in ("0", "false", "no", "off", ""):
        return False
    raise ValueError(f"Invalid boolean for {env_var}: {raw!r}")


@dataclass(frozen=True)
class IdempotencyConfig:
    """Key derivation and record lifetime settings."""

    checkout_window_seconds: int = _safe_int("CHECKOUT_WINDOW_SECONDS", "10")
    ttl_hours: int = _safe_int("IDEMPOTENCY_TTL_HOURS", "24")
    checkout_prefix: str = os.getenv("CHECKOUT_KEY_PREFIX", "checkout")
    digest_length: int = 32

    @property
    def ttl(self) -> timedelta:
        return timedelta(hours=self.ttl_hours)


@dataclass(frozen=True)
class DatabaseConfig:
    """Connection settings for the relational key store."""

    url: str = os.getenv("DATABASE_URL", "sqlite:///storefront.db")
    echo: bool = _safe_bool("DATABASE_ECHO", "false")


@dataclass(frozen=True)
class CheckoutConfig:
    """Checkout flow tuning."""

    duplicate_wait_ms: int = _safe_int("CHECKOUT_DUPLICATE_WAIT_MS", "100")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    idempotency: IdempotencyConfig = field(default_factory=IdempotencyConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    checkout: CheckoutConfig = field(default_factory=CheckoutConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    service_name: str = os.getenv("SERVICE_NAME", "storefront-core")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if config.idempotency.checkout_window_seconds < 1:
        raise ValueError(
            "CHECKOUT_WINDOW_SECONDS must be >= 1, "
            f"got {config.idempotency.checkout_window_seconds}"
        )
    if config.idempotency.ttl_hours < 1:
        raise ValueError(
            f"IDEMPOTENCY_TTL_HOURS must be >= 1, got {config.idempotency.ttl_hours}"
        )
    if not config.idempotency.checkout_prefix.strip():
        raise ValueError("CHECKOUT_KEY_PREFIX must not be empty")
    if config.checkout.duplicate_wait_ms < 0:
        raise ValueError(
            "CHECKOUT_DUPLICATE_WAIT_MS must be >= 0, "
            f"got {config.checkout.duplicate_wait_ms}"
        )
    if not config.database.url:
        raise ValueError("DATABASE_URL must not be empty")


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger.info("Configuration loaded for '%s'", config.service_name)
    return config


# Singleton instance
settings = load_config()
