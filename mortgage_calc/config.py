"""Configuration management for the mortgage calculator."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Mapping, Optional

from .exceptions import ConfigurationError
from .policies import InsurancePolicy
from .reporting import DEFAULT_PAGE_SIZE
from .utils import decimal_from_str


@dataclass
class WebConfig:
    """Flask application settings."""

    secret_key: str = "dev-secret-key"
    asset_version: str = "1"
    host: str = "0.0.0.0"
    port: int = 8710


@dataclass
class AppConfig:
    """Main configuration for the calculator, the CLI and the web app."""

    insurance: InsurancePolicy = field(default_factory=InsurancePolicy)
    page_size: int = DEFAULT_PAGE_SIZE
    log_level: str = "INFO"
    log_format: str = "standard"
    web: WebConfig = field(default_factory=WebConfig)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AppConfig":
        """Create config from environment variables.

        Raises ``ConfigurationError`` when a numeric variable cannot be
        parsed or is out of range.
        """
        env = os.environ if environ is None else environ
        defaults = InsurancePolicy()

        insurance = InsurancePolicy(
            premium_rate=_env_decimal(env, "MORTGAGE_INSURANCE_RATE", defaults.premium_rate),
            fixed_fee=_env_decimal(env, "MORTGAGE_INSURANCE_FIXED_FEE", defaults.fixed_fee),
        )
        page_size = _env_int(env, "MORTGAGE_PAGE_SIZE", DEFAULT_PAGE_SIZE)
        if page_size <= 0:
            raise ConfigurationError("MORTGAGE_PAGE_SIZE must be positive")

        web = WebConfig(
            secret_key=env.get("FLASK_SECRET_KEY", "dev-secret-key"),
            asset_version=env.get("ASSET_VERSION", "1"),
            host=env.get("MORTGAGE_WEB_HOST", "0.0.0.0"),
            port=_env_int(env, "MORTGAGE_WEB_PORT", 8710),
        )

        return cls(
            insurance=insurance,
            page_size=page_size,
            log_level=env.get("LOG_LEVEL", "INFO"),
            log_format=env.get("LOG_FORMAT", "standard"),
            web=web,
        )


def _env_decimal(env: Mapping[str, str], name: str, default: Decimal) -> Decimal:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = decimal_from_str(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number; got {raw!r}") from exc
    if not value.is_finite() or value < 0:
        raise ConfigurationError(f"{name} must be a non-negative number; got {raw!r}")
    return value


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer; got {raw!r}") from exc
