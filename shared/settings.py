from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError

from shared.codecs.params import SessionParameters


class ConfigError(Exception):
    """Raised when configuration values are invalid."""

    pass


@dataclass
class Settings:
    """Shared baseline settings (client and server configs build on top)."""

    session: SessionParameters = field(default_factory=SessionParameters)
    log_level: str = "INFO"


SETTINGS = Settings()


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        return int(value, 0)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer (decimal or 0x-hex), got {value!r}") from exc


def load_settings(env_path: str = ".env") -> Settings:
    """Load shared codec/session settings from env/.env."""
    if Path(env_path).exists():
        load_dotenv(env_path)
    defaults = SessionParameters()
    try:
        SETTINGS.session = SessionParameters(
            modulus=_int_env("CME_MODULUS", defaults.modulus),
            precision_digits=_int_env("CME_PRECISION_DIGITS", defaults.precision_digits),
            mask_key=_int_env("CME_MASK_KEY", defaults.mask_key),
            ring_multiplier=_int_env("CME_RING_MULTIPLIER", defaults.ring_multiplier),
        )
    except ValidationError as exc:
        raise ConfigError(f"Invalid session parameters: {exc}") from exc
    SETTINGS.log_level = os.getenv("CME_LOG_LEVEL", SETTINGS.log_level)
    return SETTINGS


__all__ = ["Settings", "SETTINGS", "ConfigError", "load_settings"]
