from __future__ import annotations

import logging
import os
from typing import Any, Dict

from dotenv import load_dotenv

from shared.codecs import DEFAULT_CODEC
from shared.protocol.constants import DEFAULT_DEVICE_LABEL, DEFAULT_PORT, DEFAULT_VERSION, READ_CHUNK_SIZE
from shared.settings import ConfigError

DEFAULT_CONFIG: Dict[str, Any] = {
    "server_host": "127.0.0.1",
    "server_port": DEFAULT_PORT,
    "device_label": DEFAULT_DEVICE_LABEL,
    "protocol_version": DEFAULT_VERSION,
    "codec": DEFAULT_CODEC,
    "read_chunk_size": READ_CHUNK_SIZE,
    "log_level": "INFO",
}

CLIENT_CONFIG: Dict[str, Any] = DEFAULT_CONFIG.copy()


def load_config(env_path: str = ".env") -> Dict[str, Any]:
    """Load client configuration from env file/environment variables."""
    if os.path.exists(env_path):
        load_dotenv(env_path)

    for key, default_value in DEFAULT_CONFIG.items():
        env_key = f"CLIENT_{key.upper()}"
        value = os.getenv(env_key, default_value)
        CLIENT_CONFIG[key] = _coerce_type(value, type(default_value))

    _validate_config()
    logging.getLogger().setLevel(CLIENT_CONFIG["log_level"])
    return CLIENT_CONFIG


def _coerce_type(value: Any, target_type: type) -> Any:
    if isinstance(value, target_type):
        return value
    try:
        if target_type is bool:
            return str(value).lower() in ("1", "true", "yes", "on")
        return target_type(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Cannot convert {value} to {target_type}") from exc


def _validate_config() -> None:
    if not (1 <= int(CLIENT_CONFIG["server_port"]) <= 65535):
        raise ConfigError("server_port must be between 1 and 65535")
    if CLIENT_CONFIG["read_chunk_size"] <= 0:
        raise ConfigError("read_chunk_size must be positive")
    for key in ("device_label", "protocol_version"):
        if not CLIENT_CONFIG[key] or "|" in CLIENT_CONFIG[key]:
            raise ConfigError(f"{key} must be non-empty and must not contain '|'")


__all__ = ["CLIENT_CONFIG", "DEFAULT_CONFIG", "ConfigError", "load_config"]
