from __future__ import annotations

import os
from typing import Any, Dict

from dotenv import load_dotenv

from shared.codecs import DEFAULT_CODEC
from shared.protocol.constants import DEFAULT_PORT, READ_CHUNK_SIZE
from shared.settings import ConfigError

DEFAULT_SERVER_CONFIG: Dict[str, Any] = {
    "host": "0.0.0.0",
    "port": DEFAULT_PORT,
    "codec": DEFAULT_CODEC,
    "read_chunk_size": READ_CHUNK_SIZE,
    "log_level": "INFO",
}

SERVER_CONFIG = DEFAULT_SERVER_CONFIG.copy()


def load_server_config(env_path: str = ".env") -> Dict[str, Any]:
    if os.path.exists(env_path):
        load_dotenv(env_path)
    try:
        SERVER_CONFIG["host"] = os.getenv("SERVER_HOST", DEFAULT_SERVER_CONFIG["host"])
        SERVER_CONFIG["port"] = int(os.getenv("SERVER_PORT", DEFAULT_SERVER_CONFIG["port"]))
        SERVER_CONFIG["codec"] = os.getenv("SERVER_CODEC", DEFAULT_SERVER_CONFIG["codec"])
        SERVER_CONFIG["read_chunk_size"] = int(
            os.getenv("SERVER_READ_CHUNK_SIZE", DEFAULT_SERVER_CONFIG["read_chunk_size"])
        )
        SERVER_CONFIG["log_level"] = os.getenv("SERVER_LOG_LEVEL", DEFAULT_SERVER_CONFIG["log_level"])
    except ValueError as exc:
        raise ConfigError(f"Invalid server configuration: {exc}") from exc
    if not (0 <= SERVER_CONFIG["port"] <= 65535):
        raise ConfigError("port must be between 0 and 65535")
    return SERVER_CONFIG


__all__ = ["SERVER_CONFIG", "DEFAULT_SERVER_CONFIG", "load_server_config"]
