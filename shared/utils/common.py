from __future__ import annotations

import secrets
import time


def utc_timestamp() -> int:
    """Current UTC timestamp in seconds."""
    return int(time.time())


def random_token(length: int = 8) -> str:
    """Generate hex token of `length` characters (session identifiers)."""
    return secrets.token_hex(length // 2)


__all__ = ["utc_timestamp", "random_token"]
