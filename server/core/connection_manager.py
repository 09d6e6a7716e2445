from __future__ import annotations

import logging
from typing import Optional

from shared.protocol import encode_line

from .connection import ConnectionContext

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Tracks the single active peer; a newer connection supersedes the previous one."""

    def __init__(self) -> None:
        self._active: Optional[ConnectionContext] = None

    @property
    def active(self) -> Optional[ConnectionContext]:
        return self._active

    def register(self, ctx: ConnectionContext) -> Optional[ConnectionContext]:
        """Make `ctx` the active peer and return the one it replaced, if any."""
        previous = self._active
        self._active = ctx
        return previous if previous is not ctx else None

    def unregister(self, ctx: ConnectionContext) -> bool:
        if self._active is ctx:
            self._active = None
            return True
        return False

    async def send_line(self, line: str, ctx: Optional[ConnectionContext] = None) -> bool:
        target = ctx or self._active
        if target is None:
            return False
        try:
            target.writer.write(encode_line(line))
            await target.writer.drain()
            logger.debug("TX %s: %s", target.peername, line)
            return True
        except (ConnectionError, OSError) as exc:
            logger.warning("Send to %s failed: %s", target.peername, exc)
            return False
