from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Dict, Optional, TYPE_CHECKING, Union

from shared.protocol.commands import FrameType, normalize_frame_type
from shared.protocol.messages import Frame

if TYPE_CHECKING:
    from .connection import ConnectionContext

Handler = Callable[[Frame, "ConnectionContext"], Awaitable[Optional[str]]]


class FrameRouter:
    """Maps frame types to async handlers; a handler may return a reply line."""

    def __init__(self) -> None:
        self._handlers: Dict[str, Handler] = {}

    def register(self, frame_type: Union[str, FrameType], handler: Handler) -> None:
        self._handlers[normalize_frame_type(frame_type)] = handler

    def has_handler(self, frame_type: Union[str, FrameType]) -> bool:
        return normalize_frame_type(frame_type) in self._handlers

    async def dispatch(self, frame: Frame, ctx: "ConnectionContext") -> Optional[str]:
        handler = self._handlers.get(frame.type_text)
        if handler:
            return await handler(frame, ctx)
        return None
