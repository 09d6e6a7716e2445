from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, List

from shared.protocol import ChatMsg, Direction, LineReassembler, ResponderHandshake


@dataclass
class ConnectionContext:
    reader: Any  # asyncio.StreamReader
    writer: Any  # asyncio.StreamWriter
    peername: str
    handshake: ResponderHandshake = field(default_factory=ResponderHandshake)
    reassembler: LineReassembler = field(default_factory=LineReassembler)
    messages: List[ChatMsg] = field(default_factory=list)
    last_seen: float = field(default_factory=time.time)

    def touch(self) -> None:
        self.last_seen = time.time()

    def is_handshaken(self) -> bool:
        return self.handshake.handshake_ok

    def log(self, direction: Direction, text: str, integrity_ok: bool = True) -> None:
        self.messages.append(ChatMsg(direction=direction, text=text, integrity_ok=integrity_ok))

    def reset(self) -> None:
        self.reassembler.clear()
        self.handshake.reset()
