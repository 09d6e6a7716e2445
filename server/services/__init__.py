from .handshake_service import HandshakeService
from .message_service import MessageService

__all__ = ["HandshakeService", "MessageService"]
