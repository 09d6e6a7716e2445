from .network import NetworkClient, NetworkError, SendResult
from .session import ClientSession, SessionState

__all__ = ["NetworkClient", "NetworkError", "SendResult", "ClientSession", "SessionState"]
