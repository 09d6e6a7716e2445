"""Protocol-wide constants shared by client and server."""

PROTOCOL_MAGIC = "CME1"
FRAME_PREFIX = PROTOCOL_MAGIC + "|"
FIELD_SEPARATOR = "|"
DEFAULT_VERSION = "P2"
DEFAULT_DEVICE_LABEL = "python"
DEFAULT_PORT = 5555
ENCODING = "utf-8"
FRAME_DELIMITER = b"\n"
READ_CHUNK_SIZE = 4096  # bytes per transport read

__all__ = [
    "PROTOCOL_MAGIC",
    "FRAME_PREFIX",
    "FIELD_SEPARATOR",
    "DEFAULT_VERSION",
    "DEFAULT_DEVICE_LABEL",
    "DEFAULT_PORT",
    "ENCODING",
    "FRAME_DELIMITER",
    "READ_CHUNK_SIZE",
]
