"""Transport helpers."""

from .serial_transport import open_serial
from .socket_transport import connect, listen, parse_address, socket_stream

__all__ = ["open_serial", "connect", "listen", "parse_address", "socket_stream"]
