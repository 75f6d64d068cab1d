"""TCP sockets as authio transports."""

import logging
import socket
from typing import Tuple

from authio.protocol import TransportFailure

logger = logging.getLogger(__name__)


def parse_address(address: str) -> Tuple[str, int]:
    """Split ``HOST:PORT`` into a (host, port) tuple."""
    host, sep, port = address.rpartition(":")
    if not sep or not port.isdigit():
        raise ValueError(f"Invalid address {address!r}, expected HOST:PORT")
    return host or "localhost", int(port)


def socket_stream(sock: socket.socket):
    """Unbuffered binary file object over ``sock`` with ``read``/``write``."""
    return sock.makefile("rwb", buffering=0)


def connect(address: str, timeout: float = None) -> socket.socket:
    """Open a TCP connection to ``HOST:PORT``."""
    host, port = parse_address(address)
    try:
        sock = socket.create_connection((host, port), timeout=timeout)
    except OSError as e:
        raise TransportFailure(f"Could not connect to {address}: {e}") from e
    logger.info(f"Connected to {host}:{port}")
    return sock


def listen(address: str) -> socket.socket:
    """Bind and listen on ``HOST:PORT``."""
    host, port = parse_address(address)
    try:
        sock = socket.create_server((host, port), reuse_port=False)
    except OSError as e:
        raise TransportFailure(f"Could not listen on {address}: {e}") from e
    logger.info(f"Listening on {host}:{port}")
    return sock
