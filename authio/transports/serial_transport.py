"""pyserial endpoints usable as authio transports.

``serial.serial_for_url`` accepts plain device names (``/dev/ttyACM0``) as
well as pyserial URLs such as ``loop://`` (in-memory loopback) and
``socket://host:port`` (raw TCP), so the same code drives a serial line,
a TCP connection or a test loopback.
"""

import logging
from typing import Optional

import serial

from authio.config import config
from authio.protocol import TransportFailure

logger = logging.getLogger(__name__)


def open_serial(url: str = None, baudrate: int = None, timeout: Optional[float] = None) -> serial.SerialBase:
    """
    Open a pyserial endpoint.

    Args:
        url: device name or pyserial URL (default: config.SERIAL_URL)
        baudrate: line speed, ignored by URL handlers without one
            (default: config.BAUD_RATE)
        timeout: read timeout in seconds; None blocks until data arrives
            (default: config.READ_TIMEOUT). A timed out read looks like end
            of data to the frame reader.

    Raises:
        TransportFailure: the port could not be opened
    """
    url = url or config.SERIAL_URL
    if not url:
        raise TransportFailure("No serial port or URL configured (set AUTHIO_SERIAL_URL)")
    baudrate = baudrate or config.BAUD_RATE
    if timeout is None:
        timeout = config.READ_TIMEOUT

    try:
        port = serial.serial_for_url(url, baudrate=baudrate, timeout=timeout)
    except (serial.SerialException, ValueError) as e:
        raise TransportFailure(f"Could not open {url}: {e}") from e

    try:
        port.dtr = True
        logger.info(f"Serial port {url} opened, DTR set.")
    except (IOError, ValueError) as e:
        # URL handlers such as loop:// and socket:// have no modem lines
        logger.debug(f"Could not set DTR on {url}: {e}")
    return port
