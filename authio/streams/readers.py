"""Readers that add or verify-and-strip frame headers on the way in."""

import logging
from typing import Optional

from authio.config import config
from authio.protocol import AuthIOError, BufferTooSmallError, MACMismatchError, TransportFailure

from .base import ReaderAdapter

logger = logging.getLogger(__name__)


class AppendReader(ReaderAdapter):
    """
    Reads raw bytes from the transport and hands them out as frames.

    Each ``readinto`` produces exactly one frame whose payload is at most
    ``len(buffer) - header_length`` bytes.
    """

    def readinto(self, b) -> int:
        self._checkClosed()
        view = memoryview(b).cast("B")
        if len(view) <= self.header_length:
            raise BufferTooSmallError(
                f"Buffer too small for a frame: need more than {self.header_length}, got {len(view)}"
            )

        try:
            chunk = self.transport.read(len(view) - self.header_length)
        except OSError as e:
            raise TransportFailure(f"Failed to read message: {e}") from e
        if not chunk:
            return 0

        frame = self.authenticator.encode_frame(chunk)
        view[:len(frame)] = frame
        return len(frame)


class VerifyReader(ReaderAdapter):
    """
    Reads one frame at a time from the transport and returns verified payload.

    Payload that does not fit the caller's buffer is kept and handed out by
    later reads before another frame is fetched. Empty-payload frames are
    skipped, since a zero-length read means end of data.
    """

    def __init__(self, transport, authenticator):
        super().__init__(transport, authenticator)
        self._carry: Optional[memoryview] = None

    @property
    def carrying(self) -> int:
        """Number of verified bytes waiting to be delivered."""
        return len(self._carry) if self._carry is not None else 0

    def readinto(self, b) -> int:
        self._checkClosed()
        view = memoryview(b).cast("B")
        if len(view) == 0:
            return 0

        if self._carry is None:
            payload = self._next_payload()
            if payload is None:
                return 0
            self._carry = memoryview(payload)

        n = min(len(view), len(self._carry))
        view[:n] = self._carry[:n]
        self._carry = self._carry[n:]
        if len(self._carry) == 0:
            self._carry = None
        elif config.DEBUG_FRAME_PARSING:
            logger.debug(f"Carrying {len(self._carry)} bytes over to the next read")
        return n

    def _next_payload(self) -> Optional[bytes]:
        while True:
            try:
                payload = self.authenticator.read_frame(self.transport)
            except MACMismatchError as e:
                logger.warning(f"MAC verification failed: {e}")
                raise
            except TransportFailure:
                raise
            except AuthIOError as e:
                logger.warning(f"Malformed frame: {e}")
                raise
            if payload is None or payload:
                return payload
