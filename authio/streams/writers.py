"""Writers that add or verify-and-strip frame headers on the way out."""

import logging

from authio.config import config
from authio.protocol import AuthIOError, MACMismatchError, TransportFailure

from .base import WriterAdapter, write_all

logger = logging.getLogger(__name__)


class AppendWriter(WriterAdapter):
    """
    Frames every ``write`` call as one authenticated message.

    Safe to put behind ``io.BufferedWriter``: each flushed chunk simply
    becomes its own frame.
    """

    def write(self, b) -> int:
        self._checkClosed()
        payload = bytes(b)
        frame = self.authenticator.encode_frame(payload)

        try:
            write_all(self.transport, frame)
        except TransportFailure as e:
            # header bytes are never reported to the caller
            flushed = max(0, e.written - self.header_length)
            logger.error(f"Failed to write authenticated message: {e} ({flushed} payload bytes flushed)")
            raise TransportFailure(f"Failed to write authenticated message: {e}", written=flushed) from e

        if config.DEBUG_FRAME_PARSING:
            logger.debug(f"Wrote frame: payload_len={len(payload)}, frame_len={len(frame)}")
        return len(payload)


class VerifyWriter(WriterAdapter):
    """
    Verifies and strips headers from framed data before passing it on.

    Every ``write`` call must hold whole frames. Do not wrap this in
    ``io.BufferedWriter`` or anything else that may split a frame across
    calls.
    """

    def write(self, b) -> int:
        self._checkClosed()
        try:
            payload, frame_count = self.authenticator.parse_all(b)
        except MACMismatchError as e:
            logger.warning(f"MAC verification failed after {e.frame_count} frames: {e}")
            self._forward_partial(e)
            raise
        except AuthIOError as e:
            logger.warning(f"Malformed frame after {e.frame_count} frames: {e}")
            self._forward_partial(e)
            raise

        stripped = frame_count * self.header_length
        try:
            forwarded = write_all(self.transport, payload)
        except TransportFailure as e:
            logger.error(f"Failed to write verified message: {e}")
            raise TransportFailure(
                f"Failed to write verified message: {e}", written=e.written + stripped
            ) from e

        # report the size of the framed input, not of what was forwarded
        return forwarded + stripped

    def _forward_partial(self, error: AuthIOError) -> None:
        """Pass on the frames that verified before ``error``.

        A transport failure here is logged and dropped so that the caller
        still sees ``error``.
        """
        if not error.partial:
            return
        try:
            write_all(self.transport, error.partial)
        except TransportFailure as e:
            logger.error(f"Failed to forward {len(error.partial)} verified bytes: {e}")
