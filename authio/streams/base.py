"""Shared plumbing for the stream adapters."""

import io
import logging
from typing import Optional, Protocol as TypingProtocol

from authio.protocol import FrameAuthenticator, TransportFailure

logger = logging.getLogger(__name__)


class ByteSource(TypingProtocol):
    """Anything that can be read from; ``b""`` signals a clean end of data."""
    def read(self, size: int = -1) -> bytes: ...


class ByteSink(TypingProtocol):
    """Anything that can be written to."""
    def write(self, data: bytes) -> Optional[int]: ...


def write_all(sink: ByteSink, data: bytes) -> int:
    """
    Write every byte of ``data`` to ``sink``.

    Sinks that return None from ``write`` (sockets' ``sendall`` style) are
    taken to have accepted the whole chunk.

    Returns:
        Number of bytes written (always ``len(data)``).

    Raises:
        TransportFailure: the sink raised an OSError or stopped accepting
            bytes. ``written`` holds the raw byte count flushed before that.
    """
    view = memoryview(data)
    written = 0
    while written < len(view):
        try:
            n = sink.write(view[written:])
        except OSError as e:
            raise TransportFailure(f"Failed to write to transport: {e}", written=written) from e
        if n is None:
            n = len(view) - written
        if n <= 0:
            raise TransportFailure(
                f"Transport accepted no bytes after {written} of {len(view)}", written=written
            )
        written += n
    return written


class StreamAdapter(io.RawIOBase):
    """
    Base class pairing a transport endpoint with a FrameAuthenticator.

    Adapters do not own the transport: closing an adapter leaves the
    transport open.
    """

    def __init__(self, transport, authenticator: FrameAuthenticator):
        super().__init__()
        self.transport = transport
        self.authenticator = authenticator

    @property
    def header_length(self) -> int:
        return self.authenticator.header_length

    def __repr__(self) -> str:
        return f"{type(self).__name__}(transport={self.transport!r}, authenticator={self.authenticator!r})"


class WriterAdapter(StreamAdapter):
    def writable(self) -> bool:
        return True


class ReaderAdapter(StreamAdapter):
    def readable(self) -> bool:
        return True
