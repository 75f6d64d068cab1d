"""Error types raised by the frame codec and the stream adapters."""


class AuthIOError(Exception):
    """Base exception for authio operations.

    ``partial`` and ``frame_count`` hold whatever was successfully verified
    before the failure when the error comes out of a multi-frame parse.
    """

    def __init__(self, message: str = "", partial: bytes = b"", frame_count: int = 0):
        super().__init__(message)
        self.partial = partial
        self.frame_count = frame_count


class FrameError(AuthIOError, ValueError):
    """Raised when the byte stream does not hold a well formed frame."""
    pass


class FrameTooShortError(FrameError):
    """Raised when a buffer is shorter than one header."""
    pass


class TruncatedHeaderError(FrameError):
    """Raised when the stream ends part way through a header."""
    pass


class TruncatedPayloadError(FrameError):
    """Raised when the stream ends before the declared payload is complete."""
    pass


class DeclaredSizeMismatchError(FrameError):
    """Raised when the length field disagrees with the bytes available."""
    pass


class FrameTooLargeError(DeclaredSizeMismatchError):
    """Raised when the length field exceeds the configured maximum frame size."""
    pass


class MACMismatchError(AuthIOError):
    """Raised when a received AuthCode does not match the recomputed one.

    Not a FrameError: it means tampering or a key/hash mismatch between
    peers, not a malformed stream.
    """
    pass


class BufferTooSmallError(AuthIOError, ValueError):
    """Raised when a destination buffer cannot hold a frame header."""
    pass


class UnsupportedHashError(AuthIOError, ValueError):
    """Raised when a hash function name is unknown to hashlib."""
    pass


class TransportFailure(AuthIOError, OSError):
    """Raised when the underlying transport fails to read or write.

    ``written`` is the number of caller-visible bytes that reached the
    transport before the failure.
    """

    def __init__(self, message: str = "", written: int = 0):
        super().__init__(message)
        self.written = written
