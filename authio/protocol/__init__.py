"""Protocol module for frame processing."""

from .constants import (
    LENGTH_FIELD_BYTES, READ_CHUNK_SIZE,
    HMAC_START_MARKER, HMAC_END_MARKER, MESSAGE_START_MARKER, MESSAGE_END_MARKER
)
from .errors import (
    AuthIOError, FrameError, FrameTooShortError, TruncatedHeaderError, TruncatedPayloadError,
    DeclaredSizeMismatchError, FrameTooLargeError, MACMismatchError, BufferTooSmallError,
    UnsupportedHashError, TransportFailure
)
from .header_codec import (
    auth_code_length, compute_mac, decode_header, encode_header, header_length, resolve_hash
)
from .authenticator import FrameAuthenticator, read_exactly

__all__ = [
    "LENGTH_FIELD_BYTES", "READ_CHUNK_SIZE",
    "HMAC_START_MARKER", "HMAC_END_MARKER", "MESSAGE_START_MARKER", "MESSAGE_END_MARKER",
    "AuthIOError", "FrameError", "FrameTooShortError", "TruncatedHeaderError",
    "TruncatedPayloadError", "DeclaredSizeMismatchError", "FrameTooLargeError",
    "MACMismatchError", "BufferTooSmallError", "UnsupportedHashError", "TransportFailure",
    "auth_code_length", "compute_mac", "decode_header", "encode_header", "header_length",
    "resolve_hash", "FrameAuthenticator", "read_exactly"
]
