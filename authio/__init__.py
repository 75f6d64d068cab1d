"""
authio: per-message HMAC integrity for byte streams.

Public API:
- Writer, Reader: default authenticating writer / verifying reader
- new_writer, new_reader: build the defaults from a transport and a key
- AppendWriter, VerifyWriter, AppendReader, VerifyReader: the four adapters
- FrameAuthenticator: frame encode / multi-frame parse / single-frame read
- encode_header, decode_header, header_length: the header codec
- AuthIOError and subclasses: error taxonomy
"""

from .protocol import (
    AuthIOError,
    BufferTooSmallError,
    DeclaredSizeMismatchError,
    FrameAuthenticator,
    FrameError,
    FrameTooLargeError,
    FrameTooShortError,
    MACMismatchError,
    TransportFailure,
    TruncatedHeaderError,
    TruncatedPayloadError,
    UnsupportedHashError,
    decode_header,
    encode_header,
    header_length,
)
from .streams import (
    AppendReader,
    AppendWriter,
    Reader,
    VerifyReader,
    VerifyWriter,
    Writer,
    new_reader,
    new_writer,
)

__all__ = [
    "AuthIOError",
    "BufferTooSmallError",
    "DeclaredSizeMismatchError",
    "FrameAuthenticator",
    "FrameError",
    "FrameTooLargeError",
    "FrameTooShortError",
    "MACMismatchError",
    "TransportFailure",
    "TruncatedHeaderError",
    "TruncatedPayloadError",
    "UnsupportedHashError",
    "decode_header",
    "encode_header",
    "header_length",
    "AppendReader",
    "AppendWriter",
    "Reader",
    "VerifyReader",
    "VerifyWriter",
    "Writer",
    "new_reader",
    "new_writer",
]

__version__ = "0.1.0"
