"""
Stream adapters.

- AppendWriter: frames outgoing messages
- VerifyWriter: verifies and strips framed data before writing it on
- AppendReader: frames incoming raw data
- VerifyReader: verifies and strips incoming frames
- Writer / Reader: the defaults for authenticating outgoing data and
  verifying incoming data (AppendWriter / VerifyReader)
"""

from typing import Optional, Union

from authio.config import config
from authio.protocol import FrameAuthenticator
from authio.protocol.header_codec import HashFn

from .base import ByteSink, ByteSource, StreamAdapter, write_all
from .readers import AppendReader, VerifyReader
from .writers import AppendWriter, VerifyWriter

# Defaults
Writer = AppendWriter
Reader = VerifyReader


def as_key(key: Union[str, bytes]) -> bytes:
    if isinstance(key, str):
        return key.encode("utf-8")
    return bytes(key)


def new_authenticator(key: Union[str, bytes], hash_fn: Optional[HashFn] = None) -> FrameAuthenticator:
    """FrameAuthenticator using the configured hash function unless one is given."""
    return FrameAuthenticator(
        hash_fn or config.HASH_NAME, as_key(key), max_frame_size=config.MAX_FRAME_SIZE
    )


def new_writer(transport: ByteSink, key: Union[str, bytes], hash_fn: Optional[HashFn] = None) -> AppendWriter:
    """Default authenticating writer around ``transport``."""
    return Writer(transport, new_authenticator(key, hash_fn))


def new_reader(transport: ByteSource, key: Union[str, bytes], hash_fn: Optional[HashFn] = None) -> VerifyReader:
    """Default verifying reader around ``transport``."""
    return Reader(transport, new_authenticator(key, hash_fn))


__all__ = [
    "ByteSink", "ByteSource", "StreamAdapter", "write_all",
    "AppendReader", "VerifyReader", "AppendWriter", "VerifyWriter",
    "Writer", "Reader", "as_key", "new_authenticator", "new_writer", "new_reader"
]
