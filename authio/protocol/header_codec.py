"""
Frame header encoding and decoding.

A frame is ``AuthCode || LengthField || Payload``:

- ``AuthCode`` is the standard base64 encoding of
  ``HMAC(key, LengthField || Payload)`` under the chosen hash function.
  base64 keeps the header free of bytes such as ``b"\\n"`` so line oriented
  readers stacked on top of a verifying reader are never cut short.
- ``LengthField`` is an 8 byte big-endian unsigned integer holding the total
  frame length (header included), so back-to-back frames can be walked
  without delimiters.
"""

import base64
import hashlib
import hmac
import math
from typing import Callable, Tuple, Union

from .constants import (
    BASE64_GROUP_BYTES, BASE64_GROUP_CHARS, LENGTH_FIELD_BYTEORDER, LENGTH_FIELD_BYTES
)
from .errors import (
    DeclaredSizeMismatchError, FrameTooShortError, MACMismatchError, UnsupportedHashError
)

HashFn = Union[str, Callable]


def resolve_hash(hash_fn: HashFn) -> HashFn:
    """Validate a hashlib name or constructor and return it unchanged."""
    if isinstance(hash_fn, str):
        try:
            hashlib.new(hash_fn)
        except (ValueError, TypeError) as e:
            raise UnsupportedHashError(f"Unsupported hash function: {hash_fn}") from e
    elif not callable(hash_fn):
        raise UnsupportedHashError(f"Hash function must be a name or constructor, got {type(hash_fn).__name__}")

    # SHAKE and other extendable-output functions have no fixed digest size
    if digest_size(hash_fn) == 0:
        raise UnsupportedHashError(f"Hash function has no fixed digest size: {hash_fn}")
    return hash_fn


def digest_size(hash_fn: HashFn) -> int:
    """Digest size in bytes of a hashlib name or constructor."""
    if isinstance(hash_fn, str):
        return hashlib.new(hash_fn).digest_size
    return hash_fn().digest_size


def auth_code_length(hash_fn: HashFn) -> int:
    # rounded up to a whole base64 group
    return math.ceil(digest_size(hash_fn) / BASE64_GROUP_BYTES) * BASE64_GROUP_CHARS


def header_length(hash_fn: HashFn) -> int:
    """Number of header bytes produced for every frame under ``hash_fn``."""
    return LENGTH_FIELD_BYTES + auth_code_length(hash_fn)


def compute_mac(hash_fn: HashFn, key: bytes, data: bytes) -> bytes:
    """Base64 encoded HMAC of ``data``."""
    digest = hmac.new(key, data, hash_fn).digest()
    return base64.b64encode(digest)


def encode_length(total_length: int) -> bytes:
    return total_length.to_bytes(LENGTH_FIELD_BYTES, byteorder=LENGTH_FIELD_BYTEORDER)


def decode_length(length_field: bytes) -> int:
    return int.from_bytes(length_field, byteorder=LENGTH_FIELD_BYTEORDER)


def encode_header(hash_fn: HashFn, key: bytes, payload: bytes) -> bytes:
    """
    Build the header for ``payload``.

    Args:
        hash_fn: hashlib name or constructor
        key: HMAC key (may be empty)
        payload: message bytes (may be empty)

    Returns:
        ``AuthCode || LengthField``
    """
    length_field = encode_length(header_length(hash_fn) + len(payload))
    return compute_mac(hash_fn, key, length_field + payload) + length_field


def verify_mac(hash_fn: HashFn, key: bytes, received: bytes, length_field: bytes, payload: bytes) -> None:
    """Raise MACMismatchError unless ``received`` authenticates the frame body."""
    computed = compute_mac(hash_fn, key, length_field + payload)
    if not hmac.compare_digest(bytes(received), computed):
        raise MACMismatchError("Received MAC does not match computed MAC")


def decode_header(hash_fn: HashFn, header_len: int, key: bytes, buffer: bytes) -> Tuple[bytes, bytes]:
    """
    Verify the first frame in ``buffer``.

    Args:
        hash_fn: hashlib name or constructor
        header_len: header_length(hash_fn), passed in so callers can cache it
        key: HMAC key
        buffer: bytes starting at a frame boundary

    Returns:
        Tuple of (payload, remainder after this frame). The remainder is a
        memoryview when ``buffer`` is one, so walking many frames does not
        copy the tail each time.

    Raises:
        FrameTooShortError: buffer shorter than one header
        DeclaredSizeMismatchError: length field larger than the buffer or
            smaller than a header
        MACMismatchError: AuthCode does not match
    """
    view = memoryview(buffer)
    if len(view) < header_len:
        raise FrameTooShortError(
            f"Buffer too short for header: need {header_len}, got {len(view)}"
        )

    mac_len = header_len - LENGTH_FIELD_BYTES
    received = view[:mac_len]
    length_field = bytes(view[mac_len:header_len])
    declared = decode_length(length_field)

    if declared > len(view):
        raise DeclaredSizeMismatchError(
            f"Declared frame length {declared} exceeds available {len(view)} bytes"
        )
    if declared < header_len:
        raise DeclaredSizeMismatchError(
            f"Declared frame length {declared} is shorter than header length {header_len}"
        )

    payload = bytes(view[header_len:declared])
    verify_mac(hash_fn, key, received, length_field, payload)
    remainder = view[declared:]
    if isinstance(buffer, memoryview):
        return payload, remainder
    return payload, bytes(remainder)
