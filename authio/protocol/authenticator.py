"""HMAC frame authenticator: builds, parses and reads authenticated frames."""

import logging
from typing import Optional, Tuple

from authio.config import config

from .constants import LENGTH_FIELD_BYTES, READ_CHUNK_SIZE
from .errors import (
    AuthIOError, DeclaredSizeMismatchError, FrameTooLargeError, TransportFailure,
    TruncatedHeaderError, TruncatedPayloadError
)
from .header_codec import (
    HashFn, decode_header, decode_length, encode_header, header_length, resolve_hash, verify_mac
)

logger = logging.getLogger(__name__)


def read_exactly(source, size: int) -> bytes:
    """
    Read up to ``size`` bytes from a blocking byte source.

    Stops early only when the source reports end of data, so the result is
    shorter than ``size`` exactly when the stream ended. No single read asks
    for more than READ_CHUNK_SIZE bytes, so a bogus length field cannot make
    the source allocate it up front. Errors raised by the source are wrapped
    in TransportFailure.
    """
    chunks = []
    remaining = size
    while remaining > 0:
        try:
            chunk = source.read(min(remaining, READ_CHUNK_SIZE))
        except OSError as e:
            raise TransportFailure(f"Failed to read from transport: {e}") from e
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


class FrameAuthenticator:
    """
    Frame builder and verifier for a fixed hash function and key.

    The header length is cached and only recomputed by ``rebind_hash``.
    Instances hold no per-call state, but ``rebind_hash`` must not run
    concurrently with frame operations.
    """

    def __init__(self, hash_fn: HashFn, key: bytes, max_frame_size: Optional[int] = None):
        self.hash_fn = resolve_hash(hash_fn)
        self._key = bytes(key)
        self.header_length = header_length(self.hash_fn)
        self.max_frame_size = max_frame_size or None

        if not self._key:
            logger.warning("FrameAuthenticator created with an empty key")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(hash_fn={self.hash_fn!r}, header_length={self.header_length})"

    def rebind_hash(self, hash_fn: HashFn) -> "FrameAuthenticator":
        """Switch to another hash function and return self."""
        self.hash_fn = resolve_hash(hash_fn)
        self.header_length = header_length(self.hash_fn)
        logger.debug(f"Rebound hash function to {self.hash_fn!r}, header length {self.header_length}")
        return self

    def encode_header(self, payload: bytes) -> bytes:
        return encode_header(self.hash_fn, self._key, payload)

    def encode_frame(self, payload: bytes) -> bytes:
        """Return ``header || payload`` for one message."""
        payload = bytes(payload)
        return self.encode_header(payload) + payload

    def decode_frame(self, buffer: bytes) -> Tuple[bytes, bytes]:
        """Verify the first frame in ``buffer``; returns (payload, remainder)."""
        return decode_header(self.hash_fn, self.header_length, self._key, buffer)

    def parse_all(self, buffer: bytes) -> Tuple[bytes, int]:
        """
        Verify and strip every frame in a buffer of back-to-back frames.

        Args:
            buffer: zero or more concatenated frames

        Returns:
            Tuple of (concatenated payloads, number of frames)

        Raises:
            FrameError, MACMismatchError: on the first bad frame. The payloads
                verified before it are attached as ``partial`` and their count
                as ``frame_count``.
        """
        processed = []
        remainder = memoryview(buffer)
        frame_count = 0

        while len(remainder) > 0:
            try:
                payload, remainder = self.decode_frame(remainder)
            except AuthIOError as e:
                e.partial = b"".join(processed)
                e.frame_count = frame_count
                if config.DEBUG_FRAME_PARSING:
                    logger.debug(f"Frame parse stopped after {frame_count} frames: {e}")
                raise
            processed.append(payload)
            frame_count += 1

        if config.DEBUG_FRAME_PARSING:
            logger.debug(f"Parsed {frame_count} frames from {len(buffer)} bytes")
        return b"".join(processed), frame_count

    def read_frame(self, source) -> Optional[bytes]:
        """
        Read and verify exactly one frame from a blocking byte source.

        Args:
            source: object with ``read(n) -> bytes``; ``b""`` means end of data

        Returns:
            The payload, or None if the source ended before any header byte.

        Raises:
            TruncatedHeaderError: stream ended inside the header
            TruncatedPayloadError: stream ended inside the payload
            DeclaredSizeMismatchError: length field smaller than a header
            FrameTooLargeError: length field above ``max_frame_size``
            MACMismatchError: AuthCode does not match
            TransportFailure: the source raised an OSError
        """
        frame = self.read_frame_bytes(source)
        if frame is None:
            return None

        mac_len = self.header_length - LENGTH_FIELD_BYTES
        payload = frame[self.header_length:]
        verify_mac(self.hash_fn, self._key, frame[:mac_len], frame[mac_len:self.header_length], payload)
        return payload

    def read_frame_bytes(self, source) -> Optional[bytes]:
        """
        Read one whole frame, header included, without checking its AuthCode.

        Only the length field is validated. Used to pass frames on to a
        VerifyWriter; raises the same errors as ``read_frame`` except
        MACMismatchError.
        """
        header = read_exactly(source, self.header_length)
        if not header:
            return None
        if len(header) < self.header_length:
            raise TruncatedHeaderError(
                f"Stream ended inside header: got {len(header)} of {self.header_length} bytes"
            )

        declared = decode_length(header[self.header_length - LENGTH_FIELD_BYTES:])
        if declared < self.header_length:
            raise DeclaredSizeMismatchError(
                f"Declared frame length {declared} is shorter than header length {self.header_length}"
            )
        if self.max_frame_size is not None and declared > self.max_frame_size:
            raise FrameTooLargeError(
                f"Declared frame length {declared} exceeds maximum {self.max_frame_size}"
            )

        expected = declared - self.header_length
        payload = read_exactly(source, expected)
        if len(payload) < expected:
            raise TruncatedPayloadError(
                f"Stream ended inside payload: got {len(payload)} of {expected} bytes"
            )

        if config.DEBUG_FRAME_PARSING:
            logger.debug(f"Read frame: total_len={declared}, payload_len={len(payload)}")
        return header + payload
