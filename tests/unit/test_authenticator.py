"""Tests for FrameAuthenticator."""

import io
import logging
import socket
from unittest.mock import MagicMock

import pytest

from authio.protocol import (
    READ_CHUNK_SIZE, AuthIOError, DeclaredSizeMismatchError, FrameAuthenticator, FrameTooLargeError,
    FrameTooShortError, MACMismatchError, TransportFailure, TruncatedHeaderError,
    TruncatedPayloadError
)
from authio.transports import socket_stream

MOCK_KEY = b"mock key"
MOCK_DATA = b"mock data"


@pytest.fixture
def authenticator():
    return FrameAuthenticator("sha256", MOCK_KEY)


class TestEncodeFrame:
    """Single frame construction tests."""

    def test_frame_layout(self, authenticator):
        frame = authenticator.encode_frame(MOCK_DATA)
        assert frame == (
            b"ayfkWUgjU14GmJSb+O5QP3IU7ZepnQ52KwV2s7iBX8Q=" + (61).to_bytes(8, "big") + MOCK_DATA
        )

    def test_length_field_matches_frame(self, authenticator):
        for payload in (b"", b"a", b"\n" * 300):
            frame = authenticator.encode_frame(payload)
            assert int.from_bytes(frame[44:52], "big") == len(frame)

    def test_header_length_cached(self, authenticator):
        assert authenticator.header_length == 52

    def test_rebind_hash(self, authenticator):
        """Rebinding recomputes the header length and returns the instance."""
        assert authenticator.rebind_hash("sha512") is authenticator
        assert authenticator.header_length == 96
        frame = authenticator.encode_frame(MOCK_DATA)
        assert len(frame) == 96 + len(MOCK_DATA)

    def test_repr_does_not_expose_key(self, authenticator):
        assert "mock key" not in repr(authenticator)

    def test_empty_key_warns(self, caplog):
        with caplog.at_level(logging.WARNING):
            FrameAuthenticator("sha256", b"")
        assert "empty key" in caplog.text


class TestParseAll:
    """Multi-frame parsing tests."""

    @pytest.mark.parametrize("count", [0, 1, 2, 50])
    def test_concatenated_frames(self, authenticator, count):
        payloads = [f"message {i}\n".encode() for i in range(count)]
        buffer = b"".join(authenticator.encode_frame(p) for p in payloads)

        data, frame_count = authenticator.parse_all(buffer)

        assert data == b"".join(payloads)
        assert frame_count == count

    def test_empty_input(self, authenticator):
        assert authenticator.parse_all(b"") == (b"", 0)

    def test_empty_payload_frames(self, authenticator):
        buffer = authenticator.encode_frame(b"") * 3
        assert authenticator.parse_all(buffer) == (b"", 3)

    def test_partial_failure_keeps_parsed_frames(self, authenticator):
        """A truncated second frame still returns the first payload."""
        first = authenticator.encode_frame(b"first")
        second = authenticator.encode_frame(b"second")

        with pytest.raises(AuthIOError) as exc_info:
            authenticator.parse_all(first + second[:-2])

        assert isinstance(exc_info.value, DeclaredSizeMismatchError)
        assert exc_info.value.partial == b"first"
        assert exc_info.value.frame_count == 1

    def test_partial_failure_on_short_tail(self, authenticator):
        first = authenticator.encode_frame(b"first")
        with pytest.raises(FrameTooShortError) as exc_info:
            authenticator.parse_all(first + b"junk")
        assert exc_info.value.partial == b"first"
        assert exc_info.value.frame_count == 1

    def test_partial_failure_on_bad_mac(self, authenticator):
        other = FrameAuthenticator("sha256", b"other key")
        buffer = authenticator.encode_frame(b"one") + authenticator.encode_frame(b"two") + other.encode_frame(b"three")

        with pytest.raises(MACMismatchError) as exc_info:
            authenticator.parse_all(buffer)

        assert exc_info.value.partial == b"onetwo"
        assert exc_info.value.frame_count == 2

    def test_round_trip_with_other_key_fails(self, authenticator):
        other = FrameAuthenticator("sha256", b"other key")
        with pytest.raises(MACMismatchError):
            other.parse_all(authenticator.encode_frame(MOCK_DATA))

    def test_tamper_detection(self, authenticator):
        """Changing any single byte of a frame makes verification fail."""
        frame = authenticator.encode_frame(MOCK_DATA)
        for i in range(len(frame)):
            tampered = bytearray(frame)
            tampered[i] ^= 0x01
            with pytest.raises(AuthIOError) as exc_info:
                authenticator.parse_all(bytes(tampered))
            # the length field may turn into a format error, nothing else may
            if not 44 <= i < 52:
                assert isinstance(exc_info.value, MACMismatchError), f"byte {i}"


class TestReadFrame:
    """Single frame stream read tests."""

    def test_reads_exactly_one_frame(self, authenticator):
        source = io.BytesIO(authenticator.encode_frame(b"one") + authenticator.encode_frame(b"two"))

        assert authenticator.read_frame(source) == b"one"
        assert source.tell() == 52 + 3
        assert authenticator.read_frame(source) == b"two"
        assert authenticator.read_frame(source) is None

    def test_clean_end_of_data(self, authenticator):
        assert authenticator.read_frame(io.BytesIO(b"")) is None

    def test_empty_payload(self, authenticator):
        source = io.BytesIO(authenticator.encode_frame(b""))
        assert authenticator.read_frame(source) == b""
        assert authenticator.read_frame(source) is None

    def test_truncated_header(self, authenticator):
        frame = authenticator.encode_frame(MOCK_DATA)
        with pytest.raises(TruncatedHeaderError):
            authenticator.read_frame(io.BytesIO(frame[:20]))

    def test_truncated_payload(self, authenticator):
        frame = authenticator.encode_frame(MOCK_DATA)
        with pytest.raises(TruncatedPayloadError):
            authenticator.read_frame(io.BytesIO(frame[:-1]))

    def test_header_only_with_missing_payload(self, authenticator):
        """A complete header followed by nothing is a truncated payload, not end of data."""
        frame = authenticator.encode_frame(MOCK_DATA)
        with pytest.raises(TruncatedPayloadError):
            authenticator.read_frame(io.BytesIO(frame[:52]))

    def test_mac_mismatch(self, authenticator):
        other = FrameAuthenticator("sha256", b"other key")
        with pytest.raises(MACMismatchError):
            authenticator.read_frame(io.BytesIO(other.encode_frame(MOCK_DATA)))

    def test_declared_length_below_header(self, authenticator):
        frame = bytearray(authenticator.encode_frame(MOCK_DATA))
        frame[44:52] = (3).to_bytes(8, "big")
        with pytest.raises(DeclaredSizeMismatchError):
            authenticator.read_frame(io.BytesIO(bytes(frame)))

    def test_max_frame_size(self):
        bounded = FrameAuthenticator("sha256", MOCK_KEY, max_frame_size=60)
        with pytest.raises(FrameTooLargeError):
            bounded.read_frame(io.BytesIO(bounded.encode_frame(MOCK_DATA)))

    def test_max_frame_size_zero_is_unbounded(self):
        unbounded = FrameAuthenticator("sha256", MOCK_KEY, max_frame_size=0)
        assert unbounded.read_frame(io.BytesIO(unbounded.encode_frame(b"x" * 1000))) == b"x" * 1000

    def test_short_reads_are_reassembled(self, authenticator):
        """Sources that return a few bytes at a time still yield whole frames."""
        data = io.BytesIO(authenticator.encode_frame(MOCK_DATA))
        source = MagicMock()
        source.read.side_effect = lambda n: data.read(min(n, 5))

        assert authenticator.read_frame(source) == MOCK_DATA

    def test_transport_error_is_wrapped(self, authenticator):
        source = MagicMock()
        source.read.side_effect = ConnectionResetError("peer reset")

        with pytest.raises(TransportFailure) as exc_info:
            authenticator.read_frame(source)
        assert isinstance(exc_info.value.__cause__, ConnectionResetError)

    @pytest.mark.parametrize("declared", [2 ** 63, 2 ** 40])
    def test_huge_length_field_over_socket(self, authenticator, declared):
        """A forged length field ends as a truncated payload, not a giant allocation."""
        frame = bytearray(authenticator.encode_frame(MOCK_DATA))
        frame[44:52] = declared.to_bytes(8, "big")

        left, right = socket.socketpair()
        with left, right, socket_stream(right) as source:
            left.sendall(bytes(frame))
            left.shutdown(socket.SHUT_WR)
            with pytest.raises(TruncatedPayloadError):
                authenticator.read_frame(source)

    def test_reads_are_bounded(self, authenticator):
        frame = bytearray(authenticator.encode_frame(MOCK_DATA))
        frame[44:52] = (10 ** 9).to_bytes(8, "big")
        data = io.BytesIO(bytes(frame))
        source = MagicMock()
        source.read.side_effect = data.read

        with pytest.raises(TruncatedPayloadError):
            authenticator.read_frame(source)
        assert max(call.args[0] for call in source.read.call_args_list) <= READ_CHUNK_SIZE

    def test_read_frame_bytes_skips_mac_check(self, authenticator):
        other = FrameAuthenticator("sha256", b"other key")
        frame = other.encode_frame(MOCK_DATA)
        source = io.BytesIO(frame + authenticator.encode_frame(b"next"))

        assert authenticator.read_frame_bytes(source) == frame
        assert authenticator.read_frame(source) == b"next"
        assert authenticator.read_frame_bytes(source) is None
