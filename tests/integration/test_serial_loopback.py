"""Framed traffic over a pyserial loop:// port."""

import io

import pytest
import serial

from authio.protocol import FrameAuthenticator, MACMismatchError, TransportFailure
from authio.streams import AppendReader, Reader, VerifyWriter, Writer
from authio.transports import open_serial

MOCK_KEY = b"mock key"


@pytest.fixture
def port():
    port = open_serial("loop://", baudrate=115200, timeout=0.1)
    yield port
    port.close()


@pytest.fixture
def authenticator():
    return FrameAuthenticator("sha256", MOCK_KEY)


class TestSerialLoopback:

    def test_open_serial_returns_pyserial_port(self, port):
        assert isinstance(port, serial.SerialBase)
        assert port.is_open

    def test_writer_to_reader(self, port, authenticator):
        writer = Writer(port, authenticator)
        reader = Reader(port, authenticator)

        for line in (b"first\n", b"second\n", b"third\n"):
            writer.write(line)

        lines = io.BufferedReader(reader)
        assert lines.readline() == b"first\n"
        assert lines.readline() == b"second\n"
        assert lines.readline() == b"third\n"

    def test_timeout_is_end_of_data(self, port, authenticator):
        """A read that times out on an idle line reports end of data."""
        assert Reader(port, authenticator).read(10) == b""

    def test_foreign_key_is_rejected(self, port, authenticator):
        Writer(port, FrameAuthenticator("sha256", b"other key")).write(b"spoofed")
        with pytest.raises(MACMismatchError):
            Reader(port, authenticator).read(100)

    def test_append_reader_over_port(self, port, authenticator):
        """AppendReader frames whatever the port delivers."""
        port.write(b"raw sensor bytes")
        framed = AppendReader(port, authenticator).read(200)

        sink = io.BytesIO()
        VerifyWriter(sink, authenticator).write(framed)
        assert sink.getvalue() == b"raw sensor bytes"

    @pytest.mark.parametrize("url", ["nonexistent-scheme://nowhere", "/dev/authio-no-such-device"])
    def test_open_failure(self, url):
        with pytest.raises(TransportFailure):
            open_serial(url)
