"""
Authenticated echo example.

The server answers every line it receives with ``[TIMESTAMP] LINE``; both
directions are framed and verified. The client reads lines from stdin,
sends them and prints the replies.

    authio-echo server -a localhost:1234 -k mysupersecretstring
    authio-echo client -a localhost:1234 -k mysupersecretstring
    authio-echo client --url socket://localhost:1234
    authio-echo client --url /dev/ttyUSB0 -b 115200

With --inverted the authentication moves to the local console: the client
frames each stdin line with an AppendReader and sends the frame as is, then
checks the reply with a VerifyWriter on stdout. The server checks incoming
frames with a VerifyWriter on its own stdout and answers with an AppendWriter.
Both ends must use the same mode.

    authio-echo server --inverted
    authio-echo client --inverted
"""

import argparse
import io
import logging
import random
import sys
import threading
from datetime import datetime
from typing import BinaryIO, Callable, Iterable, Iterator, TextIO

from authio.config import config
from authio.protocol import AuthIOError
from authio.streams import (
    AppendReader, AppendWriter, VerifyWriter, new_authenticator, new_reader, new_writer, write_all
)
from authio.transports import connect, listen, open_serial, socket_stream
from authio.utils import setup_logging

logger = logging.getLogger(__name__)

# Largest frame the inverted client builds from one stdin read
FRAME_BUFFER_SIZE = io.DEFAULT_BUFFER_SIZE


def timestamp() -> str:
    return datetime.now().astimezone().isoformat(timespec="seconds")


class LineSource:
    """Byte source that hands out at most one line per ``read`` call."""

    def __init__(self, stream: BinaryIO, prompt: Callable[[], None] = None):
        self.stream = stream
        self.prompt = prompt

    def read(self, size: int = -1) -> bytes:
        if self.prompt:
            self.prompt()
        return self.stream.readline(size)


def handle_connection(transport, key, client_id: int, out: TextIO = None) -> None:
    """Echo framed lines on ``transport`` until the peer goes away."""
    out = out or sys.stdout
    reader = io.BufferedReader(new_reader(transport, key))
    writer = new_writer(transport, key)

    try:
        for line in iter(reader.readline, b""):
            out.write(f"[{client_id}] {line.decode('utf-8', errors='replace')}")
            out.flush()
            writer.write(f"[{timestamp()}] ".encode("utf-8") + line)
    except AuthIOError as e:
        logger.warning(f"Dropping client id {client_id}: {e}")
    logger.info(f"Client id {client_id} disconnected")


def handle_inverted_connection(transport, key, client_id: int, out: BinaryIO = None) -> None:
    """
    Inverted echo: verify each incoming frame onto ``out``, answer with a new frame.

    The whole frame received from the client goes through a VerifyWriter, so
    only authenticated payload reaches ``out``.
    """
    out = out or sys.stdout.buffer
    authenticator = new_authenticator(key)
    verified_out = VerifyWriter(out, authenticator)
    replies = AppendWriter(transport, authenticator)

    try:
        while True:
            frame = authenticator.read_frame_bytes(transport)
            if frame is None:
                break
            out.write(f"[{client_id}] ".encode("utf-8"))
            verified_out.write(frame)
            out.flush()
            replies.write(f"[{timestamp()}] ".encode("utf-8") + frame[authenticator.header_length:])
    except AuthIOError as e:
        logger.warning(f"Dropping client id {client_id}: {e}")
    logger.info(f"Client id {client_id} disconnected")


def serve(address: str, key, inverted: bool = False) -> None:
    """Accept connections forever, one thread per client."""
    server = listen(address)
    with server:
        while True:
            conn, peer = server.accept()
            client_id = random.randrange(1000)
            logger.info(f"Accepted client id {client_id} from {peer[0]}:{peer[1]}")
            threading.Thread(
                target=_serve_client, args=(conn, key, client_id, inverted), daemon=True
            ).start()


def _serve_client(conn, key, client_id: int, inverted: bool = False) -> None:
    handler = handle_inverted_connection if inverted else handle_connection
    with conn, socket_stream(conn) as transport:
        handler(transport, key, client_id)


def exchange(transport, key, lines: Iterable[bytes]) -> Iterator[bytes]:
    """Send each line and yield the echoed reply."""
    reader = io.BufferedReader(new_reader(transport, key))
    writer = new_writer(transport, key)
    for line in lines:
        writer.write(line)
        reply = reader.readline()
        if not reply:
            logger.info("Server closed the connection")
            return
        yield reply


def exchange_inverted(transport, key, source, out: BinaryIO) -> int:
    """
    Inverted client loop.

    Each read from ``source`` is framed by an AppendReader and sent to the
    server unchanged; each reply frame is verified by a VerifyWriter on its way
    to ``out``.

    Returns:
        Number of replies written to ``out``
    """
    authenticator = new_authenticator(key)
    framed_input = AppendReader(source, authenticator)
    verified_out = VerifyWriter(out, authenticator)

    replies = 0
    while True:
        frame = framed_input.read(FRAME_BUFFER_SIZE)
        if not frame:
            return replies
        write_all(transport, frame)

        reply = authenticator.read_frame_bytes(transport)
        if reply is None:
            logger.info("Server closed the connection")
            return replies
        verified_out.write(reply)
        out.flush()
        replies += 1


def _prompt() -> None:
    sys.stdout.write(">> ")
    sys.stdout.flush()


def _stdin_lines() -> Iterator[bytes]:
    while True:
        _prompt()
        line = sys.stdin.buffer.readline()
        if not line:
            return
        yield line


def _run_exchange(transport, key, inverted: bool) -> None:
    if inverted:
        exchange_inverted(transport, key, LineSource(sys.stdin.buffer, _prompt), sys.stdout.buffer)
    else:
        _print_replies(exchange(transport, key, _stdin_lines()))


def run_client(address: str, key, url: str = None, baud: int = None, inverted: bool = False) -> None:
    if url:
        transport = open_serial(url, baud)
        with transport:
            _run_exchange(transport, key, inverted)
        return

    sock = connect(address)
    with sock, socket_stream(sock) as transport:
        _run_exchange(transport, key, inverted)


def _print_replies(replies: Iterator[bytes]) -> None:
    for reply in replies:
        sys.stdout.write(reply.decode("utf-8", errors="replace"))
        sys.stdout.flush()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Authenticated echo server and client")
    parser.add_argument("role", choices=["server", "client"])
    parser.add_argument(
        "-a", "--address", default=config.DEFAULT_ADDRESS,
        help=f"HOST:PORT to listen on or connect to (default: {config.DEFAULT_ADDRESS})"
    )
    parser.add_argument(
        "-k", "--key", default=config.MAC_PSK or config.DEMO_KEY,
        help="key used for message authentication codes (default: MAC_PSK or a demo key)"
    )
    parser.add_argument(
        "--url", default=config.SERIAL_URL,
        help="client only: serial port or pyserial URL to use instead of --address"
    )
    parser.add_argument(
        "-b", "--baud", type=int, default=config.BAUD_RATE,
        help=f"client only: baud rate for --url (default: {config.BAUD_RATE})"
    )
    parser.add_argument(
        "--inverted", action="store_true",
        help="authenticate on the console side (AppendReader on stdin, VerifyWriter on stdout)"
    )
    args = parser.parse_args(argv)
    setup_logging()

    try:
        if args.role == "server":
            serve(args.address, args.key, args.inverted)
        else:
            run_client(args.address, args.key, args.url, args.baud, args.inverted)
    except AuthIOError as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.info("Exiting due to KeyboardInterrupt.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
