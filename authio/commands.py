"""
Command line tools.

authio-hmac   print the base64 HMAC of stdin
authio-frame  print stdin as one authenticated frame

Both read the key from the MAC_PSK environment variable (a .env file is
honoured) and use the configured hash function (AUTHIO_HASH).
"""

import argparse
import logging
import sys

from authio.config import config
from authio.protocol import (
    AuthIOError, FrameAuthenticator, HMAC_END_MARKER, HMAC_START_MARKER,
    MESSAGE_END_MARKER, MESSAGE_START_MARKER, compute_mac, resolve_hash
)
from authio.utils import setup_logging

logger = logging.getLogger(__name__)


class CommandError(Exception):
    """Raised for conditions that end a command with a non-zero status."""
    pass


def load_key() -> bytes:
    key = config.MAC_PSK
    if not key:
        raise CommandError("no key in env MAC_PSK")
    return key.encode("utf-8")


def read_stdin(stdin=None) -> bytes:
    stdin = stdin or sys.stdin.buffer
    try:
        return stdin.read()
    except OSError as e:
        raise CommandError(f"unknown error reading from stdin: {e}") from e


def build_hmac(data: bytes, key: bytes, hash_name: str = None) -> str:
    """Marker-wrapped base64 HMAC of ``data``."""
    hash_fn = resolve_hash(hash_name or config.HASH_NAME)
    mac = compute_mac(hash_fn, key, data).decode("ascii")
    return f"{HMAC_START_MARKER}|{mac}|{HMAC_END_MARKER}\n"


def build_frame(data: bytes, key: bytes, hash_name: str = None) -> bytes:
    """Marker-wrapped frame carrying ``data``."""
    authenticator = FrameAuthenticator(hash_name or config.HASH_NAME, key)
    frame = authenticator.encode_frame(data)
    return MESSAGE_START_MARKER + b"|" + frame + b"|" + MESSAGE_END_MARKER + b"\n"


def _parser(description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument(
        "--hash", default=config.HASH_NAME,
        help=f"hashlib hash function name (default: {config.HASH_NAME})"
    )
    return parser


def hmac_main(argv=None) -> int:
    args = _parser("Print the base64 HMAC of stdin (key from MAC_PSK)").parse_args(argv)
    setup_logging()
    try:
        output = build_hmac(read_stdin(), load_key(), args.hash)
    except (CommandError, AuthIOError) as e:
        logger.error(str(e))
        return 1
    sys.stdout.write(output)
    sys.stdout.flush()
    return 0


def frame_main(argv=None) -> int:
    args = _parser("Print stdin as one authenticated frame (key from MAC_PSK)").parse_args(argv)
    setup_logging()
    try:
        output = build_frame(read_stdin(), load_key(), args.hash)
    except (CommandError, AuthIOError) as e:
        logger.error(str(e))
        return 1
    sys.stdout.buffer.write(output)
    sys.stdout.buffer.flush()
    return 0


if __name__ == "__main__":
    sys.exit(hmac_main())
