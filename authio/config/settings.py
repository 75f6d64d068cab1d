"""Application configuration settings."""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def _optional_float(value: Optional[str]) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


@dataclass
class Config:
    """authio settings"""
    # Frame authentication
    HASH_NAME: str = os.environ.get("AUTHIO_HASH", "sha256")
    MAC_PSK: str = os.environ.get("MAC_PSK", "")
    MAX_FRAME_SIZE: int = int(os.environ.get("AUTHIO_MAX_FRAME_SIZE", "0"))  # 0 = unbounded

    # Echo example settings
    DEFAULT_ADDRESS: str = os.environ.get("AUTHIO_ADDRESS", "localhost:1234")
    DEMO_KEY: str = "mysupersecretstring"

    # Serial transport settings
    SERIAL_URL: str = os.environ.get("AUTHIO_SERIAL_URL", "")
    BAUD_RATE: int = int(os.environ.get("AUTHIO_BAUD_RATE", "115200"))
    READ_TIMEOUT: Optional[float] = _optional_float(os.environ.get("AUTHIO_READ_TIMEOUT"))

    # Debug settings
    DEBUG_FRAME_PARSING: bool = os.environ.get("DEBUG_FRAME_PARSING", "false").lower() == "true"
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")  # DEBUG, INFO, WARNING, ERROR, CRITICAL


# Global configuration instance
config = Config()
