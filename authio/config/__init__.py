"""Configuration module."""

from .settings import Config, config

__all__ = ["Config", "config"]
