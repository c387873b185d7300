"""Configuration package: settings, logging, and exceptions."""

from config.exceptions import (
    NovelStoreError,
    NotFoundError,
    StorageIOError,
    ParseError,
    MetadataMissingError,
    MetadataMalformedError,
    ValidationError,
    InvalidArgumentError,
    InvalidConfigError,
)
from config.logging_config import setup_logging
from config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
    "setup_logging",
    "NovelStoreError",
    "NotFoundError",
    "StorageIOError",
    "ParseError",
    "MetadataMissingError",
    "MetadataMalformedError",
    "ValidationError",
    "InvalidArgumentError",
    "InvalidConfigError",
]
