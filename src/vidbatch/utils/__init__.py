"""Utility functions and classes for VidBatch."""

from .config import BatchConfig, load_links, load_settings
from .paths import safe_filename, find_existing_output
from .logging import log_error, setup_logging

__all__ = [
    "BatchConfig",
    "load_links",
    "load_settings",
    "safe_filename",
    "find_existing_output",
    "log_error",
    "setup_logging",
]
