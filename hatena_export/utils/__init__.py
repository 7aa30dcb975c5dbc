"""
Utility modules for the blog exporter.

Contains logging, path resolution, the output store, and constants.
"""

from .log import setup_logger, get_logger
from .paths import OutputPaths, image_basename
from .store import DataStore
from .constants import (
    DEFAULT_USER_AGENT,
    DEFAULT_TIMEOUT,
    DEFAULT_PAGE_DELAY,
    FEED_BASE_URL,
)

__all__ = [
    "setup_logger",
    "get_logger",
    "OutputPaths",
    "image_basename",
    "DataStore",
    "DEFAULT_USER_AGENT",
    "DEFAULT_TIMEOUT",
    "DEFAULT_PAGE_DELAY",
    "FEED_BASE_URL",
]
