"""
Path and URL utilities for the blog exporter.

Maps entries, images, categories and archive years to the file path
written below the output directory and to the URL path under which the
published site serves it. Nothing in here touches the file system.
"""

import hashlib
import os
import posixpath
from urllib.parse import urlparse, unquote, quote

from .constants import MAX_BASENAME_LENGTH


def image_basename(url: str) -> str:
    """
    Get the local file name for an image URL.

    The name is the last segment of the URL path. Names longer than
    ``MAX_BASENAME_LENGTH`` bytes in UTF-8 are replaced by the uppercase hex
    SHA-1 of the name so they stay within file system limits.

    Args:
        url: Image URL (absolute or relative)

    Returns:
        File name, or an empty string if the URL has no path segment

    Raises:
        ValueError: If the URL cannot be parsed
    """
    parsed = urlparse(url)
    basename = posixpath.basename(unquote(parsed.path))

    encoded = basename.encode("utf-8")
    if len(encoded) > MAX_BASENAME_LENGTH:
        basename = hashlib.sha1(encoded).hexdigest().upper()

    return basename


def is_remote_url(url: str) -> bool:
    """
    Check whether a URL points at a file on an http(s) server.

    Raises:
        ValueError: If the URL cannot be parsed
    """
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def escape_segment(name: str) -> str:
    """Percent-encode a string for use as a single URL path segment."""
    return quote(name, safe="")


class OutputPaths:
    """
    Resolves file paths and public URL paths of exported pages.

    File paths are relative to the output directory; URL paths are
    absolute and start with the configured URL prefix.
    """

    def __init__(self, url_prefix: str = ""):
        self.url_prefix = url_prefix.strip("/")

    def _url(self, *parts: str) -> str:
        return posixpath.join("/", self.url_prefix, *parts)

    def landing_file_path(self) -> str:
        return "index.html"

    def landing_url_path(self) -> str:
        return self._url("index.html")

    def entry_file_path(self, entry) -> str:
        return os.path.join(entry.path, "index.html")

    def entry_url_path(self, entry) -> str:
        return self._url(entry.path, "index.html")

    def image_file_path(self, entry, name: str) -> str:
        return os.path.join(entry.path, name)

    def image_url_path(self, entry, name: str) -> str:
        return self._url(entry.path, name)

    def category_file_path(self, name: str) -> str:
        # Escaped twice: the web server decodes the request path once
        # before looking the directory up.
        return os.path.join("category", escape_segment(escape_segment(name)), "index.html")

    def category_url_path(self, name: str) -> str:
        return self._url("category", escape_segment(name), "index.html")

    def archive_file_path(self, year: int) -> str:
        return os.path.join("archive", str(year), "index.html")

    def archive_url_path(self, year: int) -> str:
        return self._url("archive", str(year), "index.html")
