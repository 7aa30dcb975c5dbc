"""
Exception hierarchy for the exporter.

Transport, decode and content-type errors are fatal for the whole crawl.
Processing and store errors only abort the entry being exported.
"""

from typing import Optional


class ExportError(Exception):
    """Base class for all exporter errors."""


class TransportError(ExportError):
    """Network or HTTP failure while fetching a feed page or an image."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        page: Optional[str] = None,
        body: Optional[str] = None
    ):
        self.status = status
        self.page = page
        self.body = body
        details = []
        if status is not None:
            details.append(f"status {status}")
        if page is not None:
            details.append(f"page {page!r}")
        if details:
            message = f"{message} ({', '.join(details)})"
        if body:
            message = f"{message}: {body[:200]}"
        super().__init__(message)


class DecodeError(ExportError):
    """Malformed feed or document markup."""


class UnsupportedContentType(ExportError):
    """Entry content is not HTML."""

    def __init__(self, content_type: str):
        self.content_type = content_type
        super().__init__(f"unknown content type: {content_type!r}")


class ProcessingError(ExportError):
    """Raised by a transform callback to abort tree traversal."""


class FilterError(ProcessingError):
    """A filter rule could not rewrite the document."""


class StoreError(ExportError):
    """Directory creation or file write failed."""

    def __init__(self, path: str, cause: Exception):
        self.path = path
        super().__init__(f"unable to write {path}: {cause}")
        self.__cause__ = cause
