"""
Crawler module for blog export.

Contains the tree walker, the document filters, the paginated entry
source, the image downloader, index rendering, and the orchestrator.
"""

from .crawler import BlogCrawler, CrawlResult, parse_document, render_document
from .walker import Walker, Transformer
from .filters import (
    Filter,
    TitleFilter,
    KeywordFilter,
    CategoryFilter,
    ImagePathFilter,
    CodeFilter,
    DraftFilter,
    DateTimeFilter,
    LinkFilter,
    EncodingFilter,
    AssetFilter,
    default_filters,
)
from .source import EntrySource
from .downloader import ImageDownloader
from .index import IndexRenderer

__all__ = [
    "BlogCrawler",
    "CrawlResult",
    "parse_document",
    "render_document",
    "Walker",
    "Transformer",
    "Filter",
    "TitleFilter",
    "KeywordFilter",
    "CategoryFilter",
    "ImagePathFilter",
    "CodeFilter",
    "DraftFilter",
    "DateTimeFilter",
    "LinkFilter",
    "EncodingFilter",
    "AssetFilter",
    "default_filters",
    "EntrySource",
    "ImageDownloader",
    "IndexRenderer",
]
