"""
Main blog crawler module.

Orchestrates the export: pulls entries from the feed, rewrites each entry
document through the filter pipeline, downloads its images, and writes
the pages and index pages to the output store.
"""

import asyncio
import json
import time
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup
from bs4.dammit import EntitySubstitution
from bs4.formatter import HTMLFormatter

from .filters import Filter, is_element
from .index import IndexRenderer
from .source import EntrySource
from .walker import Walker
from ..blog.feed import Entry
from ..errors import DecodeError, FilterError, ProcessingError, StoreError, UnsupportedContentType
from ..utils.constants import HTML_CONTENT_TYPE, HTML_PARSER
from ..utils.log import get_logger, print_info, print_success, print_warning
from ..utils.paths import OutputPaths, image_basename, is_remote_url
from ..utils.store import DataStore


SKELETON = "<html><head></head><body></body></html>"


class DocumentFormatter(HTMLFormatter):
    """Minimal HTML formatter that keeps attributes in document order."""

    def __init__(self):
        super().__init__(entity_substitution=EntitySubstitution.substitute_xml)

    def attributes(self, tag):
        if tag.attrs is None:
            return []
        return list(tag.attrs.items())


def parse_document(markup: str) -> BeautifulSoup:
    """
    Parse entry content into a standalone HTML document.

    Entry content is an HTML fragment; it is placed in the ``<body>`` of an
    otherwise empty document, except that the children of a top-level
    ``<head>`` or ``<body>`` go into the document's own ``<head>``/``<body>``.
    Complete documents get any missing ``<head>``/``<body>`` added.

    Args:
        markup: HTML markup

    Returns:
        Parsed document with ``<html>``, ``<head>`` and ``<body>``

    Raises:
        DecodeError: If the markup cannot be parsed
    """
    try:
        parsed = BeautifulSoup(markup, HTML_PARSER)
    except ParserRejectedMarkup as e:
        raise DecodeError(f"unable to parse as html: {e}") from e

    if parsed.html is None:
        document = BeautifulSoup(SKELETON, HTML_PARSER)
        for node in list(parsed.contents):
            if is_element(node, "head") or is_element(node, "body"):
                target = document.head if node.name == "head" else document.body
                target.attrs.update(node.attrs)
                target.extend(list(node.contents))
                node.extract()
            else:
                document.body.append(node)
        return document

    html = parsed.html
    if parsed.head is None:
        html.insert(0, parsed.new_tag("head"))
    if parsed.body is None:
        body = parsed.new_tag("body")
        body.extend([node for node in list(html.contents) if not is_element(node, "head")])
        html.append(body)
    return parsed


def render_document(document: BeautifulSoup) -> str:
    """
    Serialize a document as written, without rewriting its charset
    declaration or reordering attributes.
    """
    return document.decode(eventual_encoding=None, formatter=DocumentFormatter())


def extract_image_urls(document: BeautifulSoup) -> List[str]:
    """Collect the ``src`` of every ``<img>`` in document order."""
    urls: List[str] = []

    def collect(node) -> None:
        if is_element(node, "img") and node.get("src"):
            urls.append(node["src"])

    Walker(collect).walk(document)
    return urls


@dataclass
class CrawlResult:
    """Results of the export run."""

    entries_written: int = 0
    images_downloaded: int = 0
    index_pages_written: int = 0
    written: List[str] = field(default_factory=list)
    errors: List[Dict] = field(default_factory=list)
    cancelled: bool = False
    duration_seconds: float = 0.0


class BlogCrawler:
    """
    Main blog crawler class.

    Coordinates the entry source, the filter pipeline, the image downloader
    and the output store. Entries are processed strictly one after another.
    """

    def __init__(
        self,
        source: EntrySource,
        store: DataStore,
        paths: OutputPaths,
        filters: Sequence[Filter],
        downloader=None,
        title: str = "",
        write_indexes: bool = True,
        cancel_event: Optional[asyncio.Event] = None
    ):
        """
        Initialize the blog crawler.

        Args:
            source: Entry source to drain
            store: Output store the pages are written to
            paths: Path resolver
            filters: Filters applied to every entry, in order
            downloader: Image downloader; images are not downloaded if None
            title: Title of the landing page
            write_indexes: Whether to render category/archive/landing pages
            cancel_event: Stops the crawl between entries when set
        """
        self.source = source
        self.store = store
        self.paths = paths
        self.filters = list(filters)
        self.downloader = downloader
        self.title = title
        self.write_indexes = write_indexes
        self.cancel_event = cancel_event

        self.logger = get_logger("crawler")
        self.indexes = IndexRenderer(paths)

        # Accumulated for index pages only
        self._by_category: Dict[str, List[Entry]] = defaultdict(list)
        self._by_year: Dict[int, List[Entry]] = defaultdict(list)
        self._errors: List[Dict] = []
        self._written: List[str] = []
        self._entries_written = 0
        self._images_downloaded = 0
        self._index_pages_written = 0

    def _cancelled(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()

    async def crawl(self) -> CrawlResult:
        """
        Export every entry of the blog.

        Returns:
            CrawlResult with statistics and per-entry errors

        Raises:
            TransportError: If a feed page or an image cannot be fetched
            DecodeError: If a feed page is malformed
            UnsupportedContentType: If an entry's content is not HTML
        """
        start_time = time.time()
        cancelled = False

        print_info(f"Exporting to {self.store.directory}")

        entries = self.source.entries()
        try:
            async for entry in entries:
                if self._cancelled():
                    cancelled = True
                    break
                await self._export_entry(entry)
        finally:
            await entries.aclose()

        cancelled = cancelled or self._cancelled()
        if cancelled:
            print_warning("Crawl cancelled, skipping index pages")
        else:
            if self.write_indexes:
                self._write_index_pages()
            self._generate_error_log()

        duration = time.time() - start_time
        result = CrawlResult(
            entries_written=self._entries_written,
            images_downloaded=self._images_downloaded,
            index_pages_written=self._index_pages_written,
            written=list(self._written),
            errors=list(self._errors),
            cancelled=cancelled,
            duration_seconds=duration
        )

        print_success(
            f"Export complete! {result.entries_written} entries, "
            f"{result.images_downloaded} images in {duration:.1f}s"
        )
        return result

    async def _export_entry(self, entry: Entry) -> bool:
        """
        Rewrite and save a single entry.

        Args:
            entry: Entry to export

        Returns:
            True if the page was written, False if the entry failed
        """
        if entry.content.type != HTML_CONTENT_TYPE:
            raise UnsupportedContentType(entry.content.type)

        path = self.paths.entry_file_path(entry)
        try:
            document = parse_document(entry.content.text)
            image_urls = extract_image_urls(document)

            for f in self.filters:
                f.process(entry, document)
            html = render_document(document)

            if self.downloader is not None:
                if not await self._download_images(entry, image_urls):
                    return False

            if self._cancelled():
                return False
            self._save(path, html)
        except (ProcessingError, DecodeError, StoreError) as e:
            self.logger.error(f"Unable to process {entry.path} ({entry.id}): {e}")
            self._errors.append({
                'id': entry.id,
                'path': path,
                'error': str(e),
                'type': type(e).__name__
            })
            return False

        self._entries_written += 1
        for category in entry.categories:
            self._by_category[category].append(entry)
        if entry.published is not None:
            self._by_year[entry.published.year].append(entry)
        return True

    async def _download_images(self, entry: Entry, urls: List[str]) -> bool:
        """
        Download the images of an entry next to its page.

        Only absolute http(s) URLs are downloaded; duplicates are fetched
        once.

        Returns:
            False if the crawl was cancelled before all images were saved
        """
        seen = set()
        for url in urls:
            if self._cancelled():
                return False
            if url in seen:
                continue
            seen.add(url)

            try:
                remote = is_remote_url(url)
                basename = image_basename(url)
            except ValueError as e:
                raise FilterError(f"invalid image URL {url!r}: {e}") from e
            if not remote or not basename:
                continue

            content = await self.downloader.fetch(url)
            self._save(self.paths.image_file_path(entry, basename), content)
            self._images_downloaded += 1
        return True

    def _save(self, path: str, content) -> None:
        self.store.write(path, content)
        self._written.append(path)
        self.logger.info(f"saved {path}")

    def _write_index_pages(self) -> None:
        """Write category, archive and landing pages."""
        pages = []
        for category, entries in self._by_category.items():
            pages.append((
                self.paths.category_file_path(category),
                self.indexes.render_category(category, entries),
            ))

        years = sorted(self._by_year)
        for year in years:
            pages.append((
                self.paths.archive_file_path(year),
                self.indexes.render_archive(year, self._by_year[year]),
            ))

        pages.append((
            self.paths.landing_file_path(),
            self.indexes.render_landing(self.title, sorted(self._by_category), years),
        ))

        for path, html in pages:
            try:
                self._save(path, html)
                self._index_pages_written += 1
            except StoreError as e:
                self.logger.error(f"Unable to write index page {path}: {e}")
                self._errors.append({
                    'id': None,
                    'path': path,
                    'error': str(e),
                    'type': type(e).__name__
                })

    def _generate_error_log(self) -> None:
        """Generate errors.json file if there are errors."""
        if not self._errors:
            return

        try:
            path = self.store.write(
                'errors.json',
                json.dumps(self._errors, indent=2, ensure_ascii=False)
            )
        except StoreError as e:
            self.logger.error(f"Unable to write error log: {e}")
            return
        self.logger.info(f"Generated error log: {path}")
