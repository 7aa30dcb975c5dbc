"""Integration tests: feed pages through filters to files on disk."""

import asyncio
import json
from datetime import datetime, timezone

import pytest

from hatena_export.crawler.crawler import BlogCrawler, extract_image_urls, parse_document, render_document
from hatena_export.crawler.filters import TitleFilter, default_filters
from hatena_export.crawler.source import EntrySource
from hatena_export.errors import TransportError, UnsupportedContentType
from hatena_export.utils.paths import OutputPaths
from hatena_export.utils.store import DataStore


ENTRY_DIR = "entry/2020/03/01"


@pytest.fixture
def make_crawler(tmp_path, fake_client, fake_sleep):
    """Build a crawler over the given feed pages writing below ``tmp_path``."""

    def build(pages, downloader=None, cancel_event=None, write_indexes=True):
        fake_client.list_entries.side_effect = list(pages)
        source = EntrySource(
            fake_client, "alice", "alice.hatenablog.com",
            sleep=fake_sleep, cancel_event=cancel_event,
        )
        return BlogCrawler(
            source=source,
            store=DataStore(str(tmp_path)),
            paths=OutputPaths(),
            filters=default_filters(),
            downloader=downloader,
            title="Alice's diary",
            write_indexes=write_indexes,
            cancel_event=cancel_event,
        )

    return build


class TestParseDocument:
    def test_fragment_goes_into_body(self):
        document = parse_document("<p>a</p><p>b</p>")
        assert str(document) == "<html><head></head><body><p>a</p><p>b</p></body></html>"

    def test_empty_content(self):
        assert str(parse_document("")) == "<html><head></head><body></body></html>"

    def test_complete_document_gets_head(self):
        document = parse_document("<html><body><p>x</p></body></html>")
        assert str(document) == "<html><head></head><body><p>x</p></body></html>"

    def test_top_level_body_is_merged(self):
        document = parse_document("<body>X</body>")
        assert str(document) == "<html><head></head><body>X</body></html>"

    def test_top_level_head_and_body_are_merged(self):
        document = parse_document('<head><title>t</title></head><body class="b">X</body>')
        assert render_document(document) == (
            '<html><head><title>t</title></head><body class="b">X</body></html>'
        )

    def test_top_level_body_gets_one_heading(self, entry_factory):
        document = parse_document("<body>X</body>")
        TitleFilter().process(entry_factory(title="T"), document)

        assert len(document.find_all("body")) == 1
        assert len(document.find_all("h1")) == 1
        assert render_document(document) == (
            "<html><head><title>T</title></head><body><h1>T</h1>X</body></html>"
        )

    def test_render_keeps_declared_charset(self):
        document = parse_document('<html><head><meta charset="UTF-8"/></head><body>x</body></html>')
        assert '<meta charset="UTF-8"/>' in render_document(document)

    def test_extract_image_urls(self):
        document = parse_document('<img src="https://h/a.png"/><p><img src="https://h/b.png"/><img/></p>')
        assert extract_image_urls(document) == ["https://h/a.png", "https://h/b.png"]


class TestBlogCrawler:
    @pytest.mark.asyncio
    async def test_writes_entries_and_indexes(self, make_crawler, tmp_path, entry_factory, page_factory):
        pages = [
            page_factory([
                entry_factory(1, title="First", categories=("Games", "C++")),
            ], next_token="2"),
            page_factory([
                entry_factory(
                    2, title="Second", categories=("Games",),
                    published=datetime(2019, 12, 31, 23, 0, 0, tzinfo=timezone.utc),
                ),
            ]),
        ]
        crawler = make_crawler(pages)

        result = await crawler.crawl()

        assert result.entries_written == 2
        assert result.errors == []
        assert result.cancelled is False

        first = (tmp_path / ENTRY_DIR / "1" / "index.html").read_text(encoding="utf-8")
        assert "<title>First</title>" in first
        assert "<h1>First</h1><p>hello</p>" in first
        assert '<meta property="hatena:category" content="Games"/>' in first

        games = (tmp_path / "category" / "Games" / "index.html").read_text(encoding="utf-8")
        assert "Category: Games" in games
        assert games.index("/entry/2020/03/01/1/index.html") < games.index("/entry/2020/03/01/2/index.html")

        assert (tmp_path / "category" / "C%252B%252B" / "index.html").exists()
        assert (tmp_path / "archive" / "2019" / "index.html").exists()
        archive = (tmp_path / "archive" / "2020" / "index.html").read_text(encoding="utf-8")
        assert "Entries from 2020-01-01 to 1 year" in archive

        landing = (tmp_path / "index.html").read_text(encoding="utf-8")
        assert "Alice&#39;s diary" in landing
        assert landing.index("/archive/2019/index.html") < landing.index("/archive/2020/index.html")
        assert landing.index("/category/C%2B%2B/index.html") < landing.index("/category/Games/index.html")

        assert result.index_pages_written == 5
        assert not (tmp_path / "errors.json").exists()

    @pytest.mark.asyncio
    async def test_downloads_images(self, make_crawler, tmp_path, fake_downloader, entry_factory, page_factory):
        html = (
            '<p><img src="https://cdn.example.com/images/foo.png"/></p>'
            '<img src="https://cdn.example.com/images/foo.png"/>'
            '<img src="data:image/png;base64,AAAA"/>'
        )
        crawler = make_crawler([page_factory([entry_factory(1, html=html)])], downloader=fake_downloader)

        result = await crawler.crawl()

        fake_downloader.fetch.assert_awaited_once_with("https://cdn.example.com/images/foo.png")
        assert result.images_downloaded == 1
        assert (tmp_path / ENTRY_DIR / "1" / "foo.png").read_bytes() == b"\x89PNG"

        page = (tmp_path / ENTRY_DIR / "1" / "index.html").read_text(encoding="utf-8")
        assert 'src="foo.png" data-original-url="https://cdn.example.com/images/foo.png"' in page

    @pytest.mark.asyncio
    async def test_image_transport_error_is_fatal(self, make_crawler, fake_downloader, entry_factory, page_factory):
        fake_downloader.fetch.side_effect = TransportError("unable to download", status=404)
        html = '<img src="https://cdn.example.com/missing.png"/>'
        crawler = make_crawler([page_factory([entry_factory(1, html=html)])], downloader=fake_downloader)

        with pytest.raises(TransportError):
            await crawler.crawl()

    @pytest.mark.asyncio
    async def test_unsupported_content_type_aborts(self, make_crawler, tmp_path, entry_factory, page_factory):
        pages = [page_factory([
            entry_factory(1, content_type="text/x-markdown"),
            entry_factory(2),
        ])]
        crawler = make_crawler(pages)

        with pytest.raises(UnsupportedContentType, match="text/x-markdown"):
            await crawler.crawl()

        assert not (tmp_path / ENTRY_DIR / "2" / "index.html").exists()
        assert not (tmp_path / "index.html").exists()

    @pytest.mark.asyncio
    async def test_filter_error_skips_entry(self, make_crawler, tmp_path, entry_factory, page_factory):
        pages = [page_factory([
            entry_factory(1, html='<img src="http://[bad/foo.png"/>', categories=("Broken",)),
            entry_factory(2, categories=("Games",)),
        ])]
        crawler = make_crawler(pages)

        result = await crawler.crawl()

        assert result.entries_written == 1
        assert not (tmp_path / ENTRY_DIR / "1" / "index.html").exists()
        assert (tmp_path / ENTRY_DIR / "2" / "index.html").exists()
        assert not (tmp_path / "category" / "Broken").exists()

        assert len(result.errors) == 1
        error = result.errors[0]
        assert error["id"].endswith("-1")
        assert error["path"] == f"{ENTRY_DIR}/1/index.html"
        assert error["type"] == "FilterError"

        logged = json.loads((tmp_path / "errors.json").read_text(encoding="utf-8"))
        assert logged == result.errors

    @pytest.mark.asyncio
    async def test_store_error_skips_entry(self, make_crawler, tmp_path, entry_factory, page_factory):
        # A plain file where the first entry's directory should be
        blocked = tmp_path / ENTRY_DIR / "1"
        blocked.parent.mkdir(parents=True)
        blocked.write_text("in the way", encoding="utf-8")

        pages = [page_factory([
            entry_factory(1, categories=("Broken",)),
            entry_factory(2, categories=("Games",)),
        ])]
        crawler = make_crawler(pages)

        result = await crawler.crawl()

        assert result.entries_written == 1
        assert blocked.read_text(encoding="utf-8") == "in the way"
        assert (tmp_path / ENTRY_DIR / "2" / "index.html").exists()
        assert not (tmp_path / "category" / "Broken").exists()

        assert len(result.errors) == 1
        error = result.errors[0]
        assert error["id"].endswith("-1")
        assert error["path"] == f"{ENTRY_DIR}/1/index.html"
        assert error["type"] == "StoreError"

        logged = json.loads((tmp_path / "errors.json").read_text(encoding="utf-8"))
        assert logged == result.errors

    @pytest.mark.asyncio
    async def test_without_indexes(self, make_crawler, tmp_path, entry_factory, page_factory):
        crawler = make_crawler([page_factory([entry_factory(1, categories=("Games",))])], write_indexes=False)

        result = await crawler.crawl()

        assert result.written == [f"{ENTRY_DIR}/1/index.html"]
        assert not (tmp_path / "index.html").exists()

    @pytest.mark.asyncio
    async def test_cancelled_before_start(self, make_crawler, tmp_path, fake_client, entry_factory, page_factory):
        cancel_event = asyncio.Event()
        cancel_event.set()
        crawler = make_crawler([page_factory([entry_factory(1)])], cancel_event=cancel_event)

        result = await crawler.crawl()

        assert result.cancelled is True
        assert result.written == []
        fake_client.list_entries.assert_not_awaited()
        assert list(tmp_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_cancelled_between_pages(self, make_crawler, tmp_path, fake_sleep, entry_factory, page_factory):
        cancel_event = asyncio.Event()
        fake_sleep.side_effect = lambda delay: cancel_event.set()
        pages = [
            page_factory([entry_factory(1)], next_token="2"),
            page_factory([entry_factory(2)]),
        ]
        crawler = make_crawler(pages, cancel_event=cancel_event)

        result = await crawler.crawl()

        assert result.cancelled is True
        assert result.written == [f"{ENTRY_DIR}/1/index.html"]
        assert not (tmp_path / ENTRY_DIR / "2").exists()
        assert not (tmp_path / "index.html").exists()
