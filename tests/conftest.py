"""Shared test fixtures for hatena-export."""

from datetime import datetime, timezone

import pytest
from unittest.mock import AsyncMock, MagicMock

from hatena_export.blog.feed import Content, Entry, FeedPage, Link


FEED_URL = "https://blog.hatena.ne.jp/alice/alice.hatenablog.com/atom/entry"

SAMPLE_FEED = """<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom"
      xmlns:app="http://www.w3.org/2007/app">
  <link rel="first" href="https://blog.hatena.ne.jp/alice/alice.hatenablog.com/atom/entry" />
  <link rel="next" href="https://blog.hatena.ne.jp/alice/alice.hatenablog.com/atom/entry?page=1377575547" />
  <title>Alice's diary</title>
  <entry>
    <id>tag:blog.hatena.ne.jp,2013:blog-alice-20000000000000-3000000000000000</id>
    <link rel="edit" href="https://blog.hatena.ne.jp/alice/alice.hatenablog.com/atom/entry/3000000000000000"/>
    <link rel="alternate" type="text/html" href="http://alice.hatenablog.com/entry/2013/09/02/112823"/>
    <author><name>alice</name></author>
    <title>Hello, world</title>
    <updated>2013-09-02T11:28:23+09:00</updated>
    <published>2013-09-02T11:28:23+09:00</published>
    <app:edited>2013-09-03T08:00:00+09:00</app:edited>
    <summary type="text">hello</summary>
    <content type="text/x-hatena-syntax">hello</content>
    <hatena:formatted-content type="text/html" xmlns:hatena="http://www.hatena.ne.jp/info/xmlns#">&lt;p&gt;hello&lt;/p&gt;</hatena:formatted-content>
    <category term="Games" />
    <category term="Hobby" />
    <app:control>
      <app:draft>no</app:draft>
    </app:control>
  </entry>
  <entry>
    <id>tag:blog.hatena.ne.jp,2013:blog-alice-20000000000000-3000000000000001</id>
    <author><name>alice</name></author>
    <title>Draft</title>
    <updated>2013-09-04T10:00:00Z</updated>
    <published>2013-09-04T10:00:00Z</published>
    <app:edited>2013-09-04T10:00:00Z</app:edited>
    <hatena:formatted-content type="text/html" xmlns:hatena="http://www.hatena.ne.jp/info/xmlns#"></hatena:formatted-content>
    <app:control>
      <app:draft>yes</app:draft>
    </app:control>
  </entry>
</feed>
"""


def make_entry(
    number: int = 123456,
    title: str = "Hello",
    html: str = "<p>hello</p>",
    content_type: str = "text/html",
    categories=(),
    published: datetime = datetime(2020, 3, 1, 12, 34, 56, tzinfo=timezone.utc),
    draft: bool = False,
) -> Entry:
    """Build an entry published at http://alice.hatenablog.com/entry/2020/03/01/<number>."""
    return Entry(
        id=f"tag:blog.hatena.ne.jp,2013:blog-alice-20000000000000-{number}",
        title=title,
        author="alice",
        edited=published,
        updated=published,
        published=published,
        categories=tuple(categories),
        draft=draft,
        content=Content(type=content_type, text=html),
        links=(
            Link(
                rel="alternate",
                href=f"http://alice.hatenablog.com/entry/2020/03/01/{number}",
                type="text/html",
            ),
        ),
    )


def make_page(entries, next_token=None) -> FeedPage:
    """Build a feed page linking to ``next_token`` when given."""
    links = [Link(rel="first", href=FEED_URL)]
    if next_token is not None:
        links.append(Link(rel="next", href=f"{FEED_URL}?page={next_token}"))
    return FeedPage(entries=list(entries), links=links)


@pytest.fixture
def sample_entry():
    return make_entry(
        title="Hello",
        categories=("Games", "Hobby"),
        published=datetime(2020, 2, 14, 11, 22, 33, tzinfo=timezone.utc),
    )


@pytest.fixture
def sample_feed():
    return SAMPLE_FEED.encode("utf-8")


@pytest.fixture
def fake_client():
    """A feed client whose pages are set by the test through ``list_entries.side_effect``."""
    client = MagicMock()
    client.list_entries = AsyncMock()
    return client


@pytest.fixture
def fake_sleep():
    return AsyncMock(return_value=None)


@pytest.fixture
def fake_downloader():
    downloader = MagicMock()
    downloader.fetch = AsyncMock(return_value=b"\x89PNG")
    return downloader


@pytest.fixture
def entry_factory():
    return make_entry


@pytest.fixture
def page_factory():
    return make_page
