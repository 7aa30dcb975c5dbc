"""
Blog entry records and AtomPub feed decoding.

One feed page holds a batch of entries plus navigation links (``first``,
``next``). Entries are immutable once decoded.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple
from urllib.parse import urlparse, parse_qs

from dateutil.parser import isoparse
from lxml import etree

from ..errors import DecodeError


ATOM_NS = "http://www.w3.org/2005/Atom"
APP_NS = "http://www.w3.org/2007/app"
HATENA_NS = "http://www.hatena.ne.jp/info/xmlns#"

NAMESPACES = {
    "atom": ATOM_NS,
    "app": APP_NS,
    "hatena": HATENA_NS,
}


@dataclass(frozen=True)
class Link:
    """A typed link of a feed or an entry."""

    rel: str
    href: str
    type: str = ""


@dataclass(frozen=True)
class Content:
    """An entry body tagged with its media type."""

    type: str
    text: str


@dataclass(frozen=True)
class Entry:
    """One blog post decoded from the feed."""

    id: str
    title: str
    author: str = ""
    edited: Optional[datetime] = None
    updated: Optional[datetime] = None
    published: Optional[datetime] = None
    categories: Tuple[str, ...] = ()
    draft: bool = False
    content: Content = Content(type="", text="")
    links: Tuple[Link, ...] = ()

    def link(self, rel: str) -> Optional[Link]:
        for link in self.links:
            if link.rel == rel:
                return link
        return None

    @property
    def alternate_url(self) -> str:
        """Canonical public URL of the entry, or an empty string."""
        link = self.link("alternate")
        return link.href if link else ""

    @property
    def path(self) -> str:
        """
        Relative path of the entry in the exported site.

        Taken from the path of the canonical URL, e.g.
        ``entry/2020/03/01/123456``.
        """
        alternate = self.alternate_url
        if alternate:
            path = urlparse(alternate).path.strip("/")
            if path:
                return path
        return "entry/" + self.id.rsplit("-", 1)[-1]


@dataclass
class FeedPage:
    """One page of the entry feed."""

    entries: List[Entry] = field(default_factory=list)
    links: List[Link] = field(default_factory=list)

    def link(self, rel: str) -> Optional[Link]:
        for link in self.links:
            if link.rel == rel:
                return link
        return None

    def next_page(self) -> Optional[str]:
        """
        Get the page token of the following page.

        The token is the ``next`` link with the ``first`` link's URL and
        ``?page=`` stripped from its front. Feeds without a ``first`` link
        do not paginate.

        Returns:
            Page token, or None on the last page
        """
        first = self.link("first")
        if first is None or not first.href:
            return None

        following = self.link("next")
        if following is None or not following.href:
            return None

        prefix = first.href.split("?", 1)[0] + "?page="
        if following.href.startswith(prefix):
            token = following.href[len(prefix):]
        else:
            token = parse_qs(urlparse(following.href).query).get("page", [""])[0]

        return token or None


def _text(element, path: str) -> str:
    found = element.find(path, NAMESPACES)
    if found is None or found.text is None:
        return ""
    return found.text


def _timestamp(element, path: str) -> Optional[datetime]:
    value = _text(element, path).strip()
    if not value:
        return None
    try:
        return isoparse(value)
    except ValueError as e:
        raise DecodeError(f"invalid timestamp {value!r} in <{path}>: {e}") from e


def _links(element) -> List[Link]:
    return [
        Link(
            rel=link.get("rel", ""),
            href=link.get("href", ""),
            type=link.get("type", ""),
        )
        for link in element.findall("atom:link", NAMESPACES)
    ]


def parse_entry(element) -> Entry:
    """
    Decode one ``<entry>`` element.

    Args:
        element: lxml element of the entry

    Returns:
        Decoded Entry
    """
    formatted = element.find("hatena:formatted-content", NAMESPACES)
    if formatted is not None:
        content = Content(type=formatted.get("type", ""), text=formatted.text or "")
    else:
        content = Content(type="", text="")

    return Entry(
        id=_text(element, "atom:id").strip(),
        title=_text(element, "atom:title"),
        author=_text(element, "atom:author/atom:name").strip(),
        edited=_timestamp(element, "app:edited"),
        updated=_timestamp(element, "atom:updated"),
        published=_timestamp(element, "atom:published"),
        categories=tuple(
            category.get("term", "")
            for category in element.findall("atom:category", NAMESPACES)
        ),
        draft=_text(element, "app:control/app:draft").strip() == "yes",
        content=content,
        links=tuple(_links(element)),
    )


def parse_feed(data: bytes) -> FeedPage:
    """
    Decode one page of the Atom entry feed.

    Args:
        data: Raw XML document

    Returns:
        FeedPage with entries in feed order

    Raises:
        DecodeError: If the document is not an Atom feed
    """
    try:
        root = etree.fromstring(data)
    except etree.XMLSyntaxError as e:
        raise DecodeError(f"malformed feed: {e}") from e

    if root.tag != f"{{{ATOM_NS}}}feed":
        raise DecodeError(f"unexpected root element {root.tag!r}")

    return FeedPage(
        entries=[parse_entry(e) for e in root.findall("atom:entry", NAMESPACES)],
        links=_links(root),
    )
