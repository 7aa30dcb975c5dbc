"""
Document filters applied to every exported entry.

A filter rewrites one parsed entry document in place. Filters are applied
in registration order and each one sees the tree as the previous filters
left it. A filter signals failure by raising ``FilterError``.
"""

from datetime import datetime
from typing import List, Optional, Sequence

from bs4 import BeautifulSoup, NavigableString, Tag

from .walker import Transformer
from ..blog.feed import Entry
from ..errors import FilterError
from ..utils.constants import (
    CODE_LANGUAGE_ATTRIBUTE,
    KEYWORD_CLASS,
    META_PROPERTY_PREFIX,
    ORIGINAL_URL_ATTRIBUTE,
)
from ..utils.paths import image_basename, is_remote_url


def make_meta(document: BeautifulSoup, prop: str, content: str) -> Tag:
    """
    Create ``<meta property="hatena:<prop>" content="<content>"/>``.

    Args:
        document: Document the tag will belong to
        prop: Property name without prefix
        content: Property value

    Returns:
        New meta tag
    """
    return document.new_tag(
        "meta",
        attrs={"property": META_PROPERTY_PREFIX + prop, "content": content},
    )


def format_timestamp(value: Optional[datetime]) -> str:
    """Format a timestamp as RFC 3339, using ``Z`` for UTC."""
    if value is None:
        return ""
    text = value.isoformat(timespec="seconds")
    if text.endswith("+00:00"):
        text = text[:-6] + "Z"
    return text


def is_element(node, name: str) -> bool:
    return isinstance(node, Tag) and node.name == name


class Filter:
    """Base class of document filters."""

    def process(self, entry: Entry, document: BeautifulSoup) -> None:
        """
        Rewrite the document of an entry in place.

        Args:
            entry: Entry the document belongs to
            document: Parsed document

        Raises:
            FilterError: If the document cannot be rewritten
        """
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class HeadFilter(Filter):
    """Appends the nodes built by ``head_nodes()`` to every ``<head>``."""

    def head_nodes(self, entry: Entry, document: BeautifulSoup) -> List[Tag]:
        raise NotImplementedError

    def process(self, entry: Entry, document: BeautifulSoup) -> None:
        def append(node):
            if is_element(node, "head"):
                for tag in self.head_nodes(entry, document):
                    node.append(tag)
            return node

        Transformer(append).transform(document)


class TitleFilter(Filter):
    """
    Adds the entry title as ``<title>`` in the head and ``<h1>`` in the body.
    """

    def process(self, entry: Entry, document: BeautifulSoup) -> None:
        def element(name: str) -> Tag:
            tag = document.new_tag(name)
            tag.string = entry.title
            return tag

        def insert_title(node):
            if is_element(node, "head"):
                node.insert(0, element("title"))
            elif is_element(node, "body"):
                node.insert(0, element("h1"))
            return node

        Transformer(insert_title).transform(document)


class KeywordFilter(Filter):
    """
    Unlinks auto-linked keywords, keeping their label.

    ``<a class="keyword">golang</a>`` becomes the text ``golang``; an empty
    keyword anchor is dropped.
    """

    def process(self, entry: Entry, document: BeautifulSoup) -> None:
        def unlink(node):
            if not is_element(node, "a"):
                return node
            if KEYWORD_CLASS not in node.get_attribute_list("class"):
                return node
            if not node.contents:
                return None
            first = node.contents[0]
            text = first.get_text() if isinstance(first, Tag) else str(first)
            return NavigableString(text)

        Transformer(unlink).transform(document)


class CategoryFilter(HeadFilter):
    """
    Adds the categories of the entry to the head::

        <meta property="hatena:category" content="Games"/>
        <meta property="hatena:category" content="Hobby"/>
    """

    def head_nodes(self, entry: Entry, document: BeautifulSoup) -> List[Tag]:
        return [make_meta(document, "category", c) for c in entry.categories]


class ImagePathFilter(Filter):
    """
    Points images at their local copy next to the page.

    ``<img src="https://cdn.example.com/2020/03/01/foobar.png"/>`` becomes
    ``<img src="foobar.png" data-original-url="https://cdn.example.com/..."/>``.
    Only http(s) sources are rewritten. Relative and inline (``data:``)
    sources are left alone, so running it twice is harmless.
    """

    def process(self, entry: Entry, document: BeautifulSoup) -> None:
        def relocate(node):
            if not is_element(node, "img"):
                return node
            src = node.get("src")
            if not src:
                return node
            try:
                remote = is_remote_url(src)
                basename = image_basename(src)
            except ValueError as e:
                raise FilterError(f"invalid image URL {src!r}: {e}") from e
            if remote and basename:
                node["src"] = basename
                if ORIGINAL_URL_ATTRIBUTE not in node.attrs:
                    node[ORIGINAL_URL_ATTRIBUTE] = src
            return node

        Transformer(relocate).transform(document)


class CodeFilter(Filter):
    """
    Turns syntax-highlighted code back into plain text.

    Highlighting ``<span>`` elements inside ``<pre>`` are replaced by their
    text, and ``<pre>`` keeps only its language attribute.
    """

    def process(self, entry: Entry, document: BeautifulSoup) -> None:
        def plain(node):
            if is_element(node, "pre"):
                node.attrs = {
                    key: value for key, value in node.attrs.items()
                    if key == CODE_LANGUAGE_ATTRIBUTE
                }
            elif is_element(node, "span") and node.find_parent("pre") is not None:
                text = node.get_text()
                return NavigableString(text) if text else None
            return node

        Transformer(plain).transform(document)


class DraftFilter(HeadFilter):
    """Records whether the entry is a draft."""

    def head_nodes(self, entry: Entry, document: BeautifulSoup) -> List[Tag]:
        return [make_meta(document, "draft", "yes" if entry.draft else "no")]


class DateTimeFilter(HeadFilter):
    """Records when the entry was edited, updated and published."""

    def head_nodes(self, entry: Entry, document: BeautifulSoup) -> List[Tag]:
        return [
            make_meta(document, "edited", format_timestamp(entry.edited)),
            make_meta(document, "updated", format_timestamp(entry.updated)),
            make_meta(document, "published", format_timestamp(entry.published)),
        ]


class LinkFilter(HeadFilter):
    """Records the canonical URL of the entry."""

    def head_nodes(self, entry: Entry, document: BeautifulSoup) -> List[Tag]:
        return [make_meta(document, "alternate", entry.alternate_url)]


class EncodingFilter(HeadFilter):
    """Declares the UTF-8 charset."""

    def head_nodes(self, entry: Entry, document: BeautifulSoup) -> List[Tag]:
        return [document.new_tag("meta", attrs={"charset": "UTF-8"})]


class AssetFilter(HeadFilter):
    """Links stylesheets and scripts from the head, in configured order."""

    def __init__(
        self,
        css_paths: Sequence[str] = (),
        javascript_paths: Sequence[str] = ()
    ):
        self.css_paths = list(css_paths)
        self.javascript_paths = list(javascript_paths)

    def head_nodes(self, entry: Entry, document: BeautifulSoup) -> List[Tag]:
        nodes = [
            document.new_tag(
                "link",
                attrs={"rel": "stylesheet", "type": "text/css", "href": path},
            )
            for path in self.css_paths
        ]
        nodes += [
            document.new_tag("script", attrs={"src": path})
            for path in self.javascript_paths
        ]
        return nodes

    def __repr__(self) -> str:
        return f"AssetFilter(css_paths={self.css_paths!r}, javascript_paths={self.javascript_paths!r})"


def default_filters(
    css_paths: Sequence[str] = (),
    javascript_paths: Sequence[str] = ()
) -> List[Filter]:
    """
    Build the standard filter pipeline in registration order.

    Args:
        css_paths: Stylesheets to link from every page
        javascript_paths: Scripts to load from every page

    Returns:
        Ordered list of filters
    """
    filters: List[Filter] = [
        TitleFilter(),
        KeywordFilter(),
        CategoryFilter(),
        ImagePathFilter(),
        CodeFilter(),
        DraftFilter(),
        DateTimeFilter(),
        LinkFilter(),
        EncodingFilter(),
    ]
    if css_paths or javascript_paths:
        filters.append(AssetFilter(css_paths, javascript_paths))
    return filters
