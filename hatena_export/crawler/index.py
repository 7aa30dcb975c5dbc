"""
Index page rendering for categories, yearly archives and the landing page.
"""

from pathlib import Path
from typing import Iterable, List

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..blog.feed import Entry
from ..utils.paths import OutputPaths


class IndexRenderer:
    """
    Renders the aggregate pages of the exported site with jinja2.

    Links point at the public URL paths resolved by ``OutputPaths``.
    """

    def __init__(self, paths: OutputPaths):
        self.paths = paths
        self.env = Environment(
            loader=FileSystemLoader(str(Path(__file__).parent / "templates")),
            autoescape=select_autoescape(["html"]),
        )

    def _entry_links(self, entries: Iterable[Entry]) -> List[dict]:
        return [
            {"title": entry.title, "link": self.paths.entry_url_path(entry)}
            for entry in entries
        ]

    def render_category(self, category: str, entries: Iterable[Entry]) -> str:
        template = self.env.get_template("index.html")
        return template.render(
            title=f"Category: {category}",
            entries=self._entry_links(entries),
        )

    def render_archive(self, year: int, entries: Iterable[Entry]) -> str:
        template = self.env.get_template("index.html")
        return template.render(
            title=f"Entries from {year}-01-01 to 1 year",
            entries=self._entry_links(entries),
        )

    def render_landing(self, title: str, categories: Iterable[str], years: Iterable[int]) -> str:
        """
        Render the top page listing archive years and categories.

        Args:
            title: Page title (the blog name)
            categories: Category names, in display order
            years: Archive years, in display order

        Returns:
            HTML document
        """
        template = self.env.get_template("landing.html")
        return template.render(
            title=title,
            archives=[
                {"name": str(year), "path": self.paths.archive_url_path(year)}
                for year in years
            ],
            categories=[
                {"name": name, "path": self.paths.category_url_path(name)}
                for name in categories
            ],
        )
