"""
hatena-export - export a Hatena Blog into a static site.

This package pages through a blog's AtomPub entry feed, rewrites each
entry's HTML through a filter pipeline, downloads embedded images, and
writes a browsable file tree with category and archive index pages.
"""

__version__ = "1.0.0"
__author__ = "hatena-export contributors"
