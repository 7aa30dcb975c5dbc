"""
Blog service access: feed records, AtomPub client and authenticators.
"""

from .feed import Entry, Link, Content, FeedPage, parse_feed
from .client import BlogClient
from .auth import OAuth1Auth, WSSEAuth

__all__ = [
    "Entry",
    "Link",
    "Content",
    "FeedPage",
    "parse_feed",
    "BlogClient",
    "OAuth1Auth",
    "WSSEAuth",
]
