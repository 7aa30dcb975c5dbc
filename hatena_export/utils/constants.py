"""
Shared constants for the blog exporter.

Contains common configuration values used across multiple modules.
"""

# Default user agent string for all HTTP requests
DEFAULT_USER_AGENT = "hatena-export/1.0"

# AtomPub endpoint of the blog service
FEED_BASE_URL = "https://blog.hatena.ne.jp"

# Default request timeout in seconds
DEFAULT_TIMEOUT = 30

# Delay between feed page requests in seconds
DEFAULT_PAGE_DELAY = 1.0

# Media type accepted for entry content
HTML_CONTENT_TYPE = "text/html"

# Base names longer than this many UTF-8 bytes are replaced by a SHA-1 fingerprint
MAX_BASENAME_LENGTH = 127

# Prefix of the property attribute on generated <meta> tags
META_PROPERTY_PREFIX = "hatena:"

# Class marking auto-linked keyword anchors
KEYWORD_CLASS = "keyword"

# Attribute keeping the original image URL after path rewriting
ORIGINAL_URL_ATTRIBUTE = "data-original-url"

# Attribute kept on <pre> blocks by the code filter
CODE_LANGUAGE_ATTRIBUTE = "data-lang"

# Parser used for entry documents (keeps the markup structure as written)
HTML_PARSER = "html.parser"
