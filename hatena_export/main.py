#!/usr/bin/env python3
"""
hatena-export - export a Hatena Blog into a static site.

Usage:
    python -m hatena_export.main --hatena-id alice --blog-id alice.hatenablog.com --out-dir ./site

Credentials are read from the environment:
    oauth1: OAUTH_CONSUMER_KEY, OAUTH_CONSUMER_SECRET, OAUTH_TOKEN, OAUTH_TOKEN_SECRET
    wsse:   WSSE_USERNAME, WSSE_PASSWORD
"""

import argparse
import asyncio
import logging
import os
import signal
import sys
from typing import Mapping, Optional, Sequence

from hatena_export.blog import BlogClient, OAuth1Auth, WSSEAuth
from hatena_export.crawler import BlogCrawler, EntrySource, ImageDownloader, default_filters
from hatena_export.errors import ExportError
from hatena_export.utils.constants import DEFAULT_PAGE_DELAY
from hatena_export.utils.log import (
    setup_logger,
    print_status,
    print_success,
    print_error,
    print_info
)
from hatena_export.utils.paths import OutputPaths
from hatena_export.utils.store import DataStore


OAUTH1_VARIABLES = (
    "OAUTH_CONSUMER_KEY",
    "OAUTH_CONSUMER_SECRET",
    "OAUTH_TOKEN",
    "OAUTH_TOKEN_SECRET",
)
WSSE_VARIABLES = ("WSSE_USERNAME", "WSSE_PASSWORD")


def parse_arguments(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog='hatena-export',
        description='Export a Hatena Blog into a static site',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    %(prog)s --hatena-id alice --blog-id alice.hatenablog.com --out-dir ./site
    %(prog)s --hatena-id alice --blog-id alice.hatenablog.com --auth wsse --url-prefix blog
    %(prog)s --hatena-id alice --blog-id alice.hatenablog.com --css /theme.css --no-images
        """
    )

    parser.add_argument(
        '--hatena-id',
        type=str,
        required=True,
        help='Hatena account id (blog owner)'
    )

    parser.add_argument(
        '--blog-id',
        type=str,
        required=True,
        help='Hatena blog id (e.g., alice.hatenablog.com)'
    )

    parser.add_argument(
        '--out-dir', '-o',
        type=str,
        default='./site',
        help='Directory where the site is written (default: ./site)'
    )

    parser.add_argument(
        '--url-prefix',
        type=str,
        default='',
        help='Path prefix of the published site (default: none)'
    )

    parser.add_argument(
        '--auth',
        choices=['oauth1', 'wsse'],
        default='oauth1',
        help='Authorization mode (default: oauth1)'
    )

    parser.add_argument(
        '--title',
        type=str,
        default=None,
        help='Title of the landing page (default: the blog id)'
    )

    parser.add_argument(
        '--css',
        action='append',
        default=[],
        metavar='PATH',
        help='Stylesheet to link from every entry page (repeatable)'
    )

    parser.add_argument(
        '--js',
        action='append',
        default=[],
        metavar='PATH',
        help='Script to load from every entry page (repeatable)'
    )

    parser.add_argument(
        '--delay',
        type=float,
        default=DEFAULT_PAGE_DELAY,
        help=f'Delay between feed page requests in seconds (default: {DEFAULT_PAGE_DELAY})'
    )

    parser.add_argument(
        '--no-images',
        action='store_true',
        help='Do not download images embedded in entries'
    )

    parser.add_argument(
        '--no-index',
        action='store_true',
        help='Do not write category, archive and landing pages'
    )

    parser.add_argument(
        '--log-file',
        type=str,
        default=None,
        help='Also write the log to this file'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose logging'
    )

    parser.add_argument(
        '--quiet', '-q',
        action='store_true',
        help='Suppress output except errors'
    )

    return parser.parse_args(argv)


def load_authenticator(mode: str, environ: Mapping[str, str] = os.environ):
    """
    Build the request authenticator from environment variables.

    Args:
        mode: 'oauth1' or 'wsse'
        environ: Environment to read credentials from

    Returns:
        OAuth1Auth or WSSEAuth instance

    Raises:
        ValueError: If the mode is unknown or a credential is missing
    """
    if mode == 'oauth1':
        names = OAUTH1_VARIABLES
    elif mode == 'wsse':
        names = WSSE_VARIABLES
    else:
        raise ValueError(f"unknown authorization mode {mode!r}")

    for name in names:
        if not environ.get(name):
            raise ValueError(f"{name} not set")

    if mode == 'oauth1':
        return OAuth1Auth(*(environ[name] for name in names))
    return WSSEAuth(*(environ[name] for name in names))


def print_summary(result) -> None:
    """
    Print the export summary.

    Args:
        result: CrawlResult object
    """
    print("\n" + "=" * 60)
    print_success("EXPORT SUMMARY")
    print("=" * 60)
    print(f"  Entries written:   {result.entries_written}")
    print(f"  Images downloaded: {result.images_downloaded}")
    print(f"  Index pages:       {result.index_pages_written}")
    print(f"  Errors:            {len(result.errors)}")
    print(f"  Duration:          {result.duration_seconds:.1f} seconds")
    if result.cancelled:
        print("  Cancelled before completion")
    print("=" * 60 + "\n")


async def export(args: argparse.Namespace, auth) -> int:
    """Run one export with the given arguments."""
    cancel_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, cancel_event.set)
    except (NotImplementedError, RuntimeError):
        # Not supported on this platform; Ctrl-C raises KeyboardInterrupt instead
        pass

    downloader = None if args.no_images else ImageDownloader()

    async with BlogClient(auth=auth) as client:
        source = EntrySource(
            client,
            args.hatena_id,
            args.blog_id,
            delay=args.delay,
            cancel_event=cancel_event
        )
        crawler = BlogCrawler(
            source=source,
            store=DataStore(args.out_dir),
            paths=OutputPaths(args.url_prefix),
            filters=default_filters(args.css, args.js),
            downloader=downloader,
            title=args.title or args.blog_id,
            write_indexes=not args.no_index,
            cancel_event=cancel_event
        )
        try:
            result = await crawler.crawl()
        finally:
            if downloader is not None:
                await downloader.stop()

    if not args.quiet:
        print_summary(result)

    print_success(f"Blog exported to: {os.path.abspath(args.out_dir)}")
    return 1 if result.errors else 0


async def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Main entry point for the exporter.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    args = parse_arguments(argv)

    log_level = logging.DEBUG if args.verbose else (logging.WARNING if args.quiet else logging.INFO)
    setup_logger(level=log_level, log_file=args.log_file)

    if not args.quiet:
        print_status("hatena-export: Hatena Blog to static site", "bold cyan")

    try:
        auth = load_authenticator(args.auth)

        if not args.quiet:
            print_info(f"Blog: {args.hatena_id}/{args.blog_id}")
            print_info(f"Output: {args.out_dir}")

        return await export(args, auth)

    except KeyboardInterrupt:
        print_error("\nExport interrupted by user")
        return 1
    except ValueError as e:
        print_error(f"Invalid input: {e}")
        return 1
    except ExportError as e:
        print_error(f"Export failed: {e}")
        return 1
    except Exception as e:
        print_error(f"Error: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


def run() -> None:
    """Entry point wrapper for running as module."""
    sys.exit(asyncio.run(main()))


if __name__ == '__main__':
    run()
