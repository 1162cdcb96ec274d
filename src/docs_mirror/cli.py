from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from tqdm.contrib.logging import logging_redirect_tqdm

from . import __version__
from .adapters import ADAPTER_NAMES, adapter_aliases
from .crawl import (
    DEFAULT_CONCURRENCY,
    DEFAULT_MAX_DEPTH,
    DEFAULT_OUT_DIR,
    CrawlConfig,
    CrawlMode,
    crawl,
)
from .errors import InvalidUrlError, SitemapError


def _non_negative_int(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid depth: {raw!r}") from None
    if value < 0:
        raise argparse.ArgumentTypeError(
            f"invalid depth: {value} (must be non-negative integer)"
        )
    return value


def _positive_int(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid concurrency: {raw!r}") from None
    if value < 1:
        raise argparse.ArgumentTypeError(
            f"invalid concurrency: {value} (must be positive integer)"
        )
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docs-mirror",
        description="Mirror a documentation site as local Markdown files.",
    )
    parser.add_argument("url", help="Entry page of the documentation site")
    parser.add_argument(
        "--out",
        "-o",
        type=Path,
        default=DEFAULT_OUT_DIR,
        help=f"Output directory (default: {DEFAULT_OUT_DIR})",
    )
    parser.add_argument(
        "--depth",
        "-d",
        type=_non_negative_int,
        default=DEFAULT_MAX_DEPTH,
        help=f"Maximum link depth to follow (default: {DEFAULT_MAX_DEPTH})",
    )
    parser.add_argument(
        "--concurrency",
        "-c",
        type=_positive_int,
        default=DEFAULT_CONCURRENCY,
        help=f"Pages fetched in parallel (default: {DEFAULT_CONCURRENCY})",
    )
    parser.add_argument(
        "--use-sitemap",
        action="store_true",
        help="Discover pages from sitemap.xml instead of following links",
    )
    parser.add_argument(
        "--use-jina",
        action="store_true",
        help="Try the Jina Reader API before the headless browser",
    )
    parser.add_argument(
        "--use-md-endpoint",
        action="store_true",
        help="Try <page>.md on any host, not just known ones",
    )
    parser.add_argument(
        "--adapter",
        choices=sorted((*ADAPTER_NAMES, *adapter_aliases())),
        default=None,
        help="Use only this adapter (no fallback)",
    )
    parser.add_argument(
        "--numbered",
        action="store_true",
        help="Prefix filenames with a per-directory sequence number",
    )
    parser.add_argument(
        "--manifest",
        action="store_true",
        help="Write manifest.jsonl and manifest.json to the output directory",
    )
    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Disable the progress bar",
    )
    parser.add_argument("--verbose", "-v", action="store_true")
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
    )

    try:
        cfg = CrawlConfig(
            out_dir=args.out,
            mode=CrawlMode.SITEMAP if args.use_sitemap else CrawlMode.LINKS,
            max_depth=int(args.depth),
            concurrency=int(args.concurrency),
            numbered=bool(args.numbered),
            forced_adapter=args.adapter,
            use_md_endpoint=bool(args.use_md_endpoint),
            use_jina=bool(args.use_jina),
            verbose=bool(args.verbose),
            write_manifest=bool(args.manifest),
            progress=not bool(args.no_progress),
        )
        with logging_redirect_tqdm():
            result = asyncio.run(crawl(args.url, cfg))
    except (InvalidUrlError, SitemapError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    stats = result.stats
    print(
        "crawl: "
        f"saved={stats['saved']} blocked={stats['blocked']} "
        f"failed={stats['failed']}"
    )
    if stats["saved"] == 0 and stats["blocked"] > 0:
        print(
            "Every fetched page was blocked; nothing saved. "
            "Try --use-jina for sites with bot protection.",
            file=sys.stderr,
        )
        return 3
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
