"""docs-mirror core library.

This package crawls a documentation site, converts each rendered page into
Markdown, and mirrors the site's URL hierarchy into a local file tree.

Layout:
- ``crawl`` owns the frontier and the per-page pipeline.
- ``adapters`` turn a URL into Markdown (direct endpoints, reader API, or a
  headless browser as the universal fallback).
- ``urls``, ``links`` and ``sitemap`` discover and map URLs.
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
