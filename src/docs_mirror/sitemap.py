from __future__ import annotations

import asyncio
import html as html_lib
import logging
import re
from urllib.parse import urljoin, urlparse

from .errors import SitemapError
from .http_client import HttpClient
from .urls import normalize_page_url

logger = logging.getLogger(__name__)

SITEMAP_CANDIDATES: tuple[str, ...] = (
    "/sitemap.xml",
    "/sitemap_index.xml",
    "/sitemap-index.xml",
)

# Tag-scoped scanning; namespace-prefixed tags (<ns:url>) are not matched.
_INDEX_LOC_RE = re.compile(r"<sitemap>\s*<loc>([^<]+)</loc>")
_URL_LOC_RE = re.compile(r"<url>\s*<loc>([^<]+)</loc>")


def _loc_values(xml: str, regex: re.Pattern[str]) -> list[str]:
    out: list[str] = []
    for match in regex.finditer(xml):
        loc = html_lib.unescape(match.group(1)).strip()
        if urlparse(loc).scheme in {"http", "https"}:
            out.append(loc)
    return out


def extract_sitemap_index_urls(xml: str) -> list[str]:
    return _loc_values(xml, _INDEX_LOC_RE)


def extract_page_urls(xml: str) -> list[str]:
    return _loc_values(xml, _URL_LOC_RE)


def is_sitemap_index(xml: str) -> bool:
    return "<sitemapindex" in xml


def sitemaps_from_robots(raw_text: str) -> list[str]:
    """Return ``Sitemap:`` directives from a robots.txt body."""

    out: list[str] = []
    for line in raw_text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        key, _, value = line.partition(":")
        if key.strip().lower() == "sitemap" and value.strip():
            out.append(value.strip())
    return out


def filter_by_base_path(urls: list[str], base_path: str) -> list[str]:
    return [u for u in urls if urlparse(u).path.startswith(base_path)]


class SitemapReader:
    def __init__(self, http: HttpClient) -> None:
        self.http = http

    async def _get_text(self, url: str) -> str:
        res = await asyncio.to_thread(self.http.get, url)
        if not res.ok:
            raise SitemapError(f"Failed to fetch sitemap: {res.status_code} {url}")
        return res.text

    async def find_sitemap_url(self, entry_url: str) -> str | None:
        robots_url = urljoin(entry_url, "/robots.txt")
        try:
            res = await asyncio.to_thread(self.http.get, robots_url)
        except RuntimeError:
            res = None
        if res is not None and res.ok:
            declared = sitemaps_from_robots(res.text)
            if declared:
                return declared[0]

        for path in SITEMAP_CANDIDATES:
            candidate = urljoin(entry_url, path)
            if await asyncio.to_thread(self.http.exists, candidate):
                return candidate
        return None

    async def fetch_all_urls(self, sitemap_url: str) -> list[str]:
        """Flatten a sitemap (or sitemap index) into page URLs.

        The root document must be readable; failures on child sitemaps are
        logged and skipped.
        """

        try:
            xml = await self._get_text(sitemap_url)
        except SitemapError:
            raise
        except RuntimeError as e:
            raise SitemapError(str(e)) from e

        seen: set[str] = {sitemap_url}
        urls = await self._collect(xml, seen)

        ordered: list[str] = []
        unique: set[str] = set()
        for url in urls:
            normalized = normalize_page_url(url)
            if normalized in unique:
                continue
            unique.add(normalized)
            ordered.append(normalized)
        return ordered

    async def _collect(self, xml: str, seen: set[str]) -> list[str]:
        if not is_sitemap_index(xml):
            return extract_page_urls(xml)

        children = extract_sitemap_index_urls(xml)
        logger.info("Found sitemap index with %d sitemaps", len(children))

        urls: list[str] = []
        for child in children:
            if child in seen:
                continue
            seen.add(child)
            try:
                child_xml = await self._get_text(child)
            except RuntimeError as e:
                logger.warning("Failed to parse child sitemap %s: %s", child, e)
                continue
            urls.extend(await self._collect(child_xml, seen))
        return urls
