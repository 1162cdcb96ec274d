"""
Shared fakes for docs-mirror tests.

Nothing here touches the network or launches a browser.
"""
import asyncio
import time
from pathlib import Path

import pytest

from docs_mirror.adapters import FetchedPage
from docs_mirror.adapters.base import Adapter
from docs_mirror.crawl import CrawlConfig
from docs_mirror.errors import AdapterChainError, AdapterError
from docs_mirror.http_client import FetchResult


def make_result(url, body="", *, status=200, content_type="text/markdown"):
    """Build a FetchResult as HttpClient.get would return it."""
    return FetchResult(
        url=url,
        final_url=url,
        status_code=status,
        headers={"Content-Type": content_type},
        fetched_at=time.time(),
        body=body.encode("utf-8"),
    )


class FakeHttp:
    """Stands in for HttpClient; responses are keyed by exact URL."""

    def __init__(self, responses=None, existing=()):
        self.responses = dict(responses or {})
        self.existing = set(existing)
        self.calls = []
        self.head_calls = []

    def get(self, url, *, headers=None):
        self.calls.append((url, dict(headers or {})))
        response = self.responses.get(url)
        if isinstance(response, Exception):
            raise response
        if response is None:
            return make_result(url, "Not Found", status=404, content_type="text/plain")
        return response

    def exists(self, url):
        self.head_calls.append(url)
        return url in self.existing


class FakePage:
    """Minimal Playwright page."""

    def __init__(self, html="", *, goto_error=None, selector_error=None):
        self.html = html
        self.goto_error = goto_error
        self.selector_error = selector_error
        self.closed = False
        self.visited = []
        self.waited_ms = []

    async def goto(self, url, wait_until=None, timeout=None):
        self.visited.append((url, wait_until))
        if self.goto_error is not None:
            raise self.goto_error

    async def content(self):
        return self.html

    async def wait_for_selector(self, selector, timeout=None):
        if self.selector_error is not None:
            raise self.selector_error

    async def wait_for_timeout(self, ms):
        self.waited_ms.append(ms)

    async def close(self):
        self.closed = True


class FakeSession:
    """Records BrowserSession usage without launching Chromium."""

    def __init__(self, pages=()):
        self.pages = list(pages)
        self.opened = []
        self.close_calls = 0

    async def new_page(self):
        page = self.pages.pop(0) if self.pages else FakePage()
        self.opened.append(page)
        return page

    async def close(self):
        self.close_calls += 1


class FakeAdapter(Adapter):
    def __init__(self, name, *, result=None, error=None, matches=True):
        self.name = name
        self.result = result
        self.error = error
        self._matches = matches
        self.calls = []

    def matches(self, url):
        return self._matches

    async def fetch(self, url):
        self.calls.append(url)
        if self.error is not None:
            raise self.error
        return self.result


class FakeChain:
    """Adapter chain over a fixed site: url -> Markdown or an exception."""

    def __init__(self, pages, adapter_name="fake"):
        self.pages = dict(pages)
        self.adapter_name = adapter_name
        self.fetched = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def fetch_markdown(self, url):
        self.fetched.append(url)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            page = self.pages.get(url)
            if isinstance(page, BaseException):
                raise page
            if page is None:
                raise AdapterChainError(url, [("fake", AdapterError("404"))])
            return FetchedPage(content=page, adapter_name=self.adapter_name)
        finally:
            self.in_flight -= 1


class FakeSitemapReader:
    def __init__(self, sitemap_url=None, urls=(), error=None):
        self.sitemap_url = sitemap_url
        self.urls = list(urls)
        self.error = error

    async def find_sitemap_url(self, entry_url):
        return self.sitemap_url

    async def fetch_all_urls(self, sitemap_url):
        if self.error is not None:
            raise self.error
        return list(self.urls)


@pytest.fixture
def make_config(tmp_path):
    """CrawlConfig factory writing under tmp_path."""

    def _make(**overrides):
        overrides.setdefault("out_dir", Path(tmp_path) / "out")
        return CrawlConfig(**overrides)

    return _make
