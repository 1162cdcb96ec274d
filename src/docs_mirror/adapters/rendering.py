from __future__ import annotations

import logging
from urllib.parse import urlparse

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ..browser import BrowserSession
from ..content import validate_content
from ..convert.html_to_md import html_to_markdown
from ..errors import AdapterError
from ..sites import (
    DEFAULT_SITE_CONFIG,
    SiteConfig,
    detect_framework,
    lookup,
    lookup_framework,
)
from .base import Adapter

logger = logging.getLogger(__name__)

NAVIGATION_TIMEOUT_MS = 30_000
SELECTOR_TIMEOUT_MS = 15_000
SELECTOR_GRACE_MS = 2_000


class RenderingAdapter(Adapter):
    """Headless-browser fallback for SPA and plain HTML documentation."""

    name = "playwright"

    def __init__(self, session: BrowserSession) -> None:
        self.session = session

    def matches(self, url: str) -> bool:
        return True

    async def _select_config(self, page, url: str) -> SiteConfig:
        host = urlparse(url).hostname or ""
        config = lookup(host)
        if config is not DEFAULT_SITE_CONFIG:
            return config

        detection = detect_framework(await page.content())
        if detection.is_confident:
            framework_config = lookup_framework(detection.framework)
            if framework_config is not None:
                logger.info(
                    "  [auto-detect] Framework: %s (confidence: %d%%)",
                    detection.framework,
                    round(detection.confidence * 100),
                )
                return framework_config
        return config

    async def _render(self, url: str) -> tuple[str, SiteConfig]:
        host = urlparse(url).hostname or ""
        initial = lookup(host)
        if initial.may_block_headless:
            logger.warning(
                "  [warning] %s may block headless browsers. "
                "If fetch fails, try --use-jina",
                host,
            )

        page = await self.session.new_page()
        try:
            await page.goto(
                url,
                wait_until=initial.wait_until or "domcontentloaded",
                timeout=NAVIGATION_TIMEOUT_MS,
            )
            config = await self._select_config(page, url)

            try:
                await page.wait_for_selector(
                    config.wait_for_selector, timeout=SELECTOR_TIMEOUT_MS
                )
            except PlaywrightTimeoutError:
                # SPAs may still render something usable.
                await page.wait_for_timeout(SELECTOR_GRACE_MS)

            return await page.content(), config
        finally:
            await page.close()

    async def fetch(self, url: str) -> str:
        try:
            html, config = await self._render(url)
        except PlaywrightError as e:
            raise AdapterError(f"Browser error: {e}") from e

        markdown = html_to_markdown(html, page_url=url, config=config)
        validate_content(markdown, url)
        return markdown
