from __future__ import annotations

import asyncio
from urllib.parse import urlparse

from ..errors import AdapterError
from ..http_client import HttpClient
from ..urls import host_matches, to_md_url
from .base import Adapter

# Sites that serve the page source as Markdown/MDX next to the page.
MDX_SITES: tuple[str, ...] = (
    "platform.claude.com",
    "docs.anthropic.com",
    "vercel.com",
    "nextjs.org",
)


class MdxAdapter(Adapter):
    name = "mdx"

    def __init__(self, http: HttpClient) -> None:
        self.http = http

    def matches(self, url: str) -> bool:
        return host_matches(urlparse(url).hostname or "", MDX_SITES)

    async def fetch(self, url: str) -> str:
        md_url = to_md_url(url)
        res = await asyncio.to_thread(
            self.http.get,
            md_url,
            headers={"Accept": "text/markdown,text/plain,text/html,*/*"},
        )
        if not res.ok:
            raise AdapterError(f"Fetch failed: {res.status_code} {md_url}")

        text = res.text
        if text.strip().lower().startswith("<!doctype"):
            raise AdapterError("HTML returned, not markdown")
        return text
