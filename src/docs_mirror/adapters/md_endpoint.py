from __future__ import annotations

import asyncio
from urllib.parse import urlparse

from ..content import check_markdown_body, check_markdown_content_type
from ..errors import AdapterError
from ..http_client import HttpClient
from ..urls import host_matches, to_md_url
from .base import Adapter

# Stainless-powered docs that serve "<page>.md".
MD_ENDPOINT_DOMAINS: tuple[str, ...] = (
    "docs.anthropic.com",
    "docs.claude.com",
    "code.claude.com",
    "developers.openai.com",
)


def supports_md_endpoint(hostname: str) -> bool:
    return host_matches(hostname, MD_ENDPOINT_DOMAINS)


class MdEndpointAdapter(Adapter):
    name = "md-endpoint"

    def __init__(self, http: HttpClient, *, force: bool = False) -> None:
        self.http = http
        self.force = force

    def matches(self, url: str) -> bool:
        return self.force or supports_md_endpoint(urlparse(url).hostname or "")

    async def fetch(self, url: str) -> str:
        md_url = to_md_url(url)
        res = await asyncio.to_thread(
            self.http.get,
            md_url,
            headers={"Accept": "text/markdown,text/plain,*/*"},
        )
        if not res.ok:
            raise AdapterError(f"Fetch failed: {res.status_code} {md_url}")

        check_markdown_content_type(res.content_type)
        text = res.text
        check_markdown_body(text)
        return text
