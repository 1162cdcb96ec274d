from __future__ import annotations

import asyncio
import os

from ..errors import AdapterError
from ..http_client import HttpClient
from .base import Adapter

JINA_API_URL = "https://r.jina.ai"
JINA_API_KEY_ENV = "JINA_API_KEY"


def _api_key() -> str | None:
    value = os.getenv(JINA_API_KEY_ENV)
    if value and value.strip():
        return value.strip()
    return None


class JinaReaderAdapter(Adapter):
    """Jina Reader API.

    Sends the page URL to an external service, so the chain only includes
    this adapter when the caller opts in.
    """

    name = "jina"

    def __init__(self, http: HttpClient) -> None:
        self.http = http

    def matches(self, url: str) -> bool:
        return True

    async def fetch(self, url: str) -> str:
        api_url = f"{JINA_API_URL}/{url}"
        headers = {"Accept": "text/markdown"}
        # Optional; raises the rate limit.
        api_key = _api_key()
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"

        res = await asyncio.to_thread(self.http.get, api_url, headers=headers)
        if not res.ok:
            raise AdapterError(f"Jina Reader error: {res.status_code}")

        markdown = res.text
        if not markdown.strip():
            raise AdapterError("Jina Reader returned empty content")
        return markdown
