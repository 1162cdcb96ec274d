"""Content adapters and the fallback chain that drives them.

Default order (first success wins):

1. ``md-endpoint``: ``<page>.md`` on allowlisted hosts, or any host when forced.
2. ``mdx``: raw Markdown/MDX siblings on allowlisted hosts.
3. ``jina``: external reader API, opt-in only.
4. ``playwright``: headless browser, matches every URL.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from ..browser import BrowserSession
from ..errors import AdapterChainError, BlockedContentError
from ..http_client import HttpClient
from .base import Adapter
from .jina import JinaReaderAdapter
from .md_endpoint import MdEndpointAdapter
from .mdx import MdxAdapter
from .rendering import RenderingAdapter

logger = logging.getLogger(__name__)

ADAPTER_NAMES: tuple[str, ...] = ("md-endpoint", "mdx", "jina", "playwright")

_ADAPTER_ALIASES = {
    "endpoint": "md-endpoint",
    "rendering": "playwright",
}

__all__ = [
    "ADAPTER_NAMES",
    "Adapter",
    "AdapterChain",
    "FetchedPage",
    "JinaReaderAdapter",
    "MdEndpointAdapter",
    "MdxAdapter",
    "RenderingAdapter",
    "adapter_aliases",
    "build_adapter_chain",
    "resolve_adapter_name",
]


def adapter_aliases() -> tuple[str, ...]:
    return tuple(_ADAPTER_ALIASES)


def resolve_adapter_name(name: str) -> str:
    key = (name or "").strip().lower()
    key = _ADAPTER_ALIASES.get(key, key)
    if key not in ADAPTER_NAMES:
        raise ValueError(
            f"Unknown adapter: {name} (expected one of {', '.join(ADAPTER_NAMES)})"
        )
    return key


@dataclass(frozen=True)
class FetchedPage:
    content: str
    adapter_name: str


class AdapterChain:
    def __init__(self, adapters: Sequence[Adapter], *, forced: bool = False) -> None:
        self.adapters = list(adapters)
        # A forced chain attempts its adapters whether or not they match.
        self.forced = forced

    def candidates(self, url: str) -> list[Adapter]:
        if self.forced:
            return list(self.adapters)
        return [a for a in self.adapters if a.matches(url)]

    async def fetch_markdown(self, url: str) -> FetchedPage:
        failures: list[tuple[str, Exception]] = []

        for adapter in self.candidates(url):
            logger.debug("Trying adapter: %s", adapter.name)
            try:
                content = await adapter.fetch(url)
            except Exception as e:
                failures.append((adapter.name, e))
                logger.debug("%s failed: %s", adapter.name, e)
                continue
            return FetchedPage(content=content, adapter_name=adapter.name)

        blocked = [e for _, e in failures if isinstance(e, BlockedContentError)]
        if blocked:
            summary = AdapterChainError(url, failures)
            raise BlockedContentError(url, blocked[-1].reason, str(summary))
        raise AdapterChainError(url, failures)


def build_adapter_chain(
    *,
    http: HttpClient,
    session: BrowserSession,
    forced_adapter: str | None = None,
    use_md_endpoint: bool = False,
    use_jina: bool = False,
) -> AdapterChain:
    if forced_adapter is not None:
        forced: dict[str, Adapter] = {
            "md-endpoint": MdEndpointAdapter(http, force=True),
            "mdx": MdxAdapter(http),
            "jina": JinaReaderAdapter(http),
            "playwright": RenderingAdapter(session),
        }
        adapter = forced[resolve_adapter_name(forced_adapter)]
        return AdapterChain([adapter], forced=True)

    adapters: list[Adapter] = [
        MdEndpointAdapter(http, force=use_md_endpoint),
        MdxAdapter(http),
    ]
    if use_jina:
        adapters.append(JinaReaderAdapter(http))
    adapters.append(RenderingAdapter(session))
    return AdapterChain(adapters)
