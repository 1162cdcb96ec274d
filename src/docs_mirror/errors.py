from __future__ import annotations

from enum import Enum


class BlockedReason(str, Enum):
    EMPTY = "empty"
    CLOUDFLARE = "cloudflare"
    BOT_DETECTION = "bot-detection"
    ACCESS_DENIED = "access-denied"
    UNKNOWN = "unknown"


_SUGGESTIONS: dict[BlockedReason, str] = {
    BlockedReason.CLOUDFLARE: (
        "Try --use-jina for sites with Cloudflare protection."
    ),
    BlockedReason.BOT_DETECTION: "Try --use-jina for sites with bot protection.",
    BlockedReason.EMPTY: "The page may require JavaScript or have no content.",
    BlockedReason.ACCESS_DENIED: (
        "The site may require authentication or block automated access."
    ),
}


def suggestion_for(reason: BlockedReason | str) -> str:
    return _SUGGESTIONS.get(
        BlockedReason(reason),
        "Try --use-jina or check if the site is accessible.",
    )


class InvalidUrlError(ValueError):
    """The entry URL cannot be crawled (unparsable or unsupported scheme)."""


class SitemapError(RuntimeError):
    """The root sitemap could not be read."""


class SitemapNotFoundError(SitemapError):
    pass


class PathTraversalError(ValueError):
    pass


class AdapterError(RuntimeError):
    """A single adapter rejected a response or could not fetch it."""


class BlockedContentError(Exception):
    """The fetch succeeded but returned a challenge page or no content."""

    def __init__(
        self,
        url: str,
        reason: BlockedReason,
        message: str | None = None,
    ) -> None:
        self.url = url
        self.reason = BlockedReason(reason)
        super().__init__(message or f"Content blocked: {url} ({self.reason.value})")

    @property
    def suggestion(self) -> str:
        return suggestion_for(self.reason)


class AdapterChainError(RuntimeError):
    """Every attempted adapter failed for a URL."""

    def __init__(self, url: str, failures: list[tuple[str, Exception]]) -> None:
        self.url = url
        self.failures = list(failures)
        lines = "\n".join(f"{name}: {err}" for name, err in self.failures)
        super().__init__(f"All adapters failed for {url}:\n{lines}")
