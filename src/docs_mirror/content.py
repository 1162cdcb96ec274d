from __future__ import annotations

import re
from typing import Final
from urllib.parse import urlparse

from .errors import AdapterError, BlockedContentError, BlockedReason

MIN_MARKDOWN_CHARS: Final = 10
SHORT_BODY_CHARS: Final = 100

_HTML_DOCUMENT_PREFIXES: Final = ("<!doctype", "<html", "<head", "<body")

_CLOUDFLARE_MARKERS: Final[tuple[str, ...]] = (
    "cf-browser-verification",
    "cf_chl_opt",
    "Cloudflare Ray ID",
)

_ACCESS_DENIED_MARKERS: Final[tuple[str, ...]] = (
    "Access Denied",
    "403 Forbidden",
    "401 Unauthorized",
)

_BOT_DETECTION_PATTERNS: Final[tuple[re.Pattern[str], ...]] = (
    # Only consulted for very short bodies: interstitials are a single line.
    re.compile(r"^Waiting for .+ to respond\.{0,3}$", re.IGNORECASE),
    re.compile(r"^Just a moment\.{0,3}$", re.IGNORECASE),
    re.compile(r"^Checking your browser\.{0,3}$", re.IGNORECASE),
    re.compile(r"^Please wait while we verify", re.IGNORECASE),
    re.compile(r"^Enable JavaScript and cookies to continue", re.IGNORECASE),
    re.compile(r"^Access denied", re.IGNORECASE),
    re.compile(r"^403 Forbidden", re.IGNORECASE),
    re.compile(r"^Attention Required!", re.IGNORECASE),
    re.compile(r"^Please complete the security check", re.IGNORECASE),
)


def looks_like_html(text: str) -> bool:
    head = text[:2048].lstrip().lower()
    return head.startswith(_HTML_DOCUMENT_PREFIXES)


def check_markdown_content_type(content_type: str) -> None:
    """Reject declared JSON/HTML responses from a Markdown endpoint."""

    ct = (content_type or "").lower()
    if "application/json" in ct:
        raise AdapterError("Received JSON instead of Markdown")
    if "text/html" in ct and "text/markdown" not in ct:
        raise AdapterError("Received HTML instead of Markdown (Content-Type)")


def check_markdown_body(text: str) -> None:
    """Reject bodies that are plainly not Markdown."""

    trimmed = text.strip()
    if looks_like_html(trimmed):
        raise AdapterError("Received HTML instead of Markdown")
    if trimmed.startswith("{") or trimmed.startswith("["):
        raise AdapterError("Received JSON instead of Markdown")
    if len(trimmed) < MIN_MARKDOWN_CHARS:
        raise AdapterError("Response too short to be valid Markdown")


def classify_blocked(markdown: str) -> BlockedReason | None:
    trimmed = markdown.strip()
    if not trimmed:
        return BlockedReason.EMPTY

    if any(marker in trimmed for marker in _CLOUDFLARE_MARKERS):
        return BlockedReason.CLOUDFLARE

    if any(marker in trimmed for marker in _ACCESS_DENIED_MARKERS):
        return BlockedReason.ACCESS_DENIED

    if len(trimmed) < SHORT_BODY_CHARS and any(
        p.search(trimmed) for p in _BOT_DETECTION_PATTERNS
    ):
        return BlockedReason.BOT_DETECTION

    return None


def validate_content(markdown: str, url: str) -> None:
    """Raise ``BlockedContentError`` unless the Markdown is genuine content."""

    reason = classify_blocked(markdown)
    if reason is None:
        return

    host = urlparse(url).hostname or url
    messages = {
        BlockedReason.EMPTY: f"Empty content extracted from {host}",
        BlockedReason.CLOUDFLARE: f"Cloudflare protection detected on {host}",
        BlockedReason.ACCESS_DENIED: f"Access denied on {host}",
        BlockedReason.BOT_DETECTION: f"Content blocked by {host} (bot detection)",
    }
    raise BlockedContentError(url, reason, messages.get(reason))
