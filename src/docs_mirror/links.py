from __future__ import annotations

import re
from urllib.parse import urljoin, urlparse

from .urls import detect_base_path, is_non_document_url, normalize_page_url, origin_of

_MD_LINK_RE = re.compile(r"\[[^\]]+\]\(([^)]+)\)")
_HREF_RE = re.compile(r"""href=["']([^"']+)["']""")

# Compared against the lowercased target; "%3c" is an encoded autolink "<".
_SKIP_PREFIXES = ("mailto:", "javascript:", "#", "<", "%3c")

_ASSET_HOST_MARKERS = ("shields.io", "badge", "img.")


def _clean_target(raw: str) -> str:
    target = raw.split("#", 1)[0].strip()
    # [text](url "title")
    if " " in target:
        target = target.split(None, 1)[0]
    return target


def extract_links(
    content: str,
    base_url: str,
    *,
    base_path: str | None = None,
    include_external: bool = False,
) -> list[str]:
    """Collect documentation links from Markdown or HTML/JSX content.

    Returns normalized absolute URLs in order of first occurrence. Markdown
    inline links are scanned before ``href`` attributes.
    """

    base_path = base_path or detect_base_path(base_url)
    base_origin = origin_of(base_url)

    seen: set[str] = set()
    out: list[str] = []

    for regex in (_MD_LINK_RE, _HREF_RE):
        for match in regex.finditer(content):
            raw = _clean_target(match.group(1))
            if not raw or raw.lower().startswith(_SKIP_PREFIXES):
                continue

            try:
                absolute = urljoin(base_url, raw)
                parsed = urlparse(absolute)
            except ValueError:
                continue
            if parsed.scheme not in {"http", "https"} or not parsed.netloc:
                continue

            is_external = origin_of(absolute) != base_origin
            if is_external:
                if not include_external:
                    continue
                host = (parsed.hostname or "").lower()
                if any(marker in host for marker in _ASSET_HOST_MARKERS):
                    continue

            if base_path and not parsed.path.startswith(base_path):
                continue

            if is_non_document_url(absolute):
                continue

            normalized = normalize_page_url(absolute)
            if normalized in seen:
                continue
            seen.add(normalized)
            out.append(normalized)

    return out
