from __future__ import annotations

from urllib.parse import ParseResult, urlparse, urlunparse

from .errors import InvalidUrlError

DOC_ROOT_SEGMENTS: tuple[str, ...] = (
    "docs",
    "documentation",
    "guide",
    "guides",
    "api",
    "reference",
)


def normalize_url(raw_url: str, *, keep_query: bool = True) -> str:
    """Normalize a URL for de-duplication.

    - Lowercases scheme + hostname.
    - Strips fragments (and the query unless ``keep_query``).
    - An empty path becomes ``/``.
    """

    parsed: ParseResult = urlparse(raw_url.strip())
    parsed = parsed._replace(
        scheme=(parsed.scheme or "").lower(),
        netloc=(parsed.netloc or "").lower(),
        path=parsed.path or "/",
        params="",
        query=parsed.query if keep_query else "",
        fragment="",
    )
    return urlunparse(parsed)


def normalize_page_url(raw_url: str) -> str:
    return normalize_url(raw_url, keep_query=False)


def validate_url(raw_url: str) -> str:
    """Return the page-normalized URL or raise ``InvalidUrlError``."""

    try:
        parsed = urlparse(raw_url.strip())
    except ValueError as e:
        raise InvalidUrlError(f"Invalid URL: {raw_url}") from e

    if not parsed.scheme or not parsed.netloc:
        raise InvalidUrlError(f"Invalid URL: {raw_url}")
    if parsed.scheme.lower() not in {"http", "https"}:
        raise InvalidUrlError(
            f"Unsupported URL scheme: {parsed.scheme} (only http/https allowed)"
        )
    return normalize_page_url(raw_url)


def origin_of(url: str) -> str:
    parsed = urlparse(url)
    return f"{parsed.scheme.lower()}://{parsed.netloc.lower()}"


def _path_segments(url: str) -> list[str]:
    return [part for part in urlparse(url).path.split("/") if part]


def to_md_url(url: str) -> str:
    """Map a page URL to its raw Markdown sibling (``/a/b`` -> ``/a/b.md``)."""

    parsed = urlparse(url)
    path = parsed.path
    if path.endswith(".md") or path.endswith(".mdx"):
        return url
    path = path.rstrip("/") + ".md"
    return urlunparse(parsed._replace(path=path))


def detect_base_path(url: str) -> str | None:
    """``https://x.com/docs/getting-started`` -> ``/docs/``."""

    for part in _path_segments(url):
        if part.lower() in DOC_ROOT_SEGMENTS:
            return f"/{part}/"
    return None


def to_local_path(url: str) -> str:
    """Map a page URL to a relative Markdown path under the docs root.

    ``https://x.com/docs/api/overview`` -> ``api/overview.md``
    ``https://x.com/docs/`` -> ``index.md``
    """

    parts = _path_segments(url)

    start = 0
    for i, part in enumerate(parts):
        if part.lower() in DOC_ROOT_SEGMENTS:
            start = i + 1
            break

    rest = parts[start:]
    if not rest:
        return "index.md"

    file_name = f"{rest[-1]}.md"
    directory = "/".join(rest[:-1])
    return f"{directory}/{file_name}" if directory else file_name


def directory_of(path: str) -> str:
    """``guides/config.md`` -> ``guides``; ``index.md`` -> ``""``."""

    directory, sep, _name = path.rpartition("/")
    return directory if sep else ""


def add_numbered_prefix(path: str, num: int, digits: int = 2) -> str:
    """``add_numbered_prefix("guides/config.md", 3)`` -> ``guides/03-config.md``."""

    prefix = str(num).zfill(digits)
    directory, sep, name = path.rpartition("/")
    if not sep:
        return f"{prefix}-{path}"
    return f"{directory}/{prefix}-{name}"


def host_matches(host: str, domains: tuple[str, ...]) -> bool:
    host = (host or "").lower()
    for domain in domains:
        domain = domain.lower().lstrip(".")
        if host == domain or host.endswith("." + domain):
            return True
    return False


_NON_DOCUMENT_EXTS = {
    ".css",
    ".js",
    ".mjs",
    ".map",
    ".png",
    ".jpg",
    ".jpeg",
    ".gif",
    ".webp",
    ".svg",
    ".ico",
    ".woff",
    ".woff2",
    ".ttf",
    ".otf",
    ".eot",
    ".pdf",
    ".zip",
    ".tar",
    ".gz",
    ".tgz",
}


def is_non_document_url(url: str) -> bool:
    path = urlparse(url).path.lower()
    return any(path.endswith(ext) for ext in _NON_DOCUMENT_EXTS)
