from __future__ import annotations

import re
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from markdownify import ATX, MarkdownConverter

from ..sites import DEFAULT_SITE_CONFIG, SiteConfig

_UNIVERSAL_REMOVE = (
    "script",
    "style",
    "noscript",
    "astro-island",
    "starlight-tabs-restore",
    "astro-breadcrumbs",
)

_LANGUAGE_CLASS_RE = re.compile(r"language-(\w+)")

_FOOTER_PATTERNS: tuple[re.Pattern[str], ...] = (
    # "- **Resources**" style link clusters run to the next heading.
    re.compile(r"\n-\s+\*\*Resources\*\*[\s\S]*?(?=\n## |\n# |\Z)", re.IGNORECASE),
    re.compile(
        r"\n-\s+\*\*Support\*\*[\s\S]*?(?=\n## |\n# |\n-\s+\*\*|\Z)", re.IGNORECASE
    ),
    re.compile(
        r"\n-\s+\*\*Company\*\*[\s\S]*?(?=\n## |\n# |\n-\s+\*\*|\Z)", re.IGNORECASE
    ),
    re.compile(
        r"\n-\s+\*\*Tools\*\*[\s\S]*?(?=\n## |\n# |\n-\s+\*\*|\Z)", re.IGNORECASE
    ),
    re.compile(
        r"\n-\s+\*\*Community\*\*[\s\S]*?(?=\n## |\n# |\n-\s+\*\*|\Z)",
        re.IGNORECASE,
    ),
    re.compile(r"\n-\s+©\s+\d{4}.*$", re.IGNORECASE | re.MULTILINE),
    re.compile(r"\n-\s+\[Privacy Policy\].*$", re.IGNORECASE | re.MULTILINE),
    re.compile(r"\n-\s+\[Terms of Use\].*$", re.IGNORECASE | re.MULTILINE),
    re.compile(r"\n-\s+\[Report Security Issues\].*$", re.IGNORECASE | re.MULTILINE),
    re.compile(r"\n-\s+\[Trademark\].*$", re.IGNORECASE | re.MULTILINE),
    re.compile(
        r"\n-\s+!\[privacy options\].*Cookie Settings.*$",
        re.IGNORECASE | re.MULTILINE,
    ),
    # GitBook
    re.compile(
        r"\nLast updated.*(?:ago|yesterday|today)\s*$", re.IGNORECASE | re.MULTILINE
    ),
    re.compile(r"\nWas this helpful\?\s*$", re.IGNORECASE | re.MULTILINE),
)

# GitBook renders "## \n\n[](#anchor)\n\nHeading" for anchored headings.
_EMPTY_ANCHOR_HEADING_RE = re.compile(
    r"^(#{2,})\s*\n\n\[\]\(#[^)]+\)\n\n(.+)$", re.MULTILINE
)


def _code_language(el) -> str:
    code = el.find("code")
    classes = list(code.get("class") or []) if code is not None else []
    classes += list(el.get("class") or [])
    for cls in classes:
        m = _LANGUAGE_CLASS_RE.match(cls)
        if m:
            return m.group(1)
    return ""


class DocsMarkdownConverter(MarkdownConverter):
    """markdownify with GFM task-list items."""

    def convert_input(self, el, text, *args, **kwargs):
        if str(el.get("type") or "").lower() != "checkbox":
            return text
        return "[x] " if el.has_attr("checked") else "[ ] "


def _converter() -> DocsMarkdownConverter:
    return DocsMarkdownConverter(
        heading_style=ATX,
        bullets="-",
        code_language_callback=_code_language,
    )


def _remove_all(soup: BeautifulSoup, selectors) -> None:
    for selector in selectors:
        for el in soup.select(selector):
            # Descendants of an already removed match are gone too.
            if el.decomposed:
                continue
            el.decompose()


def _clean_soup_inplace(soup: BeautifulSoup, config: SiteConfig) -> None:
    _remove_all(soup, _UNIVERSAL_REMOVE)
    _remove_all(soup, config.remove_selectors)


def _propagate_code_languages(soup: BeautifulSoup) -> None:
    # VitePress/Docusaurus put the language on a wrapper div, not on <code>.
    for code in soup.select('div[class*="language-"] pre > code'):
        wrapper = code.parent.parent if code.parent is not None else None
        if wrapper is None:
            continue
        match = None
        for cls in wrapper.get("class") or []:
            match = _LANGUAGE_CLASS_RE.match(cls)
            if match:
                break
        code_classes = list(code.get("class") or [])
        if match and not any(c.startswith("language-") for c in code_classes):
            code["class"] = code_classes + [f"language-{match.group(1)}"]

    _remove_all(
        soup,
        (".vp-code-group span.lang", 'div[class*="language-"] > span.lang'),
    )


def _pick_main_content(soup: BeautifulSoup, selector: str):
    node = soup.select_one(selector)
    if node is not None:
        return node
    return soup.body or soup


def _absolutize_urls(node, page_url: str) -> None:
    for tag in node.find_all(href=True):
        href = str(tag["href"])
        if href.startswith(("http", "mailto", "#")):
            continue
        try:
            tag["href"] = urljoin(page_url, href)
        except ValueError:
            continue

    for tag in node.find_all(src=True):
        src = str(tag["src"])
        if src.startswith(("http", "data:")):
            continue
        try:
            tag["src"] = urljoin(page_url, src)
        except ValueError:
            continue


def extract_content_html(
    html: str,
    *,
    page_url: str,
    config: SiteConfig = DEFAULT_SITE_CONFIG,
) -> str:
    """Return the inner HTML of the page's content region, links absolutized."""

    soup = BeautifulSoup(html, "html.parser")
    _clean_soup_inplace(soup, config)
    _propagate_code_languages(soup)
    main = _pick_main_content(soup, config.content_selector)
    _absolutize_urls(main, page_url)
    return main.decode_contents()


def clean_footer_patterns(markdown: str) -> str:
    cleaned = markdown
    for pattern in _FOOTER_PATTERNS:
        cleaned = pattern.sub("", cleaned)
    cleaned = _EMPTY_ANCHOR_HEADING_RE.sub(r"\1 \2", cleaned)
    cleaned = re.sub(r"\n{3,}", "\n\n", cleaned)
    return cleaned.strip()


def html_to_markdown(
    html: str,
    *,
    page_url: str,
    config: SiteConfig = DEFAULT_SITE_CONFIG,
) -> str:
    content_html = extract_content_html(html, page_url=page_url, config=config)
    markdown = _converter().convert(content_html)
    return clean_footer_patterns(markdown)
