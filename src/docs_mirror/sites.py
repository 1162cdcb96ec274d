"""Site and framework configuration for the rendering adapter.

Hostname entries win outright. Pages on unknown hosts start from
``DEFAULT_SITE_CONFIG``; the adapter may then swap in a framework entry
after ``detect_framework`` inspects the live document.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final

from bs4 import BeautifulSoup

CONFIDENCE_THRESHOLD: Final = 0.3
# Empirical: three full-weight selector hits saturate the score.
_SCORE_DENOMINATOR: Final = 30.0


@dataclass(frozen=True)
class SiteConfig:
    content_selector: str
    remove_selectors: tuple[str, ...]
    wait_for_selector: str
    framework: str = "custom"
    wait_until: str | None = None
    may_block_headless: bool = False


SITE_CONFIGS: dict[str, SiteConfig] = {
    # Starlight
    "developers.cloudflare.com": SiteConfig(
        content_selector="[data-pagefind-body], main article, main",
        remove_selectors=(
            "nav",
            "header",
            "footer",
            "script",
            "style",
            "noscript",
            "aside",
            "iframe",
            "astro-island",
            "starlight-tabs-restore",
            "astro-breadcrumbs",
            ".Breadcrumb",
            ".DocsSidebar",
            ".DocsFooter",
            ".PageFooter",
            ".feedback",
            ".DocsToc",
            ".copy-button",
            ".CopyCodeButton",
            '[class*="Footer"]',
            '[class*="pagination"]',
            '[class*="Pagination"]',
            '[href*="github.com"][href*="edit"]',
        ),
        wait_for_selector="[data-pagefind-body], article, main",
        framework="starlight",
    ),
    "platform.openai.com": SiteConfig(
        content_selector="main",
        remove_selectors=(
            "nav",
            "header",
            "footer",
            '[role="navigation"]',
            ".sidebar",
            ".toc",
            ".breadcrumb",
        ),
        wait_for_selector="main",
        may_block_headless=True,
    ),
    "docs.x.ai": SiteConfig(
        content_selector="article, main, .content",
        remove_selectors=("nav", "header", "footer", "aside", ".sidebar"),
        wait_for_selector="article, main",
    ),
    "ai.google.dev": SiteConfig(
        content_selector="article, main",
        remove_selectors=("nav", "header", "footer", "aside", ".devsite-nav"),
        wait_for_selector="article, main",
    ),
}

FRAMEWORK_CONFIGS: dict[str, SiteConfig] = {
    "docusaurus": SiteConfig(
        content_selector=".theme-doc-markdown, article",
        remove_selectors=(
            ".navbar",
            ".footer",
            ".pagination-nav",
            ".theme-doc-sidebar-container",
            ".theme-doc-toc-desktop",
            ".theme-doc-breadcrumbs",
        ),
        wait_for_selector=".theme-doc-markdown, article",
        framework="docusaurus",
    ),
    "vitepress": SiteConfig(
        content_selector=".vp-doc, .content",
        remove_selectors=(
            ".VPNav",
            ".VPSidebar",
            ".VPFooter",
            ".VPDocAside",
            ".outline",
        ),
        wait_for_selector=".vp-doc, .content",
        framework="vitepress",
    ),
    "starlight": SiteConfig(
        content_selector=".sl-markdown-content, article, [data-pagefind-body]",
        remove_selectors=(
            "nav",
            "header",
            "footer",
            ".sidebar",
            ".right-sidebar",
            "script",
            "style",
            "astro-island",
            "starlight-tabs-restore",
            "astro-breadcrumbs",
            "[data-application-name]",
            ".feedback-widget",
            ".page-footer",
            ".copy-button",
        ),
        wait_for_selector=".sl-markdown-content, article",
        framework="starlight",
    ),
    "mkdocs": SiteConfig(
        content_selector=".md-content, article",
        remove_selectors=(".md-header", ".md-footer", ".md-sidebar", ".md-nav"),
        wait_for_selector=".md-content, article",
        framework="mkdocs",
    ),
    "sphinx": SiteConfig(
        content_selector=(
            "#furo-main-content, .document, .body, article[role='main'], "
            ".rst-content"
        ),
        remove_selectors=(
            ".sphinxsidebar",
            ".related",
            ".footer",
            ".clearer",
            # Furo
            ".sidebar-drawer",
            ".toc-drawer",
            ".toc-scroll",
            ".toc-tree-container",
            ".page-toc",
            ".content-icon-container",
            ".back-to-top",
            ".header-article",
            ".announcement",
            # Read the Docs
            ".wy-nav-side",
            ".wy-nav-top",
            ".rst-footer-buttons",
            ".wy-side-nav-search",
            ".copybtn",
            ".copybutton",
            "button.copy",
        ),
        wait_for_selector="#furo-main-content, .document, article[role='main']",
        framework="sphinx",
    ),
    "gitbook": SiteConfig(
        content_selector="main",
        remove_selectors=(
            "header",
            '[role="banner"]',
            '[role="complementary"]',
            '[role="contentinfo"]',
            'nav[aria-label="Breadcrumb"]',
            '[aria-label="Breadcrumb"]',
            'a[href][class*="Previous"]',
            'a[href][class*="Next"]',
            'button[aria-label="Copy page"]',
            '[aria-label="Copy page"]',
            'button[aria-label="More"]',
            '[class*="feedback"]',
            '[data-testid="table-of-contents"]',
            '[data-testid="toc-scroll-container"]',
            '[class*="announcement"]',
        ),
        wait_for_selector="main",
        framework="gitbook",
    ),
}

DEFAULT_SITE_CONFIG = SiteConfig(
    content_selector="main, article, .content, .docs-content, #content",
    remove_selectors=(
        "nav",
        "header",
        "footer",
        "aside",
        ".sidebar",
        ".navigation",
        ".toc",
        ".breadcrumb",
        '[role="navigation"]',
        '[role="banner"]',
        '[role="contentinfo"]',
    ),
    wait_for_selector="main, article, .content",
)


def lookup(hostname: str) -> SiteConfig:
    return SITE_CONFIGS.get((hostname or "").lower(), DEFAULT_SITE_CONFIG)


def lookup_framework(framework: str) -> SiteConfig | None:
    return FRAMEWORK_CONFIGS.get(framework)


@dataclass(frozen=True)
class FrameworkPattern:
    framework: str
    selectors: tuple[str, ...]
    html_patterns: tuple[re.Pattern[str], ...]
    weight: float = 10.0


FRAMEWORK_PATTERNS: tuple[FrameworkPattern, ...] = (
    FrameworkPattern(
        framework="docusaurus",
        selectors=(
            ".theme-doc-markdown",
            ".docusaurus-highlight-code-line",
            ".navbar__brand",
            ".menu__link",
            '[class*="docusaurus"]',
            ".pagination-nav",
        ),
        html_patterns=(
            re.compile(r"docusaurus", re.IGNORECASE),
            re.compile(r"<meta[^>]*generator[^>]*Docusaurus", re.IGNORECASE),
            re.compile(r"/@docusaurus/"),
            re.compile(r"docusaurus\.config"),
        ),
    ),
    FrameworkPattern(
        framework="vitepress",
        selectors=(
            ".vp-doc",
            ".VPNav",
            ".VPSidebar",
            ".VPContent",
            ".vp-code",
            '[class*="VPHome"]',
        ),
        html_patterns=(
            re.compile(r"vitepress", re.IGNORECASE),
            re.compile(r"<meta[^>]*generator[^>]*VitePress", re.IGNORECASE),
            re.compile(r"vitepress\.css"),
            re.compile(r"__VP_"),
        ),
    ),
    FrameworkPattern(
        framework="starlight",
        selectors=(
            ".sl-markdown-content",
            "[data-starlight]",
            ".starlight-aside",
            "astro-island",
        ),
        html_patterns=(
            re.compile(r"starlight", re.IGNORECASE),
            re.compile(r"<meta[^>]*generator[^>]*Astro", re.IGNORECASE),
            re.compile(r"Starlight"),
            re.compile(r"@astrojs/starlight"),
        ),
    ),
    FrameworkPattern(
        framework="mkdocs",
        selectors=(
            ".md-content",
            ".md-header",
            ".md-sidebar",
            ".md-nav",
            "[data-md-component]",
        ),
        html_patterns=(
            re.compile(r"mkdocs", re.IGNORECASE),
            re.compile(r"<meta[^>]*generator[^>]*mkdocs", re.IGNORECASE),
            re.compile(r"material-?for-?mkdocs", re.IGNORECASE),
            re.compile(r"mkdocs\.yml"),
        ),
    ),
    FrameworkPattern(
        framework="sphinx",
        selectors=(
            ".sphinxsidebar",
            ".document",
            ".bodywrapper",
            '[class*="sphinx"]',
            ".rst-content",
            "#furo-main-content",
            ".furo-main",
            '[href*="sphinx-doc.org"]',
        ),
        html_patterns=(
            re.compile(r"sphinx", re.IGNORECASE),
            re.compile(r"<meta[^>]*generator[^>]*Sphinx", re.IGNORECASE),
            re.compile(r"sphinx_rtd_theme"),
            re.compile(r"_static/sphinx"),
            re.compile(r"pradyunsg.*furo", re.IGNORECASE),
            re.compile(r"furo\.css", re.IGNORECASE),
            re.compile(r"Made with.*Sphinx", re.IGNORECASE),
        ),
    ),
    FrameworkPattern(
        framework="gitbook",
        selectors=(
            ".gitbook-root",
            "[data-gitbook]",
            ".space-navigation",
            ".page-inner",
            '[class*="page-width-default"]',
            '[class*="site-width-default"]',
            '[data-testid="table-of-contents"]',
            '[href*="gitbook.com"][href*="utm_source"]',
        ),
        html_patterns=(
            re.compile(r"gitbook", re.IGNORECASE),
            re.compile(r"app\.gitbook\.com"),
            re.compile(r"gitbook-x-reason"),
            re.compile(r"Powered by GitBook", re.IGNORECASE),
            re.compile(r"gitbook\.io"),
        ),
    ),
)


@dataclass(frozen=True)
class FrameworkDetection:
    framework: str
    confidence: float
    score: float

    @property
    def is_confident(self) -> bool:
        return self.framework != "custom" and self.confidence >= CONFIDENCE_THRESHOLD


def score_frameworks(html: str) -> dict[str, float]:
    """Selector hits count fully, raw-markup pattern hits count half."""

    soup = BeautifulSoup(html, "html.parser")
    scores: dict[str, float] = {}
    for pattern in FRAMEWORK_PATTERNS:
        score = 0.0
        for selector in pattern.selectors:
            if soup.select_one(selector) is not None:
                score += pattern.weight
        for regex in pattern.html_patterns:
            if regex.search(html):
                score += pattern.weight / 2
        if score > 0:
            scores[pattern.framework] = score
    return scores


def detect_framework(html: str) -> FrameworkDetection:
    scores = score_frameworks(html)

    best, best_score = "custom", 0.0
    for framework, score in scores.items():
        if score > best_score:
            best, best_score = framework, score

    confidence = min(best_score / _SCORE_DENOMINATOR, 1.0) if best_score > 0 else 0.0
    return FrameworkDetection(framework=best, confidence=confidence, score=best_score)
