"""Tests for link discovery in Markdown and HTML content."""
from docs_mirror.links import extract_links


BASE = "https://x.com/docs/a"


class TestExtractLinks:
    def test_keeps_only_in_scope_document_links(self):
        """Anchors, assets, other origins and out-of-scope paths are dropped."""
        content = (
            "[b](/docs/b) [ext](https://other.com/y) [img](/docs/c.png) "
            "[anchor](#frag) [f](/blog/f)"
        )
        assert extract_links(content, BASE) == ["https://x.com/docs/b"]

    def test_relative_links_resolve_against_page(self):
        assert extract_links("[n](next)", BASE) == ["https://x.com/docs/next"]

    def test_href_attributes_are_scanned(self):
        content = '<a href="/docs/one">1</a> <Link href=\'/docs/two\'>2</Link>'
        assert extract_links(content, BASE) == [
            "https://x.com/docs/one",
            "https://x.com/docs/two",
        ]

    def test_markdown_links_come_before_hrefs(self):
        content = '<a href="/docs/html">h</a>\n[md](/docs/md)'
        assert extract_links(content, BASE) == [
            "https://x.com/docs/md",
            "https://x.com/docs/html",
        ]

    def test_duplicates_collapse_after_normalization(self):
        content = "[a](/docs/b) [b](/docs/b#section) [c](/docs/b?tab=1)"
        assert extract_links(content, BASE) == ["https://x.com/docs/b"]

    def test_link_titles_are_ignored(self):
        content = '[b](/docs/b "The B page")'
        assert extract_links(content, BASE) == ["https://x.com/docs/b"]

    def test_skips_mailto_javascript_and_autolinks(self):
        content = (
            "[m](mailto:a@x.com) [j](javascript:void(0)) "
            "[l](<https://x.com/docs/z>) [p](%3Chttps://x.com/docs/q%3E)"
        )
        assert extract_links(content, BASE) == []

    def test_external_links_when_allowed(self):
        content = (
            "[ext](https://y.com/docs/page) "
            "[badge](https://img.shields.io/docs/badge)"
        )
        links = extract_links(content, BASE, include_external=True)
        assert links == ["https://y.com/docs/page"]

    def test_explicit_base_path(self):
        content = "[a](/docs/a) [r](/reference/r)"
        links = extract_links(content, BASE, base_path="/reference/")
        assert links == ["https://x.com/reference/r"]

    def test_no_base_path_keeps_whole_origin(self):
        content = "[a](/blog/a) [b](/about)"
        links = extract_links(content, "https://x.com/")
        assert links == ["https://x.com/blog/a", "https://x.com/about"]
