"""Tests for blocked-content classification and Markdown sanity checks."""
import pytest

from docs_mirror.content import (
    check_markdown_body,
    check_markdown_content_type,
    classify_blocked,
    looks_like_html,
    validate_content,
)
from docs_mirror.errors import AdapterError, BlockedContentError, BlockedReason


class TestClassifyBlocked:
    def test_just_a_moment_is_bot_detection(self):
        assert classify_blocked("Just a moment...") is BlockedReason.BOT_DETECTION

    @pytest.mark.parametrize("text", ["", "   \n\t "])
    def test_empty(self, text):
        assert classify_blocked(text) is BlockedReason.EMPTY

    def test_cloudflare_marker(self):
        md = "Please wait\n\nCloudflare Ray ID: 8a1b2c3d4e\n" + "x" * 200
        assert classify_blocked(md) is BlockedReason.CLOUDFLARE

    def test_access_denied_marker(self):
        md = "# 403 Forbidden\n\nYou don't have permission to access this page."
        assert classify_blocked(md) is BlockedReason.ACCESS_DENIED

    def test_bot_patterns_only_apply_to_short_bodies(self):
        md = "Checking your browser\n\n" + "Real documentation text. " * 10
        assert classify_blocked(md) is None

    def test_real_content_passes(self):
        md = "# Install\n\nRun `pip install thing` and import it."
        assert classify_blocked(md) is None


class TestValidateContent:
    def test_raises_with_reason_and_suggestion(self):
        with pytest.raises(BlockedContentError) as exc_info:
            validate_content("Just a moment...", "https://x.com/docs/a")

        err = exc_info.value
        assert err.url == "https://x.com/docs/a"
        assert err.reason is BlockedReason.BOT_DETECTION
        assert "x.com" in str(err)
        assert "--use-jina" in err.suggestion

    def test_unknown_reason_has_generic_suggestion(self):
        err = BlockedContentError("https://x.com/", BlockedReason.UNKNOWN)
        assert "check if the site is accessible" in err.suggestion

    def test_genuine_content_returns_none(self):
        assert validate_content("# Title\n\nBody text.", "https://x.com/") is None


class TestMarkdownChecks:
    def test_html_document_rejected(self):
        with pytest.raises(AdapterError, match="HTML"):
            check_markdown_body("<!DOCTYPE html><html><body>hi</body></html>")

    @pytest.mark.parametrize("body", ['{"error": "nope"}', "[1, 2, 3, 4, 5, 6]"])
    def test_json_rejected(self, body):
        with pytest.raises(AdapterError, match="JSON"):
            check_markdown_body(body)

    def test_too_short_rejected(self):
        with pytest.raises(AdapterError, match="too short"):
            check_markdown_body("# Hi")

    def test_markdown_accepted(self):
        check_markdown_body("# Heading\n\nSome paragraph text.")

    def test_content_type_json_rejected(self):
        with pytest.raises(AdapterError):
            check_markdown_content_type("application/json; charset=utf-8")

    def test_content_type_html_rejected_unless_markdown_declared(self):
        with pytest.raises(AdapterError):
            check_markdown_content_type("text/html; charset=utf-8")
        check_markdown_content_type("text/markdown, text/html")
        check_markdown_content_type("text/plain")

    def test_looks_like_html(self):
        assert looks_like_html("  <html lang='en'>")
        assert not looks_like_html("# <html> in a heading")
