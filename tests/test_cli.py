"""Tests for the docs-mirror command line."""
from pathlib import Path

import pytest

from docs_mirror import __version__, cli
from docs_mirror.crawl import Blocked, CrawlMode, CrawlResult, Failed, Saved
from docs_mirror.errors import InvalidUrlError, SitemapNotFoundError


@pytest.fixture
def fake_crawl(monkeypatch):
    """Replace the crawl coroutine; records (url, config) calls."""
    calls = []
    state = {"result": CrawlResult(), "error": None}

    async def _crawl(entry_url, config):
        calls.append((entry_url, config))
        if state["error"] is not None:
            raise state["error"]
        return state["result"]

    monkeypatch.setattr(cli, "crawl", _crawl)
    return calls, state


def test_defaults_map_to_config(fake_crawl):
    """Without options, link mode at depth 1 with three workers writes to ./docs."""
    calls, _ = fake_crawl
    assert cli.main(["https://x.com/docs/", "--no-progress"]) == 0

    entry_url, cfg = calls[0]
    assert entry_url == "https://x.com/docs/"
    assert cfg.out_dir == Path("docs")
    assert cfg.mode is CrawlMode.LINKS
    assert cfg.max_depth == 1
    assert cfg.concurrency == 3
    assert cfg.forced_adapter is None
    assert not cfg.progress


def test_options_map_to_config(fake_crawl, tmp_path):
    calls, _ = fake_crawl
    argv = [
        "https://x.com/docs/",
        "-o",
        str(tmp_path),
        "-d",
        "0",
        "-c",
        "5",
        "--use-sitemap",
        "--use-jina",
        "--use-md-endpoint",
        "--adapter",
        "rendering",
        "--numbered",
        "--manifest",
        "--verbose",
    ]
    assert cli.main(argv) == 0

    _, cfg = calls[0]
    assert cfg.out_dir == tmp_path
    assert cfg.max_depth == 0
    assert cfg.concurrency == 5
    assert cfg.mode is CrawlMode.SITEMAP
    assert cfg.use_jina and cfg.use_md_endpoint
    assert cfg.forced_adapter == "playwright"
    assert cfg.numbered and cfg.write_manifest and cfg.verbose
    assert cfg.progress


def test_prints_summary_line(fake_crawl, capsys):
    _, state = fake_crawl
    result = CrawlResult()
    result.add(Saved(url="https://x.com/docs/", local_path="index.md", adapter_name="mdx"))
    result.add(Blocked(url="https://x.com/docs/b", reason="cloudflare"))
    result.add(Failed(url="https://x.com/docs/c", message="boom"))
    state["result"] = result

    assert cli.main(["https://x.com/docs/", "--no-progress"]) == 0
    assert "crawl: saved=1 blocked=1 failed=1" in capsys.readouterr().out


def test_everything_blocked_exits_3(fake_crawl, capsys):
    _, state = fake_crawl
    result = CrawlResult()
    result.add(Blocked(url="https://x.com/docs/", reason="bot-detection"))
    state["result"] = result

    assert cli.main(["https://x.com/docs/", "--no-progress"]) == 3
    assert "--use-jina" in capsys.readouterr().err


@pytest.mark.parametrize(
    "error",
    [
        InvalidUrlError("Unsupported URL scheme: ftp (only http/https allowed)"),
        SitemapNotFoundError("No sitemap found for https://x.com"),
    ],
)
def test_invocation_errors_exit_2(fake_crawl, capsys, error):
    _, state = fake_crawl
    state["error"] = error

    assert cli.main(["https://x.com/docs/", "--no-progress"]) == 2
    assert capsys.readouterr().err.startswith(f"Error: {error}")


@pytest.mark.parametrize(
    "argv",
    [
        ["https://x.com/", "--depth", "-1"],
        ["https://x.com/", "--depth", "two"],
        ["https://x.com/", "--concurrency", "0"],
        ["https://x.com/", "--adapter", "curl"],
        [],
    ],
)
def test_bad_arguments_rejected_by_parser(fake_crawl, argv):
    calls, _ = fake_crawl
    with pytest.raises(SystemExit) as exc_info:
        cli.main(argv)
    assert exc_info.value.code == 2
    assert calls == []


def test_version(capsys):
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["--version"])
    assert exc_info.value.code == 0
    assert __version__ in capsys.readouterr().out
