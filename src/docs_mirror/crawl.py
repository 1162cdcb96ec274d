from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, Union
from urllib.parse import urlparse

import requests
from tqdm import tqdm

from .adapters import AdapterChain, build_adapter_chain, resolve_adapter_name
from .browser import BrowserSession
from .errors import BlockedContentError, SitemapNotFoundError, suggestion_for
from .http_client import DEFAULT_TIMEOUT_S, HttpClient
from .links import extract_links
from .manifest import ManifestWriter, utc_iso
from .sitemap import SitemapReader, filter_by_base_path
from .urls import (
    add_numbered_prefix,
    detect_base_path,
    directory_of,
    origin_of,
    to_local_path,
    validate_url,
)
from .writer import FileWriter

logger = logging.getLogger(__name__)

DEFAULT_OUT_DIR = Path("docs")
DEFAULT_MAX_DEPTH = 1
DEFAULT_CONCURRENCY = 3


class CrawlMode(str, Enum):
    LINKS = "links"
    SITEMAP = "sitemap"


@dataclass(frozen=True)
class CrawlConfig:
    out_dir: Path
    mode: CrawlMode = CrawlMode.LINKS
    max_depth: int = DEFAULT_MAX_DEPTH
    concurrency: int = DEFAULT_CONCURRENCY
    numbered: bool = False
    forced_adapter: str | None = None
    use_md_endpoint: bool = False
    use_jina: bool = False
    verbose: bool = False
    write_manifest: bool = False
    progress: bool = False
    timeout_s: int = DEFAULT_TIMEOUT_S

    def __post_init__(self) -> None:
        if isinstance(self.max_depth, bool) or not isinstance(self.max_depth, int):
            raise ValueError(f"Invalid depth: {self.max_depth!r}")
        if self.max_depth < 0:
            raise ValueError(
                f"Invalid depth: {self.max_depth} (must be non-negative integer)"
            )
        if isinstance(self.concurrency, bool) or not isinstance(self.concurrency, int):
            raise ValueError(f"Invalid concurrency: {self.concurrency!r}")
        if self.concurrency < 1:
            raise ValueError(
                f"Invalid concurrency: {self.concurrency} (must be positive integer)"
            )

        object.__setattr__(self, "out_dir", Path(self.out_dir))
        object.__setattr__(self, "mode", CrawlMode(self.mode))
        if self.forced_adapter is not None:
            object.__setattr__(
                self, "forced_adapter", resolve_adapter_name(self.forced_adapter)
            )


@dataclass(frozen=True)
class FrontierEntry:
    url: str
    depth: int = 0


@dataclass(frozen=True)
class Saved:
    url: str
    local_path: str
    adapter_name: str


@dataclass(frozen=True)
class Blocked:
    url: str
    reason: str


@dataclass(frozen=True)
class Failed:
    url: str
    message: str


Outcome = Union[Saved, Blocked, Failed]


@dataclass
class CrawlResult:
    saved: list[Saved] = field(default_factory=list)
    blocked: list[Blocked] = field(default_factory=list)
    failed: list[Failed] = field(default_factory=list)

    def add(self, outcome: Outcome) -> None:
        if isinstance(outcome, Saved):
            self.saved.append(outcome)
        elif isinstance(outcome, Blocked):
            self.blocked.append(outcome)
        else:
            self.failed.append(outcome)

    @property
    def stats(self) -> dict[str, int]:
        return {
            "saved": len(self.saved),
            "blocked": len(self.blocked),
            "failed": len(self.failed),
        }

    def to_dict(self) -> dict:
        return {
            "stats": self.stats,
            "saved": [
                {"url": s.url, "path": s.local_path, "adapter": s.adapter_name}
                for s in self.saved
            ],
            "blocked": [{"url": b.url, "reason": b.reason} for b in self.blocked],
            "failed": [{"url": f.url, "error": f.message} for f in self.failed],
        }


class NumberedCounter:
    """Per-directory sequence numbers for output filenames."""

    def __init__(self) -> None:
        self._counters: dict[str, int] = {}

    def next(self, directory: str) -> int:
        num = self._counters.get(directory, 0) + 1
        self._counters[directory] = num
        return num

    def release(self, directory: str, num: int) -> None:
        # Only the most recent number can be handed back.
        if self._counters.get(directory) == num:
            self._counters[directory] = num - 1


@dataclass
class _RunState:
    """Everything owned by a single ``Crawler.crawl`` invocation."""

    result: CrawlResult = field(default_factory=CrawlResult)
    counter: NumberedCounter | None = None
    # "visited" gates processing, "queued" gates enqueueing.
    visited: set[str] = field(default_factory=set)
    queued: set[str] = field(default_factory=set)


class Crawler:
    def __init__(
        self,
        *,
        config: CrawlConfig,
        chain: AdapterChain | None = None,
        sitemap_reader: SitemapReader | None = None,
        writer: FileWriter | None = None,
        session: BrowserSession | None = None,
        http: HttpClient | None = None,
    ) -> None:
        self.cfg = config
        self.http = http or HttpClient(requests.Session(), timeout_s=config.timeout_s)
        self.session = session or BrowserSession()
        self.chain = chain or build_adapter_chain(
            http=self.http,
            session=self.session,
            forced_adapter=config.forced_adapter,
            use_md_endpoint=config.use_md_endpoint,
            use_jina=config.use_jina,
        )
        self.sitemap_reader = sitemap_reader or SitemapReader(self.http)
        self.writer = writer or FileWriter(config.out_dir)
        self.manifest = ManifestWriter(config.out_dir) if config.write_manifest else None
        self._progress: tqdm | None = None

    async def crawl(self, entry: str) -> CrawlResult:
        """Crawl from ``entry`` and write one Markdown file per saved page.

        Per-page problems end up in the returned result. Only an invalid entry
        URL or, in sitemap mode, a missing or unreadable sitemap raise.
        """

        entry_url = validate_url(entry)
        state = _RunState(counter=NumberedCounter() if self.cfg.numbered else None)
        limiter = asyncio.Semaphore(self.cfg.concurrency)
        started_at = utc_iso()
        if self.manifest is not None:
            self.manifest.start()

        logger.info("Starting crawl: %s", entry_url)
        if self.cfg.use_jina:
            logger.info("Using Jina Reader API (external)")
        else:
            logger.info("Using Playwright (local)")

        try:
            if self.cfg.mode is CrawlMode.SITEMAP:
                await self._crawl_sitemap(entry_url, state, limiter)
            else:
                await self._crawl_links(entry_url, state, limiter)
        finally:
            if self._progress is not None:
                self._progress.close()
                self._progress = None
            await self.session.close()

        self._report(state.result)
        if self.manifest is not None:
            self.manifest.write_summary(
                {
                    "entry_url": entry_url,
                    "started_at": started_at,
                    "finished_at": utc_iso(),
                    "config": {
                        "mode": self.cfg.mode.value,
                        "max_depth": self.cfg.max_depth,
                        "concurrency": self.cfg.concurrency,
                        "numbered": self.cfg.numbered,
                        "forced_adapter": self.cfg.forced_adapter,
                        "use_md_endpoint": self.cfg.use_md_endpoint,
                        "use_jina": self.cfg.use_jina,
                    },
                    **state.result.to_dict(),
                }
            )
        return state.result

    async def _crawl_links(
        self,
        entry_url: str,
        state: _RunState,
        limiter: asyncio.Semaphore,
    ) -> None:
        self._open_progress(1)
        content = await self._process(FrontierEntry(entry_url, 0), state, limiter)
        if content is None:
            return

        links = extract_links(content, entry_url)
        logger.info("Found %d links", len(links))
        if self.cfg.max_depth == 0:
            return

        queue: deque[FrontierEntry] = deque()
        self._enqueue(links, 1, queue, state)

        while queue:
            size = min(self.cfg.concurrency, len(queue))
            batch = [queue.popleft() for _ in range(size)]
            contents = await asyncio.gather(
                *(self._process(item, state, limiter) for item in batch)
            )
            for item, page_content in zip(batch, contents):
                if page_content is None or item.depth >= self.cfg.max_depth:
                    continue
                self._enqueue(
                    extract_links(page_content, item.url),
                    item.depth + 1,
                    queue,
                    state,
                )

    async def _crawl_sitemap(
        self,
        entry_url: str,
        state: _RunState,
        limiter: asyncio.Semaphore,
    ) -> None:
        logger.info("Using sitemap.xml for URL discovery")

        sitemap_url = await self.sitemap_reader.find_sitemap_url(entry_url)
        if not sitemap_url:
            raise SitemapNotFoundError(f"No sitemap found for {origin_of(entry_url)}")
        logger.info("Found sitemap: %s", sitemap_url)

        urls = await self.sitemap_reader.fetch_all_urls(sitemap_url)
        logger.info("Sitemap contains %d URLs", len(urls))

        base_path = detect_base_path(entry_url)
        if base_path:
            urls = filter_by_base_path(urls, base_path)
            logger.info("Filtered to %d URLs matching %s", len(urls), base_path)

        self._open_progress(len(urls))
        size = self.cfg.concurrency
        for start in range(0, len(urls), size):
            batch = urls[start : start + size]
            await asyncio.gather(
                *(self._process(FrontierEntry(u, 0), state, limiter) for u in batch)
            )

    def _enqueue(
        self,
        links: Iterable[str],
        depth: int,
        queue: deque[FrontierEntry],
        state: _RunState,
    ) -> None:
        added = 0
        for link in links:
            if link in state.visited or link in state.queued:
                continue
            state.queued.add(link)
            queue.append(FrontierEntry(link, depth))
            added += 1
        if added and self._progress is not None:
            self._progress.total = (self._progress.total or 0) + added
            self._progress.refresh()

    async def _process(
        self,
        entry: FrontierEntry,
        state: _RunState,
        limiter: asyncio.Semaphore,
    ) -> str | None:
        """Fetch, save and classify one page; return its Markdown on success."""

        if entry.url in state.visited:
            self._tick()
            return None
        state.visited.add(entry.url)

        async with limiter:
            try:
                page = await self.chain.fetch_markdown(entry.url)
                local_path = self._write_output(entry.url, page.content, state)
            except BlockedContentError as e:
                host = urlparse(entry.url).hostname or entry.url
                logger.warning("  [blocked] %s - %s", host, e.reason.value)
                self._record(state, Blocked(url=entry.url, reason=e.reason.value))
                return None
            except Exception as e:
                logger.warning("Failed: %s - %s", entry.url, e)
                self._record(state, Failed(url=entry.url, message=str(e)))
                return None
            finally:
                self._tick()

        logger.info(
            "[%s] Saved: %s",
            page.adapter_name,
            (self.cfg.out_dir / local_path).as_posix(),
        )
        self._record(
            state,
            Saved(url=entry.url, local_path=local_path, adapter_name=page.adapter_name),
        )
        return page.content

    def _write_output(self, url: str, content: str, state: _RunState) -> str:
        # No await between numbering and writing: the number sequence per
        # directory follows write order with no gaps.
        local_path = to_local_path(url)
        if state.counter is None:
            self.writer.save(local_path, content)
            return local_path

        directory = directory_of(local_path)
        num = state.counter.next(directory)
        numbered_path = add_numbered_prefix(local_path, num)
        try:
            self.writer.save(numbered_path, content)
        except Exception:
            state.counter.release(directory, num)
            raise
        return numbered_path

    def _record(self, state: _RunState, outcome: Outcome) -> None:
        state.result.add(outcome)
        if self.manifest is None:
            return
        if isinstance(outcome, Saved):
            self.manifest.record(
                "saved",
                outcome.url,
                path=outcome.local_path,
                adapter=outcome.adapter_name,
            )
        elif isinstance(outcome, Blocked):
            self.manifest.record("blocked", outcome.url, reason=outcome.reason)
        else:
            self.manifest.record("failed", outcome.url, error=outcome.message)

    def _open_progress(self, total: int) -> None:
        self._progress = tqdm(
            total=total,
            desc="docs-mirror",
            unit="page",
            disable=not self.cfg.progress,
        )

    def _tick(self) -> None:
        if self._progress is not None:
            self._progress.update(1)

    def _report(self, result: CrawlResult) -> None:
        logger.info("")
        logger.info("=" * 50)
        logger.info(
            "Done! Saved %d pages to %s",
            len(result.saved),
            self.cfg.out_dir.as_posix(),
        )

        if result.blocked:
            logger.info(
                "Blocked: %d pages (bot protection detected)", len(result.blocked)
            )
            if self.cfg.verbose:
                for b in result.blocked:
                    logger.info("  - %s (%s)", b.url, b.reason)
            for reason in dict.fromkeys(b.reason for b in result.blocked):
                logger.info("Tip: %s", suggestion_for(reason))

        if result.failed:
            logger.info("Failed: %d pages", len(result.failed))
            if self.cfg.verbose:
                for f in result.failed:
                    logger.info("  - %s", f.url)


async def crawl(entry_url: str, config: CrawlConfig, **collaborators) -> CrawlResult:
    """Run one crawl with a fresh ``Crawler``."""

    return await Crawler(config=config, **collaborators).crawl(entry_url)
