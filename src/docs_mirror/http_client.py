from __future__ import annotations

import logging
import time
from dataclasses import dataclass

import requests
from requests import exceptions as req_exc

from .urls import normalize_url

logger = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 docs-mirror/0.1 (Documentation Crawler)"
DEFAULT_TIMEOUT_S = 30

# Rate limiting and gateway hiccups; anything else is final.
RETRYABLE_STATUSES = frozenset({429, 500, 502, 503, 504})


@dataclass(frozen=True)
class FetchResult:
    url: str
    final_url: str
    status_code: int
    headers: dict[str, str]
    fetched_at: float
    body: bytes

    @classmethod
    def from_response(cls, url: str, resp: requests.Response) -> FetchResult:
        return cls(
            url=url,
            final_url=str(resp.url),
            status_code=int(resp.status_code),
            headers={k: str(v) for k, v in resp.headers.items()},
            fetched_at=time.time(),
            body=resp.content,
        )

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    @property
    def content_type(self) -> str:
        for key, value in self.headers.items():
            if key.lower() == "content-type":
                return value.lower()
        return ""

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


class HttpClient:
    """Blocking GET/HEAD helper shared by the HTTP adapters and sitemap reader.

    Adapters run it through ``asyncio.to_thread``; it must not touch the
    event loop.
    """

    def __init__(
        self,
        session: requests.Session,
        *,
        timeout_s: int = DEFAULT_TIMEOUT_S,
        max_retries: int = 2,
        backoff_base_s: float = 1.0,
    ) -> None:
        self.session = session
        self.session.headers["User-Agent"] = USER_AGENT
        self.timeout_s = timeout_s
        self.max_retries = max_retries
        self.backoff_base_s = backoff_base_s

    def _delay(self, attempt: int, resp: requests.Response | None = None) -> float:
        if resp is not None:
            raw = resp.headers.get("Retry-After")
            if raw:
                try:
                    return max(float(raw), 0.0)
                except ValueError:
                    # HTTP-date form; fall back to exponential backoff.
                    pass
        return self.backoff_base_s * (2**attempt)

    def get(
        self,
        url: str,
        *,
        headers: dict[str, str] | None = None,
    ) -> FetchResult:
        """GET ``url``, retrying transport errors and retryable statuses.

        Non-retryable statuses (and the last retryable one) are returned as-is;
        callers decide what a 404 or a challenge page means to them. Raises
        ``RuntimeError`` once transport errors exhaust the retries.
        """

        target = normalize_url(url)
        attempts = self.max_retries + 1
        error: Exception | None = None

        for attempt in range(attempts):
            last = attempt == attempts - 1
            try:
                resp = self.session.get(target, timeout=self.timeout_s, headers=headers)
            except req_exc.RequestException as e:
                error = e
                if last:
                    break
                logger.debug("GET %s failed (%s), retrying", target, e)
                time.sleep(self._delay(attempt))
                continue

            if resp.status_code in RETRYABLE_STATUSES and not last:
                logger.debug("GET %s -> %d, retrying", target, resp.status_code)
                time.sleep(self._delay(attempt, resp))
                continue
            return FetchResult.from_response(target, resp)

        raise RuntimeError(f"Failed to fetch {target}: {error}")

    def exists(self, url: str) -> bool:
        """Single HEAD probe; transport errors count as missing."""

        try:
            resp = self.session.head(
                normalize_url(url), timeout=self.timeout_s, allow_redirects=True
            )
        except req_exc.RequestException:
            return False
        return int(resp.status_code) < 400
