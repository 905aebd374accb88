"""Page sources: a throttled ``requests`` session for roster pages and an
``httpx`` async session for profile pages.

Neither is a global.  Callers create one, pass it to the component that
needs it, and close it when done (both are context managers).
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

import httpx
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from . import config
from .profile import ProfileDocument, parse_profile_document
from .rows import Cell, parse_table_rows

LOGGER = logging.getLogger(__name__)


class SessionNotInitializedError(RuntimeError):
    """Raised when a component is handed a session that is not open."""


# ── Roster pages (sequential, sync) ──────────────────────────────────────────


@dataclass
class ListPageSession:
    timeout_seconds: float = config.ms_to_s(config.NAVIGATION_TIMEOUT_MS)
    request_delay: float = config.REQUEST_DELAY
    user_agent: str = config.USER_AGENT
    _session: requests.Session = field(default_factory=requests.Session, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    _last_request_time: float = field(default=0.0, repr=False)
    _closed: bool = field(default=False, repr=False)

    def __post_init__(self) -> None:
        """Configure retry adapter for resilient HTTP requests."""
        retry_strategy = Retry(
            total=3,
            backoff_factor=1.0,
            status_forcelist=[429, 500, 502, 503, 504],
        )
        adapter = HTTPAdapter(
            max_retries=retry_strategy,
            pool_connections=2,
            pool_maxsize=2,
        )
        self._session.mount("https://", adapter)
        self._session.mount("http://", adapter)
        self._session.headers["User-Agent"] = self.user_agent

    def _throttled_get(self, url: str, **kwargs: object) -> requests.Response:
        """GET with a per-instance rate limit."""
        with self._lock:
            elapsed = time.time() - self._last_request_time
            wait = max(0.0, self.request_delay - elapsed)
            # Reserve our slot by advancing the timestamp before releasing the lock.
            self._last_request_time = time.time() + wait
        if wait > 0:
            time.sleep(wait)
        kwargs.setdefault("timeout", self.timeout_seconds)
        return self._session.get(url, **kwargs)

    def fetch_rows(self, url: str) -> list[list[Cell]]:
        """Table rows of *url*.  Raises ``requests.RequestException`` on failure."""
        if self._closed:
            raise SessionNotInitializedError("List page session is closed.")
        resp = self._throttled_get(url)
        resp.raise_for_status()
        # Raw bytes: BeautifulSoup picks up the Shift_JIS meta charset itself.
        return parse_table_rows(resp.content)

    def close(self) -> None:
        self._session.close()
        self._closed = True

    def __enter__(self) -> ListPageSession:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


# ── Profile pages (concurrent, async) ────────────────────────────────────────


class ProfilePageSession:
    """Shared async HTTP client; each ``open()`` owns one response for its scope.

    Usage::

        async with ProfilePageSession() as session:
            async with session.open(url) as document:
                profile = extract_profile(document)
    """

    def __init__(
        self,
        *,
        navigation_timeout_ms: int = config.NAVIGATION_TIMEOUT_MS,
        page_load_timeout_ms: int = config.PAGE_LOAD_TIMEOUT_MS,
        network_idle_timeout_ms: int = config.NETWORK_IDLE_TIMEOUT_MS,
        user_agent: str = config.USER_AGENT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        # Read timeout is the longest gap between received bytes, i.e. network idle.
        self._timeout = httpx.Timeout(
            config.ms_to_s(page_load_timeout_ms),
            connect=config.ms_to_s(navigation_timeout_ms),
            read=config.ms_to_s(network_idle_timeout_ms),
        )
        self._headers = {"User-Agent": user_agent}
        self._client = client
        self._owns_client = client is None

    @property
    def is_open(self) -> bool:
        return self._client is not None and not self._client.is_closed

    async def start(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                follow_redirects=True,
                headers=self._headers,
            )
            self._owns_client = True

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None

    async def __aenter__(self) -> ProfilePageSession:
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @asynccontextmanager
    async def open(self, url: str) -> AsyncIterator[ProfileDocument]:
        """Fetch and parse *url*; the response is closed on every exit path."""
        client = self._client
        if client is None or client.is_closed:
            raise SessionNotInitializedError("Profile page session is not open.")
        async with client.stream("GET", url) as response:
            response.raise_for_status()
            content = await response.aread()
            yield parse_profile_document(content)
