"""Batch enrichment: attach profiles to members under bounded concurrency.

Members with a ``profile_url`` are split into consecutive batches of
``concurrency``.  Each batch runs its fetches concurrently on the event loop
and fully settles before the next starts, so at most ``concurrency`` pages
are open at once.  Between batches (never after the last) the scheduler
sleeps ``delay_ms``.

Failures are per item: a network error, timeout, HTTP error status or a
non-http(s) URL leaves that member's profile unset and is counted.  Only a
missing or closed session is fatal.

Results are collected per batch keyed by member position and merged after the
batch settles, so no task writes to a shared ``Member`` while others run.
"""

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass
from urllib.parse import urlparse

import httpx

from . import config
from .models import Member, Profile
from .profile import extract_profile
from .session import SessionNotInitializedError

LOGGER = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 3
DEFAULT_DELAY_MS = 1000


@dataclass
class EnrichmentStats:
    attempted: int = 0
    succeeded: int = 0
    empty: int = 0  # fetched fine, nothing extracted
    failed: int = 0

    @property
    def success_rate(self) -> float:
        return self.succeeded / self.attempted if self.attempted else 0.0


@dataclass
class _Outcome:
    profile: Profile | None = None
    error: str | None = None


def normalize_concurrency(value: object) -> int:
    try:
        return max(1, math.floor(float(value)))  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError):
        return 1


def normalize_delay(value: object) -> int:
    try:
        return max(0, math.floor(float(value)))  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError):
        return 0


def is_fetchable_url(url: str | None) -> bool:
    if not url:
        return False
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


async def _fetch_profile(session, url: str) -> Profile | None:
    async with session.open(url) as document:
        return extract_profile(document)


async def _scrape_one(session, url: str, timeout_s: float | None) -> _Outcome:
    if not is_fetchable_url(url):
        LOGGER.warning("Skipping non-http(s) profile URL: %s", url)
        return _Outcome(error="unsupported URL")
    LOGGER.debug("Scraping profile: %s", url)
    try:
        profile = await asyncio.wait_for(_fetch_profile(session, url), timeout=timeout_s)
    except asyncio.TimeoutError:
        LOGGER.warning("Timed out scraping profile %s", url)
        return _Outcome(error="timeout")
    except httpx.HTTPError as exc:
        LOGGER.warning("Failed to scrape profile %s: %s", url, exc)
        return _Outcome(error=type(exc).__name__)
    except SessionNotInitializedError:
        raise
    except Exception as exc:
        LOGGER.exception("Unexpected error scraping profile %s", url)
        return _Outcome(error=type(exc).__name__)
    return _Outcome(profile=profile)


async def enrich_members(
    members: list[Member],
    session,
    *,
    concurrency: object = DEFAULT_CONCURRENCY,
    delay_ms: object = DEFAULT_DELAY_MS,
    timeout_ms: int | None = config.PROFILE_SCRAPE_TIMEOUT_MS,
) -> EnrichmentStats:
    """Attach ``.profile`` to every member whose profile page yields one.

    *session* is anything with an ``is_open`` flag and an async context
    manager ``open(url)`` yielding a ``ProfileDocument``
    (``ProfilePageSession`` in production).
    """
    max_concurrent = normalize_concurrency(concurrency)
    delay = normalize_delay(delay_ms)
    if session is None or not getattr(session, "is_open", False):
        raise SessionNotInitializedError("Page session not initialized")
    timeout_s = config.ms_to_s(timeout_ms) if timeout_ms else None

    targets = [m for m in members if m.profile_url]
    total = len(targets)
    stats = EnrichmentStats(attempted=total)
    LOGGER.info("Scraping profiles for %d members...", total)
    if total == 0:
        return stats

    total_batches = math.ceil(total / max_concurrent)
    completed = 0
    for batch_number, start in enumerate(range(0, total, max_concurrent), start=1):
        batch = targets[start : start + max_concurrent]
        LOGGER.info(
            "Processing batch %d/%d (%d members)...", batch_number, total_batches, len(batch)
        )
        settled = await asyncio.gather(
            *(_scrape_one(session, m.profile_url or "", timeout_s) for m in batch),
            return_exceptions=True,
        )
        # Only a lost session escapes _scrape_one; it is raised once the batch has settled.
        fatal = next((r for r in settled if isinstance(r, BaseException)), None)
        outcomes: dict[int, _Outcome] = {
            index: outcome
            for index, outcome in zip(range(start, start + len(batch)), settled)
            if isinstance(outcome, _Outcome)
        }

        batch_success = 0
        for index, outcome in outcomes.items():
            member = targets[index]
            completed += 1
            if outcome.profile is not None:
                member.profile = outcome.profile
                stats.succeeded += 1
                batch_success += 1
                LOGGER.info("  ✓ [%d/%d] %s", completed, total, member.name)
            else:
                if outcome.error:
                    stats.failed += 1
                else:
                    stats.empty += 1
                LOGGER.info(
                    "  ✗ [%d/%d] %s - %s",
                    completed,
                    total,
                    member.name,
                    outcome.error or "no profile data",
                )
        if fatal is not None:
            raise fatal
        LOGGER.info(
            "Batch %d/%d completed: %d/%d successful",
            batch_number,
            total_batches,
            batch_success,
            len(batch),
        )

        if start + max_concurrent < total and delay > 0:
            LOGGER.info("Waiting %dms before next batch...", delay)
            await asyncio.sleep(delay / 1000)

    LOGGER.info(
        "Profile scraping completed. Success rate: %d/%d (%.0f%%)",
        stats.succeeded,
        total,
        stats.success_rate * 100,
    )
    if stats.succeeded < total:
        LOGGER.warning("%d profiles failed to scrape", total - stats.succeeded)
    return stats
