"""Run orchestration: cache gate → list phase → enrichment → write.

The list phase always completes before any profile fetch starts.  Scraping
is driven from ``scripts/scrape.py``; tests call ``run_scrape`` directly with
fake sessions.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import nullcontext
from dataclasses import dataclass, field
from pathlib import Path

from . import config
from .cache import CacheGate, cache_age_label
from .chambers import Chamber
from .enrich import EnrichmentStats, enrich_members
from .models import CacheEntry, Member
from .run_log import ScrapeRunLog
from .scraper import DietScraper
from .session import ListPageSession, ProfilePageSession

LOGGER = logging.getLogger(__name__)

MODE_BASIC = "basic"
MODE_PROFILES = "profiles"
MODE_ALL_PROFILES = "all-profiles"

MODE_ALIASES: dict[str, str] = {
    "basic": MODE_BASIC,
    "profiles": MODE_PROFILES,
    "all-profiles": MODE_ALL_PROFILES,
    "profiles-all": MODE_ALL_PROFILES,
    "all": MODE_ALL_PROFILES,
}


def normalize_mode(mode: str) -> str:
    try:
        return MODE_ALIASES[mode.strip().lower()]
    except KeyError:
        raise ValueError(f"Unknown mode: {mode!r} (expected one of {sorted(MODE_ALIASES)})") from None


@dataclass
class RunOptions:
    mode: str = MODE_BASIC
    force_refresh: bool = False
    max_profiles: int = config.MAX_PROFILES
    concurrency: int = config.PROFILE_CONCURRENCY
    delay_ms: int = config.PROFILE_DELAY_MS
    max_age_hours: float = config.CACHE_MAX_AGE_HOURS

    def __post_init__(self) -> None:
        self.mode = normalize_mode(self.mode)

    @property
    def include_profiles(self) -> bool:
        return self.mode in (MODE_PROFILES, MODE_ALL_PROFILES)

    @property
    def all_profiles(self) -> bool:
        return self.mode == MODE_ALL_PROFILES


@dataclass
class RunResult:
    entry: CacheEntry
    from_cache: bool
    path: Path
    stats: EnrichmentStats | None = None
    profiled: list[Member] = field(default_factory=list)


def select_profile_targets(members: list[Member], max_profiles: int | None) -> list[Member]:
    """First *max_profiles* members that have a profile URL (all if None)."""
    with_urls = [m for m in members if m.profile_url]
    LOGGER.info("Found %d members with profile URLs", len(with_urls))
    if max_profiles is None:
        return with_urls
    if max_profiles < len(with_urls):
        LOGGER.info("Limiting profile scraping to first %d members", max_profiles)
    return with_urls[: max(0, max_profiles)]


async def enrich_entry(
    entry: CacheEntry,
    session,
    *,
    max_profiles: int | None,
    concurrency: int,
    delay_ms: int,
) -> tuple[list[Member], EnrichmentStats]:
    targets = select_profile_targets(entry.members, max_profiles)
    if not targets:
        LOGGER.info("No members with profile URLs found. Returning basic data.")
        return targets, EnrichmentStats()
    stats = await enrich_members(targets, session, concurrency=concurrency, delay_ms=delay_ms)
    return targets, stats


async def _enrich_with_session(
    entry: CacheEntry,
    session,
    options: RunOptions,
) -> tuple[list[Member], EnrichmentStats]:
    kwargs = {
        "max_profiles": None if options.all_profiles else options.max_profiles,
        "concurrency": options.concurrency,
        "delay_ms": options.delay_ms,
    }
    if session is not None:
        return await enrich_entry(entry, session, **kwargs)
    async with ProfilePageSession() as own_session:
        return await enrich_entry(entry, own_session, **kwargs)


def _finish(result: RunResult, run_log: ScrapeRunLog | None) -> RunResult:
    if run_log is not None:
        run_log.record_result(result)
    return result


def run_scrape(
    chamber: Chamber,
    options: RunOptions,
    *,
    gate: CacheGate | None = None,
    list_session=None,
    profile_session=None,
    run_log: ScrapeRunLog | None = None,
) -> RunResult:
    """Reuse a fresh cache entry or scrape, enrich and write a new one."""
    gate = gate or CacheGate()
    key = chamber.output_filename(
        profiles=options.include_profiles, all_profiles=options.all_profiles
    )

    decision = gate.decide(
        key, max_age_hours=options.max_age_hours, force_refresh=options.force_refresh
    )
    if decision.use_cache and decision.cached_data is not None:
        entry = decision.cached_data
        LOGGER.info("Using cached data from previous scraping...")
        age = cache_age_label(gate.path_for(key))
        if age:
            LOGGER.info("Cache created: %s", age)
        LOGGER.info(
            "Loaded %d members from cache (%d with profile data)",
            len(entry.members),
            sum(1 for m in entry.members if m.profile is not None),
        )
        return _finish(RunResult(entry=entry, from_cache=True, path=gate.path_for(key)), run_log)

    if options.force_refresh:
        LOGGER.info("Force refresh requested - ignoring cache")

    def _phase(name: str, detail: str | None = None):
        return run_log.phase(name, detail) if run_log is not None else nullcontext()

    LOGGER.info("Starting to scrape %s (%s)...", chamber.display_name, options.mode)
    with _phase("List", detail=chamber.key):
        if list_session is not None:
            entry = DietScraper(chamber, list_session).scrape_list()
        else:
            with ListPageSession() as own_list_session:
                entry = DietScraper(chamber, own_list_session).scrape_list()

    stats: EnrichmentStats | None = None
    profiled: list[Member] = []
    if options.include_profiles:
        with _phase("Profiles"):
            profiled, stats = asyncio.run(_enrich_with_session(entry, profile_session, options))
        LOGGER.info(
            "%d members have profile data", sum(1 for m in entry.members if m.profile is not None)
        )
    else:
        LOGGER.info("Profile scraping disabled. Returning basic member data only.")

    with _phase("Write"):
        path = gate.write(key, entry)
    return _finish(
        RunResult(entry=entry, from_cache=False, path=path, stats=stats, profiled=profiled),
        run_log,
    )
