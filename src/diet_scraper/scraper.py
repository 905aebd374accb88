from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

import requests

from .chambers import Chamber
from .models import CacheEntry, Member, RawRecord
from .rows import Cell, extract_raw_records, normalize_furigana
from .session import ListPageSession, SessionNotInitializedError

LOGGER = logging.getLogger(__name__)


class NoMembersScrapedError(RuntimeError):
    """Raised when a chamber's roster produced zero valid members."""

    def __init__(self, chamber: str = "") -> None:
        msg = "No valid members were scraped. The website structure may have changed."
        super().__init__(f"{msg} ({chamber})" if chamber else msg)


# ── Record → Member ──────────────────────────────────────────────────────────


def is_valid_record(record: RawRecord) -> bool:
    return (
        len(record.name.full.strip()) >= 2
        and bool(record.party)
        and bool(record.raw_district)
    )


def build_member(record: RawRecord, chamber: Chamber) -> Member:
    return Member(
        name=record.name.full,
        party=record.party,
        election=chamber.classify(record.raw_district),
        furigana=normalize_furigana(record.furigana) if record.furigana else None,
        profile_url=record.profile_url,
        election_count=record.election_count,
        term_expiration=record.term_expiration,
    )


# ── Scraper ──────────────────────────────────────────────────────────────────


@dataclass
class DietScraper:
    """List phase for one chamber: roster pages → classified ``Member`` list."""

    chamber: Chamber
    session: ListPageSession | None

    def _fetch_rows(self, url: str) -> list[list[Cell]]:
        if self.session is None:
            raise SessionNotInitializedError("List page session not initialized")
        for candidate in (url, *self.chamber.fallback_urls):
            try:
                rows = self.session.fetch_rows(candidate)
            except requests.RequestException as exc:
                LOGGER.exception("Failed to fetch member list from %s: %s", candidate, exc)
                continue
            if candidate != url:
                LOGGER.info("Using fallback roster %s", candidate)
            return rows
        return []

    def scrape_list(self) -> CacheEntry:
        """Scrape every roster page; raises ``NoMembersScrapedError`` on zero members."""
        chamber = self.chamber
        pages = chamber.list_urls
        LOGGER.info("Scraping %s list from %d page(s)...", chamber.display_name, len(pages))

        members: list[Member] = []
        seen_names: set[str] = set()
        total_raw = 0
        for index, url in enumerate(pages):
            label = chamber.page_label(index)
            LOGGER.info("--- Scraping page %d/%d: %s ---", index + 1, len(pages), label)
            records = extract_raw_records(self._fetch_rows(url), chamber)
            LOGGER.info("Found %d raw members on %s", len(records), label)
            total_raw += len(records)

            for record in records:
                if not is_valid_record(record):
                    LOGGER.debug("Skipping invalid record %r", record.name.full)
                    continue
                if record.name.full in seen_names:
                    LOGGER.debug("Duplicate member across pages: %s", record.name.full)
                    continue
                seen_names.add(record.name.full)
                members.append(build_member(record, chamber))

        LOGGER.info(
            "%s summary: %d raw members, %d processed.",
            chamber.display_name,
            total_raw,
            len(members),
        )
        if not members:
            raise NoMembersScrapedError(chamber.display_name)
        return CacheEntry(
            members=members,
            scraped_at=datetime.now(timezone.utc).isoformat(),
            source=chamber.source,
        )
