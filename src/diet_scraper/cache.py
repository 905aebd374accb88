"""Persisted scrape results and the gate that decides whether to reuse them.

One JSON file per chamber × mode under ``OUTPUT_DIR``::

    { "members": [...], "scrapedAt": "<ISO-8601>", "source": "<tag>" }

Keys are camelCase on disk.  Staleness is judged from the file's mtime, not
from ``scrapedAt``, so touching a file refreshes it.  A stale, unreadable or
malformed file is a cache miss; the gate never raises on bad cache data.
"""

from __future__ import annotations

import json
import logging
import os
import time
from dataclasses import dataclass, fields
from pathlib import Path

from . import config
from .models import (
    CacheEntry,
    ElectionCount,
    ElectionDescriptor,
    HouseAndSenate,
    HouseOnly,
    Member,
    Office,
    Positions,
    Profile,
)

LOGGER = logging.getLogger(__name__)


class CacheValidationError(ValueError):
    """Raised when cached data fails schema validation."""


@dataclass
class CacheDecision:
    use_cache: bool
    cached_data: CacheEntry | None = None


# ── (De)serialization ────────────────────────────────────────────────────────


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _is_empty(value: object) -> bool:
    return value is None or value == "" or value == [] or value == {}


def election_count_to_dict(count: ElectionCount) -> dict:
    if isinstance(count, HouseAndSenate):
        return {"house": count.house, "senate": count.senate}
    return {"house": count.house}


def election_count_from_value(value: object) -> ElectionCount | None:
    # Older files stored a bare integer for house-only counts.
    if isinstance(value, int) and not isinstance(value, bool):
        return HouseOnly(house=value)
    if isinstance(value, dict) and isinstance(value.get("house"), int):
        if isinstance(value.get("senate"), int):
            return HouseAndSenate(house=value["house"], senate=value["senate"])
        return HouseOnly(house=value["house"])
    return None


def election_to_dict(election: ElectionDescriptor) -> dict:
    d: dict = {"system": election.system}
    if election.prefecture is not None:
        d["prefecture"] = election.prefecture
    if election.district_number is not None:
        d["number"] = election.district_number
    if election.area is not None:
        d["area"] = election.area
    return d


def election_from_dict(d: dict) -> ElectionDescriptor:
    return ElectionDescriptor(
        system=d["system"],
        prefecture=d.get("prefecture"),
        district_number=d.get("number"),
        area=d.get("area"),
    )


def profile_to_dict(profile: Profile) -> dict:
    d: dict = {}
    for f in fields(profile):
        value = getattr(profile, f.name)
        if isinstance(value, (Positions, Office)):
            value = {k: v for k, v in vars(value).items() if not _is_empty(v)}
        if not _is_empty(value):
            d[_camel(f.name)] = value
    return d


def profile_from_dict(d: dict) -> Profile:
    profile = Profile()
    for f in fields(profile):
        key = _camel(f.name)
        if key not in d:
            continue
        value = d[key]
        if f.name in ("current_positions", "previous_positions"):
            value = Positions(**value)
        elif f.name == "office":
            value = Office(**value)
        setattr(profile, f.name, value)
    return profile


def member_to_dict(member: Member) -> dict:
    d: dict = {"name": member.name}
    if member.furigana:
        d["furigana"] = member.furigana
    d["party"] = member.party
    if member.profile_url:
        d["profileUrl"] = member.profile_url
    if member.election_count is not None:
        d["electionCount"] = election_count_to_dict(member.election_count)
    d["election"] = election_to_dict(member.election)
    if member.term_expiration is not None:
        d["termExpiration"] = member.term_expiration
    if member.profile is not None:
        d["profile"] = profile_to_dict(member.profile)
    return d


def member_from_dict(d: dict) -> Member:
    return Member(
        name=d["name"],
        party=d["party"],
        election=election_from_dict(d["election"]),
        furigana=d.get("furigana"),
        profile_url=d.get("profileUrl"),
        election_count=election_count_from_value(d.get("electionCount")),
        term_expiration=d.get("termExpiration"),
        profile=profile_from_dict(d["profile"]) if d.get("profile") else None,
    )


def entry_to_dict(entry: CacheEntry) -> dict:
    return {
        "members": [member_to_dict(m) for m in entry.members],
        "scrapedAt": entry.scraped_at,
        "source": entry.source,
    }


def validate_entry_dict(data: object) -> dict:
    """Check the top-level shape; raises ``CacheValidationError``."""
    if not isinstance(data, dict):
        raise CacheValidationError("Cache entry is not an object")
    if not isinstance(data.get("members"), list):
        raise CacheValidationError("Cache entry 'members' is not a list")
    for key in ("scrapedAt", "source"):
        if not isinstance(data.get(key), str):
            raise CacheValidationError(f"Cache entry '{key}' is not a string")
    return data


def entry_from_dict(data: object) -> CacheEntry:
    d = validate_entry_dict(data)
    try:
        members = [member_from_dict(m) for m in d["members"]]
    except (KeyError, TypeError, AttributeError) as exc:
        raise CacheValidationError(f"Malformed member in cache entry: {exc}") from exc
    return CacheEntry(members=members, scraped_at=d["scrapedAt"], source=d["source"])


# ── Age ──────────────────────────────────────────────────────────────────────


def cache_age_hours(path: Path) -> float | None:
    """Age of *path* in hours, or None if it doesn't exist."""
    try:
        mtime = path.stat().st_mtime
    except OSError:
        return None
    return (time.time() - mtime) / 3600


def cache_age_label(path: Path) -> str | None:
    """Human label such as ``3時間12分前`` or ``7分前``."""
    hours = cache_age_hours(path)
    if hours is None:
        return None
    total_minutes = max(0, int(hours * 60))
    whole_hours, minutes = divmod(total_minutes, 60)
    if whole_hours > 0:
        return f"{whole_hours}時間{minutes}分前"
    return f"{minutes}分前"


# ── Gate ─────────────────────────────────────────────────────────────────────


class CacheGate:
    """Reads and writes cache entries in one directory."""

    def __init__(self, directory: Path | None = None) -> None:
        self.directory = Path(directory) if directory is not None else config.OUTPUT_DIR

    def path_for(self, key: str) -> Path:
        return self.directory / key

    def load(self, key: str) -> CacheEntry | None:
        """Parse and validate the entry for *key*, ignoring age."""
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            with open(path, encoding="utf-8") as f:
                return entry_from_dict(json.load(f))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, CacheValidationError) as exc:
            LOGGER.warning("Failed to parse cached data from %s: %s", path, exc)
            return None

    def decide(
        self,
        key: str,
        *,
        max_age_hours: float = 24,
        force_refresh: bool = False,
    ) -> CacheDecision:
        if force_refresh:
            return CacheDecision(use_cache=False)
        age = cache_age_hours(self.path_for(key))
        if age is None or age >= max_age_hours:
            if age is not None:
                LOGGER.info(
                    "Cache %s is %.1fh old (threshold: %.0fh); refreshing.",
                    key,
                    age,
                    max_age_hours,
                )
            return CacheDecision(use_cache=False)
        entry = self.load(key)
        if entry is None:
            return CacheDecision(use_cache=False)
        return CacheDecision(use_cache=True, cached_data=entry)

    def write(self, key: str, entry: CacheEntry) -> Path:
        """Write *entry* atomically (temp file, then replace)."""
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.path_for(key)
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(entry_to_dict(entry), f, indent=2, ensure_ascii=False)
        os.replace(tmp_path, path)
        LOGGER.info("Saved %d members to %s", len(entry.members), path)
        return path
