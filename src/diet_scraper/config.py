"""Centralized configuration for the Diet member scraper.

All settings live here so they can be overridden by environment variables or a
``.env`` file without touching source code.  Timeouts are in milliseconds to
match how the chamber sites are usually profiled; convert with ``ms_to_s``.

Usage::

    from diet_scraper.config import OUTPUT_DIR, PROFILE_CONCURRENCY
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from current working directory
load_dotenv()

LOGGER = logging.getLogger(__name__)


def _env(key: str, fallback: str = "") -> str:
    """Read an env var, falling back to *fallback*."""
    return os.getenv(key, fallback)


def _env_int(key: str, fallback: int) -> int:
    raw = _env(key).strip()
    if not raw:
        return fallback
    try:
        return int(raw)
    except ValueError:
        LOGGER.warning("Invalid %s=%r, using default %d.", key, raw, fallback)
        return fallback


def _env_float(key: str, fallback: float) -> float:
    raw = _env(key).strip()
    if not raw:
        return fallback
    try:
        return float(raw)
    except ValueError:
        LOGGER.warning("Invalid %s=%r, using default %s.", key, raw, fallback)
        return fallback


def ms_to_s(value_ms: int) -> float:
    return max(0, value_ms) / 1000.0


# ── House of Representatives ─────────────────────────────────────────────────
REPRESENTATIVES_BASE_URL: str = _env(
    "HOUSE_OF_REPRESENTATIVES_BASE_URL", "https://www.shugiin.go.jp"
).rstrip("/")

_REPRESENTATIVES_LIST_DIR = f"{REPRESENTATIVES_BASE_URL}/internet/itdb_annai.nsf/html/statics/syu"

DEFAULT_REPRESENTATIVES_LIST_URLS: list[str] = [
    f"{_REPRESENTATIVES_LIST_DIR}/{n}giin.htm" for n in range(1, 11)
]

# ── House of Councillors ─────────────────────────────────────────────────────
COUNCILLORS_BASE_URL: str = _env("HOUSE_OF_COUNCILLORS_BASE_URL", "https://www.sangiin.go.jp").rstrip(
    "/"
)
COUNCILLORS_SESSION: str = _env("HOUSE_OF_COUNCILLORS_SESSION", "218").strip() or "218"
COUNCILLORS_LIST_URL: str = _env(
    "HOUSE_OF_COUNCILLORS_URL",
    f"{COUNCILLORS_BASE_URL}/japanese/joho1/kousei/giin/{COUNCILLORS_SESSION}/giin.htm",
).strip()
# Tried in order when the current-session page cannot be fetched.
COUNCILLORS_FALLBACK_URLS: list[str] = [
    f"{COUNCILLORS_BASE_URL}/japanese/joho1/kousei/giin/217/giin.htm",
]

# ── Timeouts (ms) ────────────────────────────────────────────────────────────
PAGE_LOAD_TIMEOUT_MS: int = _env_int("PAGE_LOAD_TIMEOUT", 10000)
NAVIGATION_TIMEOUT_MS: int = _env_int("NAVIGATION_TIMEOUT", 15000)
PROFILE_SCRAPE_TIMEOUT_MS: int = _env_int("PROFILE_SCRAPE_TIMEOUT", 10000)
NETWORK_IDLE_TIMEOUT_MS: int = _env_int("NETWORK_IDLE_TIMEOUT", 5000)

# ── Cache / output ───────────────────────────────────────────────────────────
OUTPUT_DIR: Path = Path(_env("DIET_OUTPUT_DIR", "out"))
CACHE_MAX_AGE_HOURS: float = _env_float("DIET_CACHE_MAX_AGE_HOURS", 24.0)

# ── Enrichment / politeness ──────────────────────────────────────────────────
PROFILE_CONCURRENCY: int = _env_int("DIET_PROFILE_CONCURRENCY", 2)
PROFILE_DELAY_MS: int = _env_int("DIET_PROFILE_DELAY_MS", 1500)
MAX_PROFILES: int = _env_int("DIET_MAX_PROFILES", 10)
# Seconds between sequential list-page GETs.
REQUEST_DELAY: float = _env_float("DIET_REQUEST_DELAY", 1.0)
USER_AGENT: str = _env(
    "DIET_USER_AGENT",
    "diet-scraper/0.1",
)


def get_representatives_list_urls() -> list[str]:
    """Return the syllabary list pages, from env or defaults."""
    custom = _env("HOUSE_OF_REPRESENTATIVES_URLS").strip()
    if custom:
        return [u.strip() for u in custom.split(",") if u.strip()]
    return list(DEFAULT_REPRESENTATIVES_LIST_URLS)
