#!/usr/bin/env python3
"""Scrape Diet member rosters, optionally with profile pages.

Modes:

  basic         roster data only → out/<chamber>-members.json
  profiles      roster + the first N profiles (--max-profiles, default 10)
                → out/<chamber>-members-with-profiles.json
  all-profiles  roster + every profile (aliases: profiles-all, all)
                → out/<chamber>-members-with-all-profiles.json

A fresh result (younger than --max-age-hours) is reused unless
--force-refresh is given.

Usage::

    python scripts/scrape.py                               # representatives, basic
    python scripts/scrape.py basic --councillors           # councillors, basic
    python scripts/scrape.py profiles --max-profiles 25    # 25 profiles
    python scripts/scrape.py all-profiles --senate         # councillors, every profile
    python scripts/scrape.py profiles --force-refresh      # ignore cache
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

# Ensure the project is importable
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT / "src"))

from diet_scraper import config  # noqa: E402
from diet_scraper.cache import member_to_dict  # noqa: E402
from diet_scraper.chambers import COUNCILLORS, REPRESENTATIVES  # noqa: E402
from diet_scraper.pipeline import MODE_ALIASES, RunOptions, run_scrape  # noqa: E402
from diet_scraper.run_log import ScrapeRunLog  # noqa: E402
from diet_scraper.scraper import NoMembersScrapedError  # noqa: E402
from diet_scraper.session import SessionNotInitializedError  # noqa: E402


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Scrape House of Representatives / House of Councillors members.",
    )
    parser.add_argument(
        "mode",
        nargs="?",
        default="basic",
        choices=sorted(MODE_ALIASES),
        help="basic, profiles or all-profiles (default: basic).",
    )
    parser.add_argument(
        "--councillors",
        "--house-of-councillors",
        "--senate",
        dest="councillors",
        action="store_true",
        help="Scrape the House of Councillors instead of Representatives.",
    )
    parser.add_argument(
        "--force-refresh",
        action="store_true",
        help="Ignore any cached result and scrape again.",
    )
    parser.add_argument(
        "--max-profiles",
        type=int,
        default=config.MAX_PROFILES,
        help=f"Profiles to fetch in 'profiles' mode (default: {config.MAX_PROFILES}).",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        default=config.PROFILE_CONCURRENCY,
        help=f"Profile pages fetched per batch (default: {config.PROFILE_CONCURRENCY}).",
    )
    parser.add_argument(
        "--delay-ms",
        type=int,
        default=config.PROFILE_DELAY_MS,
        help=f"Pause between profile batches (default: {config.PROFILE_DELAY_MS}).",
    )
    parser.add_argument(
        "--max-age-hours",
        type=float,
        default=config.CACHE_MAX_AGE_HOURS,
        help=f"Reuse cached results younger than this (default: {config.CACHE_MAX_AGE_HOURS:g}).",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger = logging.getLogger("scrape")

    chamber = COUNCILLORS if args.councillors else REPRESENTATIVES
    options = RunOptions(
        mode=args.mode,
        force_refresh=args.force_refresh,
        max_profiles=args.max_profiles,
        concurrency=args.concurrency,
        delay_ms=args.delay_ms,
        max_age_hours=args.max_age_hours,
    )

    try:
        with ScrapeRunLog(chamber.key, options.mode, force_refresh=options.force_refresh) as log:
            result = run_scrape(chamber, options, run_log=log)
    except (NoMembersScrapedError, SessionNotInitializedError) as exc:
        logger.error("%s", exc)
        return 1

    members = result.entry.members
    logger.info("%d %s members (%s).", len(members), chamber.display_name, result.path)
    if options.include_profiles:
        sample = next((m for m in members if m.profile is not None), None)
        if sample is not None:
            logger.info(
                "Sample profile data:\n%s",
                json.dumps(member_to_dict(sample), indent=2, ensure_ascii=False),
            )
    else:
        logger.info(
            "Sample data:\n%s",
            json.dumps([member_to_dict(m) for m in members[:3]], indent=2, ensure_ascii=False),
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
