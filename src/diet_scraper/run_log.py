"""Scrape history: one JSON line per CLI run.

Each line is a ``ScrapeRun``: chamber, mode, whether the cache was reused,
member and profile counts, and how long each phase (List, Profiles, Write)
took.  ``scripts/log_dashboard.py`` reads it back.  The file is
``.run_log.jsonl`` unless ``DIET_RUN_LOG`` points elsewhere.

Usage::

    from diet_scraper.run_log import ScrapeRunLog

    with ScrapeRunLog("representatives", "profiles") as log:
        result = run_scrape(chamber, options, run_log=log)
"""

from __future__ import annotations

import json
import logging
import os
import time
import uuid
from contextlib import contextmanager
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .pipeline import RunResult

LOGGER = logging.getLogger(__name__)

DEFAULT_LOG_PATH = Path(".run_log.jsonl")


def get_log_path() -> Path:
    return Path(os.environ.get("DIET_RUN_LOG", str(DEFAULT_LOG_PATH)))


@dataclass
class PhaseTiming:
    name: str
    duration_s: float
    detail: str | None = None


@dataclass
class ProfileCounts:
    attempted: int = 0
    succeeded: int = 0
    empty: int = 0
    failed: int = 0


@dataclass
class ScrapeRun:
    """One scrape run as stored in the log."""

    run_id: str
    chamber: str
    mode: str
    started_at: str  # ISO
    ended_at: str | None = None
    duration_s: float | None = None
    status: str = "running"  # ok | error | running
    force_refresh: bool = False
    from_cache: bool | None = None
    members: int | None = None
    profiles: ProfileCounts | None = None
    output: str | None = None
    phases: list[PhaseTiming] = field(default_factory=list)
    error: str | None = None

    @property
    def slowest_phase(self) -> PhaseTiming | None:
        return max(self.phases, key=lambda p: p.duration_s, default=None)

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)

    @classmethod
    def from_json_line(cls, line: str) -> ScrapeRun | None:
        """Parse one log line; blank, malformed or foreign lines give None."""
        line = line.strip()
        if not line:
            return None
        try:
            d = json.loads(line)
            profiles = d.get("profiles")
            return cls(
                run_id=d["run_id"],
                chamber=d["chamber"],
                mode=d["mode"],
                started_at=d["started_at"],
                ended_at=d.get("ended_at"),
                duration_s=d.get("duration_s"),
                status=d.get("status", "ok"),
                force_refresh=bool(d.get("force_refresh", False)),
                from_cache=d.get("from_cache"),
                members=d.get("members"),
                profiles=ProfileCounts(**profiles) if profiles is not None else None,
                output=d.get("output"),
                phases=[PhaseTiming(**p) for p in d.get("phases", [])],
                error=d.get("error"),
            )
        except (json.JSONDecodeError, KeyError, TypeError, AttributeError):
            return None


class ScrapeRunLog:
    """Times the phases of one scrape and appends a ``ScrapeRun`` on exit."""

    def __init__(
        self,
        chamber: str,
        mode: str,
        *,
        force_refresh: bool = False,
        log_path: Path | None = None,
    ):
        self.log_path = log_path if log_path is not None else get_log_path()
        self.run = ScrapeRun(
            run_id=str(uuid.uuid4())[:8],
            chamber=chamber,
            mode=mode,
            started_at="",
            force_refresh=force_refresh,
        )
        self._start_time: float | None = None

    @contextmanager
    def phase(self, name: str, detail: str | None = None):
        t0 = time.perf_counter()
        try:
            yield
        finally:
            self.run.phases.append(
                PhaseTiming(name=name, duration_s=round(time.perf_counter() - t0, 2), detail=detail)
            )

    def record_result(self, result: RunResult) -> None:
        self.run.from_cache = result.from_cache
        self.run.members = len(result.entry.members)
        self.run.output = str(result.path)
        if result.stats is not None:
            self.run.profiles = ProfileCounts(
                attempted=result.stats.attempted,
                succeeded=result.stats.succeeded,
                empty=result.stats.empty,
                failed=result.stats.failed,
            )

    def __enter__(self) -> ScrapeRunLog:
        self.run.started_at = datetime.now(timezone.utc).isoformat()
        self._start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_type is not None:
            self.run.status = "error"
            self.run.error = f"{exc_type.__name__}: {exc_val}" if exc_val else exc_type.__name__
        else:
            self.run.status = "ok"
        self.run.ended_at = datetime.now(timezone.utc).isoformat()
        if self._start_time is not None:
            self.run.duration_s = round(time.perf_counter() - self._start_time, 2)
        self._append()
        return None  # do not suppress

    def _append(self) -> None:
        try:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.log_path, "a", encoding="utf-8") as f:
                f.write(self.run.to_json_line() + "\n")
        except OSError as e:
            LOGGER.warning("Run log append failed: %s", e)


def load_recent_runs(
    n: int = 100,
    *,
    chamber: str | None = None,
    log_path: Path | None = None,
) -> list[ScrapeRun]:
    """The last *n* runs, newest first, optionally for one chamber."""
    path = log_path or get_log_path()
    if not path.exists():
        return []
    runs: list[ScrapeRun] = []
    with open(path, encoding="utf-8", errors="replace") as f:
        for line in f:
            run = ScrapeRun.from_json_line(line)
            if run is not None and (chamber is None or run.chamber == chamber):
                runs.append(run)
    return runs[::-1][:n]
