#!/usr/bin/env python3
"""Recent scrape runs from the run log, newest first.

Shows chamber, mode, member counts and the slowest phase of each run, then
the average time per phase.

Usage::

    python scripts/log_dashboard.py               # last 20 runs
    python scripts/log_dashboard.py --tail 50
    python scripts/log_dashboard.py --chamber councillors
"""

from __future__ import annotations

import argparse
import sys
from datetime import datetime
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT / "src"))

from diet_scraper.run_log import ScrapeRun, get_log_path, load_recent_runs  # noqa: E402

G = "\033[92m"
R = "\033[91m"
D = "\033[90m"
X = "\033[0m"


def _local_time(iso: str) -> str:
    try:
        return datetime.fromisoformat(iso).astimezone().strftime("%m/%d %H:%M")
    except ValueError:
        return iso[:16]


def _fmt_dur(seconds: float | None) -> str:
    if seconds is None:
        return "-"
    if seconds >= 60:
        return f"{seconds / 60:.1f}m"
    return f"{seconds:.1f}s"


def format_run(run: ScrapeRun) -> list[str]:
    status = f"{G}{run.status}{X}" if run.status == "ok" else f"{R}{run.status}{X}"
    members = run.members if run.members is not None else "-"
    source = "cache" if run.from_cache else "scrape"
    lines = [
        f"  {D}{_local_time(run.started_at)}{X}  {run.chamber:16} "
        f"{run.mode:13} {_fmt_dur(run.duration_s):>6}  {status}  "
        f"{members} members ({source})"
    ]
    if run.profiles is not None:
        p = run.profiles
        lines.append(
            f"       {D}profiles: {p.succeeded}/{p.attempted} ok, {p.empty} empty, {p.failed} failed{X}"
        )
    slowest = run.slowest_phase
    if slowest is not None:
        lines.append(f"       {D}└ {slowest.name}: {_fmt_dur(slowest.duration_s)}{X}")
    if run.error:
        lines.append(f"       {R}{run.error}{X}")
    return lines


def phase_averages(runs: list[ScrapeRun]) -> dict[str, float]:
    durations: dict[str, list[float]] = {}
    for run in runs:
        for phase in run.phases:
            durations.setdefault(phase.name, []).append(phase.duration_s)
    return {name: sum(d) / len(d) for name, d in durations.items()}


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Show recent scrape runs.")
    parser.add_argument("--tail", "-n", type=int, default=20, help="Runs to show (default: 20).")
    parser.add_argument(
        "--chamber",
        choices=["representatives", "councillors"],
        default=None,
        help="Only runs for this chamber.",
    )
    parser.add_argument("--no-color", action="store_true", help="Disable ANSI color.")
    args = parser.parse_args(argv)

    if args.no_color or not sys.stdout.isatty():
        global G, R, D, X
        G = R = D = X = ""

    path = get_log_path()
    runs = load_recent_runs(n=args.tail, chamber=args.chamber)
    if not runs:
        print(f"No scrape runs in {path}.")
        return 0

    for run in runs:
        print("\n".join(format_run(run)))
    print()
    averages = phase_averages(runs)
    print("Average phase time: " + ", ".join(f"{n}: {_fmt_dur(s)}" for n, s in averages.items()))
    print(f"{D}Log file: {path}{X}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
