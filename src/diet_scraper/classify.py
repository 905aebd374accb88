"""Classify free-text electoral cells into typed descriptors.

District cells on the chamber rosters mix several encodings in one column:
``東京1`` (prefecture plus district), ``（比）近畿`` (proportional block),
bare prefecture names, and occasionally a stray election count.  Each
classifier is an ordered list of ``(predicate, transform)`` rules; the first
rule whose predicate matches produces the descriptor.  Rule order is part of
the contract and is exposed (``REPRESENTATIVES_RULES``) so tests can pin it.

Election counts (``5`` or ``1（参2）``) are parsed independently by
``parse_election_count``; the two scans share no state.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable

from .constants import PREFECTURES, PROPORTIONAL_BLOCKS, PROPORTIONAL_TAG, PROPORTIONAL_WORD, UNKNOWN
from .models import ElectionCount, ElectionDescriptor, HouseAndSenate, HouseOnly

# ── Pre-compiled regex patterns ──────────────────────────────────────────────

_RE_DIGITS = re.compile(r"[0-9]+")
_RE_WHITESPACE = re.compile(r"\s+")
_RE_BLOCK = re.compile(PROPORTIONAL_TAG + "(" + "|".join(PROPORTIONAL_BLOCKS) + ")")
_RE_TRAILING_DIGITS = re.compile(r"(.+?)([0-9]+)")
_RE_HOUSE_AND_SENATE = re.compile(r"([0-9]+)[（(]参([0-9]+)[）)]")

MIN_ELECTION_COUNT = 1
MAX_ELECTION_COUNT = 25

Predicate = Callable[[str], bool]
Transform = Callable[[str], ElectionDescriptor]
Rule = tuple[str, Predicate, Transform]


def _is_digits(text: str) -> bool:
    # ASCII only: \d and str.isdigit() also accept full-width digits.
    return bool(_RE_DIGITS.fullmatch(text))


def split_prefecture_district(text: str) -> tuple[str, str] | None:
    """Return ``(prefecture, digits)`` for ``<prefecture><digits>`` text."""
    for prefecture in PREFECTURES:
        if text.startswith(prefecture):
            rest = text[len(prefecture) :]
            if _is_digits(rest):
                return prefecture, rest
    return None


def _sentinel(_text: str) -> ElectionDescriptor:
    return ElectionDescriptor.single_seat(UNKNOWN)


def _proportional(text: str) -> ElectionDescriptor:
    match = _RE_BLOCK.search(text)
    return ElectionDescriptor.proportional(match.group(1) if match else text)


def _prefecture_district(text: str) -> ElectionDescriptor:
    split = split_prefecture_district(text)
    if split is None:
        return _verbatim(text)
    return ElectionDescriptor.single_seat(*split)


def _trailing_digits(text: str) -> ElectionDescriptor:
    match = _RE_TRAILING_DIGITS.fullmatch(text)
    if match is None:
        return _verbatim(text)
    return ElectionDescriptor.single_seat(match.group(1), match.group(2))


def _verbatim(text: str) -> ElectionDescriptor:
    return ElectionDescriptor.single_seat(text)


def _first_contained_prefecture(text: str) -> str | None:
    return next((p for p in PREFECTURES if p in text), None)


REPRESENTATIVES_RULES: tuple[Rule, ...] = (
    ("empty-or-unknown", lambda t: not t or t == UNKNOWN, _sentinel),
    # Digits alone are an election count, surfaced by parse_election_count.
    ("election-count", _is_digits, _sentinel),
    ("proportional", lambda t: PROPORTIONAL_TAG in t or PROPORTIONAL_WORD in t, _proportional),
    ("prefecture-district", lambda t: split_prefecture_district(t) is not None, _prefecture_district),
    ("prefecture-only", lambda t: t in PREFECTURES, _verbatim),
    ("trailing-digits", lambda t: _RE_TRAILING_DIGITS.fullmatch(t) is not None, _trailing_digits),
    ("verbatim", lambda t: True, _verbatim),
)

COUNCILLORS_RULES: tuple[Rule, ...] = (
    ("empty-or-unknown", lambda t: not t or t == UNKNOWN, _sentinel),
    ("proportional", lambda t: PROPORTIONAL_WORD in t, ElectionDescriptor.proportional),
    (
        "contains-prefecture",
        lambda t: _first_contained_prefecture(t) is not None,
        lambda t: ElectionDescriptor.single_seat(_first_contained_prefecture(t) or t),
    ),
    ("verbatim", lambda t: True, _verbatim),
)


def apply_rules(rules: Iterable[Rule], text: str) -> ElectionDescriptor:
    for _name, predicate, transform in rules:
        if predicate(text):
            return transform(text)
    return _verbatim(text)


def classify(text: str | None) -> ElectionDescriptor:
    """Classify a House of Representatives district cell.  Never raises."""
    return apply_rules(REPRESENTATIVES_RULES, (text or "").strip())


def classify_councillors(text: str | None) -> ElectionDescriptor:
    """Classify a House of Councillors election cell.  Never raises."""
    return apply_rules(COUNCILLORS_RULES, (text or "").strip())


def matching_rule(text: str, rules: Iterable[Rule] = REPRESENTATIVES_RULES) -> str:
    """Name of the first rule that fires for *text* (for logging and tests)."""
    text = (text or "").strip()
    for name, predicate, _transform in rules:
        if predicate(text):
            return name
    return "verbatim"


# ── Election count ───────────────────────────────────────────────────────────


def _in_range(value: int) -> bool:
    return MIN_ELECTION_COUNT <= value <= MAX_ELECTION_COUNT


def parse_election_count(text: str | None) -> ElectionCount | None:
    """Parse ``5`` or ``1（参2）``; anything else, or out-of-range numbers, is None.

    Values outside 1..25 are usually years or seat numbers, not counts.
    """
    if not text:
        return None
    compact = _RE_WHITESPACE.sub("", text)
    match = _RE_HOUSE_AND_SENATE.fullmatch(compact)
    if match:
        house, senate = int(match.group(1)), int(match.group(2))
        if _in_range(house) and _in_range(senate):
            return HouseAndSenate(house=house, senate=senate)
        return None
    if _is_digits(compact):
        value = int(compact)
        if _in_range(value):
            return HouseOnly(house=value)
    return None


def find_election_count(cells: Iterable[str]) -> ElectionCount | None:
    """First cell that parses as an election count, scanning left to right."""
    for text in cells:
        count = parse_election_count(text)
        if count is not None:
            return count
    return None
