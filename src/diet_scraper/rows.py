"""Turn roster table rows into deduplicated ``RawRecord`` candidates.

The input is the page-source shape: an ordered list of rows, each an ordered
list of ``Cell`` (text plus the href of the name cell's anchor, if any).
``parse_table_rows`` produces that shape from roster HTML.

Header rows are not detected structurally; a name cell that is too short or
starts with a header keyword simply does not qualify as a name.  Column
positions differ between page templates, so the representatives scan looks
for district and count candidates across every cell of the row.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from bs4 import BeautifulSoup

from .classify import find_election_count, split_prefecture_district
from .constants import PREFECTURES, PROPORTIONAL_TAG, UNKNOWN
from .models import ElectionCount, PersonName, RawRecord

if TYPE_CHECKING:
    from .chambers import Chamber

# ── Pre-compiled regex patterns ──────────────────────────────────────────────

_RE_HONORIFIC = re.compile(r"君$")
_RE_ANNOTATION = re.compile(r"\[.*?\]")
_RE_DIGITS = re.compile(r"[0-9]+")
_RE_HTTP = re.compile(r"^https?://", re.IGNORECASE)
_RE_SCHEME = re.compile(r"^[a-z][a-z0-9+.\-]*:", re.IGNORECASE)
_RE_LEADING_PARENTS = re.compile(r"^(?:\.\./)+")
_RE_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class Cell:
    text: str
    href: str | None = None


@dataclass(frozen=True)
class RowFields:
    party: str
    raw_district: str
    election_count: ElectionCount | None = None
    term_expiration: str | None = None


# ── HTML → rows ──────────────────────────────────────────────────────────────


def parse_table_rows(html: str | bytes) -> list[list[Cell]]:
    """Every ``<tr>`` under a ``<table>``, as cell lists.  No table -> ``[]``."""
    soup = BeautifulSoup(html, "html.parser")
    rows: list[list[Cell]] = []
    for tr in soup.select("table tr"):
        cells: list[Cell] = []
        for index, td in enumerate(tr.find_all("td")):
            if index == 0:
                link = td.find("a")
                if link is not None:
                    href = link.get("href")
                    cells.append(Cell(link.get_text().strip(), href.strip() if href else None))
                    continue
            cells.append(Cell(td.get_text().strip()))
        rows.append(cells)
    return rows


# ── Cell predicates ──────────────────────────────────────────────────────────


def is_header_text(text: str, keywords: frozenset[str]) -> bool:
    t = text.strip()
    return len(t) < 2 or any(t.startswith(k) for k in keywords)


def contains_party(text: str, parties: tuple[str, ...]) -> bool:
    t = (text or "").strip()
    return any(keyword in t for keyword in parties)


def clean_name(name: str, *, strip_annotations: bool = False) -> str:
    if strip_annotations:
        name = _RE_ANNOTATION.sub("", name, count=1)
    return _RE_HONORIFIC.sub("", name.strip()).strip()


def normalize_furigana(furigana: str) -> str:
    text = furigana.replace("\n", " ").replace("　", " ")
    return _RE_WHITESPACE.sub(" ", text).strip()


# ── Profile URL resolution ───────────────────────────────────────────────────


def _reject_or_absolute(href: str) -> str | None:
    """Absolute http(s) passes through, any other scheme becomes ``""``.

    Returns None when *href* is relative and needs resolving.
    """
    if _RE_HTTP.match(href):
        return href
    if _RE_SCHEME.match(href):
        return ""
    return None


def resolve_representatives_url(href: str, base_url: str) -> str:
    href = href.strip()
    if not href:
        return ""
    absolute = _reject_or_absolute(href)
    if absolute is not None:
        return absolute
    if href.startswith("../../../../"):
        return href.replace("../../../../", f"{base_url}/internet/", 1)
    if href.startswith("../"):
        return f"{base_url}/internet/{_RE_LEADING_PARENTS.sub('', href)}"
    if href.startswith("/"):
        return f"{base_url}{href}"
    return f"{base_url}/internet/itdb_annai.nsf/html/statics/syu/{href}"


def resolve_councillors_url(href: str, base_url: str, session: str) -> str:
    href = href.strip()
    if not href:
        return ""
    absolute = _reject_or_absolute(href)
    if absolute is not None:
        return absolute
    if href.startswith("../"):
        return f"{base_url}/japanese/joho1/kousei/giin/{session}/{_RE_LEADING_PARENTS.sub('', href)}"
    if href.startswith("/"):
        return f"{base_url}{href}"
    return f"{base_url}/{href}"


# ── Per-template field location ──────────────────────────────────────────────


def representatives_fields(texts: list[str], chamber: Chamber) -> RowFields:
    """Party from cells 2-4, district and count from anywhere in the row."""
    keywords = chamber.header_keywords

    def _plain(text: str) -> bool:
        return bool(text) and not is_header_text(text, keywords) and not contains_party(
            text, chamber.parties
        )

    party = UNKNOWN
    for text in texts[2 : min(5, len(texts))]:
        if text and not is_header_text(text, keywords) and contains_party(text, chamber.parties):
            party = text
            break

    district = next(
        (t for t in texts if _plain(t) and split_prefecture_district(t) is not None),
        UNKNOWN,
    )
    election_count = find_election_count(texts)
    if district == UNKNOWN:
        district = next((t for t in texts if PROPORTIONAL_TAG in t), UNKNOWN)
    if district == UNKNOWN:
        district = next(
            (
                t
                for t in texts[2:]
                if _plain(t) and not _RE_DIGITS.fullmatch(t) and any(p in t for p in PREFECTURES)
            ),
            UNKNOWN,
        )
    return RowFields(party=party, raw_district=district, election_count=election_count)


def councillors_fields(texts: list[str], chamber: Chamber) -> RowFields:
    """Fixed columns: party, election, term expiration."""
    keywords = chamber.header_keywords

    def _cell(index: int) -> str:
        return texts[index] if index < len(texts) else ""

    party_text = _cell(2)
    party = (
        party_text
        if party_text
        and not is_header_text(party_text, keywords)
        and contains_party(party_text, chamber.parties)
        else UNKNOWN
    )
    election_text = _cell(3)
    election = election_text if election_text and not is_header_text(election_text, keywords) else UNKNOWN
    term_text = _cell(4)
    term = term_text if term_text and not is_header_text(term_text, keywords) else ""
    return RowFields(party=party, raw_district=election, term_expiration=term)


# ── Extractor ────────────────────────────────────────────────────────────────


def extract_raw_records(rows: list[list[Cell]], chamber: Chamber) -> list[RawRecord]:
    """Deduplicated raw records for one page.  Pure: same rows, same output."""
    records: list[RawRecord] = []
    seen_names: set[str] = set()
    for cells in rows:
        if len(cells) < chamber.min_cells:
            continue
        name_cell = cells[0]
        name = name_cell.text.strip()
        if not name or is_header_text(name, chamber.header_keywords):
            continue

        cleaned = clean_name(name, strip_annotations=chamber.strip_annotations)
        if not cleaned or cleaned in seen_names:
            continue
        seen_names.add(cleaned)

        texts = [cell.text.strip() for cell in cells]
        row = chamber.row_fields(texts, chamber)
        furigana = texts[1]
        profile_url = chamber.resolve_url(name_cell.href) if name_cell.href else ""

        records.append(
            RawRecord(
                name=PersonName.split(cleaned),
                party=row.party,
                raw_district=row.raw_district,
                furigana=(
                    furigana
                    if furigana and not is_header_text(furigana, chamber.header_keywords)
                    else None
                ),
                profile_url=profile_url or None,
                election_count=row.election_count,
                term_expiration=row.term_expiration,
            )
        )
    return records
