"""Profile page extraction.

Profile pages are biographical prose with no stable schema, so extraction is
a set of independent probes over the flattened body text, plus a key→value
mapping for the few pages that carry a table or definition list.  Each probe
is optional; a miss is silent.  The only ordering dependency is that the
university name is read from the first education fragment.

``parse_profile_document`` is the HTML side (BeautifulSoup) and
``extract_profile`` the pure side; tests mostly exercise the latter with a
hand-built ``ProfileDocument``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from bs4 import BeautifulSoup

from .constants import (
    DIET_POSITION_KEYWORDS,
    GOVERNMENT_POSITION_KEYWORDS,
    KANJI_NUMBERS,
    PARTY_POSITION_KEYWORDS,
    WEBSITE_EXCLUDE,
)
from .models import Office, Positions, Profile

LOGGER = logging.getLogger(__name__)

# ── Pre-compiled regex patterns ──────────────────────────────────────────────

_RE_WHITESPACE = re.compile(r"[\s　]+")
_RE_HEADING_NAME = re.compile(r"^([^(（]+)[（(]([^)）]+)[）)]")
_RE_ELECTION_DISTRICT = re.compile(r"([^、，。○\s]+選出)[、，]([^、，。○\s]+)")
_RE_BIRTH = re.compile(
    r"(昭和|平成|令和)([^年○、，\s]+年(?:[^月に○、，\s]+月)?(?:[^日に○、，\s]+日)?)([^に○、，]*)に生まれる"
)
_RE_EDUCATION = (
    re.compile(r"([^、，。○\s]+大学[^、，。○\s]*卒業)"),
    re.compile(r"([^、，。○\s]+大学院[^、，。○\s]*)"),
    re.compile(r"([^、，。○\s]+学部[^、，。○\s]*)"),
    re.compile(r"([^、，。○\s]+研究科[^、，。○\s]*)"),
)
_RE_UNIVERSITY = re.compile(r"([^、，\s]+?大学)")
_RE_ELECTION_HISTORY = re.compile(r"当選([^回]+回)[（(]([^）)]+)[）)]")
_RE_ELECTION_TIMES = re.compile(r"([\d一二三四五六七八九十]+)回")
_RE_ACHIEVEMENT = re.compile(r"(?:平成|令和|昭和)[^○]*?表彰[^○]*")
_RE_ORGANIZATION = re.compile(r"[（(]([^）)]*財[^）)]*)[）)]")
_RE_UPDATED = re.compile(r"(令和\d+年\d+月現在)")
_RE_POSITION_SPLIT = re.compile(r"[○、，]")
_RE_CURRENT_MARKER = re.compile(r"^(?:現在|現)")
_RE_LIST_SPLIT = re.compile(r"[、，,]")
_RE_EMAIL_HREF = re.compile(r"^mailto:", re.IGNORECASE)

# Paragraphs shorter than this are labels or captions, not narrative.
MIN_BIOGRAPHY_PARAGRAPH = 50

ADDITIONAL_ORGANIZATIONS_KEY = "関連組織"
ADDITIONAL_UPDATED_KEY = "情報更新日"


def clean_text(text: str | None) -> str:
    if not text:
        return ""
    return _RE_WHITESPACE.sub(" ", text).strip()


# ── Page document ────────────────────────────────────────────────────────────


@dataclass
class ProfileDocument:
    """What the page session hands the extractor for one profile page."""

    heading: str = ""
    body_text: str = ""
    pairs: list[tuple[str, str]] = field(default_factory=list)
    paragraphs: list[str] = field(default_factory=list)
    links: list[str] = field(default_factory=list)


def parse_profile_document(html: str | bytes) -> ProfileDocument:
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()

    heading_tag = soup.find(["h1", "h2", "h3"])
    heading = clean_text(heading_tag.get_text()) if heading_tag else ""

    pairs: list[tuple[str, str]] = []
    for tr in soup.find_all("tr"):
        cells = tr.find_all(["th", "td"])
        if len(cells) == 2:
            key = clean_text(cells[0].get_text())
            value = clean_text(cells[1].get_text())
            if key:
                pairs.append((key, value))
    for dt in soup.find_all("dt"):
        dd = dt.find_next_sibling("dd")
        if dd is not None:
            key = clean_text(dt.get_text())
            if key:
                pairs.append((key, clean_text(dd.get_text())))

    body = soup.body or soup
    return ProfileDocument(
        heading=heading,
        body_text=clean_text(body.get_text(" ")),
        pairs=pairs,
        paragraphs=[text for p in soup.find_all("p") if (text := clean_text(p.get_text()))],
        links=[a["href"].strip() for a in soup.find_all("a", href=True)],
    )


# ── Helpers ──────────────────────────────────────────────────────────────────


def convert_japanese_number(text: str) -> int:
    """Kanji 一..二十 or Arabic digits to int; anything else is 0."""
    if text in KANJI_NUMBERS:
        return KANJI_NUMBERS[text]
    try:
        return int(text)
    except ValueError:
        return 0


def extract_positions(text: str, keywords: tuple[str, ...]) -> list[str]:
    """Enumeration fragments of *text* that mention any of *keywords*, deduped."""
    positions: list[str] = []
    for sentence in _RE_POSITION_SPLIT.split(text):
        position = sentence.strip()
        if position and position not in positions and any(k in position for k in keywords):
            positions.append(position)
    return positions


def _split_list(value: str) -> list[str]:
    return [part.strip() for part in _RE_LIST_SPLIT.split(value) if part.strip()]


def _split_positions(text: str) -> tuple[Positions, Positions]:
    current, previous = Positions(), Positions()
    for bucket, keywords in (
        ("government", GOVERNMENT_POSITION_KEYWORDS),
        ("party", PARTY_POSITION_KEYWORDS),
        ("diet", DIET_POSITION_KEYWORDS),
    ):
        for position in extract_positions(text, keywords):
            target = current if _RE_CURRENT_MARKER.match(position) else previous
            getattr(target, bucket).append(position)
    return current, previous


# ── Key/value mapping ────────────────────────────────────────────────────────

# Occupation keys route by tense: the same "occupation" notion lands in a
# different field depending on whether the key denotes current or previous.
_OCCUPATION_KEYS: dict[str, str] = {
    "職業": "occupation",
    "現職": "occupation",
    "前職": "previous_occupation",
    "元職": "previous_occupation",
}
_SCALAR_KEYS: dict[str, str] = {
    "生年月日": "birth_date",
    "出身地": "birth_place",
    "学歴": "education",
    "ホームページ": "website",
    "メールアドレス": "email",
}
_OFFICE_KEYS: dict[str, str] = {
    "事務所住所": "address",
    "住所": "address",
    "電話": "phone",
    "電話番号": "phone",
    "FAX": "fax",
    "ＦＡＸ": "fax",
}


def _apply_pair(profile: Profile, key: str, value: str) -> None:
    if key in _OCCUPATION_KEYS:
        target = _OCCUPATION_KEYS[key]
        if target == "previous_occupation":
            profile.previous_occupation = _split_list(value)
        else:
            profile.occupation = value
    elif key in _SCALAR_KEYS:
        setattr(profile, _SCALAR_KEYS[key], value)
    elif key == "委員会" or key == "所属委員会":
        profile.committees = _split_list(value)
    elif key in _OFFICE_KEYS:
        if profile.office is None:
            profile.office = Office()
        setattr(profile.office, _OFFICE_KEYS[key], value)
    else:
        profile.additional_info[key] = value


# ── Probes ───────────────────────────────────────────────────────────────────


def _probe_heading(profile: Profile, heading: str) -> None:
    if not heading:
        return
    match = _RE_HEADING_NAME.match(heading)
    if match:
        profile.full_name = match.group(1).strip()
        profile.furigana = match.group(2).strip()
    else:
        profile.full_name = heading


def _probe_election_district(profile: Profile, text: str) -> bool:
    match = _RE_ELECTION_DISTRICT.search(text)
    if not match:
        return False
    profile.election_district = match.group(1).strip()
    profile.party_affiliation = match.group(2).strip()
    return True


def _probe_birth(profile: Profile, text: str) -> bool:
    match = _RE_BIRTH.search(text)
    if not match:
        return False
    profile.birth_date = profile.birth_date or match.group(1) + match.group(2)
    place = match.group(3).strip()
    if place and not profile.birth_place:
        profile.birth_place = place
    return True


def _probe_education(profile: Profile, text: str) -> bool:
    fragments: list[str] = []
    for pattern in _RE_EDUCATION:
        for match in pattern.finditer(text):
            fragment = match.group(1).strip()
            if fragment and fragment not in fragments:
                fragments.append(fragment)
    if not fragments:
        return False
    profile.education = profile.education or fragments[0]
    profile.academic_background = fragments
    university = _RE_UNIVERSITY.search(profile.education)
    if university:
        profile.university = university.group(1).strip()
    return True


def _probe_election_history(profile: Profile, text: str) -> bool:
    match = _RE_ELECTION_HISTORY.search(text)
    if not match:
        return False
    profile.election_history = f"当選{match.group(1)}"
    times = _RE_ELECTION_TIMES.search(match.group(1))
    if times:
        profile.election_count = convert_japanese_number(times.group(1))
    profile.term_numbers = match.group(2).split()
    return True


def _probe_positions(profile: Profile, text: str) -> bool:
    current, previous = _split_positions(text)
    if not current.is_empty():
        profile.current_positions = current
    if not previous.is_empty():
        profile.previous_positions = previous
    return not (current.is_empty() and previous.is_empty())


def _probe_achievements(profile: Profile, text: str) -> bool:
    profile.achievements = [m.group(0).strip() for m in _RE_ACHIEVEMENT.finditer(text)]
    return bool(profile.achievements)


def _probe_additional(profile: Profile, text: str) -> None:
    organizations = [
        m.group(1).strip()
        for m in _RE_ORGANIZATION.finditer(text)
        if "年" not in m.group(1) and "選挙" not in m.group(1)
    ]
    if organizations:
        profile.additional_info[ADDITIONAL_ORGANIZATIONS_KEY] = "、".join(organizations)
    updated = _RE_UPDATED.search(text)
    if updated:
        profile.additional_info[ADDITIONAL_UPDATED_KEY] = updated.group(1)


def _probe_links(profile: Profile, links: list[str]) -> None:
    website = next(
        (h for h in links if h.lower().startswith(("http://", "https://")) and WEBSITE_EXCLUDE not in h),
        None,
    )
    if website and not profile.website:
        profile.website = website
    mailto = next((h for h in links if _RE_EMAIL_HREF.match(h)), None)
    if mailto and not profile.email:
        profile.email = mailto.split(":", 1)[1].split("?", 1)[0]


# ── Entry point ──────────────────────────────────────────────────────────────


def extract_profile(document: ProfileDocument) -> Profile | None:
    """Run every probe over *document*; ``None`` when nothing was found."""
    profile = Profile()
    text = clean_text(document.body_text)

    _probe_heading(profile, document.heading)
    for key, value in document.pairs:
        if value:
            _apply_pair(profile, key, value)

    narrative = False
    if text:
        narrative |= _probe_election_district(profile, text)
        narrative |= _probe_birth(profile, text)
        narrative |= _probe_education(profile, text)
        narrative |= _probe_positions(profile, text)
        narrative |= _probe_election_history(profile, text)
        narrative |= _probe_achievements(profile, text)
        _probe_additional(profile, text)
    _probe_links(profile, document.links)

    if narrative:
        profile.career_history = text
    long_paragraphs = [p for p in document.paragraphs if len(p) > MIN_BIOGRAPHY_PARAGRAPH]
    if long_paragraphs:
        profile.biography = "\n".join(long_paragraphs)
    elif narrative:
        profile.biography = text

    if not profile.has_any_field():
        LOGGER.debug("No profile fields found (heading=%r)", document.heading)
        return None
    return profile
