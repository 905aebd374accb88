from __future__ import annotations

from dataclasses import dataclass, field, fields

SINGLE_SEAT = "single-seat"
PROPORTIONAL = "proportional-representation"


@dataclass(frozen=True)
class PersonName:
    full: str
    last: str
    first: str

    @classmethod
    def split(cls, full: str) -> PersonName:
        """Family name first, given name(s) after the first whitespace run."""
        parts = full.split()
        return cls(full=full, last=parts[0] if parts else "", first=" ".join(parts[1:]))


# ── Election count: tagged variant ───────────────────────────────────────────


@dataclass(frozen=True)
class HouseOnly:
    house: int


@dataclass(frozen=True)
class HouseAndSenate:
    house: int
    senate: int


ElectionCount = HouseOnly | HouseAndSenate


@dataclass(frozen=True)
class ElectionDescriptor:
    system: str  # SINGLE_SEAT or PROPORTIONAL
    prefecture: str | None = None
    district_number: str | None = None  # digits exactly as scraped
    area: str | None = None

    @classmethod
    def single_seat(cls, prefecture: str, district_number: str | None = None) -> ElectionDescriptor:
        return cls(system=SINGLE_SEAT, prefecture=prefecture, district_number=district_number)

    @classmethod
    def proportional(cls, area: str) -> ElectionDescriptor:
        return cls(system=PROPORTIONAL, area=area)

    @property
    def is_proportional(self) -> bool:
        return self.system == PROPORTIONAL


@dataclass
class RawRecord:
    """One table row before classification."""

    name: PersonName
    party: str
    raw_district: str
    furigana: str | None = None
    profile_url: str | None = None
    election_count: ElectionCount | None = None
    term_expiration: str | None = None


# ── Profile ──────────────────────────────────────────────────────────────────


@dataclass
class Office:
    address: str | None = None
    phone: str | None = None
    fax: str | None = None


@dataclass
class Positions:
    government: list[str] = field(default_factory=list)
    party: list[str] = field(default_factory=list)
    diet: list[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.government or self.party or self.diet)


# Identification fields taken from the page heading; on their own they do not
# amount to an extracted profile.
_HEADING_FIELDS = frozenset({"full_name", "furigana"})


@dataclass
class Profile:
    full_name: str | None = None
    furigana: str | None = None
    birth_date: str | None = None
    birth_place: str | None = None
    education: str | None = None
    university: str | None = None
    academic_background: list[str] = field(default_factory=list)
    occupation: str | None = None
    previous_occupation: list[str] = field(default_factory=list)
    committees: list[str] = field(default_factory=list)
    election_district: str | None = None
    party_affiliation: str | None = None
    election_history: str | None = None
    election_count: int | None = None
    term_numbers: list[str] = field(default_factory=list)
    current_positions: Positions | None = None
    previous_positions: Positions | None = None
    achievements: list[str] = field(default_factory=list)
    career_history: str | None = None
    biography: str | None = None
    website: str | None = None
    email: str | None = None
    office: Office | None = None
    additional_info: dict[str, str] = field(default_factory=dict)

    def has_any_field(self) -> bool:
        for f in fields(self):
            if f.name in _HEADING_FIELDS:
                continue
            value = getattr(self, f.name)
            if isinstance(value, Positions):
                if not value.is_empty():
                    return True
            elif isinstance(value, Office):
                if value.address or value.phone or value.fax:
                    return True
            elif value not in (None, "", [], {}):
                return True
        return False


@dataclass
class Member:
    name: str
    party: str
    election: ElectionDescriptor
    furigana: str | None = None
    profile_url: str | None = None
    election_count: ElectionCount | None = None
    term_expiration: str | None = None  # House of Councillors only
    profile: Profile | None = None


@dataclass
class CacheEntry:
    members: list[Member]
    scraped_at: str  # ISO-8601
    source: str  # e.g. "house-of-representatives-list"
