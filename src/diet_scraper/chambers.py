"""Per-chamber roster descriptions: where the pages are and how to read them."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from . import config
from .classify import classify, classify_councillors
from .constants import (
    COUNCILLORS_HEADER_KEYWORDS,
    COUNCILLORS_PARTIES,
    HEADER_KEYWORDS,
    REPRESENTATIVES_PARTIES,
    SYLLABARY_LABELS,
)
from .models import ElectionDescriptor
from .rows import (
    RowFields,
    councillors_fields,
    representatives_fields,
    resolve_councillors_url,
    resolve_representatives_url,
)


@dataclass(frozen=True)
class Chamber:
    key: str
    slug: str
    display_name: str
    source: str
    list_urls: tuple[str, ...]
    page_labels: tuple[str, ...]
    header_keywords: frozenset[str]
    parties: tuple[str, ...]
    min_cells: int
    row_fields: Callable[[list[str], Chamber], RowFields] = field(repr=False)
    resolve_url: Callable[[str], str] = field(repr=False)
    classify: Callable[[str], ElectionDescriptor] = field(repr=False)
    strip_annotations: bool = False
    # Alternatives for a single-page roster whose primary URL fails.
    fallback_urls: tuple[str, ...] = ()

    def page_label(self, index: int) -> str:
        if index < len(self.page_labels):
            return self.page_labels[index]
        return f"page {index + 1}"

    def output_filename(self, *, profiles: bool = False, all_profiles: bool = False) -> str:
        if all_profiles:
            return f"{self.slug}-members-with-all-profiles.json"
        if profiles:
            return f"{self.slug}-members-with-profiles.json"
        return f"{self.slug}-members.json"


REPRESENTATIVES = Chamber(
    key="representatives",
    slug="house-of-representatives",
    display_name="House of Representatives",
    source="house-of-representatives-list",
    list_urls=tuple(config.get_representatives_list_urls()),
    page_labels=SYLLABARY_LABELS,
    header_keywords=HEADER_KEYWORDS,
    parties=REPRESENTATIVES_PARTIES,
    min_cells=3,
    row_fields=representatives_fields,
    resolve_url=lambda href: resolve_representatives_url(href, config.REPRESENTATIVES_BASE_URL),
    classify=classify,
)

COUNCILLORS = Chamber(
    key="councillors",
    slug="house-of-councillors",
    display_name="House of Councillors",
    source="house-of-councillors-list",
    list_urls=(config.COUNCILLORS_LIST_URL,),
    page_labels=(),
    header_keywords=COUNCILLORS_HEADER_KEYWORDS,
    parties=COUNCILLORS_PARTIES,
    min_cells=4,
    row_fields=councillors_fields,
    resolve_url=lambda href: resolve_councillors_url(
        href, config.COUNCILLORS_BASE_URL, config.COUNCILLORS_SESSION
    ),
    classify=classify_councillors,
    strip_annotations=True,
    fallback_urls=tuple(config.COUNCILLORS_FALLBACK_URLS),
)

CHAMBERS: dict[str, Chamber] = {c.key: c for c in (REPRESENTATIVES, COUNCILLORS)}
