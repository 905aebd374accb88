from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from dataclasses import replace

import httpx
import pytest
import requests

from diet_scraper.chambers import COUNCILLORS, REPRESENTATIVES, Chamber
from diet_scraper.models import ElectionDescriptor, HouseAndSenate, HouseOnly, Member
from diet_scraper.profile import ProfileDocument
from diet_scraper.rows import Cell, parse_table_rows

# ── Roster pages ──────────────────────────────────────────────────────────────

REPRESENTATIVES_PAGE_1 = """
<html><body>
<table>
  <tr><th>氏名</th><th>ふりがな</th><th>会派</th><th>選挙区</th><th>当選回数</th></tr>
  <tr><td>氏名</td><td>ふりがな</td><td>会派</td><td>選挙区</td><td>当選回数</td></tr>
  <tr>
    <td><a href="../../../../itdb_annai.nsf/html/statics/syu/a001.htm">逢沢　一郎君</a></td>
    <td>あいさわ　いちろう</td><td>自由民主党・無所属の会</td><td>岡山1</td><td>13</td>
  </tr>
  <tr>
    <td>青山　周平君</td>
    <td>あおやま　しゅうへい</td><td>自由民主党・無所属の会</td><td>（比）東海</td><td>3（参1）</td>
  </tr>
  <tr>
    <td><a href="/internet/itdb_annai.nsf/html/statics/syu/a003.htm">逢沢　一郎</a></td>
    <td>あいさわ　いちろう</td><td>立憲民主党・無所属</td><td>東京2</td><td>1</td>
  </tr>
  <tr><td>短い</td><td>x</td></tr>
</table>
</body></html>
"""

REPRESENTATIVES_PAGE_2 = """
<html><body>
<table>
  <tr>
    <td><a href="a010.htm">井上　信治君</a></td>
    <td>いのうえ　しんじ</td><td>自由民主党・無所属の会</td><td>東京都第25区</td><td>6</td>
  </tr>
  <tr>
    <td><a href="javascript:void(0)">青山　周平君</a></td>
    <td>あおやま　しゅうへい</td><td>自由民主党・無所属の会</td><td>（比）東海</td><td>3</td>
  </tr>
</table>
</body></html>
"""

COUNCILLORS_PAGE = """
<html><body>
<table>
  <tr><td>あ行</td><td>読み方</td><td>会派</td><td>選挙区</td><td>任期満了</td></tr>
  <tr>
    <td><a href="../profile/7001001.htm">青木　愛[選]</a></td>
    <td>あおき　あい</td><td>立憲</td><td>比例</td><td>令和10年7月25日</td>
  </tr>
  <tr>
    <td><a href="../profile/7002002.htm">赤池　誠章</a></td>
    <td>あかいけ　まさあき</td><td>自民</td><td>山梨</td><td>令和10年7月25日</td>
  </tr>
</table>
</body></html>
"""

TEST_LIST_URLS = (
    "https://www.shugiin.test/syu/1giin.htm",
    "https://www.shugiin.test/syu/2giin.htm",
)


# ── Fakes ─────────────────────────────────────────────────────────────────────


class FakeListSession:
    """Serves canned roster HTML by URL; unknown URLs fail like a dead host."""

    def __init__(self, pages: dict[str, str], events: list[str] | None = None) -> None:
        self.pages = pages
        self.requested: list[str] = []
        self.events = events if events is not None else []

    def fetch_rows(self, url: str) -> list[list[Cell]]:
        self.requested.append(url)
        self.events.append(f"list:{url}")
        if url not in self.pages:
            raise requests.ConnectionError(f"cannot reach {url}")
        return parse_table_rows(self.pages[url])


class FakeProfileSession:
    """In-memory stand-in for ``ProfilePageSession``.

    Tracks how many pages are open at once and how many were released, so
    tests can check the concurrency bound and scoped cleanup.
    """

    def __init__(
        self,
        documents: dict[str, ProfileDocument] | None = None,
        *,
        default: ProfileDocument | None = None,
        failing: tuple[str, ...] = (),
        latency: float = 0.01,
        events: list[str] | None = None,
    ) -> None:
        self.documents = documents or {}
        self.default = default
        self.failing = set(failing)
        self.latency = latency
        self.is_open = True
        self.in_flight = 0
        self.high_water = 0
        self.released = 0
        self.requested: list[str] = []
        self.events = events if events is not None else []

    @asynccontextmanager
    async def open(self, url: str):
        self.requested.append(url)
        self.events.append(f"start:{url}")
        self.in_flight += 1
        self.high_water = max(self.high_water, self.in_flight)
        try:
            await asyncio.sleep(self.latency)
            if url in self.failing:
                raise httpx.ConnectError(f"connection refused: {url}")
            yield self.documents.get(url, self.default)
        finally:
            self.in_flight -= 1
            self.released += 1
            self.events.append(f"end:{url}")


# ── Fixtures ──────────────────────────────────────────────────────────────────


@pytest.fixture
def profile_document() -> ProfileDocument:
    return ProfileDocument(
        heading="逢沢 一郎（あいさわ いちろう）",
        body_text=(
            "逢沢 一郎（あいさわ いちろう） 小選挙区（岡山県第一区）選出、自由民主党・無所属の会 "
            "○昭和二十九年六月岡山県岡山市に生まれる ○慶應義塾大学工学部卒業 "
            "○外務政務次官、衆議院議院運営委員長、党幹事長代理 ○現衆議院懲罰委員長 "
            "○平成二十三年五月永年在職議員として衆議院より表彰される "
            "○当選十三回（38 39 40 41 42 43 44 45 46 47 48 49 50） （令和6年11月現在）"
        ),
    )


@pytest.fixture
def sample_members() -> list[Member]:
    return [
        Member(
            name=f"議員　{i}",
            party="自由民主党",
            election=ElectionDescriptor.single_seat("東京", str(i)),
            profile_url=f"https://www.shugiin.test/profile/{i}.htm",
            election_count=HouseOnly(house=i),
        )
        for i in range(1, 6)
    ]


@pytest.fixture
def councillor_member() -> Member:
    return Member(
        name="青木　愛",
        party="立憲",
        election=ElectionDescriptor.proportional("比例"),
        furigana="あおき あい",
        profile_url="https://www.sangiin.test/profile/7001001.htm",
        election_count=HouseAndSenate(house=3, senate=2),
        term_expiration="令和10年7月25日",
    )


@pytest.fixture
def representatives_chamber() -> Chamber:
    return replace(REPRESENTATIVES, list_urls=TEST_LIST_URLS)


@pytest.fixture
def councillors_chamber() -> Chamber:
    return replace(
        COUNCILLORS,
        list_urls=("https://www.sangiin.test/218/giin.htm",),
        fallback_urls=("https://www.sangiin.test/217/giin.htm",),
    )


@pytest.fixture
def list_session() -> FakeListSession:
    return FakeListSession(
        {TEST_LIST_URLS[0]: REPRESENTATIVES_PAGE_1, TEST_LIST_URLS[1]: REPRESENTATIVES_PAGE_2}
    )
