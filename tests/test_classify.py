"""Tests for the electoral descriptor classifiers and election-count parsing."""

from __future__ import annotations

import pytest

from diet_scraper.classify import (
    COUNCILLORS_RULES,
    REPRESENTATIVES_RULES,
    classify,
    classify_councillors,
    find_election_count,
    matching_rule,
    parse_election_count,
    split_prefecture_district,
)
from diet_scraper.constants import PREFECTURES, PROPORTIONAL_BLOCKS, UNKNOWN
from diet_scraper.models import (
    PROPORTIONAL,
    SINGLE_SEAT,
    ElectionDescriptor,
    HouseAndSenate,
    HouseOnly,
)

DISTRICT_NUMBERS = [str(n) for n in range(1, 100)]


class TestPrefectureDistrict:
    @pytest.mark.parametrize("prefecture", PREFECTURES)
    def test_every_prefecture_and_number(self, prefecture: str) -> None:
        for number in DISTRICT_NUMBERS:
            result = classify(f"{prefecture}{number}")
            assert result == ElectionDescriptor(
                system=SINGLE_SEAT, prefecture=prefecture, district_number=number
            )

    def test_number_kept_as_scraped(self) -> None:
        assert classify("東京01").district_number == "01"

    def test_split_requires_digits_after_prefecture(self) -> None:
        assert split_prefecture_district("東京1") == ("東京", "1")
        assert split_prefecture_district("東京都第1区") is None
        assert split_prefecture_district("東京") is None
        assert split_prefecture_district("1東京") is None

    def test_full_width_digits_are_not_district_numbers(self) -> None:
        assert split_prefecture_district("東京１") is None

    def test_prefecture_only(self) -> None:
        assert classify("北海道") == ElectionDescriptor.single_seat("北海道")

    def test_surrounding_whitespace_ignored(self) -> None:
        assert classify("  大阪3 ") == ElectionDescriptor.single_seat("大阪", "3")


class TestSentinel:
    @pytest.mark.parametrize("text", ["", "   ", None, UNKNOWN])
    def test_empty_or_unknown(self, text) -> None:
        assert classify(text) == ElectionDescriptor.single_seat(UNKNOWN)

    def test_bare_digits_are_an_election_count(self) -> None:
        assert classify("5") == ElectionDescriptor.single_seat(UNKNOWN)
        assert matching_rule("12") == "election-count"


class TestProportional:
    @pytest.mark.parametrize("block", PROPORTIONAL_BLOCKS)
    def test_tagged_block(self, block: str) -> None:
        result = classify(f"（比）{block}")
        assert result.system == PROPORTIONAL
        assert result.area == block
        assert result.prefecture is None
        assert result.is_proportional

    def test_unrecognized_block_keeps_raw_text(self) -> None:
        assert classify("比例東北ブロック") == ElectionDescriptor.proportional("比例東北ブロック")

    def test_tag_without_known_block(self) -> None:
        assert classify("（比）不詳").area == "（比）不詳"

    def test_proportional_wins_over_prefecture(self) -> None:
        # 北海道 is both a block and a prefecture.
        assert classify("（比）北海道").system == PROPORTIONAL
        assert matching_rule("（比）北海道") == "proportional"


class TestFallbacks:
    def test_trailing_digits(self) -> None:
        assert classify("島しょ部3") == ElectionDescriptor.single_seat("島しょ部", "3")
        assert matching_rule("島しょ部3") == "trailing-digits"

    def test_verbatim(self) -> None:
        assert classify("東京都第25区") == ElectionDescriptor.single_seat("東京都第25区")
        assert matching_rule("東京都第25区") == "verbatim"

    def test_transforms_keep_text_they_cannot_split(self) -> None:
        transforms = {name: transform for name, _predicate, transform in REPRESENTATIVES_RULES}
        assert transforms["prefecture-district"]("比例") == ElectionDescriptor.single_seat("比例")
        assert transforms["trailing-digits"]("東京都") == ElectionDescriptor.single_seat("東京都")

    def test_never_raises_on_odd_input(self) -> None:
        for text in ("（", "比", "()", "0", "　", "東京\n1"):
            assert isinstance(classify(text), ElectionDescriptor)


class TestRuleOrder:
    def test_representatives_order(self) -> None:
        assert [name for name, _p, _t in REPRESENTATIVES_RULES] == [
            "empty-or-unknown",
            "election-count",
            "proportional",
            "prefecture-district",
            "prefecture-only",
            "trailing-digits",
            "verbatim",
        ]

    def test_councillors_order(self) -> None:
        assert [name for name, _p, _t in COUNCILLORS_RULES] == [
            "empty-or-unknown",
            "proportional",
            "contains-prefecture",
            "verbatim",
        ]

    def test_first_matching_rule_wins(self) -> None:
        assert matching_rule("") == "empty-or-unknown"
        assert matching_rule("東京1") == "prefecture-district"
        assert matching_rule("東京") == "prefecture-only"


class TestClassifyCouncillors:
    def test_proportional_keeps_raw_text(self) -> None:
        assert classify_councillors("比例") == ElectionDescriptor.proportional("比例")

    def test_prefecture_with_suffix(self) -> None:
        assert classify_councillors("東京都") == ElectionDescriptor.single_seat("東京")
        assert classify_councillors("京都府") == ElectionDescriptor.single_seat("京都")

    def test_combined_district_uses_first_listed_prefecture(self) -> None:
        assert classify_councillors("鳥取・島根") == ElectionDescriptor.single_seat("鳥取")

    def test_unknown_and_verbatim(self) -> None:
        assert classify_councillors("") == ElectionDescriptor.single_seat(UNKNOWN)
        assert classify_councillors("全国区") == ElectionDescriptor.single_seat("全国区")


class TestParseElectionCount:
    def test_house_only(self) -> None:
        assert parse_election_count("5") == HouseOnly(house=5)
        assert parse_election_count("1") == HouseOnly(house=1)
        assert parse_election_count("25") == HouseOnly(house=25)

    @pytest.mark.parametrize("text", ["1（参2）", "1(参2)", " 1 （参 2） ", "1（参2)"])
    def test_house_and_senate(self, text: str) -> None:
        assert parse_election_count(text) == HouseAndSenate(house=1, senate=2)

    @pytest.mark.parametrize(
        "text",
        ["0", "26", "1.5", "abc", "", "   ", None, "1（参）", "（参2）", "1（2）", "1（参26）", "５"],
    )
    def test_rejected(self, text) -> None:
        assert parse_election_count(text) is None

    def test_find_first_count_in_row(self) -> None:
        cells = ["逢沢　一郎", "あいさわ", "自由民主党", "岡山1", "13", "2"]
        assert find_election_count(cells) == HouseOnly(house=13)

    def test_find_none(self) -> None:
        assert find_election_count(["逢沢　一郎", "岡山1", "2024"]) is None
