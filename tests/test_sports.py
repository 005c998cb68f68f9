"""Sport lookup tests."""

from __future__ import annotations

import json

from betledger.parsing.sports import SportLookup


def test_tags_resolve_first(lookup: SportLookup) -> None:
    assert lookup.detect("CFB") == "NCAAF"
    assert lookup.detect("MU") == "UFC"
    assert lookup.detect("[NBA] OHIO STATE") == "NBA"


def test_keyword_rules(lookup: SportLookup) -> None:
    assert lookup.detect("Indiana Pacers vs Boston Celtics") == "NBA"
    assert lookup.detect("KC CHIEFS vs DEN BRONCOS") == "NFL"
    assert lookup.detect("Toronto Maple Leafs vs Boston Bruins") == "NHL"
    assert lookup.detect("OHIO STATE vs MICHIGAN") == "NCAAF"
    assert lookup.detect("E-Sports / CS2. IEM Katowice") == "CS2"
    assert lookup.detect("something unrelated") == "Other"


def test_keywords_match_whole_words(lookup: SportLookup) -> None:
    # "HEAT" must not fire inside "CHEATERS"
    assert lookup.detect("CHEATERS") == "Other"


def test_prop_sport_football_market_forces_college(lookup: SportLookup) -> None:
    assert lookup.detect_prop_sport("Receiving Yards", "Western Michigan vs Toledo", "") == "NCAAF"
    assert lookup.detect_prop_sport("Rushing Yards", "KC CHIEFS vs DEN BRONCOS", "") == "NFL"
    assert lookup.detect_prop_sport("Rushing Yards", "", "") == "NCAAF"


def test_prop_sport_from_matchup_then_block(lookup: SportLookup) -> None:
    assert lookup.detect_prop_sport("Points", "Indiana Pacers vs Boston Celtics", "") == "NBA"
    assert lookup.detect_prop_sport("Points", "", "WNBA Points") == "WNBA"


def test_custom_table_from_path(tmp_path) -> None:
    path = tmp_path / "lookup.json"
    path.write_text(
        json.dumps({"version": "test-1", "tags": {"KBO": ["KBO"]}, "rules": [{"sport": "KBO", "contains": ["TIGERS"]}]}),
        encoding="utf-8",
    )
    custom = SportLookup.from_path(path)
    assert custom.version == "test-1"
    assert custom.detect("KIA TIGERS") == "KBO"
    assert custom.detect("LAKERS") == "Other"
