"""Grammar for the DETAILS part of a wager or leg line.

Each entry of ``DETAIL_GRAMMAR`` is a ``(matcher, extractor)`` pair; the first
matcher that accepts the text decides the bet kind. Matchers are plain
compiled patterns so each can be tested on its own.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, List, Tuple

from betledger.parsing.blocks import normalize_glyphs
from betledger.parsing.types import BetKind, LegStatus

MATCHUP_IN_PARENS = re.compile(
    r"\((?:\d[QH]\s+)?([A-Za-z0-9.&'\s-]+?)\s+(?:vrs|vs)\.?\s+(?:\d[QH]\s+)?([A-Za-z0-9.&'\s-]+?)\)",
    re.IGNORECASE,
)
TEASER_ADJUSTMENT = re.compile(r"\(B([+-])(\d+(?:\.\d+)?)\)")
SCORE_SUFFIX = re.compile(r"\(Score:[^)]*\)", re.IGNORECASE)
STATUS_TAG = re.compile(r"\[(Pending|Won|Lost|Push)\]", re.IGNORECASE)
TRAILING_ODDS = re.compile(r"([+-]\d{3,})(?!\d)")

TOTAL_WORDS = re.compile(r"\b(Over|Under)\s*(\d+(?:\.\d+)?)", re.IGNORECASE)
TOTAL_SHORTHAND = re.compile(r"\bTOTAL\s*([ou])\s*(\d+(?:\.\d+)?)", re.IGNORECASE)
SPREAD = re.compile(r"^(?P<team>.+?)\s*(?P<line>[+-]\d{1,2}(?:\.\d+)?)\s*(?P<odds>[+-]\d{3,})(?!\d)")
MONEYLINE = re.compile(r"^(?P<team>.+?)\s+(?P<odds>[+-]\d{3,})(?![\d.])")
BARE_SPREAD = re.compile(r"^(?P<team>.+?)\s*(?P<line>[+-]\d{1,2}(?:\.\d+)?)\s*$")

MAX_SPREAD_MAGNITUDE = 20.0


@dataclass
class LegDetails:
    """Tagged result of the detail grammar."""

    kind: BetKind
    participant: str | None = None
    opponent: str | None = None
    line: float | None = None
    teaser_adjustment: float | None = None
    over_under: str | None = None
    odds: int | None = None
    matchup: str | None = None


def clean_details(details: str) -> str:
    """Strip status tags and score suffixes and normalise glyphs."""

    text = normalize_glyphs(details)
    text = STATUS_TAG.sub(" ", text)
    text = SCORE_SUFFIX.sub(" ", text)
    return re.sub(r"\s+", " ", text).strip()


def leg_status_from_text(text: str) -> LegStatus:
    match = STATUS_TAG.search(text)
    if not match:
        return LegStatus.PENDING
    return LegStatus(match.group(1).lower())


def matchup_from_details(details: str) -> Tuple[str, str] | None:
    """Teams/fighters from ``(A vrs B)``, in printed order."""

    match = MATCHUP_IN_PARENS.search(details)
    if not match:
        return None
    return match.group(1).strip(), match.group(2).strip()


def _without_parens(details: str) -> str:
    return re.sub(r"\([^)]*\)", " ", details).strip()


def _odds_after(text: str) -> int | None:
    found = TRAILING_ODDS.findall(text)
    return int(found[-1]) if found else None


def _extract_total(body: str, match: re.Match[str]) -> LegDetails:
    direction = match.group(1)
    over_under = "Over" if direction.lower().startswith("o") else "Under"
    return LegDetails(
        kind=BetKind.TOTAL,
        line=float(match.group(2)),
        over_under=over_under,
        odds=_odds_after(body[match.end():]),
    )


def _match_total(body: str) -> re.Match[str] | None:
    return TOTAL_SHORTHAND.search(body) or TOTAL_WORDS.search(body)


def _match_spread(body: str) -> re.Match[str] | None:
    match = SPREAD.match(body)
    if match and abs(float(match.group("line"))) <= MAX_SPREAD_MAGNITUDE:
        return match
    return None


def _extract_spread(body: str, match: re.Match[str]) -> LegDetails:
    return LegDetails(
        kind=BetKind.SPREAD,
        participant=match.group("team").strip(),
        line=float(match.group("line")),
        odds=int(match.group("odds")),
    )


def _match_moneyline(body: str) -> re.Match[str] | None:
    match = MONEYLINE.match(body)
    if match and abs(int(match.group("odds"))) > 100:
        return match
    return None


def _extract_moneyline(body: str, match: re.Match[str]) -> LegDetails:
    return LegDetails(
        kind=BetKind.MONEYLINE,
        participant=match.group("team").strip(),
        odds=int(match.group("odds")),
    )


Matcher = Callable[[str], "re.Match[str] | None"]
Extractor = Callable[[str, "re.Match[str]"], LegDetails]

DETAIL_GRAMMAR: List[Tuple[Matcher, Extractor]] = [
    (_match_total, _extract_total),
    (_match_spread, _extract_spread),
    (_match_moneyline, _extract_moneyline),
]


def parse_details(details: str) -> LegDetails:
    """Classify and decompose one DETAILS string; unknown shapes stay ``UNKNOWN``."""

    text = clean_details(details)
    teaser = TEASER_ADJUSTMENT.search(text)
    teaser_adjustment = None
    if teaser:
        value = float(teaser.group(2))
        teaser_adjustment = value if teaser.group(1) == "+" else -value

    body = _without_parens(text)
    result = LegDetails(kind=BetKind.UNKNOWN)
    for matcher, extractor in DETAIL_GRAMMAR:
        match = matcher(body)
        if match:
            result = extractor(body, match)
            break

    matchup = matchup_from_details(text)
    if matchup:
        result.matchup = f"{matchup[0]} vs {matchup[1]}"
        if result.participant is None:
            result.participant = matchup[0]
            result.opponent = matchup[1]
        elif result.participant.upper() == matchup[0].upper():
            result.opponent = matchup[1]
        elif result.participant.upper() == matchup[1].upper():
            result.opponent = matchup[0]

    if teaser_adjustment is not None:
        result.teaser_adjustment = teaser_adjustment
        if result.line is None and result.kind is BetKind.UNKNOWN:
            bare = BARE_SPREAD.match(body)
            if bare:
                result.kind = BetKind.SPREAD
                result.participant = bare.group("team").strip()
                result.line = float(bare.group("line"))
        if result.line is not None:
            result.line = result.line + teaser_adjustment
    return result
