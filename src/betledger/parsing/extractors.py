"""Type-specific field extraction for wager blocks."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Tuple

from betledger.parsing.blocks import block_lines, normalize_glyphs, parse_slip_datetime
from betledger.parsing.legs import (
    SCORE_SUFFIX,
    STATUS_TAG,
    clean_details,
    leg_status_from_text,
    matchup_from_details,
    parse_details,
)
from betledger.parsing.sports import SportLookup
from betledger.parsing.types import BetKind, ParsedLeg

logger = logging.getLogger(__name__)

LEG_LINE = re.compile(r"^\[([^\]]+)\]\s*\[([^\]]+)\]\s*-\s*\[(\d+)\]\s*(.+)$")
COMBAT_HEADER = re.compile(r"^\[([^\]]+)\]\s*\[([^\]]+)\]\s*-[ \t]*(?![ \t]*\[\d+\])(.+)$")
COMBAT_SELECTION = re.compile(r"^\[(\d+)\]\s*([^(]+?)\s*\(([^)]+)\)")
COMBAT_LEG_SELECTION = re.compile(
    r"\[(\d+)\]\s*(.+?)\s+([+-]?\d+)\s*\(([^)]+)\)\s*(\[(?:Pending|Won|Lost|Push)\])?",
    re.IGNORECASE,
)
COMBAT_TAGS = ("MU", "UFC", "MMA")
FIGHT_MATCHUP = re.compile(r"(.+?)\s+(?:vrs|vs)\.?\s+(.+)", re.IGNORECASE)
UPPER_TEAM = re.compile(r"^([A-Z0-9&.'\s]+?)(?=\s*[+-]|\s*$)")
LEG_STATUS_SUFFIX = re.compile(r"(\[(?:Pending|Won|Lost|Push)\])?\s*(\(Score:\s*[^)]*\))?\s*$", re.IGNORECASE)

PROP_WITH_TEAM = re.compile(r"^(.+?)\s*\(([A-Z]{2,4})\)\s+(Over|Under)\s+([\d.]+)\s+(.+)$", re.IGNORECASE)
PROP_PLAIN = re.compile(r"^(.+?)\s+(Over|Under)\s+([\d.]+)\s+(.+)$", re.IGNORECASE)
OVER_UNDER_WORD = re.compile(r"\b(Over|Under)\b", re.IGNORECASE)
PROP_STAT_WORD = re.compile(r"\b(Yards|Points|Assists|Rebounds|Receptions|Touchdowns)\b", re.IGNORECASE)
LEG_PREFIX = re.compile(r"^\[[^\]]+\]\s*(?:\[[^\]]+\]\s*)?-\s*(?:\[\d+\]\s*)?")
PARLAY_TEAMS = re.compile(r"PARLAY\s*\((\d+)\s*TEAMS?\)", re.IGNORECASE)

LIVE_GAME_ID = re.compile(r"\bG(\d+)")
LIVE_TEAMS = re.compile(r"([A-Za-z0-9.'\s]+?)\s+vs\s+([A-Za-z0-9.'\s]+?)(?=\s*/|$)", re.IGNORECASE)
LIVE_LEAGUE = re.compile(r"E-Sports\s*/\s*([^.]+)\.?\s*(.+)?", re.IGNORECASE)
LIVE_SELECTION = re.compile(r"Winner\s*(?:\([^)]+\))?\s*/\s*([^/\n]+?)(?:\s*[-+]\d|$)", re.IGNORECASE)
INLINE_ODDS = re.compile(r"([+-]\d+)(?:\s|$)")

INCOMPLETE_MATCHUP_LENGTH = 50


def _title_over_under(value: str) -> str:
    return value[:1].upper() + value[1:].lower()


def _normalize_matchup(raw: str) -> str:
    match = FIGHT_MATCHUP.match(raw.strip())
    if not match:
        return raw.strip()
    return f"{match.group(1).strip()} vs {match.group(2).strip()}"


def _sport_for_tag(tag: str, block: str, lookup: SportLookup) -> str:
    sport = lookup.detect(tag)
    if sport == lookup.default:
        sport = lookup.detect(block)
    return sport


# --------------------------------------------------------------------------- #
# Straight bets
# --------------------------------------------------------------------------- #


@dataclass
class StraightDetails:
    game: str
    description: str
    sport: str
    game_start_time: datetime | None
    incomplete_matchup: bool
    leg: ParsedLeg | None = None


def _match_combat_straight(lines: List[str]) -> Tuple[re.Match[str], re.Match[str]] | None:
    for idx, line in enumerate(lines[:-1]):
        header = COMBAT_HEADER.match(line)
        if not header:
            continue
        selection = COMBAT_SELECTION.match(lines[idx + 1])
        if selection:
            return header, selection
    return None


def _extract_combat_straight(
    matches: Tuple[re.Match[str], re.Match[str]], block: str, lookup: SportLookup
) -> StraightDetails:
    header, selection = matches
    fighter_and_odds = normalize_glyphs(selection.group(2).strip())
    matchup_raw = selection.group(3).strip()
    game = _normalize_matchup(matchup_raw)
    sport = _sport_for_tag(header.group(2), block, lookup)
    start = parse_slip_datetime(header.group(1))
    description = f"{fighter_and_odds} ({matchup_raw})"
    details = parse_details(description)
    leg = ParsedLeg(
        raw_description=description,
        bet_kind=details.kind,
        sport=sport,
        participant=details.participant,
        opponent=details.opponent,
        game_date=start,
        line=details.line,
        over_under=details.over_under,
        odds=details.odds,
    )
    return StraightDetails(
        game=game,
        description=description,
        sport=sport,
        game_start_time=start,
        incomplete_matchup=False,
        leg=leg,
    )


def _match_generic_straight(lines: List[str]) -> re.Match[str] | None:
    for line in lines:
        match = LEG_LINE.match(line)
        if match:
            return match
    return None


def _extract_generic_straight(match: re.Match[str], block: str, lookup: SportLookup) -> StraightDetails:
    date_text, sport_tag, _line_number, details_raw = match.groups()
    description = clean_details(details_raw)
    description = re.sub(r"\s*\b(Pending|Won|Lost)\s*$", "", description, flags=re.IGNORECASE).strip()
    sport = _sport_for_tag(sport_tag, block, lookup)
    details = parse_details(description)

    matchup = matchup_from_details(description)
    if matchup:
        game = f"{matchup[0]} vs {matchup[1]}"
    else:
        team = UPPER_TEAM.match(description)
        game = team.group(1).strip() if team and team.group(1).strip() else description

    start = parse_slip_datetime(date_text)
    leg = ParsedLeg(
        raw_description=description,
        bet_kind=details.kind,
        sport=sport,
        participant=details.participant,
        opponent=details.opponent,
        game_date=start,
        line=details.line,
        over_under=details.over_under,
        odds=details.odds,
    )
    return StraightDetails(
        game=game,
        description=description,
        sport=sport,
        game_start_time=start,
        incomplete_matchup=" vs " not in game and len(game) < INCOMPLETE_MATCHUP_LENGTH,
        leg=leg,
    )


STRAIGHT_GRAMMAR: List[Tuple[Callable, Callable]] = [
    (_match_combat_straight, _extract_combat_straight),
    (_match_generic_straight, _extract_generic_straight),
]


def extract_straight(block: str, lookup: SportLookup) -> StraightDetails:
    lines = block_lines(block)
    for matcher, extractor in STRAIGHT_GRAMMAR:
        matched = matcher(lines)
        if matched:
            return extractor(matched, block, lookup)
    return StraightDetails(
        game="Unknown",
        description="Unknown bet",
        sport=lookup.detect(block),
        game_start_time=None,
        incomplete_matchup=True,
    )


# --------------------------------------------------------------------------- #
# Player props
# --------------------------------------------------------------------------- #


@dataclass
class PropDetails:
    game: str
    description: str
    sport: str
    player: str | None = None
    player_team: str | None = None
    market: str | None = None
    over_under: str | None = None
    line: str | None = None
    prop_lines: List[str] = field(default_factory=list)
    legs: List[ParsedLeg] = field(default_factory=list)
    game_start_time: datetime | None = None


def is_matchup_line(line: str) -> bool:
    if " vs " not in line or "[" in line:
        return False
    return not OVER_UNDER_WORD.search(line) and not PROP_STAT_WORD.search(line)


def is_prop_line(line: str) -> bool:
    return bool(OVER_UNDER_WORD.search(line)) and " vs " not in line


def parse_prop_line(line: str) -> dict[str, str | None] | None:
    """Split ``PLAYER (TEAM) Over|Under LINE STAT`` into its fields."""

    text = LEG_PREFIX.sub("", clean_details(line)).strip()
    text = re.sub(r"\s*\b(Pending|Won|Lost)\s*$", "", text, flags=re.IGNORECASE)
    match = PROP_WITH_TEAM.match(text)
    if match:
        return {
            "player": match.group(1).strip(),
            "player_team": match.group(2).strip().upper(),
            "over_under": _title_over_under(match.group(3)),
            "line": match.group(4).strip(),
            "market": match.group(5).strip(),
            "description": text,
        }
    match = PROP_PLAIN.match(text)
    if match:
        return {
            "player": match.group(1).strip(),
            "player_team": None,
            "over_under": _title_over_under(match.group(2)),
            "line": match.group(3).strip(),
            "market": match.group(4).strip(),
            "description": text,
        }
    return None


def matchup_sides(game: str) -> Tuple[str | None, str | None]:
    sides = [side.strip() for side in game.split(" vs ")] if game else []
    if len(sides) != 2 or not all(sides):
        return None, None
    return sides[0], sides[1]


def _prop_leg(
    line: str,
    fields: dict[str, str | None] | None,
    sport: str,
    start: datetime | None,
    game: str = "",
) -> ParsedLeg:
    if not fields:
        return ParsedLeg(raw_description=clean_details(line), bet_kind=BetKind.UNKNOWN, sport=sport, game_date=start)
    try:
        value = float(fields["line"] or "")
    except ValueError:
        value = None
    # the event is searched by team; the player's own side is not known from the slip
    team, other = matchup_sides(game)
    return ParsedLeg(
        raw_description=fields["description"] or line,
        bet_kind=BetKind.PROP,
        sport=sport,
        participant=fields["player"],
        team=team,
        opponent=other,
        game_date=start,
        line=value,
        over_under=fields["over_under"],
        stat_name=fields["market"],
        status=leg_status_from_text(line),
    )


def extract_player_prop(block: str, lookup: SportLookup) -> PropDetails:
    lines = block_lines(block)
    game = next((line for line in lines if is_matchup_line(line)), "")
    prop_lines = [line for line in lines if is_prop_line(line)]

    start = None
    for line in lines:
        if line.startswith("["):
            start = parse_slip_datetime(line)
            if start:
                break

    fields = parse_prop_line(prop_lines[0]) if prop_lines else None
    market = fields["market"] if fields else None
    sport = lookup.detect_prop_sport(market, game, block)

    details = PropDetails(game=game, description="", sport=sport, game_start_time=start)
    details.prop_lines = [clean_details(LEG_PREFIX.sub("", line)) for line in prop_lines]
    details.legs = [_prop_leg(line, parse_prop_line(line), sport, start, game) for line in prop_lines]
    if fields:
        details.description = fields["description"] or ""
        details.player = fields["player"]
        details.player_team = fields["player_team"]
        details.market = fields["market"]
        details.over_under = fields["over_under"]
        details.line = fields["line"]
    elif prop_lines:
        details.description = details.prop_lines[0]
    if not details.description:
        details.description = game
    return details


# --------------------------------------------------------------------------- #
# Parlay, teaser and round robin legs
# --------------------------------------------------------------------------- #


@dataclass
class MultiLegDetails:
    legs: List[str]
    parsed_legs: List[ParsedLeg]
    description: str
    game_start_time: datetime | None


def _standard_leg(match: re.Match[str], block: str, lookup: SportLookup) -> Tuple[str, ParsedLeg]:
    date_text, sport_tag, _line_number, full_text = match.groups()
    full_text = full_text.strip()
    suffix = LEG_STATUS_SUFFIX.search(full_text)
    detail = full_text
    status = ""
    score = ""
    if suffix and suffix.group(0):
        detail = full_text[: suffix.start()].strip()
        status = suffix.group(1) or ""
        score = suffix.group(2) or ""
    detail = re.sub(r"\s+", " ", normalize_glyphs(detail)).strip()
    canonical = " ".join(part for part in (f"[{date_text}] [{sport_tag}] {detail}", status, score) if part)

    details = parse_details(detail)
    sport = _sport_for_tag(sport_tag, block, lookup)
    leg = ParsedLeg(
        raw_description=canonical,
        bet_kind=details.kind,
        sport=sport,
        participant=details.participant,
        opponent=details.opponent,
        game_date=parse_slip_datetime(date_text),
        line=details.line,
        teaser_adjustment=details.teaser_adjustment,
        over_under=details.over_under,
        odds=details.odds,
        status=leg_status_from_text(status),
    )
    return canonical, leg


def _combat_leg(
    header: re.Match[str], selection: re.Match[str], block: str, lookup: SportLookup
) -> Tuple[str, ParsedLeg]:
    date_text = header.group(1)
    fighter = selection.group(2).strip()
    odds = selection.group(3)
    matchup = selection.group(4).strip()
    status = selection.group(5) or ""
    detail = f"{fighter} {odds} ({matchup})"
    canonical = f"[{date_text}] [{header.group(2)}] {detail} {status}".strip()

    details = parse_details(detail)
    leg = ParsedLeg(
        raw_description=canonical,
        bet_kind=BetKind.MONEYLINE,
        sport=_sport_for_tag(header.group(2), block, lookup),
        participant=fighter,
        opponent=details.opponent,
        game_date=parse_slip_datetime(date_text),
        odds=int(odds),
        status=leg_status_from_text(status),
    )
    return canonical, leg


def extract_multi_leg(block: str, lookup: SportLookup, leg_noun: str = "Team Parlay") -> MultiLegDetails:
    """Walk the block with a cursor, reading one- and two-line leg forms.

    Lines that match neither form are skipped.
    """

    lines = block_lines(block)
    legs: List[str] = []
    parsed: List[ParsedLeg] = []
    i = 0
    while i < len(lines):
        line = lines[i]
        standard = LEG_LINE.match(line)
        if standard:
            canonical, leg = _standard_leg(standard, block, lookup)
            legs.append(canonical)
            parsed.append(leg)
            i += 1
            continue

        header = COMBAT_HEADER.match(line)
        if header and header.group(2).upper() in COMBAT_TAGS and i + 1 < len(lines):
            selection = COMBAT_LEG_SELECTION.search(lines[i + 1])
            if selection:
                canonical, leg = _combat_leg(header, selection, block, lookup)
                legs.append(canonical)
                parsed.append(leg)
                i += 2
                continue
            logger.debug("Combat header without a selection line: %s", line[:80])
        i += 1

    dates = [leg.game_date for leg in parsed if leg.game_date is not None]
    team_count = PARLAY_TEAMS.search(block)
    count = team_count.group(1) if team_count else str(len(legs))
    return MultiLegDetails(
        legs=legs,
        parsed_legs=parsed,
        description=f"{count}-{leg_noun}",
        game_start_time=min(dates) if dates else None,
    )


# --------------------------------------------------------------------------- #
# Live bets
# --------------------------------------------------------------------------- #


@dataclass
class LiveDetails:
    game: str
    description: str
    sport: str
    odds: int | None
    provider_game_id: str | None = None
    league: str | None = None
    selection: str | None = None


def extract_live(block: str, lookup: SportLookup) -> LiveDetails:
    lines = block_lines(block)
    game = ""
    description = ""
    odds = None
    for line in lines:
        if " vs " not in line:
            continue
        parts = line.split(" - ")
        if len(parts) >= 2:
            rest = " - ".join(parts[1:])
            teams = LIVE_TEAMS.search(rest)
            if teams:
                game = f"{teams.group(1).strip()} vs {teams.group(2).strip()}"
            description = STATUS_TAG.sub("", SCORE_SUFFIX.sub("", rest)).strip()
            found = INLINE_ODDS.search(description + " ")
            odds = int(found.group(1)) if found else None
        break

    league = None
    for line in lines:
        league_match = LIVE_LEAGUE.search(line)
        if league_match:
            league = (league_match.group(2) or "").strip() or None
            break

    game_id = LIVE_GAME_ID.search(block)
    selection = LIVE_SELECTION.search(description) if description else None
    return LiveDetails(
        game=game,
        description=description,
        sport=lookup.detect(block),
        odds=odds,
        provider_game_id=game_id.group(0) if game_id else None,
        league=league,
        selection=selection.group(1).strip() if selection else None,
    )
