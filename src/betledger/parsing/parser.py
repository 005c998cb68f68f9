"""Bet-history paste parsing: blocks in, wager records out."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Union

from betledger.config import get_settings
from betledger.errors import RoundRobinError
from betledger.parlays.round_robin import build_breakdown
from betledger.parsing.blocks import parse_header, split_blocks
from betledger.parsing.classifier import bet_category, classify_wager, is_live_bet, refine_wager_type
from betledger.parsing.extractors import (
    extract_live,
    extract_multi_leg,
    extract_player_prop,
    extract_straight,
)
from betledger.parsing.odds import american_odds, multi_leg_status, parse_stake_and_win, single_leg_status
from betledger.parsing.sports import SportLookup, default_sport_lookup
from betledger.parsing.types import (
    BetKind,
    ParseFailure,
    ParsedLeg,
    ParseReport,
    ParseSkip,
    RawBlock,
    WagerRecord,
    WagerType,
)

logger = logging.getLogger(__name__)

FREE_PLAY_TAG = "[FREE PLAY]"
RAW_TEXT_LIMIT = 200

WARN_GAME = "Game not identified"
WARN_DETAILS = "Bet details could not be parsed"
WARN_STAKE = "Stake not found"
WARN_WIN = "Potential win not found"
WARN_ODDS = "Odds could not be calculated"
WARN_MATCHUP = "Incomplete matchup: opponent not identified"

BlockOutcome = Union[WagerRecord, ParseSkip, ParseFailure]


def _sport_for_legs(legs, block: str, lookup: SportLookup) -> str:
    sports = {leg.sport for leg in legs if leg.sport != lookup.default}
    if len(sports) == 1:
        return sports.pop()
    return lookup.detect(block)


def parse_block(block: RawBlock, lookup: SportLookup) -> WagerRecord | ParseSkip:
    """Parse one block; raises on malformed input so the caller can isolate it."""

    text = block.text
    header = parse_header(text)
    if header is None:
        return ParseSkip(block_index=block.index, reason="no ticket header")

    wager_type = refine_wager_type(classify_wager(text), header.type_label)
    is_free_play = FREE_PLAY_TAG in text.upper()
    is_live = is_live_bet(text)
    stake, potential_win = parse_stake_and_win(text)
    if is_free_play:
        stake = 0.0

    record = WagerRecord(
        ticket_id=header.ticket_id,
        placed_at=header.placed_at,
        wager_type=wager_type,
        type_label=header.type_label,
        sport=lookup.default,
        game="",
        description="",
        stake=stake,
        potential_win=potential_win,
        odds=american_odds(stake, potential_win),
        is_free_play=is_free_play,
        is_live=is_live,
        block_index=block.index,
    )
    warnings = record.warnings

    if wager_type is WagerType.STRAIGHT:
        straight = extract_straight(text, lookup)
        record.game = straight.game
        record.description = straight.description
        record.sport = straight.sport
        record.game_start_time = straight.game_start_time
        if straight.leg is not None:
            record.parsed_legs = [straight.leg]
        if straight.leg is None or straight.leg.bet_kind is BetKind.UNKNOWN:
            warnings.append(WARN_DETAILS)
        if straight.incomplete_matchup and straight.game_start_time is None:
            warnings.append(WARN_MATCHUP)

    elif wager_type in (WagerType.PLAYER_PROP, WagerType.PLAYER_PROP_PARLAY):
        prop = extract_player_prop(text, lookup)
        record.game = prop.game
        record.sport = prop.sport
        record.game_start_time = prop.game_start_time
        record.player = prop.player
        record.player_team = prop.player_team
        record.market = prop.market
        record.over_under = prop.over_under
        record.line = prop.line
        if wager_type is WagerType.PLAYER_PROP_PARLAY:
            if not prop.legs:
                raise ValueError("Player prop parlay has no prop lines")
            record.legs = list(prop.prop_lines)
            record.parsed_legs = list(prop.legs)
            record.description = f"{len(prop.legs)}-Prop Parlay"
        else:
            record.description = prop.description
            record.parsed_legs = prop.legs[:1]
        if prop.player is None:
            warnings.append(WARN_DETAILS)

    elif wager_type is WagerType.LIVE:
        live = extract_live(text, lookup)
        record.game = live.game
        record.description = live.description
        record.sport = live.sport
        record.provider_game_id = live.provider_game_id
        record.league = live.league
        if live.odds is not None:
            record.odds = live.odds
        if live.selection:
            teams = [team.strip() for team in live.game.split(" vs ")] if live.game else []
            opponent = next((team for team in teams if team.lower() != live.selection.lower()), None)
            record.parsed_legs = [
                ParsedLeg(
                    raw_description=live.description,
                    bet_kind=BetKind.MONEYLINE,
                    sport=live.sport,
                    participant=live.selection,
                    opponent=opponent,
                    odds=live.odds,
                )
            ]
        if not live.description:
            warnings.append(WARN_DETAILS)

    else:
        noun = "Leg Teaser" if wager_type is WagerType.TEASER else "Team Parlay"
        multi = extract_multi_leg(text, lookup, leg_noun=noun)
        if not multi.legs:
            raise ValueError(f"{wager_type.value} wager has no recognisable legs")
        record.legs = multi.legs
        record.parsed_legs = multi.parsed_legs
        record.description = multi.description
        record.game = multi.description
        record.game_start_time = multi.game_start_time
        record.sport = _sport_for_legs(multi.parsed_legs, text, lookup)
        if wager_type is WagerType.ROUND_ROBIN:
            record.description = header.type_label
            try:
                breakdown = build_breakdown(header.type_label, record.stake, multi.parsed_legs)
            except RoundRobinError as exc:
                warnings.append(f"Round robin could not be expanded: {exc}")
            else:
                warnings.extend(breakdown.warnings)

    # a free play or a single priced leg still carries its printed odds
    if record.odds == 0 and len(record.parsed_legs) == 1 and record.parsed_legs[0].odds:
        record.odds = record.parsed_legs[0].odds

    if wager_type.is_multi_leg:
        record.status = multi_leg_status(text)
    else:
        record.status = single_leg_status(text)

    if not record.game or record.game == "Unknown":
        warnings.insert(0, WARN_GAME)
    if record.stake == 0 and not is_free_play:
        warnings.append(WARN_STAKE)
    if record.potential_win == 0:
        warnings.append(WARN_WIN)
    if record.odds == 0:
        warnings.append(WARN_ODDS)

    record.category = bet_category(wager_type, record.sport, is_live, is_free_play)
    return record


def _parse_isolated(block: RawBlock, lookup: SportLookup) -> BlockOutcome:
    try:
        return parse_block(block, lookup)
    except Exception as exc:  # noqa: BLE001 - one bad block must not sink the batch
        logger.warning("Failed to parse block %d: %s", block.index, exc)
        return ParseFailure(block_index=block.index, error=str(exc), raw_text=block.text[:RAW_TEXT_LIMIT])


def parse_bet_paste(
    raw_text: str,
    sport_lookup: SportLookup | None = None,
    max_workers: int | None = None,
) -> ParseReport:
    """Parse a full bet-history paste into a :class:`ParseReport`.

    Blocks are independent, so with ``max_workers > 1`` they are parsed in a
    thread pool; results keep the paste order either way.
    """

    lookup = sport_lookup or default_sport_lookup()
    workers = max_workers if max_workers is not None else get_settings().parse_max_workers
    blocks = split_blocks(raw_text)

    if workers > 1 and len(blocks) > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            outcomes: List[BlockOutcome] = list(pool.map(lambda b: _parse_isolated(b, lookup), blocks))
    else:
        outcomes = [_parse_isolated(block, lookup) for block in blocks]

    report = ParseReport()
    for outcome in outcomes:
        if isinstance(outcome, WagerRecord):
            report.wagers.append(outcome)
        elif isinstance(outcome, ParseSkip):
            logger.debug("Skipped block %d: %s", outcome.block_index, outcome.reason)
            report.skipped.append(outcome)
        else:
            report.failures.append(outcome)

    logger.info(
        "Parsed paste: %d parsed, %d warned, %d failed, %d skipped",
        report.parsed,
        report.warned,
        report.failed,
        len(report.skipped),
    )
    return report
