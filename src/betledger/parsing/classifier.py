"""Wager type classification from keyword cues."""

from __future__ import annotations

import re
from typing import Callable, List, Tuple

from betledger.parsing.types import WagerType

ROUND_ROBIN_LABEL = re.compile(r"(\d+)\s*/\s*(\d+)\s*Round Robin\s*\((\d+)\s*Bets?\)", re.IGNORECASE)


def is_live_bet(text: str) -> bool:
    upper = text.upper()
    return "LIVE BETTING" in upper or "LIVE BET" in upper


def _contains(*cues: str) -> Callable[[str], bool]:
    def check(upper: str) -> bool:
        return all(cue in upper for cue in cues)

    return check


# Order is part of the contract: the first cue that matches wins.
DECISIONS: List[Tuple[Callable[[str], bool], WagerType]] = [
    (_contains("PLAYER PROPS", "PARLAY"), WagerType.PLAYER_PROP_PARLAY),
    (_contains("PLAYER PROPS"), WagerType.PLAYER_PROP),
    (_contains("PARLAY"), WagerType.PARLAY),
    (_contains("TEAS"), WagerType.TEASER),
    (is_live_bet, WagerType.LIVE),
]


def classify_wager(block: str) -> WagerType:
    upper = block.upper()
    for predicate, wager_type in DECISIONS:
        if predicate(upper):
            return wager_type
    return WagerType.STRAIGHT


def is_round_robin_label(type_label: str) -> bool:
    return ROUND_ROBIN_LABEL.search(type_label) is not None


def refine_wager_type(wager_type: WagerType, type_label: str) -> WagerType:
    """Promote a ticket whose label reads ``k/n Round Robin (m Bets)``."""

    if wager_type in (WagerType.PLAYER_PROP, WagerType.PLAYER_PROP_PARLAY):
        return wager_type
    if is_round_robin_label(type_label):
        return WagerType.ROUND_ROBIN
    return wager_type


def bet_category(wager_type: WagerType, sport: str, is_live: bool, is_free_play: bool) -> str:
    if is_free_play:
        return "Free bet"
    if "parlay" in wager_type.value.lower():
        return "Parlay"
    if is_live and sport in ("MLB", "CS2", "NCAAF", "NFL", "NBA", "WNBA"):
        return f"Live - {sport}"
    return "Regular"
