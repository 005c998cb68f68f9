"""Odds and status derivation for parsed wagers."""

from __future__ import annotations

import math
import re
from typing import Tuple

from betledger.parsing.types import WagerStatus

STAKE_WIN_PATTERN = re.compile(r"\$?([\d,]+(?:\.\d{1,2})?)\s*/\s*\$?([\d,]+(?:\.\d{1,2})?)")
STAKE_WIN_LOCATOR = re.compile(r"\$[\d,]+(?:\.\d{1,2})?\s*/\s*\$[\d,]+(?:\.\d{1,2})?")

_WON = re.compile(r"\bwon\b")
_LOST = re.compile(r"\blost\b")
_PENDING = re.compile(r"\bpending\b")
_SCORE = re.compile(r"\(score:[^)]*\)")
_AGGREGATE_STATUS = re.compile(r"\b(won|lost|pending)\b")


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def american_odds(stake: float, potential_win: float) -> int:
    """Derive American odds from a stake and its potential win.

    Returns 0 for a free play (no stake) and when the win is zero, both of
    which are reported as uncalculable odds.
    """

    if stake == 0:
        return 0
    ratio = potential_win / stake
    if ratio == 0:
        return 0
    if ratio >= 1:
        return _round_half_up(ratio * 100)
    return _round_half_up(-100 / ratio)


def win_for_odds(stake: float, odds: int) -> float:
    """Potential win (profit) of ``stake`` at American ``odds``."""

    if odds == 0:
        return 0.0
    if odds > 0:
        return stake * odds / 100
    return stake * 100 / abs(odds)


def parse_stake_and_win(block: str) -> Tuple[float, float]:
    """Locate the ``$stake/$win`` line of a block; ``(0, 0)`` when absent."""

    located = STAKE_WIN_LOCATOR.search(block)
    if not located:
        return 0.0, 0.0
    match = STAKE_WIN_PATTERN.search(located.group(0))
    if not match:  # pragma: no cover - locator and pattern agree
        return 0.0, 0.0
    return float(match.group(1).replace(",", "")), float(match.group(2).replace(",", ""))


def single_leg_status(block: str) -> WagerStatus:
    """Status of a straight, prop or live wager from the whole block.

    Bracketed tags decide on their own. A bare ``won`` is ignored when the block
    mentions ``winner`` (market names such as ``Winner (2 way)``) and a bare
    ``lost`` is ignored when the block mentions ``loss``.
    """

    text = block.lower()
    if "[won]" in text:
        return WagerStatus.WON
    if "[lost]" in text:
        return WagerStatus.LOST
    if "[pending]" in text:
        return WagerStatus.PENDING
    if _WON.search(text) and "winner" not in text:
        return WagerStatus.WON
    if _LOST.search(text) and "loss" not in text:
        return WagerStatus.LOST
    return WagerStatus.PENDING


def multi_leg_status(block: str) -> WagerStatus:
    """Status of a multi-leg wager.

    Only the text after the final leg's closing bracket counts, so per-leg
    ``[Won]``/``[Lost]`` tags never decide the wager. Blocks without any
    bracketed leg (prop parlays) are scanned whole.
    """

    text = block.lower()
    closing = text.rfind("]")
    tail = _SCORE.sub(" ", text[closing + 1:])
    match = _AGGREGATE_STATUS.search(tail)
    if not match:
        return WagerStatus.PENDING
    return WagerStatus(match.group(1))
