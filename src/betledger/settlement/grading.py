"""Grade one leg against a completed event."""

from __future__ import annotations

from betledger.data.results_client import SCORE_STAT, GameResultsProvider
from betledger.data.schemas import EventHandle
from betledger.errors import SettlementAbort
from betledger.parsing.types import BetKind, LegStatus, ParsedLeg


def compare(actual: float, target: float) -> LegStatus:
    """``WON`` above the target, ``LOST`` below, ``PUSH`` on it."""

    if actual > target:
        return LegStatus.WON
    if actual < target:
        return LegStatus.LOST
    return LegStatus.PUSH


def _score(provider: GameResultsProvider, handle: EventHandle, team: str) -> float:
    value = provider.stat_value(handle, team, SCORE_STAT)
    if value is None:
        raise SettlementAbort(f"score unavailable for {team}")
    return value


def _sides(handle: EventHandle, participant: str) -> tuple[str, str]:
    side = handle.side_of(participant)
    if side == "home":
        return handle.home_team, handle.away_team
    if side == "away":
        return handle.away_team, handle.home_team
    raise SettlementAbort(f"{participant} is not in event {handle.event_id}")


def _over_under(leg: ParsedLeg, actual: float) -> LegStatus:
    if leg.line is None or leg.over_under not in ("Over", "Under"):
        raise SettlementAbort(f"no line to grade: {leg.raw_description}")
    outcome = compare(actual, leg.line)
    if leg.over_under == "Under" and outcome is not LegStatus.PUSH:
        return LegStatus.LOST if outcome is LegStatus.WON else LegStatus.WON
    return outcome


def grade_leg(leg: ParsedLeg, handle: EventHandle, provider: GameResultsProvider) -> LegStatus:
    """Outcome of ``leg`` in a completed event; unknown shapes abort."""

    participant = leg.participant or ""
    if leg.bet_kind is BetKind.PROP:
        if not leg.stat_name:
            raise SettlementAbort(f"prop without a stat: {leg.raw_description}")
        value = provider.stat_value(handle, participant, leg.stat_name)
        if value is None:
            raise SettlementAbort(f"{leg.stat_name} unavailable for {participant}")
        return _over_under(leg, value)

    if leg.bet_kind is BetKind.TOTAL:
        total = _score(provider, handle, handle.home_team) + _score(provider, handle, handle.away_team)
        return _over_under(leg, total)

    if leg.bet_kind in (BetKind.MONEYLINE, BetKind.SPREAD):
        mine, theirs = _sides(handle, participant)
        margin = _score(provider, handle, mine) - _score(provider, handle, theirs)
        if leg.bet_kind is BetKind.MONEYLINE:
            return compare(margin, 0)
        if leg.line is None:
            raise SettlementAbort(f"spread without a line: {leg.raw_description}")
        return compare(margin + leg.line, 0)

    raise SettlementAbort(f"unrecognised selection: {leg.raw_description}")
