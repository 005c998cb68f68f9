"""Leg settlement tracker.

Every leg is checked against the results provider before anything is
decided. A leg that cannot be verified (unsupported sport, event not found,
provider failure, unavailable stat or a push) aborts the whole wager, which
then stays unresolved until a later cycle or a manual review.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterable, List, Sequence

from betledger.data.results_client import GameResultsProvider
from betledger.errors import ResultsProviderError, SettlementAbort
from betledger.parsing.types import BetKind, LegStatus, ParsedLeg
from betledger.settlement.grading import grade_leg

logger = logging.getLogger(__name__)


class SettlementDecision(str, Enum):
    WON = "won"
    LOST = "lost"
    UNRESOLVED = "unresolved"


@dataclass
class TrackerOutcome:
    decision: SettlementDecision
    leg_statuses: List[LegStatus] = field(default_factory=list)
    reason: str | None = None


def aggregate(statuses: Sequence[LegStatus]) -> SettlementDecision:
    """Wager decision from per-leg outcomes; terminal only when every leg is."""

    if not statuses or not all(status.is_terminal for status in statuses):
        return SettlementDecision.UNRESOLVED
    if any(status is LegStatus.LOST for status in statuses):
        return SettlementDecision.LOST
    return SettlementDecision.WON


class LegSettlementTracker:
    def __init__(self, provider: GameResultsProvider, supported_sports: Iterable[str]) -> None:
        self.provider = provider
        self.supported_sports = {sport.upper() for sport in supported_sports}

    def resolve_leg(self, leg: ParsedLeg, fallback_date: datetime | None) -> LegStatus:
        """Outcome of one leg; ``PENDING`` while its event is still running."""

        if leg.sport.upper() not in self.supported_sports:
            raise SettlementAbort(f"no results feed for {leg.sport}")
        if not leg.participant:
            raise SettlementAbort(f"no participant in {leg.raw_description!r}")
        when = leg.game_date or fallback_date
        if when is None:
            raise SettlementAbort(f"no date for {leg.raw_description!r}")

        if leg.bet_kind is BetKind.PROP and not leg.team:
            raise SettlementAbort(f"no team to find the event of {leg.raw_description!r}")
        searched = leg.team or leg.participant

        try:
            handle = self.provider.find_event(leg.sport, searched, when)
            if handle is None:
                raise SettlementAbort(f"event not found for {searched} ({leg.sport}) near {when.date()}")
            if not self.provider.is_complete(handle):
                return LegStatus.PENDING
            status = grade_leg(leg, handle, self.provider)
        except ResultsProviderError as exc:
            raise SettlementAbort(f"results provider error: {exc}") from exc

        if status is LegStatus.PUSH:
            raise SettlementAbort(f"push on {leg.raw_description!r} needs manual resolution")
        return status

    def settle(self, legs: Sequence[ParsedLeg], fallback_date: datetime | None = None) -> TrackerOutcome:
        if not legs:
            return TrackerOutcome(SettlementDecision.UNRESOLVED, reason="wager has no legs")
        statuses: List[LegStatus] = []
        try:
            for leg in legs:
                statuses.append(self.resolve_leg(leg, fallback_date))
        except SettlementAbort as exc:
            logger.debug("Leg %d aborted settlement: %s", len(statuses), exc.reason)
            return TrackerOutcome(SettlementDecision.UNRESOLVED, reason=exc.reason)

        decision = aggregate(statuses)
        reason = None if decision is not SettlementDecision.UNRESOLVED else "legs still in progress"
        return TrackerOutcome(decision, leg_statuses=statuses, reason=reason)
