"""Settle stored wagers: lease, track legs, write terminal results once."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import List

from sqlalchemy import or_, select, update
from sqlalchemy.orm import selectinload

from betledger.config import Settings, get_settings
from betledger.data.results_client import GameResultsProvider
from betledger.db.database import SessionFactory, SessionLocal, session_scope
from betledger.db.models import Wager, WagerLeg
from betledger.errors import RoundRobinError, WagerNotFound
from betledger.parlays.round_robin import expand_round_robin, legs_from_parsed, parse_round_robin_label
from betledger.parsing.types import BetKind, LegStatus, ParsedLeg, WagerStatus, WagerType
from betledger.settlement.tracker import LegSettlementTracker, SettlementDecision, TrackerOutcome

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parsed_leg_from_row(row: WagerLeg) -> ParsedLeg:
    return ParsedLeg(
        raw_description=row.raw_description,
        bet_kind=BetKind(row.bet_kind),
        sport=row.sport,
        participant=row.participant,
        opponent=row.opponent,
        team=row.team,
        game_date=row.game_date,
        line=row.line,
        teaser_adjustment=row.teaser_adjustment,
        over_under=row.over_under,
        stat_name=row.stat_name,
        odds=row.odds,
        status=LegStatus(row.status),
    )


def stored_decision(wager: Wager) -> SettlementDecision:
    if wager.status == WagerStatus.WON.value:
        return SettlementDecision.WON
    if wager.status == WagerStatus.LOST.value:
        return SettlementDecision.LOST
    return SettlementDecision.UNRESOLVED


class SettlementService:
    """``settle(wager_id)`` for wagers persisted by the import service."""

    def __init__(
        self,
        provider: GameResultsProvider,
        session_factory: SessionFactory | None = None,
        settings: Settings | None = None,
        clock: Callable[[], datetime] | None = None,
        owner: str | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.session_factory = session_factory or SessionLocal
        self.tracker = LegSettlementTracker(provider, self.settings.results_supported_sports)
        self.clock = clock or _utcnow
        self.owner = owner or f"settler-{uuid.uuid4().hex[:8]}"

    def _acquire_lease(self, wager_id: int) -> bool:
        now = self.clock()
        with session_scope(self.session_factory) as session:
            result = session.execute(
                update(Wager)
                .where(
                    Wager.id == wager_id,
                    Wager.status == WagerStatus.PENDING.value,
                    or_(Wager.lease_owner.is_(None), Wager.lease_expires_at < now),
                )
                .values(
                    lease_owner=self.owner,
                    lease_expires_at=now + timedelta(seconds=self.settings.settlement_lease_seconds),
                )
                .execution_options(synchronize_session=False)
            )
            return result.rowcount == 1

    def _release_lease(self, wager_id: int) -> None:
        with session_scope(self.session_factory) as session:
            session.execute(
                update(Wager)
                .where(Wager.id == wager_id, Wager.lease_owner == self.owner)
                .values(lease_owner=None, lease_expires_at=None)
                .execution_options(synchronize_session=False)
            )

    def _load(self, wager_id: int) -> Wager:
        with session_scope(self.session_factory) as session:
            wager = session.scalar(select(Wager).options(selectinload(Wager.legs)).where(Wager.id == wager_id))
            if wager is None:
                raise WagerNotFound(f"Wager {wager_id} does not exist")
            return wager

    def settle(self, wager_id: int) -> SettlementDecision:
        """Settle one wager.

        Re-settling a terminal wager returns its stored decision without
        touching ``settled_at``. A wager whose lease is held elsewhere is
        reported as unresolved and left alone.
        """

        wager = self._load(wager_id)
        if wager.status != WagerStatus.PENDING.value:
            return stored_decision(wager)
        if not self._acquire_lease(wager_id):
            logger.debug("Wager %s is being settled elsewhere", wager_id)
            current = self._load(wager_id)
            return stored_decision(current)

        try:
            legs = [parsed_leg_from_row(row) for row in wager.legs]
            outcome = self.tracker.settle(legs, fallback_date=wager.game_start_time or wager.placed_at)
            return self._record(wager, outcome)
        finally:
            self._release_lease(wager_id)

    def _record(self, wager: Wager, outcome: TrackerOutcome) -> SettlementDecision:
        decision = outcome.decision
        profit = None
        reason = outcome.reason
        if decision is not SettlementDecision.UNRESOLVED:
            if wager.wager_type == WagerType.ROUND_ROBIN.value:
                try:
                    decision, profit = self._round_robin_result(wager, outcome.leg_statuses)
                except RoundRobinError as exc:
                    decision, reason = SettlementDecision.UNRESOLVED, f"round robin: {exc}"
            elif decision is SettlementDecision.WON:
                profit = wager.potential_win
            else:
                profit = -wager.stake

        with session_scope(self.session_factory) as session:
            row = session.get(Wager, wager.id)
            if row is None or row.lease_owner != self.owner or row.status != WagerStatus.PENDING.value:
                logger.info("Lost the lease on wager %s before writing", wager.id)
                return SettlementDecision.UNRESOLVED
            if decision is SettlementDecision.UNRESOLVED:
                row.last_settlement_error = reason
                logger.info("Wager %s left unresolved: %s", wager.id, reason)
                return decision

            row.status = decision.value
            row.result = decision.value
            row.profit = profit
            row.settled_at = self.clock()
            row.last_settlement_error = None
            for leg_row, status in zip(row.legs, outcome.leg_statuses):
                leg_row.status = status.value
            logger.info("Wager %s settled %s (profit %.2f)", wager.id, decision.value, profit)
        return decision

    def _round_robin_result(self, wager: Wager, statuses: List[LegStatus]) -> tuple[SettlementDecision, float]:
        parlay_size, total_legs, total_parlays = parse_round_robin_label(wager.round_robin_label or wager.type_label)
        parsed = [parsed_leg_from_row(row) for row in wager.legs]
        for leg, status in zip(parsed, statuses):
            leg.status = status
        breakdown = expand_round_robin(
            parlay_size,
            total_parlays,
            wager.stake,
            legs_from_parsed(parsed),
            total_legs=total_legs,
        )
        profit = breakdown.final_profit
        if profit is None:
            raise RoundRobinError("legs are not all settled")
        if round(profit, 2) == 0:
            raise RoundRobinError("combinations broke even; needs manual resolution")
        decision = SettlementDecision.WON if profit > 0 else SettlementDecision.LOST
        return decision, profit
