"""Import service: parse a paste and persist wagers with structured legs."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

from sqlalchemy import select

from betledger.db.database import SessionFactory, SessionLocal, session_scope
from betledger.db.models import Wager, WagerLeg
from betledger.errors import RoundRobinError
from betledger.parlays.round_robin import build_breakdown
from betledger.parsing.parser import parse_bet_paste
from betledger.parsing.sports import SportLookup
from betledger.parsing.types import ParseFailure, ParsedLeg, WagerRecord, WagerStatus, WagerType

logger = logging.getLogger(__name__)


@dataclass
class ImportSummary:
    parsed: int = 0
    warned: int = 0
    failed: int = 0
    skipped: int = 0
    duplicates: int = 0
    wager_ids: List[int] = field(default_factory=list)
    failures: List[ParseFailure] = field(default_factory=list)


def leg_row(leg: ParsedLeg, order: int) -> WagerLeg:
    return WagerLeg(
        leg_order=order,
        game_date=leg.game_date,
        sport=leg.sport,
        participant=leg.participant,
        opponent=leg.opponent,
        team=leg.team,
        bet_kind=leg.bet_kind.value,
        line=leg.line,
        teaser_adjustment=leg.teaser_adjustment,
        over_under=leg.over_under,
        stat_name=leg.stat_name,
        odds=leg.odds,
        status=leg.status.value,
        raw_description=leg.raw_description,
    )


def imported_profit(record: WagerRecord) -> float | None:
    """Profit of a ticket the book already graded; ``None`` while pending."""

    if not record.status.is_terminal:
        return None
    if record.wager_type is WagerType.ROUND_ROBIN:
        try:
            return build_breakdown(record.type_label, record.stake, record.parsed_legs).final_profit
        except RoundRobinError:
            return None
    return record.potential_win if record.status is WagerStatus.WON else -record.stake


def wager_row(record: WagerRecord) -> Wager:
    """Map a parsed record onto a new ``Wager`` row with its legs."""

    return Wager(
        ticket_id=record.ticket_id,
        placed_at=record.placed_at,
        wager_type=record.wager_type.value,
        type_label=record.type_label,
        sport=record.sport,
        game=record.game,
        description=record.description,
        category=record.category,
        stake=record.stake,
        potential_win=record.potential_win,
        american_odds=record.odds,
        status=record.status.value,
        result=record.status.value if record.status.is_terminal else None,
        profit=imported_profit(record),
        game_start_time=record.game_start_time,
        is_free_play=record.is_free_play,
        is_live=record.is_live,
        provider_game_id=record.provider_game_id,
        league=record.league,
        player=record.player,
        player_team=record.player_team,
        market=record.market,
        over_under=record.over_under,
        line=record.line,
        warnings=list(record.warnings),
        display_legs=list(record.legs),
        round_robin_label=record.type_label if record.wager_type is WagerType.ROUND_ROBIN else None,
        legs=[leg_row(leg, order) for order, leg in enumerate(record.parsed_legs)],
    )


def import_paste(
    raw_text: str,
    session_factory: SessionFactory | None = None,
    sport_lookup: SportLookup | None = None,
) -> ImportSummary:
    """Parse ``raw_text`` and store every new ticket.

    Tickets already stored (by ticket id) are counted as duplicates and left
    untouched. Warned wagers are stored with their warnings attached.
    """

    report = parse_bet_paste(raw_text, sport_lookup=sport_lookup)
    summary = ImportSummary(
        parsed=report.parsed,
        warned=report.warned,
        failed=report.failed,
        skipped=len(report.skipped),
        failures=list(report.failures),
    )

    with session_scope(session_factory or SessionLocal) as session:
        seen: set[str] = set()
        for record in report.wagers:
            if record.ticket_id in seen:
                summary.duplicates += 1
                continue
            seen.add(record.ticket_id)
            existing = session.scalar(select(Wager.id).where(Wager.ticket_id == record.ticket_id))
            if existing is not None:
                summary.duplicates += 1
                continue
            row = wager_row(record)
            session.add(row)
            session.flush()
            summary.wager_ids.append(row.id)

    logger.info(
        "Imported %d wager(s), %d duplicate(s), %d failed block(s)",
        len(summary.wager_ids),
        summary.duplicates,
        summary.failed,
    )
    return summary
