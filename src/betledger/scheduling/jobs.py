"""Scheduling entry points."""

from __future__ import annotations

import argparse
import logging
import time
from typing import Dict

from sqlalchemy import select

from betledger.config import Settings, get_settings
from betledger.data.results_client import GameResultsProvider, HttpResultsProvider
from betledger.db.database import SessionFactory, SessionLocal, init_db, session_scope
from betledger.db.models import Wager
from betledger.parsing.types import WagerStatus
from betledger.settlement.service import SettlementService
from betledger.settlement.tracker import SettlementDecision

logger = logging.getLogger(__name__)


def pending_wager_ids(session_factory: SessionFactory) -> list[int]:
    with session_scope(session_factory) as session:
        stmt = select(Wager.id).where(Wager.status == WagerStatus.PENDING.value).order_by(Wager.id)
        return list(session.scalars(stmt))


def run_settlement_cycle(
    provider: GameResultsProvider | None = None,
    session_factory: SessionFactory | None = None,
    settings: Settings | None = None,
) -> Dict[str, int]:
    """Try to settle every pending wager once; one failing wager never stops the rest."""

    settings = settings or get_settings()
    factory = session_factory or SessionLocal
    service = SettlementService(provider or HttpResultsProvider(settings=settings), factory, settings)

    counts = {"checked": 0, "won": 0, "lost": 0, "unresolved": 0, "errors": 0}
    for wager_id in pending_wager_ids(factory):
        counts["checked"] += 1
        try:
            decision = service.settle(wager_id)
        except Exception:  # noqa: BLE001 - isolate each wager
            logger.exception("Settlement of wager %s failed", wager_id)
            counts["errors"] += 1
            continue
        if decision is SettlementDecision.WON:
            counts["won"] += 1
        elif decision is SettlementDecision.LOST:
            counts["lost"] += 1
        else:
            counts["unresolved"] += 1
    logger.info("Settlement cycle finished: %s", counts)
    return counts


def main(argv: list[str] | None = None) -> None:  # pragma: no cover - CLI convenience
    parser = argparse.ArgumentParser(description="Settle pending wagers against the results feed.")
    parser.add_argument("--loop", action="store_true", help="keep running every settlement interval")
    args = parser.parse_args(argv)

    settings = get_settings()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    init_db()
    with HttpResultsProvider(settings=settings) as provider:
        while True:
            run_settlement_cycle(provider, settings=settings)
            if not args.loop:
                break
            time.sleep(settings.settlement_interval_minutes * 60)


if __name__ == "__main__":  # pragma: no cover
    main()
