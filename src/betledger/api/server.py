"""FastAPI backend for betledger."""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from betledger import __version__
from betledger.api.schemas import (
    ImportFailure,
    ImportRequest,
    ImportResponse,
    RoundRobinLegResponse,
    RoundRobinParlayResponse,
    RoundRobinResponse,
    SettleResponse,
    WagerResponse,
)
from betledger.data.ingestion import import_paste
from betledger.data.results_client import GameResultsProvider, HttpResultsProvider
from betledger.db.database import SessionFactory, SessionLocal
from betledger.db.models import Wager
from betledger.errors import RoundRobinError, WagerNotFound
from betledger.parlays.engine import american_to_implied, decimal_to_american
from betledger.parlays.round_robin import build_breakdown
from betledger.parsing.types import WagerType
from betledger.settlement.service import SettlementService, parsed_leg_from_row


@lru_cache(maxsize=1)
def get_results_provider() -> HttpResultsProvider:
    """One provider per process so every request shares its client and rate limiter."""

    return HttpResultsProvider()


def close_results_provider() -> None:
    if get_results_provider.cache_info().currsize:
        get_results_provider().close()
    get_results_provider.cache_clear()


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    yield
    close_results_provider()


app = FastAPI(
    title="betledger API",
    version=__version__,
    description="Import bet-history pastes and settle the wagers they contain.",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_session_factory() -> SessionFactory:
    return SessionLocal


def get_db(factory: Annotated[SessionFactory, Depends(get_session_factory)]) -> Iterator[Session]:
    db = factory()
    try:
        yield db
    finally:
        db.close()


FactoryDep = Annotated[SessionFactory, Depends(get_session_factory)]
SessionDep = Annotated[Session, Depends(get_db)]
ProviderDep = Annotated[GameResultsProvider, Depends(get_results_provider)]


def _wager_or_404(session: Session, wager_id: int) -> Wager:
    wager = session.scalar(select(Wager).options(selectinload(Wager.legs)).where(Wager.id == wager_id))
    if wager is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Wager {wager_id} not found")
    return wager


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/imports", response_model=ImportResponse)
def create_import(payload: ImportRequest, factory: FactoryDep) -> ImportResponse:
    summary = import_paste(payload.text, session_factory=factory)
    return ImportResponse(
        parsed=summary.parsed,
        warned=summary.warned,
        failed=summary.failed,
        skipped=summary.skipped,
        duplicates=summary.duplicates,
        wager_ids=summary.wager_ids,
        failures=[
            ImportFailure(block_index=f.block_index, error=f.error, raw_text=f.raw_text) for f in summary.failures
        ],
    )


@app.get("/wagers/{wager_id}", response_model=WagerResponse)
def get_wager(wager_id: int, session: SessionDep) -> WagerResponse:
    return WagerResponse.model_validate(_wager_or_404(session, wager_id))


@app.post("/wagers/{wager_id}/settle", response_model=SettleResponse)
def settle_wager(wager_id: int, factory: FactoryDep, provider: ProviderDep) -> SettleResponse:
    service = SettlementService(provider, session_factory=factory)
    try:
        decision = service.settle(wager_id)
    except WagerNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    with factory() as session:
        wager = _wager_or_404(session, wager_id)
        return SettleResponse(
            wager_id=wager_id,
            decision=decision.value,
            status=wager.status,
            settled_at=wager.settled_at,
        )


@app.get("/wagers/{wager_id}/round-robin", response_model=RoundRobinResponse)
def round_robin(wager_id: int, session: SessionDep) -> RoundRobinResponse:
    wager = _wager_or_404(session, wager_id)
    if wager.wager_type != WagerType.ROUND_ROBIN.value:
        raise HTTPException(status_code=422, detail="Wager is not a round robin")
    try:
        breakdown = build_breakdown(
            wager.round_robin_label or wager.type_label,
            wager.stake,
            [parsed_leg_from_row(row) for row in wager.legs],
        )
    except RoundRobinError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    return RoundRobinResponse(
        parlay_size=breakdown.parlay_size,
        total_legs=breakdown.total_legs,
        total_parlays=breakdown.total_parlays,
        stake_per_parlay=breakdown.stake_per_parlay,
        total_stake=breakdown.total_stake,
        potential_max_win=breakdown.potential_max_win,
        won_parlays=breakdown.won_parlays,
        lost_parlays=breakdown.lost_parlays,
        final_profit=breakdown.final_profit,
        legs=[
            RoundRobinLegResponse(
                index=leg.index,
                description=leg.description,
                odds=leg.odds,
                implied_probability=american_to_implied(leg.odds) if leg.odds else None,
                status=leg.status.value,
            )
            for leg in breakdown.legs
        ],
        parlays=[
            RoundRobinParlayResponse(
                legs=list(parlay.legs),
                decimal_odds=parlay.decimal_odds,
                american_odds=decimal_to_american(parlay.decimal_odds),
                stake=parlay.stake,
                potential_win=parlay.potential_win,
                status=parlay.status.value,
            )
            for parlay in breakdown.parlays
        ],
        warnings=breakdown.warnings,
    )
