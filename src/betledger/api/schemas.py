"""Pydantic schemas for the betledger API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ImportRequest(BaseModel):
    text: str = Field(min_length=1, description="Raw paste from the bet-history page")


class ImportFailure(BaseModel):
    block_index: int
    error: str
    raw_text: str


class ImportResponse(BaseModel):
    parsed: int
    warned: int
    failed: int
    skipped: int
    duplicates: int
    wager_ids: list[int]
    failures: list[ImportFailure] = Field(default_factory=list)


class LegResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    leg_order: int
    game_date: datetime | None
    sport: str
    participant: str | None
    opponent: str | None
    team: str | None
    bet_kind: str
    line: float | None
    teaser_adjustment: float | None
    over_under: str | None
    stat_name: str | None
    odds: int | None
    status: str
    raw_description: str


class WagerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    ticket_id: str
    placed_at: datetime
    wager_type: str
    type_label: str
    sport: str
    game: str
    description: str
    category: str
    stake: float
    potential_win: float
    american_odds: int
    status: str
    result: str | None
    profit: float | None
    settled_at: datetime | None
    game_start_time: datetime | None
    is_free_play: bool
    player: str | None
    player_team: str | None
    market: str | None
    over_under: str | None
    line: str | None
    warnings: list[str]
    display_legs: list[str]
    last_settlement_error: str | None
    legs: list[LegResponse]


class SettleResponse(BaseModel):
    wager_id: int
    decision: str
    status: str
    settled_at: datetime | None


class RoundRobinLegResponse(BaseModel):
    index: int
    description: str
    odds: int | None
    implied_probability: float | None
    status: str


class RoundRobinParlayResponse(BaseModel):
    legs: list[int]
    decimal_odds: float
    american_odds: int
    stake: float
    potential_win: float
    status: str


class RoundRobinResponse(BaseModel):
    parlay_size: int
    total_legs: int
    total_parlays: int
    stake_per_parlay: float
    total_stake: float
    potential_max_win: float
    won_parlays: int
    lost_parlays: int
    final_profit: float | None
    legs: list[RoundRobinLegResponse]
    parlays: list[RoundRobinParlayResponse]
    warnings: list[str] = Field(default_factory=list)
