"""Dataclasses for round robin modeling."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from betledger.parsing.types import LegStatus, WagerStatus


@dataclass
class RoundRobinLeg:
    index: int
    description: str
    odds: int | None
    status: LegStatus = LegStatus.PENDING
    sport: str = "Other"
    participant: str | None = None


@dataclass
class RoundRobinParlay:
    legs: tuple[int, ...]
    decimal_odds: float
    stake: float
    potential_win: float
    status: WagerStatus = WagerStatus.PENDING


@dataclass
class RoundRobinBreakdown:
    parlay_size: int
    total_legs: int
    total_parlays: int
    stake_per_parlay: float
    total_stake: float
    legs: List[RoundRobinLeg]
    parlays: List[RoundRobinParlay]
    warnings: List[str] = field(default_factory=list)

    @property
    def settled_parlays(self) -> int:
        return sum(1 for p in self.parlays if p.status is not WagerStatus.PENDING)

    @property
    def won_parlays(self) -> int:
        return sum(1 for p in self.parlays if p.status is WagerStatus.WON)

    @property
    def lost_parlays(self) -> int:
        return sum(1 for p in self.parlays if p.status is WagerStatus.LOST)

    @property
    def total_profit(self) -> float:
        """Payout of won combinations minus the total stake."""

        payout = sum(p.potential_win + p.stake for p in self.parlays if p.status is WagerStatus.WON)
        return payout - self.total_stake

    @property
    def potential_max_win(self) -> float:
        return sum(p.potential_win for p in self.parlays)

    @property
    def is_settled(self) -> bool:
        return all(leg.status.is_terminal for leg in self.legs)

    @property
    def final_profit(self) -> float | None:
        """``total_profit`` once every leg is won or lost, else ``None``."""

        return self.total_profit if self.is_settled else None
