"""Dataclasses and enums for parsed wagers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List


class WagerType(str, Enum):
    STRAIGHT = "Straight"
    PARLAY = "Parlay"
    TEASER = "Teaser"
    PLAYER_PROP = "Player Prop"
    PLAYER_PROP_PARLAY = "Player Prop Parlay"
    LIVE = "Live"
    ROUND_ROBIN = "Round Robin"

    @property
    def is_multi_leg(self) -> bool:
        return self in MULTI_LEG_TYPES


MULTI_LEG_TYPES = frozenset(
    {WagerType.PARLAY, WagerType.TEASER, WagerType.PLAYER_PROP_PARLAY, WagerType.ROUND_ROBIN}
)


class WagerStatus(str, Enum):
    PENDING = "pending"
    WON = "won"
    LOST = "lost"

    @property
    def is_terminal(self) -> bool:
        return self is not WagerStatus.PENDING


class LegStatus(str, Enum):
    PENDING = "pending"
    WON = "won"
    LOST = "lost"
    PUSH = "push"

    @property
    def is_terminal(self) -> bool:
        return self in (LegStatus.WON, LegStatus.LOST)


class BetKind(str, Enum):
    MONEYLINE = "moneyline"
    SPREAD = "spread"
    TOTAL = "total"
    PROP = "prop"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class RawBlock:
    """One wager's slice of the pasted text; only kept for error attribution."""

    index: int
    text: str


@dataclass
class ParsedLeg:
    """Structured selection used for settlement.

    ``line`` already includes any teaser adjustment; ``raw_description`` keeps the
    text the line was read from for display. ``team`` names a side of the event
    when ``participant`` is a player rather than a team.
    """

    raw_description: str
    bet_kind: BetKind = BetKind.UNKNOWN
    sport: str = "Other"
    participant: str | None = None
    opponent: str | None = None
    team: str | None = None
    game_date: datetime | None = None
    line: float | None = None
    teaser_adjustment: float | None = None
    over_under: str | None = None
    stat_name: str | None = None
    odds: int | None = None
    status: LegStatus = LegStatus.PENDING


@dataclass
class WagerRecord:
    ticket_id: str
    placed_at: datetime
    wager_type: WagerType
    type_label: str
    sport: str
    game: str
    description: str
    stake: float
    potential_win: float
    odds: int
    status: WagerStatus = WagerStatus.PENDING
    is_free_play: bool = False
    is_live: bool = False
    category: str = "Regular"
    legs: List[str] = field(default_factory=list)
    parsed_legs: List[ParsedLeg] = field(default_factory=list)
    game_start_time: datetime | None = None
    provider_game_id: str | None = None
    league: str | None = None
    player: str | None = None
    player_team: str | None = None
    market: str | None = None
    over_under: str | None = None
    line: str | None = None
    warnings: List[str] = field(default_factory=list)
    block_index: int = 0


@dataclass(frozen=True)
class ParseSkip:
    block_index: int
    reason: str


@dataclass(frozen=True)
class ParseFailure:
    block_index: int
    error: str
    raw_text: str


@dataclass
class ParseReport:
    wagers: List[WagerRecord] = field(default_factory=list)
    failures: List[ParseFailure] = field(default_factory=list)
    skipped: List[ParseSkip] = field(default_factory=list)

    @property
    def parsed(self) -> int:
        return len(self.wagers)

    @property
    def warned(self) -> int:
        return sum(1 for wager in self.wagers if wager.warnings)

    @property
    def failed(self) -> int:
        return len(self.failures)

    def counts(self) -> dict[str, int]:
        return {"parsed": self.parsed, "warned": self.warned, "failed": self.failed}
