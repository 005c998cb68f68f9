"""Shared fixtures: sample pastes, an in-memory database and a fake results feed."""

from __future__ import annotations

from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from betledger.data.schemas import EventHandle
from betledger.db.models import Base
from betledger.parsing.sports import SportLookup

STRAIGHT_BLOCK = (
    "Nov-29-2025\n"
    "12:00 PM\t612345678\tSTRAIGHT BET\n"
    "[Nov-29-2025 12:00 PM] [CFB] - [305] OHIO STATE -215\n"
    "Pending\n"
    "$151/$70\n"
)

PARLAY_BLOCK = (
    "Nov-30-2025\n"
    "1:05 PM\t612345679\tPARLAY (3 TEAMS)\n"
    "[Nov-30-2025 01:00 PM] [NFL] - [451] NYG GIANTS +3.5-110 (NYG GIANTS vrs DAL COWBOYS) [Won] (Score: 24-20)\n"
    "[Nov-30-2025 04:25 PM] [NBA] - [512] TOTAL o221.5-110 (BOS CELTICS vrs NY KNICKS) [Lost]\n"
    "[Nov-29-2025 08:00 PM] [MU] - UFC 310 MAIN CARD\n"
    "[1001] PETR YAN -150 (PETR YAN vrs MERAB DVALISHVILI) [Won]\n"
    "Pending\n"
    "$25/$150\n"
)

ROUND_ROBIN_BLOCK = (
    "Dec-01-2025\n"
    "7:00 PM\t612345680\t2/3 Round Robin (3 Bets)\n"
    "[Dec-01-2025 07:00 PM] [NBA] - [501] BOS CELTICS -110 [Lost]\n"
    "[Dec-01-2025 07:30 PM] [NBA] - [503] NY KNICKS -110 [Won]\n"
    "[Dec-01-2025 08:00 PM] [NBA] - [505] MIA HEAT -110 [Won]\n"
    "Lost\n"
    "$30/$79.34\n"
)

PROP_BLOCK = (
    "Dec-02-2025\n"
    "7:10 PM\t612345681\tPLAYER PROPS\n"
    "Indiana Pacers vs Boston Celtics\n"
    "Jay Huff (IND) Over 11.5 Points\n"
    "Pending\n"
    "$20/$18.18\n"
)

TEASER_BLOCK = (
    "Dec-07-2025\n"
    "11:00 AM\t612345683\tTEASER 6 POINT FOOTBALL\n"
    "[Dec-07-2025 01:00 PM] [NFL] - [455] NYG GIANTS +½ (B+7.5) (NYG GIANTS vrs DAL COWBOYS) [Won]\n"
    "[Dec-07-2025 04:25 PM] [NFL] - [470] TOTAL o40.5 (B-6) (KC CHIEFS vrs DEN BRONCOS) [Pending]\n"
    "Pending\n"
    "$110/$100\n"
)

LIVE_BLOCK = (
    "Dec-08-2025\n"
    "3:00 PM\t612345684\tLIVE BETTING\n"
    "G12345 - Team Spirit vs NAVI / Winner (2 way) / Team Spirit -163\n"
    "E-Sports / CS2. IEM Katowice\n"
    "[Won]\n"
    "$16.30/$10\n"
)


@pytest.fixture()
def lookup() -> SportLookup:
    return SportLookup.packaged()


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, class_=Session, expire_on_commit=False, autoflush=False)
    yield factory
    engine.dispose()


class FakeResultsProvider:
    """In-memory results feed keyed by team name."""

    def __init__(self) -> None:
        self.events: dict[str, EventHandle] = {}
        self.scores: dict[tuple[str, str], float] = {}
        self.stats: dict[tuple[str, str], float] = {}
        self.complete: set[str] = set()
        self.calls: list[tuple[str, str]] = []

    def add_game(self, sport: str, home: str, away: str, home_score: float, away_score: float, final: bool = True) -> EventHandle:
        handle = EventHandle(
            event_id=f"{home}-{away}",
            sport=sport,
            home_team=home,
            away_team=away,
            start_time=datetime(2025, 12, 1, 19, 0),
        )
        self.events[home.lower()] = handle
        self.events[away.lower()] = handle
        self.scores[(handle.event_id, home.lower())] = home_score
        self.scores[(handle.event_id, away.lower())] = away_score
        if final:
            self.complete.add(handle.event_id)
        return handle

    def find_event(self, sport: str, participant: str, approx_date: datetime) -> EventHandle | None:
        self.calls.append(("find_event", participant))
        return self.events.get(participant.lower())

    def is_complete(self, handle: EventHandle) -> bool:
        return handle.event_id in self.complete

    def stat_value(self, handle: EventHandle, participant: str, stat_name: str) -> float | None:
        if stat_name == "points" and (handle.event_id, participant.lower()) in self.scores:
            return self.scores[(handle.event_id, participant.lower())]
        return self.stats.get((participant.lower(), stat_name.lower()))


@pytest.fixture()
def provider() -> FakeResultsProvider:
    return FakeResultsProvider()
