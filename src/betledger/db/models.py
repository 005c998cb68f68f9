"""ORM models for stored wagers and their legs."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base declarative class."""


class Wager(Base):
    """One imported ticket."""

    __tablename__ = "wagers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    ticket_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    placed_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    wager_type: Mapped[str] = mapped_column(String(32), nullable=False)
    type_label: Mapped[str] = mapped_column(String(255), default="")
    sport: Mapped[str] = mapped_column(String(32), default="Other")
    game: Mapped[str] = mapped_column(String(512), default="")
    description: Mapped[str] = mapped_column(String(1024), default="")
    category: Mapped[str] = mapped_column(String(64), default="Regular")
    stake: Mapped[float] = mapped_column(Float, default=0.0)
    potential_win: Mapped[float] = mapped_column(Float, default=0.0)
    american_odds: Mapped[int] = mapped_column(Integer, default=0)
    status: Mapped[str] = mapped_column(String(16), default="pending", index=True)
    result: Mapped[str | None] = mapped_column(String(16))
    profit: Mapped[float | None] = mapped_column(Float)
    settled_at: Mapped[datetime | None] = mapped_column(DateTime)
    game_start_time: Mapped[datetime | None] = mapped_column(DateTime)
    is_free_play: Mapped[bool] = mapped_column(Boolean, default=False)
    is_live: Mapped[bool] = mapped_column(Boolean, default=False)
    provider_game_id: Mapped[str | None] = mapped_column(String(64))
    league: Mapped[str | None] = mapped_column(String(128))
    player: Mapped[str | None] = mapped_column(String(128))
    player_team: Mapped[str | None] = mapped_column(String(16))
    market: Mapped[str | None] = mapped_column(String(128))
    over_under: Mapped[str | None] = mapped_column(String(8))
    line: Mapped[str | None] = mapped_column(String(16))
    warnings: Mapped[list[str]] = mapped_column(JSON, default=list)
    display_legs: Mapped[list[str]] = mapped_column(JSON, default=list)
    round_robin_label: Mapped[str | None] = mapped_column(String(128))
    last_settlement_error: Mapped[str | None] = mapped_column(Text)
    lease_owner: Mapped[str | None] = mapped_column(String(64))
    lease_expires_at: Mapped[datetime | None] = mapped_column(DateTime)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    legs: Mapped[list[WagerLeg]] = relationship(
        back_populates="wager",
        cascade="all, delete-orphan",
        order_by="WagerLeg.leg_order",
    )


class WagerLeg(Base):
    """Structured selection of a wager, stored in ticket order."""

    __tablename__ = "wager_legs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    wager_id: Mapped[int] = mapped_column(ForeignKey("wagers.id"), nullable=False)
    leg_order: Mapped[int] = mapped_column(Integer, default=0)
    game_date: Mapped[datetime | None] = mapped_column(DateTime)
    sport: Mapped[str] = mapped_column(String(32), default="Other")
    participant: Mapped[str | None] = mapped_column(String(128))
    opponent: Mapped[str | None] = mapped_column(String(128))
    team: Mapped[str | None] = mapped_column(String(128))
    bet_kind: Mapped[str] = mapped_column(String(16), default="unknown")
    line: Mapped[float | None] = mapped_column(Float)
    teaser_adjustment: Mapped[float | None] = mapped_column(Float)
    over_under: Mapped[str | None] = mapped_column(String(8))
    stat_name: Mapped[str | None] = mapped_column(String(128))
    odds: Mapped[int | None] = mapped_column(Integer)
    status: Mapped[str] = mapped_column(String(16), default="pending")
    raw_description: Mapped[str] = mapped_column(String(1024), default="")

    wager: Mapped[Wager] = relationship(back_populates="legs")
