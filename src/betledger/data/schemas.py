"""Pydantic schemas for results-provider payloads."""

from __future__ import annotations

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

FINAL_STATUSES = frozenset({"final", "completed", "closed", "ft"})

NO_MATCH, PARTIAL, EXACT = 0, 1, 2
_NON_WORD = re.compile(r"[^a-z0-9]+")


class EventSchema(BaseModel):
    id: str
    sport: str
    start_time: datetime
    status: str = "scheduled"
    home_team: str
    away_team: str
    home_score: float | None = None
    away_score: float | None = None

    @property
    def is_final(self) -> bool:
        return self.status.lower() in FINAL_STATUSES


class EventListSchema(BaseModel):
    data: list[EventSchema] = Field(default_factory=list)


class StatLineSchema(BaseModel):
    participant: str
    stat_name: str
    value: float | None = None


class StatListSchema(BaseModel):
    data: list[StatLineSchema] = Field(default_factory=list)


def team_tokens(name: str) -> list[str]:
    return _NON_WORD.sub(" ", name.lower()).split()


def name_match(participant: str, team: str) -> int:
    """How well ``participant`` names ``team``.

    ``EXACT`` for equal names after normalisation, ``PARTIAL`` when the
    participant's words appear as a whole-word run inside the team name
    (``"Celtics"`` in ``"Boston Celtics"``), ``NO_MATCH`` otherwise. A longer
    participant never matches a shorter team: ``"Ohio State"`` is not ``"Ohio"``.
    """

    wanted = team_tokens(participant)
    have = team_tokens(team)
    if not wanted or not have:
        return NO_MATCH
    if wanted == have:
        return EXACT
    span = len(wanted)
    for start in range(len(have) - span + 1):
        if have[start:start + span] == wanted:
            return PARTIAL
    return NO_MATCH


class EventHandle(BaseModel):
    """Reference to one provider event, as returned by ``find_event``."""

    model_config = ConfigDict(frozen=True)

    event_id: str
    sport: str
    home_team: str
    away_team: str
    start_time: datetime

    def match_strength(self, participant: str) -> int:
        return max(name_match(participant, self.home_team), name_match(participant, self.away_team))

    def side_of(self, participant: str) -> str | None:
        """``"home"``/``"away"`` for the side ``participant`` names; ``None`` if neither or both."""

        home = name_match(participant, self.home_team)
        away = name_match(participant, self.away_team)
        if home > away:
            return "home"
        if away > home:
            return "away"
        return None
