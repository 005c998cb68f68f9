"""Sport detection driven by a versioned lookup table.

The table is data, not code: the packaged ``data/sport_lookup.json`` can be
replaced through ``Settings.sport_lookup_path`` or by passing a custom
``SportLookup`` into the parser.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Dict, List

from betledger.config import get_settings

OTHER = "Other"
FOOTBALL_MARKETS = (
    "RECEIVING YARDS",
    "RUSHING YARDS",
    "PASSING YARDS",
    "RECEPTIONS",
    "CARRIES",
    "TOUCHDOWNS",
    "COMPLETIONS",
    "PASS INTERCEPTIONS",
)
COLLEGE_FOOTBALL = "NCAAF"


def _term_pattern(term: str) -> re.Pattern[str]:
    prefix = r"\b" if term[0].isalnum() else ""
    suffix = r"(?:S|ES)?\b" if term[-1].isalnum() else ""
    return re.compile(prefix + re.escape(term) + suffix)


@dataclass
class SportRule:
    sport: str
    patterns: List[re.Pattern[str]]
    refine: List["SportRule"] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SportRule":
        return cls(
            sport=data["sport"],
            patterns=[_term_pattern(term.upper()) for term in data.get("contains", [])],
            refine=[cls.from_dict(item) for item in data.get("refine", [])],
        )

    def matches(self, upper: str) -> bool:
        return any(pattern.search(upper) for pattern in self.patterns)

    def resolve(self, upper: str) -> str:
        for rule in self.refine:
            if rule.matches(upper):
                return rule.resolve(upper)
        return self.sport


class SportLookup:
    """Ordered sport detection: explicit tags first, then keyword rules."""

    def __init__(self, data: Dict[str, Any]) -> None:
        self.version: str = str(data.get("version", "unversioned"))
        self.default: str = data.get("default", OTHER)
        self.tags: Dict[str, str] = {}
        for sport, aliases in data.get("tags", {}).items():
            for alias in aliases:
                self.tags[alias.upper()] = sport
        self.rules = [SportRule.from_dict(item) for item in data.get("rules", [])]

    @classmethod
    def from_path(cls, path: Path) -> "SportLookup":
        return cls(json.loads(Path(path).read_text(encoding="utf-8")))

    @classmethod
    def packaged(cls) -> "SportLookup":
        source = resources.files("betledger").joinpath("data/sport_lookup.json")
        return cls(json.loads(source.read_text(encoding="utf-8")))

    def detect(self, text: str) -> str:
        upper = text.upper().strip()
        if upper in self.tags:
            return self.tags[upper]
        for alias, sport in self.tags.items():
            if f"[{alias}]" in upper:
                return sport
        for rule in self.rules:
            if rule.matches(upper):
                return rule.resolve(upper)
        return self.default

    def detect_prop_sport(self, market: str | None, matchup: str, block: str) -> str:
        """Sport for a player prop.

        Football-only markets force college football unless the matchup already
        names a football sport.
        """

        market_upper = (market or "").upper()
        if any(name in market_upper for name in FOOTBALL_MARKETS):
            sport = self.detect(matchup) if matchup else COLLEGE_FOOTBALL
            if sport not in ("NFL", COLLEGE_FOOTBALL):
                sport = COLLEGE_FOOTBALL
            return sport
        sport = self.detect(matchup) if matchup else self.detect(block)
        if sport == self.default:
            sport = self.detect(block)
        return sport


@lru_cache(maxsize=1)
def default_sport_lookup() -> SportLookup:
    """Lookup table from settings, falling back to the packaged data file."""

    override = get_settings().sport_lookup_path
    if override:
        return SportLookup.from_path(override)
    return SportLookup.packaged()
