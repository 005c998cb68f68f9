"""Exception types shared across parsing, round robins and settlement."""

from __future__ import annotations


class SettlementAbort(Exception):
    """A wager cannot be settled this cycle; its stored state must stay untouched."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class ResultsProviderError(RuntimeError):
    """The results provider could not be reached or returned an unusable payload."""


class RoundRobinError(ValueError):
    """A round robin label or leg list cannot be expanded."""


class WagerNotFound(LookupError):
    """No stored wager has the requested id."""
