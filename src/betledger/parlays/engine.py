"""Odds arithmetic shared by parlays and round robins."""

from __future__ import annotations

from collections.abc import Iterable


def american_to_decimal(odds: int) -> float:
    return 1 + (odds / 100) if odds > 0 else 1 + (100 / abs(odds))


def american_to_implied(odds: int) -> float:
    """Convert American odds to implied probability."""

    if odds > 0:
        return 100 / (odds + 100)
    return -odds / (-odds + 100)


def combine_odds(odds: Iterable[int]) -> float:
    decimal = 1.0
    for price in odds:
        decimal *= american_to_decimal(price)
    return decimal


def decimal_to_american(decimal: float) -> int:
    if decimal <= 1:
        return 0
    if decimal >= 2:
        return round((decimal - 1) * 100)
    return round(-100 / (decimal - 1))
