"""Round robin expansion: every k-of-n leg combination as its own parlay."""

from __future__ import annotations

import itertools
import math
from collections.abc import Iterable, Sequence

from betledger.errors import RoundRobinError
from betledger.parlays.engine import combine_odds
from betledger.parlays.types import RoundRobinBreakdown, RoundRobinLeg, RoundRobinParlay
from betledger.parsing.classifier import ROUND_ROBIN_LABEL
from betledger.parsing.types import LegStatus, ParsedLeg, WagerStatus


def parse_round_robin_label(label: str) -> tuple[int, int, int]:
    """Return ``(k, n, m)`` from ``"k/n Round Robin (m Bets)"``."""

    match = ROUND_ROBIN_LABEL.search(label or "")
    if not match:
        raise RoundRobinError(f"Not a round robin label: {label!r}")
    return int(match.group(1)), int(match.group(2)), int(match.group(3))


def leg_combinations(total_legs: int, parlay_size: int) -> list[tuple[int, ...]]:
    """Every ``parlay_size`` subset of leg indices, in lexicographic order."""

    if parlay_size < 0 or parlay_size > total_legs:
        raise RoundRobinError(f"Cannot pick {parlay_size} of {total_legs} legs")
    return list(itertools.combinations(range(total_legs), parlay_size))


def combination_status(statuses: Iterable[LegStatus]) -> WagerStatus:
    statuses = list(statuses)
    if any(status is LegStatus.LOST for status in statuses):
        return WagerStatus.LOST
    if all(status is LegStatus.WON for status in statuses):
        return WagerStatus.WON
    # pending legs and pushes both leave the combination open
    return WagerStatus.PENDING


def legs_from_parsed(parsed_legs: Sequence[ParsedLeg]) -> list[RoundRobinLeg]:
    return [
        RoundRobinLeg(
            index=idx,
            description=leg.raw_description,
            odds=leg.odds,
            status=leg.status,
            sport=leg.sport,
            participant=leg.participant,
        )
        for idx, leg in enumerate(parsed_legs)
    ]


def expand_round_robin(
    parlay_size: int,
    total_parlays: int,
    total_stake: float,
    legs: Sequence[RoundRobinLeg],
    total_legs: int | None = None,
) -> RoundRobinBreakdown:
    """Build the breakdown for a round robin over ``legs``.

    ``total_parlays`` is the bet count printed on the ticket and sets the stake
    per combination; a mismatch with ``C(n, k)`` is reported as a warning.
    """

    if not legs:
        raise RoundRobinError("Round robin has no legs")
    if total_parlays <= 0:
        raise RoundRobinError("Round robin bet count must be positive")
    unpriced = [leg.index for leg in legs if not leg.odds]
    if unpriced:
        raise RoundRobinError(f"Legs without odds cannot be priced: {unpriced}")

    n = len(legs)
    warnings: list[str] = []
    if total_legs is not None and total_legs != n:
        warnings.append(f"Label lists {total_legs} legs but {n} were found")
    expected = math.comb(n, parlay_size) if 0 <= parlay_size <= n else 0
    if expected != total_parlays:
        warnings.append(f"Label lists {total_parlays} bets but C({n},{parlay_size}) = {expected}")

    stake_per_parlay = total_stake / total_parlays
    parlays: list[RoundRobinParlay] = []
    for combo in leg_combinations(n, parlay_size):
        chosen = [legs[i] for i in combo]
        decimal_odds = combine_odds(leg.odds for leg in chosen)
        parlays.append(
            RoundRobinParlay(
                legs=combo,
                decimal_odds=decimal_odds,
                stake=stake_per_parlay,
                potential_win=stake_per_parlay * decimal_odds - stake_per_parlay,
                status=combination_status(leg.status for leg in chosen),
            )
        )

    return RoundRobinBreakdown(
        parlay_size=parlay_size,
        total_legs=n,
        total_parlays=total_parlays,
        stake_per_parlay=stake_per_parlay,
        total_stake=total_stake,
        legs=list(legs),
        parlays=parlays,
        warnings=warnings,
    )


def build_breakdown(label: str, total_stake: float, parsed_legs: Sequence[ParsedLeg]) -> RoundRobinBreakdown:
    parlay_size, total_legs, total_parlays = parse_round_robin_label(label)
    return expand_round_robin(
        parlay_size,
        total_parlays,
        total_stake,
        legs_from_parsed(parsed_legs),
        total_legs=total_legs,
    )
