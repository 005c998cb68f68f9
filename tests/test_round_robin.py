"""Round robin expansion tests."""

from __future__ import annotations

import math

import pytest

from betledger.errors import RoundRobinError
from betledger.parlays import engine, round_robin
from betledger.parlays.types import RoundRobinLeg
from betledger.parsing.types import LegStatus, WagerStatus


def _legs(*statuses: LegStatus, odds: int = -110) -> list[RoundRobinLeg]:
    return [RoundRobinLeg(index=i, description=f"Leg {i}", odds=odds, status=s) for i, s in enumerate(statuses)]


def test_parse_label() -> None:
    assert round_robin.parse_round_robin_label("2/3 Round Robin (3 Bets)") == (2, 3, 3)
    assert round_robin.parse_round_robin_label("3 / 5 round robin (10 bets)") == (3, 5, 10)
    with pytest.raises(RoundRobinError):
        round_robin.parse_round_robin_label("PARLAY (3 TEAMS)")


@pytest.mark.parametrize("n", range(0, 7))
def test_combinations_cover_every_subset(n: int) -> None:
    for k in range(0, n + 1):
        combos = round_robin.leg_combinations(n, k)
        assert len(combos) == math.comb(n, k)
        assert len(set(combos)) == len(combos)
        assert all(len(set(combo)) == k for combo in combos)


def test_too_many_picks_rejected() -> None:
    with pytest.raises(RoundRobinError):
        round_robin.leg_combinations(3, 4)


def test_two_of_three_scenario() -> None:
    legs = _legs(LegStatus.LOST, LegStatus.WON, LegStatus.WON, odds=100 + 50)
    breakdown = round_robin.expand_round_robin(2, 3, 30.0, legs, total_legs=3)
    assert breakdown.total_parlays == 3
    assert len(breakdown.parlays) == 3
    assert breakdown.stake_per_parlay == pytest.approx(10.0)
    assert [p.legs for p in breakdown.parlays] == [(0, 1), (0, 2), (1, 2)]
    assert breakdown.won_parlays == 1
    assert breakdown.lost_parlays == 2
    won = breakdown.parlays[2]
    assert won.decimal_odds == pytest.approx(2.5 * 2.5)
    assert won.potential_win == pytest.approx(10 * 6.25 - 10)
    assert breakdown.final_profit == pytest.approx(62.5 - 30)
    assert breakdown.warnings == []


def test_pending_and_push_keep_combination_open() -> None:
    legs = _legs(LegStatus.WON, LegStatus.PUSH, LegStatus.PENDING)
    breakdown = round_robin.expand_round_robin(2, 3, 30.0, legs)
    assert [p.status for p in breakdown.parlays] == [WagerStatus.PENDING] * 3
    assert breakdown.final_profit is None


def test_label_mismatch_is_a_warning() -> None:
    legs = _legs(LegStatus.WON, LegStatus.WON, LegStatus.WON)
    breakdown = round_robin.expand_round_robin(2, 4, 40.0, legs, total_legs=4)
    assert len(breakdown.parlays) == 3
    assert breakdown.stake_per_parlay == pytest.approx(10.0)
    assert len(breakdown.warnings) == 2


def test_unpriced_leg_rejected() -> None:
    legs = [RoundRobinLeg(index=0, description="a", odds=None), RoundRobinLeg(index=1, description="b", odds=-110)]
    with pytest.raises(RoundRobinError):
        round_robin.expand_round_robin(1, 2, 20.0, legs)


@pytest.mark.parametrize("flipped", range(4))
def test_flipping_a_leg_to_won_never_lowers_profit(flipped: int) -> None:
    base = [LegStatus.LOST, LegStatus.WON, LegStatus.LOST, LegStatus.WON]
    better = list(base)
    better[flipped] = LegStatus.WON
    before = round_robin.expand_round_robin(2, 6, 60.0, _legs(*base, odds=120))
    after = round_robin.expand_round_robin(2, 6, 60.0, _legs(*better, odds=120))
    assert after.total_profit >= before.total_profit


def test_engine_conversions() -> None:
    assert engine.american_to_decimal(150) == pytest.approx(2.5)
    assert engine.american_to_decimal(-200) == pytest.approx(1.5)
    assert engine.combine_odds([150, -200]) == pytest.approx(3.75)
    assert engine.decimal_to_american(2.5) == 150
    assert engine.decimal_to_american(1.5) == -200
    assert engine.american_to_implied(-110) == pytest.approx(0.5238, rel=1e-3)
