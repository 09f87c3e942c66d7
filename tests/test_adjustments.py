"""
Tests for glide-path and market-shock adjustments.
"""

import pytest

from finsim import AssetAllocation, GlidePath, MarketShock, apply_glide_path, shock_factor

BALANCED = AssetAllocation(35, 15, 30, 8, 7, 5)
GLIDE = GlidePath(enabled=True, reduce_equity_percent=5, every_years=5, floor_percent=20)


def test_disabled_or_missing_glide_path_is_a_no_op():
    assert apply_glide_path(BALANCED, None, 10) is BALANCED
    assert apply_glide_path(BALANCED, GlidePath(enabled=False), 10) is BALANCED


def test_no_reduction_before_first_step():
    assert apply_glide_path(BALANCED, GLIDE, 0) == BALANCED
    assert apply_glide_path(BALANCED, GLIDE, 4) == BALANCED


def test_reduction_is_credited_pro_rata():
    adjusted = apply_glide_path(BALANCED, GLIDE, 5)
    assert adjusted.equity == pytest.approx(45)
    assert adjusted.domestic_equity == pytest.approx(31.5)
    assert adjusted.international_equity == pytest.approx(13.5)
    assert adjusted.bonds == pytest.approx(33)
    assert adjusted.reits == pytest.approx(8.8)
    assert adjusted.gold == pytest.approx(7.7)
    assert adjusted.cash == pytest.approx(5.5)
    assert adjusted.total() == pytest.approx(100)


def test_reduction_stops_at_floor():
    adjusted = apply_glide_path(BALANCED, GLIDE, 100)
    assert adjusted.equity == pytest.approx(20)
    assert adjusted.total() == pytest.approx(100)


def test_equity_below_floor_is_left_alone():
    low_equity = AssetAllocation(domestic_equity=10, bonds=90)
    assert apply_glide_path(low_equity, GLIDE, 20) == low_equity


def test_all_equity_reduction_goes_to_bonds():
    all_equity = AssetAllocation(domestic_equity=60, international_equity=40)
    adjusted = apply_glide_path(all_equity, GLIDE, 10)
    assert adjusted.bonds == pytest.approx(10)
    assert adjusted.domestic_equity == pytest.approx(54)
    assert adjusted.international_equity == pytest.approx(36)


def test_glide_path_does_not_mutate_input():
    before = BALANCED.as_dict()
    apply_glide_path(BALANCED, GLIDE, 15)
    assert BALANCED.as_dict() == before


@pytest.mark.parametrize("year,expected", [
    (0, 1.0),
    (2, 1.0),
    (3, 0.7),
    (4, 1.2),
    (5, 1.0),
])
def test_shock_factor(year, expected):
    shock = MarketShock(enabled=True, year=3, magnitude_percent=-30, recovery_percent=20)
    assert shock_factor(shock, year) == pytest.approx(expected)


def test_shock_without_recovery():
    shock = MarketShock(enabled=True, year=1, magnitude_percent=-40)
    assert shock_factor(shock, 1) == pytest.approx(0.6)
    assert shock_factor(shock, 2) == 1.0


def test_missing_or_disabled_shock():
    assert shock_factor(None, 1) == 1.0
    assert shock_factor(MarketShock(enabled=False, year=1), 1) == 1.0
