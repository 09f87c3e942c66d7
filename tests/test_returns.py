"""
Tests for the Box-Muller normal source and the portfolio return model.
"""

import math

import numpy as np
import pytest

from finsim import (
    DEFAULT_RETURN_TABLES,
    AssetAllocation,
    BoxMullerSource,
    ReturnModel,
    Scenario,
    SimulationAssumptions,
)


# =============================================================================
# Box-Muller
# =============================================================================

def test_next_returns_a_finite_pair():
    source = BoxMullerSource(seed=1)
    for _ in range(1000):
        z0, z1 = source.next()
        assert math.isfinite(z0) and math.isfinite(z1)


def test_normals_are_reproducible_from_seed():
    a = BoxMullerSource(seed=7).normals(101)
    b = BoxMullerSource(seed=7).normals(101)
    assert a.shape == (101,)
    np.testing.assert_array_equal(a, b)


def test_normals_are_standard_normal():
    z = BoxMullerSource(seed=123).normals(200_000)
    assert abs(z.mean()) < 0.02, f"Sample mean {z.mean():.4f} too far from 0"
    assert abs(z.std() - 1) < 0.02, f"Sample std {z.std():.4f} too far from 1"


def test_source_wraps_given_generator():
    rng = np.random.default_rng(5)
    source = BoxMullerSource(rng=rng)
    assert source.rng is rng


# =============================================================================
# Return Model
# =============================================================================

def test_single_asset_portfolio():
    stats = ReturnModel().portfolio_stats(AssetAllocation(cash=100), DEFAULT_RETURN_TABLES.medium)
    assert stats.expected_return == pytest.approx(0.02)
    assert stats.volatility == pytest.approx(0.01)


def test_weighted_expected_return():
    allocation = AssetAllocation(35, 15, 30, 8, 7, 5)
    stats = ReturnModel().portfolio_stats(allocation, DEFAULT_RETURN_TABLES.medium)
    assert stats.expected_return == pytest.approx(0.0584)


def test_volatility_assumes_zero_correlation():
    allocation = AssetAllocation(domestic_equity=50, bonds=50)
    stats = ReturnModel().portfolio_stats(allocation, DEFAULT_RETURN_TABLES.medium)
    assert stats.volatility == pytest.approx(math.sqrt((0.5 * 0.18) ** 2 + (0.5 * 0.08) ** 2))


def test_net_stats_subtract_fees_and_tax_drag():
    allocation = AssetAllocation(35, 15, 30, 8, 7, 5)
    assumptions = SimulationAssumptions(fees=0.005, tax_drag=0.001)
    stats = ReturnModel().net_stats(allocation, assumptions)
    assert stats.expected_return == pytest.approx(0.0584 - 0.006)


@pytest.mark.parametrize("scenario,expected", [
    (Scenario.LOW, 0.06),
    (Scenario.MEDIUM, 0.08),
    (Scenario.HIGH, 0.10),
])
def test_named_scenarios(scenario, expected):
    table = ReturnModel().assumptions_for(scenario)
    assert table.domestic_equity.mean == pytest.approx(expected)


def test_custom_returns_are_percentages_with_medium_volatility():
    model = ReturnModel()
    table = model.assumptions_for(Scenario.CUSTOM, {'domestic_equity': 10})
    assert table.domestic_equity.mean == pytest.approx(0.10)
    assert table.domestic_equity.volatility == pytest.approx(0.18)
    # Unspecified assets keep the medium means
    assert table.bonds.mean == pytest.approx(0.04)


def test_custom_without_returns_falls_back_to_medium():
    assert ReturnModel().assumptions_for('custom') == DEFAULT_RETURN_TABLES.medium


def test_custom_returns_reject_unknown_assets():
    with pytest.raises(ValueError):
        ReturnModel().assumptions_for(Scenario.CUSTOM, {'crypto': 50})


def test_unknown_scenario_raises():
    with pytest.raises(ValueError):
        SimulationAssumptions(scenario='extreme')


def test_model_uses_injected_tables(flat_model):
    stats = flat_model(0.05).net_stats(AssetAllocation(bonds=100), SimulationAssumptions(fees=0))
    assert stats.expected_return == pytest.approx(0.05)
    assert stats.volatility == 0
