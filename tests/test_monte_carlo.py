"""
Tests for the Monte Carlo projector.

The key property: with zero volatility every trial follows the
deterministic projection exactly, including contribution schedules, glide
paths and shocks. With volatility, results are reproducible from the seed
regardless of how batches are spread over worker threads.
"""

import threading

import numpy as np
import pytest

from finsim import (
    AssetAllocation,
    ContributionInputs,
    GlidePath,
    MarketShock,
    MonteCarloParams,
    MonteCarloResult,
    ProjectionInputs,
    SimulationAssumptions,
    SimulationCancelled,
    project_deterministic,
    run_monte_carlo,
    run_projection,
)

SPREAD_MEANS = {
    'domestic_equity': 0.09, 'international_equity': 0.08,
    'bonds': 0.04, 'reits': 0.06, 'gold': 0.03, 'cash': 0.02,
}


@pytest.fixture(scope="module")
def base_inputs():
    return ProjectionInputs(
        lump_sum=10_000,
        duration_years=10,
        contribution=ContributionInputs(amount=250),
        target_amount=60_000,
    )


@pytest.fixture(scope="module")
def mc_result(base_inputs):
    """Default-model Monte Carlo run shared by the distribution tests."""
    return run_monte_carlo(base_inputs, MonteCarloParams(n_simulations=2000, random_seed=42))


def test_zero_volatility_matches_deterministic(flat_model):
    model = flat_model(SPREAD_MEANS, volatility=0.0)
    inputs = ProjectionInputs(
        lump_sum=5_000,
        duration_years=12,
        contribution=ContributionInputs(
            amount=300,
            start_delay_months=4,
            annual_escalation_percent=3,
            skip_months_per_year=1,
        ),
        glide_path=GlidePath(enabled=True, reduce_equity_percent=5, every_years=3),
        shock=MarketShock(enabled=True, year=4, magnitude_percent=-25, recovery_percent=8),
    )

    deterministic = project_deterministic(inputs, model)
    mc = run_monte_carlo(inputs, MonteCarloParams(n_simulations=20, batch_size=7), model)

    for band, snap in zip(mc.percentiles, deterministic.yearly_snapshots):
        expected = snap.portfolio_value
        assert band.p10 == pytest.approx(expected, rel=1e-9), f"Year {band.year} p10"
        assert band.p50 == pytest.approx(expected, rel=1e-9), f"Year {band.year} p50"
        assert band.p90 == pytest.approx(expected, rel=1e-9), f"Year {band.year} p90"

    assert mc.final_value == pytest.approx(deterministic.final_value, rel=1e-9)
    assert mc.final_stats.stddev == pytest.approx(0, abs=1e-6)


def test_percentiles_are_ordered(mc_result):
    for band in mc_result.percentiles:
        assert band.p10 <= band.p50 <= band.p90, f"Year {band.year}: {band}"


def test_year_zero_is_the_lump_sum(mc_result, base_inputs):
    first = mc_result.percentiles[0]
    assert first.p10 == first.p50 == first.p90 == base_inputs.lump_sum


def test_balances_stay_positive(mc_result):
    assert all(band.p10 > 0 for band in mc_result.percentiles)


def test_mean_tracks_deterministic_projection(mc_result, base_inputs):
    deterministic = project_deterministic(base_inputs)
    ratio = mc_result.final_stats.mean / deterministic.final_value
    assert ratio == pytest.approx(1.0, abs=0.05), (
        f"Monte Carlo mean {mc_result.final_stats.mean:,.0f} vs deterministic "
        f"{deterministic.final_value:,.0f}"
    )


def test_result_fields(mc_result, base_inputs):
    assert isinstance(mc_result, MonteCarloResult)
    assert mc_result.n_simulations == 2000
    assert len(mc_result.percentiles) == base_inputs.duration_years + 1
    assert mc_result.final_value == mc_result.final_stats.median
    assert mc_result.final_stats.p10 == pytest.approx(mc_result.percentiles[-1].p10)
    assert mc_result.final_stats.p90 == pytest.approx(mc_result.percentiles[-1].p90)
    assert mc_result.worst_case <= mc_result.final_value <= mc_result.best_case
    assert [s.portfolio_value for s in mc_result.yearly_snapshots] == [b.p50 for b in mc_result.percentiles]
    assert mc_result.total_contributions == pytest.approx(10_000 + 250 * 120)


def test_success_probability_is_a_fraction(mc_result):
    assert 0.0 < mc_result.success_probability < 1.0


def test_same_seed_same_result(base_inputs):
    params = MonteCarloParams(n_simulations=300, random_seed=7, batch_size=100)
    a = run_monte_carlo(base_inputs, params)
    b = run_monte_carlo(base_inputs, params)
    assert a.percentiles == b.percentiles


def test_different_seed_different_result(base_inputs):
    a = run_monte_carlo(base_inputs, MonteCarloParams(n_simulations=300, random_seed=1))
    b = run_monte_carlo(base_inputs, MonteCarloParams(n_simulations=300, random_seed=2))
    assert a.final_value != b.final_value


def test_worker_count_does_not_change_results(base_inputs):
    serial = run_monte_carlo(base_inputs, MonteCarloParams(n_simulations=400, batch_size=50, n_workers=1))
    threaded = run_monte_carlo(base_inputs, MonteCarloParams(n_simulations=400, batch_size=50, n_workers=4))
    assert serial.percentiles == threaded.percentiles
    assert serial.final_stats == threaded.final_stats


def test_uneven_batches_run_every_trial(flat_model):
    inputs = ProjectionInputs(lump_sum=100, duration_years=1)
    result = run_monte_carlo(inputs, MonteCarloParams(n_simulations=7, batch_size=3), flat_model(0.05, 0.1))
    assert result.n_simulations == 7


def test_invalid_simulation_count_raises(base_inputs):
    with pytest.raises(ValueError):
        run_monte_carlo(base_inputs, MonteCarloParams(n_simulations=0))


def test_negative_duration_raises():
    with pytest.raises(ValueError):
        run_monte_carlo(ProjectionInputs(duration_years=-2), MonteCarloParams(n_simulations=10))


def test_cancellation(base_inputs):
    cancel = threading.Event()
    cancel.set()
    with pytest.raises(SimulationCancelled):
        run_monte_carlo(base_inputs, MonteCarloParams(n_simulations=100), cancel_event=cancel)


def test_cancellation_with_workers(base_inputs):
    cancel = threading.Event()
    cancel.set()
    params = MonteCarloParams(n_simulations=400, batch_size=50, n_workers=4)
    with pytest.raises(RuntimeError):
        run_monte_carlo(base_inputs, params, cancel_event=cancel)


def test_unset_cancel_event_runs_to_completion(base_inputs):
    result = run_monte_carlo(base_inputs, MonteCarloParams(n_simulations=50), cancel_event=threading.Event())
    assert result.n_simulations == 50


def test_invalid_allocation_propagates_without_error():
    inputs = ProjectionInputs(
        lump_sum=1000,
        duration_years=5,
        allocation=AssetAllocation(domestic_equity=150, bonds=-50),
    )
    result = run_monte_carlo(inputs, MonteCarloParams(n_simulations=50))
    assert np.isfinite(result.final_value)


def test_inflation_deflates_real_value(base_inputs):
    inputs = base_inputs.with_changes(assumptions=SimulationAssumptions(inflation=0.03))
    result = run_monte_carlo(inputs, MonteCarloParams(n_simulations=100))
    assert result.final_value_real == pytest.approx(result.final_value / 1.03 ** 10)


def test_run_projection_monte_carlo(base_inputs):
    result = run_projection(base_inputs, 'monte_carlo', MonteCarloParams(n_simulations=20))
    assert isinstance(result, MonteCarloResult)
