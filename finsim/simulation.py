"""
Simulation engines for portfolio projection.

This module contains the deterministic projector and the Monte Carlo
projector. Both share the same building blocks (contribution schedule,
per-year glide-path returns, shock multipliers) so that a zero-volatility
Monte Carlo run reproduces the deterministic projection exactly.

Timing convention (both engines):
- Year 0 is the starting point: the lump sum, no growth, no contributions.
- Year y applies the shock multiplier for y, then 12 months of growth with
  contributions credited at the end of each month.
- The lump sum compounds at (1 + net) per year; contributions compound at
  net / 12 per month, the standard future-value-of-annuity convention.
"""

import logging
import math
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional, Tuple

import numpy as np

from .adjustments import apply_glide_path, shock_factor
from .economics import (
    BoxMullerSource,
    NormalSource,
    calculate_percentiles,
    contribution_schedule,
    required_monthly_contribution,
    summarize_final_values,
    total_monthly_contribution,
)
from .params import (
    MarketShock,
    MonteCarloParams,
    MonteCarloResult,
    PercentileBand,
    ProjectionInputs,
    SimulationResult,
    YearlySnapshot,
)
from .returns import DEFAULT_RETURN_MODEL, PortfolioStats, ReturnModel

logger = logging.getLogger(__name__)

DETERMINISTIC = "deterministic"
MONTE_CARLO = "monte_carlo"


class SimulationCancelled(RuntimeError):
    """Raised when a caller cancels a Monte Carlo run between batches."""


# =============================================================================
# Shared Helpers
# =============================================================================

def _check_duration(duration_years: int) -> None:
    if duration_years < 0:
        raise ValueError(f"duration_years must be >= 0, got {duration_years}")


def compute_yearly_stats(
    inputs: ProjectionInputs,
    model: ReturnModel = DEFAULT_RETURN_MODEL,
) -> List[PortfolioStats]:
    """
    Net portfolio stats in force for each year 0..duration_years.

    Entry y is used for the growth step that ends at year y, after the glide
    path has been applied for y elapsed years.
    """
    return [
        model.net_stats(
            apply_glide_path(inputs.allocation, inputs.glide_path, year),
            inputs.assumptions,
        )
        for year in range(inputs.duration_years + 1)
    ]


def build_schedule(inputs: ProjectionInputs) -> Tuple[float, np.ndarray]:
    """Monthly contribution and its per-month schedule over the full horizon."""
    monthly = total_monthly_contribution(inputs.contribution)
    c = inputs.contribution
    schedule = contribution_schedule(
        monthly,
        inputs.duration_years * 12,
        start_delay_months=c.start_delay_months,
        annual_escalation_percent=c.annual_escalation_percent,
        skip_months_per_year=c.skip_months_per_year,
    )
    return monthly, schedule


def _inflation_factor(inputs: ProjectionInputs) -> float:
    return (1 + inputs.assumptions.inflation) ** inputs.duration_years


def _cumulative_contributions(lump_sum: float, schedule: np.ndarray, n_years: int) -> np.ndarray:
    """Total contributed by the end of each year 0..n_years."""
    by_year = schedule.reshape(n_years, 12).sum(axis=1) if n_years > 0 else np.zeros(0)
    return lump_sum + np.concatenate([[0.0], np.cumsum(by_year)])


# =============================================================================
# Deterministic Projection
# =============================================================================

def project_deterministic(
    inputs: ProjectionInputs,
    model: ReturnModel = DEFAULT_RETURN_MODEL,
) -> SimulationResult:
    """
    Project portfolio value under a fixed net return.

    For a flat schedule with no glide path or shock this is the closed form

        value(y) = lump * (1 + net)^y + c * ((1 + net/12)^(12y) - 1) / (net/12)

    (with the annuity term falling back to c * 12y when net == 0). Glide paths
    change the net return year by year and shocks rescale the running value,
    so the projection steps through each year instead.
    """
    _check_duration(inputs.duration_years)
    n_years = inputs.duration_years

    monthly, schedule = build_schedule(inputs)
    yearly_stats = compute_yearly_stats(inputs, model)
    contributions = _cumulative_contributions(inputs.lump_sum, schedule, n_years)

    lump_value = float(inputs.lump_sum)
    annuity_value = 0.0
    snapshots = []

    for year in range(n_years + 1):
        factor = shock_factor(inputs.shock, year)
        lump_value *= factor
        annuity_value *= factor

        if year > 0:
            net = yearly_stats[year].expected_return
            monthly_rate = net / 12
            lump_value *= 1 + net
            for payment in schedule[(year - 1) * 12:year * 12]:
                annuity_value = annuity_value * (1 + monthly_rate) + payment

        value = lump_value + annuity_value
        contributed = float(contributions[year])
        snapshots.append(YearlySnapshot(
            year=year,
            contributions=contributed,
            portfolio_value=value,
            returns=value - contributed,
        ))

    final_value = snapshots[-1].portfolio_value
    total_contributions = snapshots[-1].contributions
    inflation_factor = _inflation_factor(inputs)
    final_value_real = final_value / inflation_factor

    success_probability = None
    required_monthly = None
    if inputs.target_amount is not None:
        success_probability = 1.0 if final_value_real >= inputs.target_amount else 0.0
        # Target is in today's money; fund its nominal equivalent at the year-1 rate
        required_monthly = required_monthly_contribution(
            inputs.target_amount * inflation_factor,
            inputs.lump_sum,
            n_years,
            yearly_stats[1].expected_return if n_years > 0 else yearly_stats[0].expected_return,
        )

    logger.debug("Deterministic projection: %d years, final value %.2f", n_years, final_value)

    return SimulationResult(
        yearly_snapshots=snapshots,
        final_value=final_value,
        total_contributions=total_contributions,
        total_returns=final_value - total_contributions,
        monthly_contribution=monthly,
        final_value_real=final_value_real,
        success_probability=success_probability,
        required_monthly=required_monthly,
    )


# =============================================================================
# Monte Carlo Projection
# =============================================================================

def simulate_trial_batch(
    n_trials: int,
    lump_sum: float,
    schedule: np.ndarray,
    yearly_stats: List[PortfolioStats],
    source: NormalSource,
    shock: Optional[MarketShock] = None,
) -> np.ndarray:
    """
    Simulate a batch of independent trials month by month.

    Each month every trial draws one deviate z and grows by the log-normal
    factor exp(mu - sigma^2 / 2 + sigma * z), with sigma the annual volatility
    scaled by 1/sqrt(12). The lump-sum and contribution sleeves use the monthly
    log drifts ln(1 + net) / 12 and ln(1 + net / 12) respectively (both close
    to net / 12), which makes a zero-volatility trial match the deterministic
    projection. Balances stay positive by construction.

    Returns:
        Array of shape (n_trials, n_years + 1) with the balance at each year end.
    """
    n_years = len(yearly_stats) - 1
    lump = np.full(n_trials, float(lump_sum))
    contrib = np.zeros(n_trials)
    paths = np.empty((n_trials, n_years + 1))

    for year in range(n_years + 1):
        factor = shock_factor(shock, year)
        if factor != 1.0:
            lump *= factor
            contrib *= factor

        if year > 0:
            stats = yearly_stats[year]
            sigma = stats.volatility / math.sqrt(12)
            lump_drift = math.log1p(stats.expected_return) / 12
            contrib_drift = math.log1p(stats.expected_return / 12)

            for payment in schedule[(year - 1) * 12:year * 12]:
                noise = sigma * source.normals(n_trials) - 0.5 * sigma ** 2
                lump *= np.exp(lump_drift + noise)
                contrib *= np.exp(contrib_drift + noise)
                contrib += payment

        paths[:, year] = lump + contrib

    return paths


def _batch_sizes(n_simulations: int, batch_size: int) -> List[int]:
    batch_size = max(1, batch_size)
    full, rest = divmod(n_simulations, batch_size)
    return [batch_size] * full + ([rest] if rest else [])


def run_monte_carlo(
    inputs: ProjectionInputs,
    mc_params: MonteCarloParams = None,
    model: ReturnModel = DEFAULT_RETURN_MODEL,
    cancel_event: Optional[threading.Event] = None,
    source_factory: Callable[[np.random.Generator], NormalSource] = BoxMullerSource,
) -> MonteCarloResult:
    """
    Run a Monte Carlo projection and aggregate percentiles.

    Trials are split into batches, each with its own child seed spawned from
    mc_params.random_seed, so results are reproducible and independent of
    n_workers. cancel_event is checked before every batch. Aggregation waits
    for every batch; per-trial paths are discarded once percentiles and final
    statistics have been computed.

    Each month a trial grows first and then credits the contribution, with
    separate log drifts for the lump-sum and contribution sleeves (see
    simulate_trial_batch). This differs from the plain "add contribution,
    then grow at net/12 plus noise" step, and makes a zero-volatility run
    reproduce project_deterministic exactly.

    Allocation problems (negative weights, totals other than 100) are not
    rejected and simply skew the projected returns.

    Raises:
        ValueError: if n_simulations < 1 or duration_years < 0
        SimulationCancelled: if cancel_event is set before all batches ran
    """
    if mc_params is None:
        mc_params = MonteCarloParams()
    if mc_params.n_simulations < 1:
        raise ValueError(f"n_simulations must be >= 1, got {mc_params.n_simulations}")
    _check_duration(inputs.duration_years)

    n_years = inputs.duration_years
    monthly, schedule = build_schedule(inputs)
    yearly_stats = compute_yearly_stats(inputs, model)
    sizes = _batch_sizes(mc_params.n_simulations, mc_params.batch_size)
    seeds = np.random.SeedSequence(mc_params.random_seed).spawn(len(sizes))

    logger.info(
        "Monte Carlo: %d trials in %d batches, %d years, net return %.4f, volatility %.4f",
        mc_params.n_simulations, len(sizes), n_years,
        yearly_stats[0].expected_return, yearly_stats[0].volatility,
    )

    def run_batch(i: int) -> np.ndarray:
        if cancel_event is not None and cancel_event.is_set():
            raise SimulationCancelled(f"Monte Carlo cancelled before batch {i + 1} of {len(sizes)}")
        source = source_factory(np.random.default_rng(seeds[i]))
        return simulate_trial_batch(
            sizes[i], inputs.lump_sum, schedule, yearly_stats, source, inputs.shock,
        )

    if mc_params.n_workers > 1 and len(sizes) > 1:
        with ThreadPoolExecutor(max_workers=mc_params.n_workers) as pool:
            futures = [pool.submit(run_batch, i) for i in range(len(sizes))]
            try:
                batches = [f.result() for f in futures]
            except SimulationCancelled:
                for f in futures:
                    f.cancel()
                logger.warning("Monte Carlo run cancelled")
                raise
    else:
        batches = []
        for i in range(len(sizes)):
            try:
                batches.append(run_batch(i))
            except SimulationCancelled:
                logger.warning("Monte Carlo run cancelled after %d of %d batches", i, len(sizes))
                raise

    paths = np.vstack(batches)
    final_values = paths[:, -1]

    p10, p50, p90 = calculate_percentiles(paths, [10, 50, 90])
    percentiles = [
        PercentileBand(year=year, p10=float(p10[year]), p50=float(p50[year]), p90=float(p90[year]))
        for year in range(n_years + 1)
    ]
    final_stats = summarize_final_values(final_values)

    contributions = _cumulative_contributions(inputs.lump_sum, schedule, n_years)
    snapshots = [
        YearlySnapshot(
            year=year,
            contributions=float(contributions[year]),
            portfolio_value=band.p50,
            returns=band.p50 - float(contributions[year]),
        )
        for year, band in enumerate(percentiles)
    ]

    inflation_factor = _inflation_factor(inputs)
    final_value = final_stats.median
    total_contributions = float(contributions[-1])

    success_probability = None
    if inputs.target_amount is not None:
        success_probability = float(np.mean(final_values / inflation_factor >= inputs.target_amount))

    return MonteCarloResult(
        yearly_snapshots=snapshots,
        final_value=final_value,
        total_contributions=total_contributions,
        total_returns=final_value - total_contributions,
        monthly_contribution=monthly,
        final_value_real=final_value / inflation_factor,
        success_probability=success_probability,
        percentiles=percentiles,
        final_stats=final_stats,
        n_simulations=mc_params.n_simulations,
    )


def run_projection(
    inputs: ProjectionInputs,
    mode: str = DETERMINISTIC,
    mc_params: MonteCarloParams = None,
    model: ReturnModel = DEFAULT_RETURN_MODEL,
) -> SimulationResult:
    """Run either engine by name ('deterministic' or 'monte_carlo')."""
    if mode == DETERMINISTIC:
        return project_deterministic(inputs, model)
    if mode == MONTE_CARLO:
        return run_monte_carlo(inputs, mc_params, model)
    raise ValueError(f"Unknown projection mode {mode!r}; expected {DETERMINISTIC!r} or {MONTE_CARLO!r}")
