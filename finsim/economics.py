"""
Economic primitives for the projection engine.

This module contains the leaf-level building blocks:
- Standard-normal generation via the Box-Muller transform
- Contribution normalization (periodic, round-up, monthly schedules)
- Time-value-of-money formulas (lump sum, annuity, required payment)
- Percentile and summary statistics over simulated outcomes
"""

import math
from typing import List, Optional, Protocol, Sequence, Tuple

import numpy as np

from .params import ContributionInputs, FinalStats, Frequency


# =============================================================================
# Random Normal Generation
# =============================================================================

class NormalSource(Protocol):
    """Anything that can produce arrays of standard-normal deviates."""

    def normals(self, size: int) -> np.ndarray:
        ...


class BoxMullerSource:
    """
    Standard-normal deviates from the Box-Muller transform.

    Two uniforms u1, u2 in (0, 1] x [0, 1) give two independent deviates:

        z0 = sqrt(-2 ln u1) cos(2 pi u2)
        z1 = sqrt(-2 ln u1) sin(2 pi u2)

    u1 is drawn as 1 - U with U in [0, 1), so ln(u1) is always finite.
    """

    def __init__(self, rng: Optional[np.random.Generator] = None, seed: Optional[int] = None):
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    def next(self) -> Tuple[float, float]:
        """Return one pair of independent standard-normal deviates."""
        u1 = 1.0 - self.rng.random()
        u2 = self.rng.random()
        radius = math.sqrt(-2.0 * math.log(u1))
        theta = 2.0 * math.pi * u2
        return radius * math.cos(theta), radius * math.sin(theta)

    def normals(self, size: int) -> np.ndarray:
        """Vectorized draw of `size` deviates (both halves of each pair are used)."""
        n_pairs = (size + 1) // 2
        u1 = 1.0 - self.rng.random(n_pairs)
        u2 = self.rng.random(n_pairs)
        radius = np.sqrt(-2.0 * np.log(u1))
        theta = 2.0 * np.pi * u2
        z = np.concatenate([radius * np.cos(theta), radius * np.sin(theta)])
        return z[:size]


# =============================================================================
# Contribution Normalization
# =============================================================================

# Average days and weeks per month (365.25 / 12 and 52.14 / 12)
DAYS_PER_MONTH = 30.44
WEEKS_PER_MONTH = 4.345


def to_monthly_contribution(amount: float, frequency: Frequency) -> float:
    """
    Convert a periodic contribution to its monthly equivalent.

    The day and week multipliers are calendar averages, so a weekly saver is
    credited 4.345 contributions every month rather than 4 or 5.
    """
    frequency = Frequency(frequency)
    if frequency == Frequency.DAILY:
        return amount * DAYS_PER_MONTH
    if frequency == Frequency.WEEKLY:
        return amount * WEEKS_PER_MONTH
    if frequency == Frequency.QUARTERLY:
        return amount / 3
    return amount


def round_up_contribution(
    avg_tx_per_month: float,
    avg_tx_amount: float,
    round_up_to: float,
    multiplier: float = 1.0,
) -> float:
    """
    Monthly amount invested by rounding up everyday transactions.

    The average round-up per transaction is round_up_to minus the remainder of
    the average transaction amount, so a 4.30 purchase rounded to 1 gives 0.70.
    """
    if avg_tx_per_month <= 0 or avg_tx_amount <= 0:
        return 0.0
    avg_round_up = round_up_to - math.fmod(avg_tx_amount, round_up_to)
    return avg_tx_per_month * avg_round_up * multiplier


def total_monthly_contribution(contribution: ContributionInputs) -> float:
    """Periodic contribution plus round-ups, as one monthly cash flow."""
    periodic = to_monthly_contribution(contribution.amount, contribution.frequency)
    round_up = 0.0
    if contribution.round_up is not None:
        r = contribution.round_up
        round_up = round_up_contribution(
            r.avg_tx_per_month, r.avg_tx_amount, r.round_up_to, r.multiplier
        )
    return periodic + round_up


def contribution_schedule(
    monthly_amount: float,
    n_months: int,
    start_delay_months: int = 0,
    annual_escalation_percent: float = 0.0,
    skip_months_per_year: int = 0,
) -> np.ndarray:
    """
    Expand a monthly contribution into a per-month cash-flow array.

    Month m (1-based) pays nothing while m <= start_delay_months or when it is
    one of the last skip_months_per_year months of its year. Otherwise it pays
    monthly_amount escalated once per elapsed year.

    Returns:
        Array of shape (n_months,) where element i is the contribution made at
        the end of month i + 1.
    """
    months = np.arange(1, n_months + 1)
    year_index = (months - 1) // 12
    month_in_year = (months - 1) % 12

    active = (months > start_delay_months) & (month_in_year < 12 - skip_months_per_year)
    escalation = (1 + annual_escalation_percent / 100) ** year_index
    return np.where(active, monthly_amount * escalation, 0.0)


# =============================================================================
# Time Value of Money
# =============================================================================

def future_value_lump_sum(present_value: float, annual_rate: float, years: float) -> float:
    """Value of a one-off investment after compounding annually for `years`."""
    return present_value * (1 + annual_rate) ** years


def future_value_annuity(monthly_payment: float, monthly_rate: float, n_months: int) -> float:
    """
    Future value of end-of-month payments.

        FV = PMT * ((1 + r)^n - 1) / r

    With r == 0 this is just PMT * n.
    """
    if monthly_rate == 0:
        return monthly_payment * n_months
    return monthly_payment * ((1 + monthly_rate) ** n_months - 1) / monthly_rate


def required_monthly_contribution(
    target_amount: float,
    current_amount: float,
    years: float,
    annual_return: float,
) -> float:
    """
    Monthly payment needed to grow current_amount to target_amount in `years`.

    The existing balance compounds annually; the shortfall is funded by an
    end-of-month annuity at annual_return / 12.
    """
    if years <= 0:
        return 0.0

    monthly_rate = annual_return / 12
    n_months = years * 12
    shortfall = target_amount - future_value_lump_sum(current_amount, annual_return, years)
    if shortfall <= 0:
        return 0.0

    if monthly_rate == 0:
        return shortfall / n_months
    return shortfall * monthly_rate / ((1 + monthly_rate) ** n_months - 1)


MILESTONE_AMOUNTS = (1_000, 5_000, 10_000, 25_000, 50_000, 100_000)
MAX_MILESTONE_MONTHS = 600


def estimate_milestones(
    monthly_contribution: float,
    annual_return: float,
    lump_sum: float = 0.0,
    amounts: Sequence[float] = MILESTONE_AMOUNTS,
) -> List[Tuple[float, int]]:
    """
    Months needed to reach each milestone amount.

    Milestones that are not reached within 50 years are omitted.

    Returns:
        List of (amount, months) pairs in the order of `amounts`.
    """
    monthly_rate = annual_return / 12
    milestones = []

    for target in amounts:
        if lump_sum >= target:
            milestones.append((target, 0))
            continue
        if monthly_contribution <= 0:
            continue
        if monthly_rate == 0:
            months = math.ceil((target - lump_sum) / monthly_contribution)
            if months < MAX_MILESTONE_MONTHS:
                milestones.append((target, months))
            continue

        for months in range(1, MAX_MILESTONE_MONTHS):
            value = (lump_sum * (1 + monthly_rate) ** months
                     + future_value_annuity(monthly_contribution, monthly_rate, months))
            if value >= target:
                milestones.append((target, months))
                break

    return milestones


# =============================================================================
# Outcome Statistics
# =============================================================================

def calculate_percentiles(values: Sequence[float], percentiles: Sequence[float]) -> np.ndarray:
    """
    Percentiles with linear interpolation between ranks.

    For n sorted values the p-th percentile sits at index p/100 * (n - 1),
    interpolated between the floor and ceiling ranks (numpy's 'linear' method).
    Works along axis 0, so a (n_trials, n_years) array gives
    (len(percentiles), n_years).
    """
    return np.percentile(np.asarray(values, dtype=float), percentiles, axis=0)


def summarize_final_values(final_values: np.ndarray) -> FinalStats:
    """Mean, median, population stddev, p10 and p90 of trial-final values."""
    final_values = np.asarray(final_values, dtype=float)
    p10, median, p90 = calculate_percentiles(final_values, [10, 50, 90])
    return FinalStats(
        mean=float(np.mean(final_values)),
        median=float(median),
        stddev=float(np.std(final_values)),
        p10=float(p10),
        p90=float(p90),
    )
