"""
Time-based adjustments applied during a projection.

- Glide path: scheduled shift from equities into the other asset classes
- Market shock: one-off multiplicative drop with an optional bounce-back

Both are pure functions of the base configuration and the elapsed year, so
every Monte Carlo trial sees exactly the same adjustment as the deterministic
projection.
"""

from typing import Optional

from .params import AssetAllocation, GlidePath, MarketShock

NON_EQUITY = ('bonds', 'reits', 'gold', 'cash')


def apply_glide_path(
    allocation: AssetAllocation,
    glide_path: Optional[GlidePath],
    year: int,
) -> AssetAllocation:
    """
    Allocation after `year` years of glide-path reductions.

    Equity falls by reduce_equity_percent points every every_years years but
    never below floor_percent (and never rises when it already starts below
    the floor). The amount removed is split pro-rata between domestic and
    international equity and credited to the non-equity classes in proportion
    to their current weights; if there are none, it all goes to bonds.
    """
    if glide_path is None or not glide_path.enabled:
        return allocation

    equity = allocation.equity
    if equity <= 0:
        return allocation

    steps = year // glide_path.every_years
    target_equity = max(glide_path.floor_percent, equity - steps * glide_path.reduce_equity_percent)
    reduction = equity - min(equity, target_equity)
    if reduction <= 0:
        return allocation

    weights = allocation.as_dict()
    weights['domestic_equity'] -= reduction * allocation.domestic_equity / equity
    weights['international_equity'] -= reduction * allocation.international_equity / equity

    non_equity_total = sum(getattr(allocation, name) for name in NON_EQUITY)
    if non_equity_total > 0:
        for name in NON_EQUITY:
            weights[name] += reduction * getattr(allocation, name) / non_equity_total
    else:
        weights['bonds'] += reduction

    return AssetAllocation(**weights)


def shock_factor(shock: Optional[MarketShock], year: int) -> float:
    """
    Multiplier applied to portfolio value at the start of `year`.

    (1 + magnitude/100) in the shock year, (1 + recovery/100) the year after
    when a recovery is configured, 1.0 otherwise.
    """
    if shock is None or not shock.enabled:
        return 1.0
    if year == shock.year:
        return 1 + shock.magnitude_percent / 100
    if shock.recovery_percent and year == shock.year + 1:
        return 1 + shock.recovery_percent / 100
    return 1.0
