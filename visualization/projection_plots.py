"""
Projection charts: portfolio value fan charts, allocation bars and scenario
comparisons.
"""

from typing import Dict, Optional, Tuple

import matplotlib.pyplot as plt
import numpy as np

from finsim.params import ASSET_CLASSES, AssetAllocation, MonteCarloResult, SimulationResult

from .helpers import add_legend, format_currency_axis, plot_fan_chart
from .styles import ASSET_COLORS, COLORS, SCENARIO_COLORS


def plot_projection(
    ax: plt.Axes,
    result: SimulationResult,
    target_amount: Optional[float] = None,
    title: str = 'Projected Portfolio Value',
) -> None:
    """
    Plot a projection on one axes.

    Monte Carlo results get a p10-p90 band around the median; deterministic
    results a single line. Cumulative contributions are drawn for reference.
    """
    years = np.array(result.years)

    if isinstance(result, MonteCarloResult) and result.percentiles:
        plot_fan_chart(ax, result.percentiles, color=COLORS['band'])
    else:
        values = [s.portfolio_value for s in result.yearly_snapshots]
        ax.plot(years, values, color=COLORS['deterministic'], linewidth=2, label='Portfolio value')

    contributions = [s.contributions for s in result.yearly_snapshots]
    ax.plot(years, contributions, color=COLORS['contributions'], linewidth=1.5,
            linestyle='--', label='Contributions')

    if target_amount is not None:
        ax.axhline(y=target_amount, color=COLORS['target'], linestyle=':', label='Target')

    ax.set_xlabel('Year')
    ax.set_ylabel('Value')
    ax.set_title(title)
    format_currency_axis(ax)
    add_legend(ax)


def plot_allocation_bars(ax: plt.Axes, allocation: AssetAllocation, title: str = 'Asset Allocation') -> None:
    """Horizontal bar per asset class, labelled with its weight."""
    labels = [name.replace('_', ' ').title() for name in ASSET_CLASSES]
    weights = [getattr(allocation, name) for name in ASSET_CLASSES]
    colors = [ASSET_COLORS[name] for name in ASSET_CLASSES]

    bars = ax.barh(labels, weights, color=colors)
    for bar, weight in zip(bars, weights):
        ax.text(bar.get_width() + 0.5, bar.get_y() + bar.get_height() / 2,
                f'{weight:g}%', va='center', fontsize=9)

    ax.invert_yaxis()
    ax.set_xlim(0, max(max(weights), 1) * 1.15)
    ax.set_xlabel('Weight (%)')
    ax.set_title(title)


def plot_scenario_comparison(
    ax: plt.Axes,
    results: Dict[str, SimulationResult],
    title: str = 'Scenario Comparison',
) -> None:
    """Median (or deterministic) value path of each scenario."""
    for i, (name, result) in enumerate(results.items()):
        values = [s.portfolio_value for s in result.yearly_snapshots]
        ax.plot(result.years, values, color=SCENARIO_COLORS[i % len(SCENARIO_COLORS)],
                linewidth=2, label=name)

    ax.set_xlabel('Year')
    ax.set_ylabel('Value')
    ax.set_title(title)
    format_currency_axis(ax)
    add_legend(ax)


def create_projection_figure(
    result: SimulationResult,
    allocation: Optional[AssetAllocation] = None,
    target_amount: Optional[float] = None,
    figsize: Tuple[int, int] = (14, 6),
) -> plt.Figure:
    """
    Create the projection summary figure.

    Args:
        result: Deterministic or Monte Carlo result
        allocation: If given, adds an allocation panel on the right
        target_amount: Optional goal line
        figsize: Figure size

    Returns:
        matplotlib Figure
    """
    if allocation is None:
        fig, ax = plt.subplots(figsize=figsize)
        plot_projection(ax, result, target_amount)
    else:
        fig, (ax_value, ax_alloc) = plt.subplots(
            1, 2, figsize=figsize, gridspec_kw={'width_ratios': [2, 1]},
        )
        plot_projection(ax_value, result, target_amount)
        plot_allocation_bars(ax_alloc, allocation)

    fig.tight_layout()
    return fig
