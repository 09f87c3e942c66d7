"""
Common plotting utilities for projection charts.
"""

from typing import List, Tuple

import matplotlib.pyplot as plt
import numpy as np

from finsim.params import PercentileBand


def setup_figure(figsize: Tuple[int, int] = (10, 6)) -> Tuple[plt.Figure, plt.Axes]:
    """Create a figure with consistent styling."""
    fig, ax = plt.subplots(figsize=figsize)
    return fig, ax


def format_currency_axis(ax: plt.Axes, axis: str = 'y') -> None:
    """Format axis labels as whole currency amounts."""
    def currency_formatter(x, pos):
        return f'${x:,.0f}'

    if axis == 'y':
        ax.yaxis.set_major_formatter(plt.FuncFormatter(currency_formatter))
    else:
        ax.xaxis.set_major_formatter(plt.FuncFormatter(currency_formatter))


def add_legend(ax: plt.Axes, loc: str = 'upper left', fontsize: int = 9) -> None:
    """Add a legend with standard formatting."""
    ax.legend(loc=loc, fontsize=fontsize)


def bands_to_arrays(percentiles: List[PercentileBand]) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """Split percentile bands into (years, p10, p50, p90) arrays."""
    years = np.array([b.year for b in percentiles])
    p10 = np.array([b.p10 for b in percentiles])
    p50 = np.array([b.p50 for b in percentiles])
    p90 = np.array([b.p90 for b in percentiles])
    return years, p10, p50, p90


def plot_fan_chart(
    ax: plt.Axes,
    percentiles: List[PercentileBand],
    color: str = 'blue',
    label_prefix: str = '',
    alpha: float = 0.25,
    show_median_label: bool = True,
) -> None:
    """
    Plot a fan chart from precomputed percentile bands.

    Args:
        ax: Matplotlib axes to plot on
        percentiles: One PercentileBand per year
        color: Color for the band and median line
        label_prefix: Prefix for legend labels (e.g., a scenario name)
        alpha: Transparency for the p10-p90 band
        show_median_label: Whether to add median to legend
    """
    years, p10, p50, p90 = bands_to_arrays(percentiles)

    ax.fill_between(years, p10, p90, alpha=alpha, color=color,
                    label=f'{label_prefix} 10th-90th percentile'.strip())

    label = f'{label_prefix} Median'.strip() if show_median_label else None
    ax.plot(years, p50, color=color, linewidth=2, label=label)
