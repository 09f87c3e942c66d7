"""
Visualization module for portfolio projections.

This module keeps all matplotlib code separate from the projection engine.

Submodules:
- styles: Color schemes and style constants
- helpers: Common plotting utilities
- projection_plots: Fan charts, allocation bars, scenario comparisons
"""

from .styles import (
    COLORS,
    ASSET_COLORS,
    SCENARIO_COLORS,
    apply_standard_style,
)

from .helpers import (
    setup_figure,
    format_currency_axis,
    add_legend,
    bands_to_arrays,
    plot_fan_chart,
)

from .projection_plots import (
    plot_projection,
    plot_allocation_bars,
    plot_scenario_comparison,
    create_projection_figure,
)

__all__ = [
    'COLORS',
    'ASSET_COLORS',
    'SCENARIO_COLORS',
    'apply_standard_style',
    'setup_figure',
    'format_currency_axis',
    'add_legend',
    'bands_to_arrays',
    'plot_fan_chart',
    'plot_projection',
    'plot_allocation_bars',
    'plot_scenario_comparison',
    'create_projection_figure',
]
