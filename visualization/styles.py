"""
Centralized style definitions for projection charts.

This module provides consistent colors, fonts, and styles across all plots.
"""

import matplotlib.pyplot as plt

# Set consistent style for all figures
plt.style.use('seaborn-v0_8-whitegrid')

# Main color scheme (colorblind-friendly: blue-orange palette)
COLORS = {
    'blue': '#1A759F',
    'orange': '#E07A5F',
    'teal': '#2A9D8F',
    'amber': '#E9C46A',

    # Projection lines
    'median': '#1A759F',
    'band': '#1A759F',
    'contributions': '#95a5a6',  # Gray
    'deterministic': '#1D3557',  # Dark blue
    'target': '#BC6C25',         # Rust
}

# One color per asset class, in ASSET_CLASSES order
ASSET_COLORS = {
    'domestic_equity': '#1A759F',
    'international_equity': '#457B9D',
    'bonds': '#9b59b6',
    'reits': '#2A9D8F',
    'gold': '#E9C46A',
    'cash': '#95a5a6',
}

# Scenario comparison color list (colorblind-safe)
SCENARIO_COLORS = ['#1A759F', '#E9C46A', '#2A9D8F', '#BC6C25', '#9b59b6']


def apply_standard_style():
    """Apply standard matplotlib style settings."""
    plt.rcParams.update({
        'font.size': 12,
        'axes.titlesize': 14,
        'axes.labelsize': 12,
        'legend.fontsize': 10,
        'figure.titlesize': 16,
    })
