"""Shared fixtures: flat return tables and a headless matplotlib backend."""

import matplotlib
matplotlib.use('Agg')

import pytest

from finsim import ASSET_CLASSES, AssetReturn, ReturnAssumptions, ReturnModel, ReturnTables


def make_model(means, volatility: float = 0.0) -> ReturnModel:
    """
    ReturnModel whose low/medium/high tables are all the same.

    means is either one float for every asset class or a dict per asset class.
    """
    if not isinstance(means, dict):
        means = {name: means for name in ASSET_CLASSES}
    table = ReturnAssumptions(**{
        name: AssetReturn(mean=means[name], volatility=volatility) for name in ASSET_CLASSES
    })
    return ReturnModel(tables=ReturnTables(low=table, medium=table, high=table))


@pytest.fixture
def flat_model():
    """Factory fixture: flat_model(mean, volatility=0.0) -> ReturnModel."""
    return make_model
