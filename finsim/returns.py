"""
Portfolio return model.

Maps an asset allocation and a set of per-asset return assumptions to the
portfolio's expected annual return and volatility.
"""

import math
from dataclasses import dataclass
from typing import Dict, Optional

from .assumptions import DEFAULT_RETURN_TABLES, ReturnTables
from .params import (
    ASSET_CLASSES,
    AssetAllocation,
    AssetReturn,
    ReturnAssumptions,
    Scenario,
    SimulationAssumptions,
)


@dataclass(frozen=True)
class PortfolioStats:
    expected_return: float
    volatility: float


@dataclass(frozen=True)
class ReturnModel:
    """
    Weighted-sum return model over named or custom scenario tables.

    Volatility assumes zero correlation between asset classes:

        sigma_p = sqrt(sum_i (w_i * sigma_i)^2)

    This understates risk for correlated assets (domestic and international
    equity especially) and is a modeling simplification, not an estimate.
    """
    tables: ReturnTables = DEFAULT_RETURN_TABLES

    def assumptions_for(
        self,
        scenario: Scenario,
        custom_returns: Optional[Dict[str, float]] = None,
    ) -> ReturnAssumptions:
        """
        Resolve a scenario to per-asset assumptions.

        CUSTOM takes mean returns in percent from custom_returns and keeps the
        medium table's volatilities; without custom_returns it falls back to
        the medium table.
        """
        scenario = Scenario(scenario)
        if scenario != Scenario.CUSTOM:
            return self.tables.for_scenario(scenario)
        if not custom_returns:
            return self.tables.medium

        unknown = set(custom_returns) - set(ASSET_CLASSES)
        if unknown:
            raise ValueError(f"Unknown asset classes in custom returns: {sorted(unknown)}")

        base = self.tables.medium
        return ReturnAssumptions(**{
            name: AssetReturn(
                mean=custom_returns.get(name, base.for_asset(name).mean * 100) / 100,
                volatility=base.for_asset(name).volatility,
            )
            for name in ASSET_CLASSES
        })

    def portfolio_stats(
        self,
        allocation: AssetAllocation,
        assumptions: ReturnAssumptions,
    ) -> PortfolioStats:
        """Expected return and volatility; weights are read as percentages."""
        expected_return = 0.0
        variance = 0.0
        for name in ASSET_CLASSES:
            weight = getattr(allocation, name) / 100
            asset = assumptions.for_asset(name)
            expected_return += weight * asset.mean
            variance += (weight * asset.volatility) ** 2

        return PortfolioStats(expected_return=expected_return, volatility=math.sqrt(variance))

    def net_stats(
        self,
        allocation: AssetAllocation,
        assumptions: SimulationAssumptions,
    ) -> PortfolioStats:
        """Stats for a projection: expected return net of fees and tax drag."""
        table = self.assumptions_for(assumptions.scenario, assumptions.custom_returns)
        stats = self.portfolio_stats(allocation, table)
        return PortfolioStats(
            expected_return=stats.expected_return - assumptions.fees - assumptions.tax_drag,
            volatility=stats.volatility,
        )


DEFAULT_RETURN_MODEL = ReturnModel()
