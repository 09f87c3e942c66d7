"""
Default configuration tables for the projection engine.

All tables are immutable values. Engines receive them as arguments (with
these defaults) so tests and callers can substitute their own.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from .params import (
    AssetAllocation,
    AssetReturn,
    InvestorType,
    ReturnAssumptions,
    RiskQuestion,
    Scenario,
)


# =============================================================================
# Market Return Scenarios
# =============================================================================

LOW_RETURNS = ReturnAssumptions(
    domestic_equity=AssetReturn(0.06, 0.18),
    international_equity=AssetReturn(0.05, 0.20),
    bonds=AssetReturn(0.03, 0.08),
    reits=AssetReturn(0.04, 0.22),
    gold=AssetReturn(0.02, 0.15),
    cash=AssetReturn(0.015, 0.01),
)

MEDIUM_RETURNS = ReturnAssumptions(
    domestic_equity=AssetReturn(0.08, 0.18),
    international_equity=AssetReturn(0.07, 0.20),
    bonds=AssetReturn(0.04, 0.08),
    reits=AssetReturn(0.06, 0.22),
    gold=AssetReturn(0.03, 0.15),
    cash=AssetReturn(0.02, 0.01),
)

HIGH_RETURNS = ReturnAssumptions(
    domestic_equity=AssetReturn(0.10, 0.18),
    international_equity=AssetReturn(0.09, 0.20),
    bonds=AssetReturn(0.05, 0.08),
    reits=AssetReturn(0.08, 0.22),
    gold=AssetReturn(0.04, 0.15),
    cash=AssetReturn(0.025, 0.01),
)


@dataclass(frozen=True)
class ReturnTables:
    """Named scenario tables; custom scenarios borrow volatilities from `medium`."""
    low: ReturnAssumptions = LOW_RETURNS
    medium: ReturnAssumptions = MEDIUM_RETURNS
    high: ReturnAssumptions = HIGH_RETURNS

    def for_scenario(self, scenario: Scenario) -> ReturnAssumptions:
        scenario = Scenario(scenario)
        if scenario == Scenario.CUSTOM:
            raise ValueError("Custom scenarios need explicit per-asset returns")
        return getattr(self, scenario.value)


DEFAULT_RETURN_TABLES = ReturnTables()

# The recommender projects with its own, wider spread of means. Volatilities
# match the tables above and are unused by deterministic projections.
RECOMMENDER_RETURN_TABLES = ReturnTables(
    low=ReturnAssumptions(
        domestic_equity=AssetReturn(0.04, 0.18),
        international_equity=AssetReturn(0.03, 0.20),
        bonds=AssetReturn(0.01, 0.08),
        reits=AssetReturn(0.03, 0.22),
        gold=AssetReturn(-0.01, 0.15),
        cash=AssetReturn(0.005, 0.01),
    ),
    medium=MEDIUM_RETURNS,
    high=ReturnAssumptions(
        domestic_equity=AssetReturn(0.12, 0.18),
        international_equity=AssetReturn(0.10, 0.20),
        bonds=AssetReturn(0.06, 0.08),
        reits=AssetReturn(0.09, 0.22),
        gold=AssetReturn(0.06, 0.15),
        cash=AssetReturn(0.03, 0.01),
    ),
)


# =============================================================================
# Recommender Tables
# =============================================================================

BASE_ALLOCATIONS: Mapping[InvestorType, AssetAllocation] = MappingProxyType({
    InvestorType.VERY_CONSERVATIVE: AssetAllocation(7, 3, 60, 3, 7, 20),
    InvestorType.CONSERVATIVE: AssetAllocation(25, 8, 47, 4, 6, 10),
    InvestorType.BALANCED: AssetAllocation(35, 15, 30, 8, 7, 5),
    InvestorType.GROWTH: AssetAllocation(45, 25, 12, 8, 5, 5),
    InvestorType.AGGRESSIVE: AssetAllocation(55, 32, 5, 8, 0, 0),
})

INSTRUMENT_SUGGESTIONS: Mapping[str, str] = MappingProxyType({
    'domestic_equity': 'Domestic Large-Cap ETF (placeholder)',
    'international_equity': 'International Developed Markets ETF (placeholder)',
    'bonds': 'Government & Corporate Bond Fund (placeholder)',
    'reits': 'Real Estate Investment Trust ETF (placeholder)',
    'gold': 'Gold ETF/Commodity Fund (placeholder)',
    'cash': 'High-Yield Savings/Money Market (placeholder)',
})

# Micro-investment strategy presets
STRATEGY_PRESETS: Mapping[str, AssetAllocation] = MappingProxyType({
    'conservative': AssetAllocation(domestic_equity=30, bonds=60, cash=10),
    'balanced': AssetAllocation(domestic_equity=60, bonds=30, cash=5, gold=5),
    'growth': AssetAllocation(domestic_equity=80, bonds=15, cash=5),
})


# =============================================================================
# Risk Questionnaire
# =============================================================================

RISK_QUESTIONS = (
    RiskQuestion('Q1', 'tolerance',
                 'If my investments drop 10% in a month, I would stay invested.'),
    RiskQuestion('Q2', 'tolerance',
                 "I'm comfortable with high short-term volatility for higher long-term gains."),
    RiskQuestion('Q3', 'capacity', 'My monthly income is stable and predictable.'),
    RiskQuestion('Q4', 'capacity',
                 'I have an emergency fund covering at least 3-6 months of expenses.'),
    RiskQuestion('Q5', 'horizon', "I won't need this money for at least 5 years."),
    RiskQuestion('Q6', 'horizon',
                 "I'm investing primarily for long-term goals (e.g., retirement)."),
    RiskQuestion('Q7', 'liquidity',
                 'I might need to withdraw part of this money within the next 12 months.',
                 reverse=True),
    RiskQuestion('Q8', 'liquidity',
                 'Quick access to my invested funds is important to me.', reverse=True),
    RiskQuestion('Q9', 'knowledge',
                 'I understand diversification, ETFs, and risk vs return.'),
    RiskQuestion('Q10', 'knowledge',
                 "I've previously invested in equities, mutual funds, or ETFs."),
    RiskQuestion('Q11', 'lossAversion',
                 'I prefer a guaranteed small return over a risky higher return.',
                 reverse=True),
    RiskQuestion('Q12', 'lossAversion',
                 "A temporary 20% drop would make me sell to 'stop the loss'.",
                 reverse=True),
)

DIMENSION_LABELS: Mapping[str, str] = MappingProxyType({
    'tolerance': 'Risk Tolerance',
    'capacity': 'Risk Capacity',
    'horizon': 'Time Horizon',
    'liquidity': 'Liquidity Needs',
    'knowledge': 'Investment Knowledge',
    'lossAversion': 'Loss Tolerance',
})

# Sum to 1.0
DIMENSION_WEIGHTS: Mapping[str, float] = MappingProxyType({
    'tolerance': 0.35,
    'capacity': 0.25,
    'horizon': 0.15,
    'liquidity': 0.10,
    'knowledge': 0.10,
    'lossAversion': 0.05,
})

# Inclusive integer bands on the rounded overall score
INVESTOR_TYPE_THRESHOLDS = (
    (0, 20, InvestorType.VERY_CONSERVATIVE),
    (21, 40, InvestorType.CONSERVATIVE),
    (41, 60, InvestorType.BALANCED),
    (61, 80, InvestorType.GROWTH),
    (81, 100, InvestorType.AGGRESSIVE),
)

ALLOCATION_BANDS: Mapping[InvestorType, Mapping[str, str]] = MappingProxyType({
    InvestorType.VERY_CONSERVATIVE: {'equity': '10-20%', 'debt': '55-70%', 'gold': '5-10%', 'cash': '10-20%'},
    InvestorType.CONSERVATIVE: {'equity': '20-35%', 'debt': '45-60%', 'gold': '5-10%', 'cash': '10-15%'},
    InvestorType.BALANCED: {'equity': '40-60%', 'debt': '30-45%', 'gold': '5-10%', 'cash': '5-10%'},
    InvestorType.GROWTH: {'equity': '65-80%', 'debt': '15-30%', 'gold': '5-10%', 'cash': '0-5%'},
    InvestorType.AGGRESSIVE: {'equity': '80-95%', 'debt': '0-15%', 'gold': '5-10%', 'cash': '0-5%'},
})


@dataclass(frozen=True)
class Questionnaire:
    """Questions, dimension weights and archetype bands used by the scorer."""
    questions: tuple = RISK_QUESTIONS
    weights: Mapping[str, float] = field(default_factory=lambda: DIMENSION_WEIGHTS)
    labels: Mapping[str, str] = field(default_factory=lambda: DIMENSION_LABELS)
    thresholds: tuple = INVESTOR_TYPE_THRESHOLDS


DEFAULT_QUESTIONNAIRE = Questionnaire()
