"""
Rule-based portfolio recommendation.

Starts from the archetype's base allocation and applies additive shifts in a
fixed order:

1. Long horizon (> 10 years): bonds into equities
2. Short horizon (<= 3 years): equities into bonds and cash
3. Weak capacity or liquidity scores: equities into cash
4. Explicit liquidity preference: equities into cash and bonds
5. Manual risk override far from the archetype: bonds <-> equities
6. Optional adaptive tilt from feedback history: bonds <-> equities

The working copy is then floored at zero and renormalized to whole
percentages summing to 100. The base table is never modified.
"""

import calendar
import logging
import math
from datetime import date
from typing import Dict, List, Mapping, Optional, Tuple, Union

from .assumptions import BASE_ALLOCATIONS, INSTRUMENT_SUGGESTIONS, RECOMMENDER_RETURN_TABLES
from .params import (
    ASSET_CLASSES,
    AssetAllocation,
    Confidence,
    ContributionInputs,
    ContributionPlan,
    Goal,
    InvestorType,
    PortfolioRecommendation,
    Preferences,
    ProjectionInputs,
    RiskProfileResult,
    Scenario,
    SimulationAssumptions,
    SimulationResult,
)
from .returns import ReturnModel
from .simulation import project_deterministic

logger = logging.getLogger(__name__)

# Split of any equity shift between domestic and international
DOMESTIC_SHARE = 0.6
INTERNATIONAL_SHARE = 0.4

LONG_HORIZON_YEARS = 10
LONG_HORIZON_EQUITY_BOOST = 7
SHORT_HORIZON_YEARS = 3
SHORT_HORIZON_SAFETY_BOOST = 15
CAPACITY_CASH_BUFFER = 8
LIQUIDITY_BUFFER = 7
OVERRIDE_THRESHOLD = 10
OVERRIDE_SENSITIVITY = 0.3

SRI_SUFFIX = ' - SRI/ESG variant'

RECOMMENDER_RETURN_MODEL = ReturnModel(RECOMMENDER_RETURN_TABLES)


def _shift_equity(weights: Dict[str, float], amount: float) -> None:
    """Add `amount` points to equities (negative removes), split 60/40."""
    weights['domestic_equity'] += amount * DOMESTIC_SHARE
    weights['international_equity'] += amount * INTERNATIONAL_SHARE


def normalize_to_percent(weights: Mapping[str, float]) -> Dict[str, int]:
    """
    Scale weights to whole percentages that sum to exactly 100.

    Negative weights are floored at zero first. Rounding uses the largest
    remainder method so the integer weights always add up to 100. An all-zero
    input is returned unchanged.
    """
    floored = {name: max(0.0, value) for name, value in weights.items()}
    total = sum(floored.values())
    if total == 0:
        return {name: 0 for name in floored}

    scaled = {name: value / total * 100 for name, value in floored.items()}
    rounded = {name: math.floor(value) for name, value in scaled.items()}
    leftover = 100 - sum(rounded.values())
    by_remainder = sorted(scaled, key=lambda name: scaled[name] - rounded[name], reverse=True)
    for name in by_remainder[:leftover]:
        rounded[name] += 1
    return rounded


def implied_percentile(investor_type: InvestorType) -> int:
    """Risk percentile an archetype stands for: 20, 40, 60, 80 or 100."""
    return (InvestorType(investor_type).rank + 1) * 20


def determine_confidence(
    goal: Goal,
    contribution: ContributionPlan,
    investor_type: InvestorType,
) -> Confidence:
    score = 0
    if goal.time_horizon_years >= 5:
        score += 2
    elif goal.time_horizon_years >= 3:
        score += 1

    if contribution.current_lump_sum > 0 or contribution.monthly_contribution > 0:
        score += 2

    if investor_type in (InvestorType.CONSERVATIVE, InvestorType.BALANCED, InvestorType.GROWTH):
        score += 1

    if score >= 4:
        return Confidence.HIGH
    if score >= 2:
        return Confidence.MEDIUM
    return Confidence.LOW


def generate_rationale(investor_type: InvestorType, goal: Goal, adjustments: List[str]) -> str:
    rationale = (
        f"Based on your {investor_type.value} risk profile and "
        f"{goal.time_horizon_years}-year horizon for {goal.goal_name}"
    )
    if goal.priority == 'Maximize Returns':
        rationale += ', the allocation favors growth assets for maximum return potential'
    elif goal.priority == 'Preserve Capital':
        rationale += ', the allocation emphasizes capital preservation with defensive assets'
    else:
        rationale += ', the allocation balances growth potential with risk management'

    if adjustments:
        rationale += '. Adjustments: ' + '; '.join(adjustments)
    return rationale + '.'


def suggested_instruments(preferences: Preferences) -> Dict[str, str]:
    instruments = dict(INSTRUMENT_SUGGESTIONS)
    if preferences.ethical_filter:
        instruments = {name: text + SRI_SUFFIX for name, text in instruments.items()}
    return instruments


def recommend_portfolio(
    risk_profile: Union[RiskProfileResult, InvestorType],
    goal: Goal,
    contribution: ContributionPlan = None,
    preferences: Preferences = None,
    equity_tilt: float = 0.0,
    base_allocations: Mapping[InvestorType, AssetAllocation] = BASE_ALLOCATIONS,
) -> PortfolioRecommendation:
    """
    Recommend a target allocation for an investor and goal.

    Args:
        risk_profile: A scored questionnaire, or a bare InvestorType when the
            user picked an archetype manually (skips the capacity rule)
        goal: Goal with horizon, priority and optional risk_override (0-100)
        contribution: Current lump sum and monthly contribution
        preferences: Ethical filter and liquidity requirement flags
        equity_tilt: Extra equity points from feedback history (negative
            moves toward bonds)
        base_allocations: Archetype base table

    Returns:
        PortfolioRecommendation with integer weights summing to 100
    """
    if contribution is None:
        contribution = ContributionPlan()
    if preferences is None:
        preferences = Preferences()

    if isinstance(risk_profile, RiskProfileResult):
        investor_type = InvestorType(risk_profile.investor_type)
    else:
        investor_type = InvestorType(risk_profile)

    weights = base_allocations[investor_type].as_dict()
    adjustments = []
    horizon = goal.time_horizon_years

    if horizon > LONG_HORIZON_YEARS:
        boost = LONG_HORIZON_EQUITY_BOOST
        _shift_equity(weights, boost)
        weights['bonds'] -= boost
        adjustments.append(f"+{boost}% equities for long {horizon}-year horizon")
    elif horizon <= SHORT_HORIZON_YEARS:
        boost = SHORT_HORIZON_SAFETY_BOOST
        weights['bonds'] += boost * 0.7
        weights['cash'] += boost * 0.3
        _shift_equity(weights, -boost)
        adjustments.append(f"+{boost}% bonds/cash for short {horizon}-year horizon")

    if isinstance(risk_profile, RiskProfileResult):
        capacity = risk_profile.dimension_score('capacity')
        liquidity = risk_profile.dimension_score('liquidity')
        capacity = 50 if capacity is None else capacity
        liquidity = 50 if liquidity is None else liquidity
        if capacity < 50 or liquidity < 50:
            buffer = CAPACITY_CASH_BUFFER
            weights['cash'] += buffer
            _shift_equity(weights, -buffer)
            adjustments.append(f"+{buffer}% cash buffer for income stability")

    if preferences.liquidity_requirement:
        buffer = LIQUIDITY_BUFFER
        weights['cash'] += buffer
        weights['bonds'] += buffer * 0.5
        weights['domestic_equity'] -= buffer * 0.9
        weights['international_equity'] -= buffer * 0.6
        adjustments.append(f"+{buffer + buffer * 0.5:g}% liquid assets for withdrawal needs")

    if goal.risk_override is not None:
        diff = goal.risk_override - implied_percentile(investor_type)
        if abs(diff) > OVERRIDE_THRESHOLD:
            shift = diff * OVERRIDE_SENSITIVITY
            _shift_equity(weights, shift)
            weights['bonds'] -= shift
            direction = 'increased' if diff > 0 else 'decreased'
            adjustments.append(f"Manual risk override: {direction} equity exposure")

    if equity_tilt:
        _shift_equity(weights, equity_tilt)
        weights['bonds'] -= equity_tilt
        adjustments.append(f"{equity_tilt:+g}% equities from recent feedback")

    allocation = AssetAllocation(**normalize_to_percent(weights))
    logger.debug("Recommended %s allocation: %s", investor_type.value, allocation.as_dict())

    return PortfolioRecommendation(
        allocation=allocation,
        rationale=generate_rationale(investor_type, goal, adjustments),
        investor_type=investor_type,
        adjustments=adjustments,
        confidence=determine_confidence(goal, contribution, investor_type),
        suggested_instruments=suggested_instruments(preferences),
    )


def project_recommendation(
    allocation: AssetAllocation,
    lump_sum: float,
    monthly_contribution: float,
    years: int,
    model: ReturnModel = RECOMMENDER_RETURN_MODEL,
    fees: float = 0.0,
) -> Dict[Scenario, Dict[str, object]]:
    """
    Deterministic low/medium/high projections for a recommended allocation.

    Uses the recommender's own return tables (RECOMMENDER_RETURN_TABLES)
    unless another model is given.

    Returns:
        Mapping of scenario to {'result': SimulationResult, 'breakdown': list}
        where breakdown holds, per year, the portfolio value split by the
        allocation weights.
    """
    projections = {}
    for scenario in (Scenario.LOW, Scenario.MEDIUM, Scenario.HIGH):
        inputs = ProjectionInputs(
            lump_sum=lump_sum,
            duration_years=years,
            contribution=ContributionInputs(amount=monthly_contribution),
            allocation=allocation,
            assumptions=SimulationAssumptions(scenario=scenario, fees=fees),
        )
        result: SimulationResult = project_deterministic(inputs, model)
        breakdown = [
            {name: s.portfolio_value * getattr(allocation, name) / 100 for name in ASSET_CLASSES}
            for s in result.yearly_snapshots
        ]
        projections[scenario] = {'result': result, 'breakdown': breakdown}
    return projections


# =============================================================================
# Goal Helpers
# =============================================================================

REBALANCE_MONTHS = {'quarterly': 3, 'semi-annually': 6, 'annually': 12}


def validate_goal(goal: Goal) -> Tuple[bool, List[str]]:
    """Check a goal before recommending; returns (is_valid, error messages)."""
    errors = []
    if not goal.goal_name or len(goal.goal_name.strip()) < 2:
        errors.append('Goal name must be at least 2 characters')
    if not goal.time_horizon_years or goal.time_horizon_years < 1:
        errors.append('Time horizon must be at least 1 year')
    if goal.target_amount is not None and goal.target_amount <= 0:
        errors.append('Target amount must be positive')
    return not errors, errors


def next_rebalance_date(frequency: str = 'annually', last: Optional[date] = None) -> date:
    """
    Date of the next rebalance after `last` (today when omitted).

    Unknown frequencies rebalance annually. Day-of-month is clamped to the
    length of the target month, so 31 Aug + 6 months is 28/29 Feb.
    """
    last = last or date.today()
    months = REBALANCE_MONTHS.get(frequency, 12)
    month_index = last.month - 1 + months
    year = last.year + month_index // 12
    month = month_index % 12 + 1
    day = min(last.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)
