"""
Tests for the rule-based portfolio recommender and goal helpers.
"""

from datetime import date

import pytest

from finsim import (
    BASE_ALLOCATIONS,
    AssetAllocation,
    Confidence,
    ContributionPlan,
    Goal,
    InvestorType,
    Preferences,
    Scenario,
    next_rebalance_date,
    project_recommendation,
    recommend_portfolio,
    score_risk_profile,
    validate_goal,
)
from finsim.params import ASSET_CLASSES
from finsim.recommender import SRI_SUFFIX, normalize_to_percent

QUESTION_IDS = ['Q%d' % i for i in range(1, 13)]


def neutral_profile(**overrides):
    answers = {qid: 3 for qid in QUESTION_IDS}
    answers.update(overrides)
    return score_risk_profile(answers)


@pytest.mark.parametrize("investor_type", list(InvestorType))
@pytest.mark.parametrize("horizon", [1, 3, 4, 10, 11, 30])
def test_allocation_sums_to_100(investor_type, horizon):
    reco = recommend_portfolio(
        investor_type,
        Goal(time_horizon_years=horizon, risk_override=95),
        preferences=Preferences(liquidity_requirement=True),
    )
    weights = reco.allocation.as_dict().values()
    assert sum(weights) == 100, f"{investor_type.value}, {horizon}y: {reco.allocation}"
    assert all(w >= 0 and float(w).is_integer() for w in weights)


def test_mid_horizon_keeps_base_allocation():
    reco = recommend_portfolio(InvestorType.BALANCED, Goal(time_horizon_years=5))
    assert reco.allocation == BASE_ALLOCATIONS[InvestorType.BALANCED]
    assert reco.adjustments == []


def test_long_horizon_moves_bonds_into_equities():
    reco = recommend_portfolio(InvestorType.BALANCED, Goal(time_horizon_years=15))
    assert reco.allocation == AssetAllocation(39, 18, 23, 8, 7, 5)
    assert reco.adjustments == ['+7% equities for long 15-year horizon']


def test_short_horizon_moves_equities_into_safety():
    base = BASE_ALLOCATIONS[InvestorType.AGGRESSIVE]
    reco = recommend_portfolio(InvestorType.AGGRESSIVE, Goal(time_horizon_years=2))
    assert reco.allocation.equity < base.equity
    assert reco.allocation.bonds > base.bonds
    assert reco.allocation.cash > base.cash
    assert reco.adjustments == ['+15% bonds/cash for short 2-year horizon']


def test_weak_capacity_adds_cash_buffer():
    profile = neutral_profile(Q3=1, Q4=1)
    reco = recommend_portfolio(profile, Goal(time_horizon_years=5))
    base = BASE_ALLOCATIONS[profile.investor_type]
    assert reco.allocation.cash > base.cash
    assert '+8% cash buffer for income stability' in reco.adjustments


def test_bare_investor_type_skips_capacity_rule():
    reco = recommend_portfolio(InvestorType.CONSERVATIVE, Goal(time_horizon_years=5))
    assert reco.allocation == BASE_ALLOCATIONS[InvestorType.CONSERVATIVE]


def test_liquidity_preference():
    reco = recommend_portfolio(
        InvestorType.BALANCED, Goal(time_horizon_years=5),
        preferences=Preferences(liquidity_requirement=True),
    )
    assert '+10.5% liquid assets for withdrawal needs' in reco.adjustments
    assert reco.allocation.cash > 5


def test_risk_override_far_from_archetype():
    higher = recommend_portfolio(InvestorType.BALANCED, Goal(time_horizon_years=5, risk_override=90))
    assert higher.allocation.equity > 50
    assert 'Manual risk override: increased equity exposure' in higher.adjustments

    lower = recommend_portfolio(InvestorType.BALANCED, Goal(time_horizon_years=5, risk_override=20))
    assert lower.allocation.equity < 50
    assert 'Manual risk override: decreased equity exposure' in lower.adjustments


def test_risk_override_close_to_archetype_is_ignored():
    reco = recommend_portfolio(InvestorType.BALANCED, Goal(time_horizon_years=5, risk_override=65))
    assert reco.allocation == BASE_ALLOCATIONS[InvestorType.BALANCED]


def test_equity_tilt_from_feedback():
    reco = recommend_portfolio(InvestorType.BALANCED, Goal(time_horizon_years=5), equity_tilt=-5)
    assert reco.allocation.equity == 45
    assert reco.allocation.bonds == 35


def test_base_table_is_not_mutated():
    before = {t: a.as_dict() for t, a in BASE_ALLOCATIONS.items()}
    for investor_type in InvestorType:
        recommend_portfolio(investor_type, Goal(time_horizon_years=1, risk_override=0),
                            preferences=Preferences(liquidity_requirement=True))
    assert {t: a.as_dict() for t, a in BASE_ALLOCATIONS.items()} == before


def test_custom_base_table():
    table = {t: AssetAllocation(cash=100) for t in InvestorType}
    reco = recommend_portfolio(InvestorType.GROWTH, Goal(time_horizon_years=5), base_allocations=table)
    assert reco.allocation == AssetAllocation(cash=100)


def test_negative_weights_are_floored():
    # Very Conservative has 10% equity; a 15-point short-horizon cut overshoots
    reco = recommend_portfolio(InvestorType.VERY_CONSERVATIVE, Goal(time_horizon_years=1))
    assert reco.allocation.domestic_equity == 0
    assert reco.allocation.international_equity == 0
    assert reco.allocation.total() == 100


@pytest.mark.parametrize("horizon,lump,investor_type,expected", [
    (10, 1000, InvestorType.BALANCED, Confidence.HIGH),
    (3, 0, InvestorType.BALANCED, Confidence.MEDIUM),
    (1, 0, InvestorType.AGGRESSIVE, Confidence.LOW),
    (5, 0, InvestorType.VERY_CONSERVATIVE, Confidence.MEDIUM),
])
def test_confidence(horizon, lump, investor_type, expected):
    reco = recommend_portfolio(
        investor_type, Goal(time_horizon_years=horizon),
        contribution=ContributionPlan(current_lump_sum=lump),
    )
    assert reco.confidence == expected


def test_ethical_filter_marks_instruments():
    plain = recommend_portfolio(InvestorType.GROWTH, Goal())
    ethical = recommend_portfolio(InvestorType.GROWTH, Goal(), preferences=Preferences(ethical_filter=True))
    assert set(ethical.suggested_instruments) == set(ASSET_CLASSES)
    for name, text in ethical.suggested_instruments.items():
        assert text == plain.suggested_instruments[name] + SRI_SUFFIX


def test_rationale_follows_priority():
    reco = recommend_portfolio(
        InvestorType.GROWTH, Goal(goal_name='Retirement', time_horizon_years=20, priority='Maximize Returns'),
    )
    assert reco.rationale.startswith('Based on your Growth risk profile and 20-year horizon for Retirement')
    assert 'maximum return potential' in reco.rationale
    assert 'Adjustments: +7% equities' in reco.rationale


def test_normalize_to_percent():
    assert normalize_to_percent({'a': -10, 'b': 50, 'c': 50}) == {'a': 0, 'b': 50, 'c': 50}
    assert normalize_to_percent({'a': 0, 'b': 0}) == {'a': 0, 'b': 0}
    thirds = normalize_to_percent({'a': 1, 'b': 1, 'c': 1})
    assert sum(thirds.values()) == 100
    assert sorted(thirds.values()) == [33, 33, 34]


def test_project_recommendation():
    projections = project_recommendation(BASE_ALLOCATIONS[InvestorType.BALANCED], 10_000, 200, 10)
    assert set(projections) == {Scenario.LOW, Scenario.MEDIUM, Scenario.HIGH}
    finals = [projections[s]['result'].final_value for s in (Scenario.LOW, Scenario.MEDIUM, Scenario.HIGH)]
    assert finals == sorted(finals) and finals[0] < finals[-1]

    medium = projections[Scenario.MEDIUM]
    for snap, parts in zip(medium['result'].yearly_snapshots, medium['breakdown']):
        assert sum(parts.values()) == pytest.approx(snap.portfolio_value)


def test_project_recommendation_uses_recommender_tables():
    # Balanced low case: .35*4 + .15*3 + .30*1 + .08*3 + .07*-1 + .05*.5 = 2.345%
    projections = project_recommendation(BASE_ALLOCATIONS[InvestorType.BALANCED], 10_000, 0, 1)
    low = projections[Scenario.LOW]['result'].final_value
    assert low == pytest.approx(10_234.5), f"low scenario final value {low:.2f}"

    # High case: .35*12 + .15*10 + .30*6 + .08*9 + .07*6 + .05*3 = 8.79%
    high = projections[Scenario.HIGH]['result'].final_value
    assert high == pytest.approx(10_879.0), f"high scenario final value {high:.2f}"


# =============================================================================
# Goal Helpers
# =============================================================================

def test_validate_goal():
    assert validate_goal(Goal()) == (True, [])
    is_valid, errors = validate_goal(Goal(goal_name=' ', time_horizon_years=0, target_amount=-1))
    assert not is_valid
    assert errors == [
        'Goal name must be at least 2 characters',
        'Time horizon must be at least 1 year',
        'Target amount must be positive',
    ]


@pytest.mark.parametrize("frequency,last,expected", [
    ('quarterly', date(2024, 1, 15), date(2024, 4, 15)),
    ('semi-annually', date(2024, 8, 31), date(2025, 2, 28)),
    ('annually', date(2024, 2, 29), date(2025, 2, 28)),
    ('quarterly', date(2024, 11, 30), date(2025, 2, 28)),
    ('weekly', date(2024, 3, 1), date(2025, 3, 1)),
])
def test_next_rebalance_date(frequency, last, expected):
    assert next_rebalance_date(frequency, last) == expected
