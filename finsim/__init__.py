"""
Core package for personal-finance projection.

This package provides the building blocks for projecting and planning a
portfolio:
- Parameter and result dataclasses (params.py)
- Immutable return, allocation and questionnaire tables (assumptions.py)
- Economic primitives: Box-Muller normals, contribution normalization,
  time value of money, percentiles (economics.py)
- Portfolio return model (returns.py)
- Glide-path and market-shock adjustments (adjustments.py)
- Simulation engines: deterministic and Monte Carlo (simulation.py)
- Risk questionnaire scoring (risk_profile.py)
- Rule-based portfolio recommendation (recommender.py)
- What-if scenario comparison (scenarios.py)
- JSON and tabular export, key-value persistence (export.py, storage.py)
"""

# Parameter dataclasses
from .params import (
    ASSET_CLASSES,
    Frequency,
    Scenario,
    InvestorType,
    Confidence,
    FeedbackAction,
    AssetAllocation,
    AssetReturn,
    ReturnAssumptions,
    SimulationAssumptions,
    RoundUpInputs,
    ContributionInputs,
    GlidePath,
    MarketShock,
    ProjectionInputs,
    MonteCarloParams,
    # Result dataclasses
    YearlySnapshot,
    PercentileBand,
    FinalStats,
    SimulationResult,
    MonteCarloResult,
    # Risk profile and recommendation
    RiskQuestion,
    DimensionScore,
    RiskProfileResult,
    Goal,
    ContributionPlan,
    Preferences,
    PortfolioRecommendation,
)

# Default tables
from .assumptions import (
    BASE_ALLOCATIONS,
    DEFAULT_QUESTIONNAIRE,
    DEFAULT_RETURN_TABLES,
    RECOMMENDER_RETURN_TABLES,
    STRATEGY_PRESETS,
    Questionnaire,
    ReturnTables,
)

# Economic primitives
from .economics import (
    BoxMullerSource,
    NormalSource,
    to_monthly_contribution,
    round_up_contribution,
    total_monthly_contribution,
    contribution_schedule,
    future_value_lump_sum,
    future_value_annuity,
    required_monthly_contribution,
    estimate_milestones,
    calculate_percentiles,
    summarize_final_values,
)

from .returns import DEFAULT_RETURN_MODEL, PortfolioStats, ReturnModel
from .adjustments import apply_glide_path, shock_factor

# Simulation engines
from .simulation import (
    DETERMINISTIC,
    MONTE_CARLO,
    SimulationCancelled,
    project_deterministic,
    run_monte_carlo,
    run_projection,
)

from .risk_profile import (
    score_risk_profile,
    allocation_band,
    special_notes,
    top_drivers,
)

from .recommender import (
    recommend_portfolio,
    project_recommendation,
    validate_goal,
    next_rebalance_date,
)

from .scenarios import (
    ScenarioDeltas,
    WhatIfScenario,
    apply_scenario_deltas,
    compare_scenarios,
    preset_allocation,
)

from .export import (
    to_json,
    write_json,
    simulation_result_from_json,
    projection_inputs_from_dict,
    snapshots_to_frame,
    percentiles_to_frame,
)

from .storage import (
    StorageError,
    InMemoryStore,
    JsonFileStore,
    save_risk_profile,
    load_latest_risk_profile,
    save_plan,
    load_plan,
    list_plans,
    record_feedback,
    load_feedback,
    adaptive_adjustments,
)

__all__ = [
    # Params
    'ASSET_CLASSES',
    'Frequency',
    'Scenario',
    'InvestorType',
    'Confidence',
    'FeedbackAction',
    'AssetAllocation',
    'AssetReturn',
    'ReturnAssumptions',
    'SimulationAssumptions',
    'RoundUpInputs',
    'ContributionInputs',
    'GlidePath',
    'MarketShock',
    'ProjectionInputs',
    'MonteCarloParams',
    'YearlySnapshot',
    'PercentileBand',
    'FinalStats',
    'SimulationResult',
    'MonteCarloResult',
    'RiskQuestion',
    'DimensionScore',
    'RiskProfileResult',
    'Goal',
    'ContributionPlan',
    'Preferences',
    'PortfolioRecommendation',
    # Tables
    'BASE_ALLOCATIONS',
    'DEFAULT_QUESTIONNAIRE',
    'DEFAULT_RETURN_TABLES',
    'RECOMMENDER_RETURN_TABLES',
    'STRATEGY_PRESETS',
    'Questionnaire',
    'ReturnTables',
    # Economics
    'BoxMullerSource',
    'NormalSource',
    'to_monthly_contribution',
    'round_up_contribution',
    'total_monthly_contribution',
    'contribution_schedule',
    'future_value_lump_sum',
    'future_value_annuity',
    'required_monthly_contribution',
    'estimate_milestones',
    'calculate_percentiles',
    'summarize_final_values',
    # Returns and adjustments
    'DEFAULT_RETURN_MODEL',
    'PortfolioStats',
    'ReturnModel',
    'apply_glide_path',
    'shock_factor',
    # Simulation
    'DETERMINISTIC',
    'MONTE_CARLO',
    'SimulationCancelled',
    'project_deterministic',
    'run_monte_carlo',
    'run_projection',
    # Risk profile
    'score_risk_profile',
    'allocation_band',
    'special_notes',
    'top_drivers',
    # Recommendation
    'recommend_portfolio',
    'project_recommendation',
    'validate_goal',
    'next_rebalance_date',
    # Scenarios
    'ScenarioDeltas',
    'WhatIfScenario',
    'apply_scenario_deltas',
    'compare_scenarios',
    'preset_allocation',
    # Export and storage
    'to_json',
    'write_json',
    'simulation_result_from_json',
    'projection_inputs_from_dict',
    'snapshots_to_frame',
    'percentiles_to_frame',
    'StorageError',
    'InMemoryStore',
    'JsonFileStore',
    'save_risk_profile',
    'load_latest_risk_profile',
    'save_plan',
    'load_plan',
    'list_plans',
    'record_feedback',
    'load_feedback',
    'adaptive_adjustments',
]
