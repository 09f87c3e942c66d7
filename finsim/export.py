"""
JSON and tabular export of engine inputs and results.

JSON documents mirror the dataclasses field for field (snake_case keys,
enums as their values). Floats are written with Python's shortest
round-trip repr, so parsing an export reproduces every number exactly.
"""

import json
from dataclasses import fields, is_dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Union

import numpy as np
import pandas as pd

from .params import (
    AssetAllocation,
    ContributionInputs,
    DimensionScore,
    FinalStats,
    GlidePath,
    Goal,
    InvestorType,
    MarketShock,
    MonteCarloResult,
    PercentileBand,
    ProjectionInputs,
    RiskProfileResult,
    RoundUpInputs,
    SimulationAssumptions,
    SimulationResult,
    YearlySnapshot,
)


# =============================================================================
# Serialization
# =============================================================================

def to_plain(obj: Any) -> Any:
    """Convert dataclasses, enums and numpy values into JSON-ready Python values."""
    if is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: to_plain(getattr(obj, f.name)) for f in fields(obj)}
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, dict):
        return {to_plain(k): to_plain(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_plain(v) for v in obj]
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, np.generic):
        return obj.item()
    return obj


def to_json(obj: Any) -> str:
    """Pretty-printed JSON document for any engine input or result."""
    return json.dumps(to_plain(obj), indent=2)


def write_json(path: Union[str, Path], obj: Any) -> Path:
    path = Path(path)
    path.write_text(to_json(obj) + "\n")
    return path


# =============================================================================
# Deserialization
# =============================================================================

def simulation_result_from_dict(data: Dict[str, Any]) -> SimulationResult:
    """Rebuild a SimulationResult, or a MonteCarloResult when percentiles are present."""
    common = dict(
        yearly_snapshots=[YearlySnapshot(**s) for s in data['yearly_snapshots']],
        final_value=data['final_value'],
        total_contributions=data['total_contributions'],
        total_returns=data['total_returns'],
        monthly_contribution=data['monthly_contribution'],
        final_value_real=data.get('final_value_real', 0.0),
        success_probability=data.get('success_probability'),
        required_monthly=data.get('required_monthly'),
    )
    if 'percentiles' not in data:
        return SimulationResult(**common)

    return MonteCarloResult(
        **common,
        percentiles=[PercentileBand(**p) for p in data['percentiles']],
        final_stats=FinalStats(**data['final_stats']) if data.get('final_stats') else None,
        n_simulations=data.get('n_simulations', 0),
    )


def simulation_result_from_json(text: str) -> SimulationResult:
    return simulation_result_from_dict(json.loads(text))


def risk_profile_from_dict(data: Dict[str, Any]) -> RiskProfileResult:
    return RiskProfileResult(
        answers=dict(data['answers']),
        dimensions=[DimensionScore(**d) for d in data['dimensions']],
        overall=data['overall'],
        investor_type=InvestorType(data['investor_type']),
        created_at=data.get('created_at', ''),
        version=data.get('version', '1.0'),
    )


def goal_from_dict(data: Dict[str, Any]) -> Goal:
    return Goal(**data)


def projection_inputs_from_dict(data: Dict[str, Any]) -> ProjectionInputs:
    """
    Build ProjectionInputs from a (possibly partial) JSON config.

    Missing sections keep their dataclass defaults.
    """
    data = dict(data)
    defaults = ProjectionInputs()

    contribution = defaults.contribution
    if 'contribution' in data:
        c = dict(data.pop('contribution'))
        if c.get('round_up') is not None:
            c['round_up'] = RoundUpInputs(**c['round_up'])
        contribution = ContributionInputs(**c)

    allocation = defaults.allocation
    if 'allocation' in data:
        allocation = AssetAllocation.from_dict(data.pop('allocation'))

    assumptions = defaults.assumptions
    if 'assumptions' in data:
        assumptions = SimulationAssumptions(**data.pop('assumptions'))

    glide_path = data.pop('glide_path', None)
    shock = data.pop('shock', None)

    return ProjectionInputs(
        contribution=contribution,
        allocation=allocation,
        assumptions=assumptions,
        glide_path=GlidePath(**glide_path) if glide_path else None,
        shock=MarketShock(**shock) if shock else None,
        **data,
    )


# =============================================================================
# Tabular Views
# =============================================================================

def snapshots_to_frame(result: SimulationResult) -> pd.DataFrame:
    """One row per year: contributions, portfolio value, returns."""
    frame = pd.DataFrame([to_plain(s) for s in result.yearly_snapshots])
    return frame.set_index('year')


def percentiles_to_frame(result: MonteCarloResult) -> pd.DataFrame:
    """One row per year with p10/p50/p90 columns."""
    frame = pd.DataFrame([to_plain(p) for p in result.percentiles])
    return frame.set_index('year')
