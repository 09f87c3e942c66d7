"""
Core parameter and result dataclasses for the projection engine.

This module contains every input and result type used across the engine,
kept in one place as the single source of truth for field names. Inputs carry
sensible defaults so callers (and the CLI) only override what they need.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Optional


# =============================================================================
# Enums
# =============================================================================

class Frequency(str, Enum):
    """How often a periodic contribution is made."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"


class Scenario(str, Enum):
    """Named market-return scenario."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CUSTOM = "custom"


class InvestorType(str, Enum):
    """Investor archetype, ordered from least to most risk-seeking."""
    VERY_CONSERVATIVE = "Very Conservative"
    CONSERVATIVE = "Conservative"
    BALANCED = "Balanced"
    GROWTH = "Growth"
    AGGRESSIVE = "Aggressive"

    @property
    def rank(self) -> int:
        """Zero-based position in the risk ordering."""
        return list(InvestorType).index(self)


class Confidence(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class FeedbackAction(str, Enum):
    ACCEPT = "accept"
    REJECT = "reject"
    MODIFY = "modify"


# =============================================================================
# Allocation and Return Assumptions
# =============================================================================

ASSET_CLASSES = (
    "domestic_equity",
    "international_equity",
    "bonds",
    "reits",
    "gold",
    "cash",
)


@dataclass(frozen=True)
class AssetAllocation:
    """
    Portfolio weights in percent, one field per asset class.

    Weights should be non-negative and sum to 100. Consumers normalize
    instead of rejecting allocations that do not.
    """
    domestic_equity: float = 0.0
    international_equity: float = 0.0
    bonds: float = 0.0
    reits: float = 0.0
    gold: float = 0.0
    cash: float = 0.0

    @property
    def equity(self) -> float:
        return self.domestic_equity + self.international_equity

    def total(self) -> float:
        return sum(getattr(self, name) for name in ASSET_CLASSES)

    def as_dict(self) -> Dict[str, float]:
        return {name: getattr(self, name) for name in ASSET_CLASSES}

    @classmethod
    def from_dict(cls, weights: Dict[str, float]) -> 'AssetAllocation':
        unknown = set(weights) - set(ASSET_CLASSES)
        if unknown:
            raise ValueError(f"Unknown asset classes: {sorted(unknown)}")
        return cls(**{name: float(value) for name, value in weights.items()})

    def normalized(self) -> 'AssetAllocation':
        """Scale weights so they sum to 100 (unchanged when the total is zero)."""
        total = self.total()
        if total == 0:
            return self
        return AssetAllocation(**{
            name: value / total * 100 for name, value in self.as_dict().items()
        })


@dataclass(frozen=True)
class AssetReturn:
    """Annual expected return and volatility of one asset class (fractions)."""
    mean: float
    volatility: float


@dataclass(frozen=True)
class ReturnAssumptions:
    """Per-asset return assumptions covering every asset class."""
    domestic_equity: AssetReturn
    international_equity: AssetReturn
    bonds: AssetReturn
    reits: AssetReturn
    gold: AssetReturn
    cash: AssetReturn

    def for_asset(self, name: str) -> AssetReturn:
        return getattr(self, name)


@dataclass
class SimulationAssumptions:
    """
    Market assumptions for a projection.

    fees, tax_drag and inflation are annual fractions (0.005 = 0.5%).
    custom_returns holds per-asset mean returns in percent and is only read
    when scenario is CUSTOM.
    """
    scenario: Scenario = Scenario.MEDIUM
    fees: float = 0.005
    tax_drag: float = 0.0
    inflation: float = 0.0
    custom_returns: Optional[Dict[str, float]] = None

    def __post_init__(self):
        self.scenario = Scenario(self.scenario)


# =============================================================================
# Contribution and Projection Inputs
# =============================================================================

@dataclass
class RoundUpInputs:
    """Spend-based micro-contributions from rounding up card transactions."""
    avg_tx_per_month: float = 0.0
    avg_tx_amount: float = 0.0
    round_up_to: float = 1.0
    multiplier: float = 1.0


@dataclass
class ContributionInputs:
    """Periodic contribution schedule."""
    amount: float = 0.0
    frequency: Frequency = Frequency.MONTHLY
    start_delay_months: int = 0
    annual_escalation_percent: float = 0.0
    skip_months_per_year: int = 0
    round_up: Optional[RoundUpInputs] = None

    def __post_init__(self):
        self.frequency = Frequency(self.frequency)


@dataclass(frozen=True)
class GlidePath:
    """Scheduled equity reduction: reduce_equity_percent points every every_years years."""
    enabled: bool = False
    reduce_equity_percent: float = 5.0
    every_years: int = 5
    floor_percent: float = 20.0

    def __post_init__(self):
        if self.enabled and self.every_years < 1:
            raise ValueError(
                f"Glide path every_years must be at least 1, got {self.every_years}"
            )


@dataclass(frozen=True)
class MarketShock:
    """One-off multiplicative shock at a given year, with optional bounce-back."""
    enabled: bool = False
    year: int = 1
    magnitude_percent: float = -30.0
    recovery_percent: Optional[float] = None


@dataclass
class ProjectionInputs:
    """Everything a single projection run needs."""
    lump_sum: float = 0.0
    duration_years: int = 10
    contribution: ContributionInputs = field(default_factory=ContributionInputs)
    allocation: AssetAllocation = field(default_factory=lambda: AssetAllocation(
        domestic_equity=35, international_equity=15, bonds=30, reits=8, gold=7, cash=5,
    ))
    assumptions: SimulationAssumptions = field(default_factory=SimulationAssumptions)
    glide_path: Optional[GlidePath] = None
    shock: Optional[MarketShock] = None
    target_amount: Optional[float] = None

    def with_changes(self, **changes) -> 'ProjectionInputs':
        return replace(self, **changes)


@dataclass
class MonteCarloParams:
    """Parameters for Monte Carlo simulation."""
    n_simulations: int = 500     # Number of simulated trials
    random_seed: Optional[int] = 42
    batch_size: int = 250        # Trials per batch (cancellation granularity)
    n_workers: int = 1           # >1 runs batches on a thread pool


# =============================================================================
# Projection Results
# =============================================================================

@dataclass(frozen=True)
class YearlySnapshot:
    """Portfolio state at the end of one year (year 0 is the starting point)."""
    year: int
    contributions: float
    portfolio_value: float
    returns: float


@dataclass(frozen=True)
class PercentileBand:
    year: int
    p10: float
    p50: float
    p90: float


@dataclass(frozen=True)
class FinalStats:
    """Summary statistics over trial-final values."""
    mean: float
    median: float
    stddev: float
    p10: float
    p90: float


@dataclass
class SimulationResult:
    """
    Result of a deterministic projection.

    final_value_real deflates final_value by cumulative inflation.
    success_probability and required_monthly are only set when the inputs
    carry a target_amount.
    """
    yearly_snapshots: List[YearlySnapshot]
    final_value: float
    total_contributions: float
    total_returns: float
    monthly_contribution: float
    final_value_real: float = 0.0
    success_probability: Optional[float] = None
    required_monthly: Optional[float] = None

    @property
    def years(self) -> List[int]:
        return [s.year for s in self.yearly_snapshots]


@dataclass
class MonteCarloResult(SimulationResult):
    """
    Monte Carlo projection result.

    yearly_snapshots follow the median (p50) path; final_value is the median
    trial-final value. Individual trial paths are not retained.
    """
    percentiles: List[PercentileBand] = field(default_factory=list)
    final_stats: Optional[FinalStats] = None
    n_simulations: int = 0

    @property
    def worst_case(self) -> float:
        return self.percentiles[-1].p10

    @property
    def best_case(self) -> float:
        return self.percentiles[-1].p90


# =============================================================================
# Risk Profile
# =============================================================================

@dataclass(frozen=True)
class RiskQuestion:
    id: str
    dimension: str
    text: str
    reverse: bool = False


@dataclass(frozen=True)
class DimensionScore:
    dimension: str
    label: str
    score: float  # 0-100


@dataclass(frozen=True)
class RiskProfileResult:
    """Scored questionnaire. Created once per completed questionnaire."""
    answers: Dict[str, int]
    dimensions: List[DimensionScore]
    overall: int  # 0-100
    investor_type: InvestorType
    created_at: str = ""
    version: str = "1.0"

    def dimension_score(self, dimension: str) -> Optional[float]:
        for d in self.dimensions:
            if d.dimension == dimension:
                return d.score
        return None


# =============================================================================
# Portfolio Recommendation
# =============================================================================

@dataclass
class Goal:
    goal_name: str = "Wealth Building"
    time_horizon_years: int = 10
    priority: str = "Balance Risk & Returns"  # or "Maximize Returns", "Preserve Capital"
    goal_type: str = "Wealth Building"
    target_amount: Optional[float] = None
    risk_override: Optional[float] = None  # 0-100 percentile


@dataclass
class ContributionPlan:
    current_lump_sum: float = 0.0
    monthly_contribution: float = 0.0
    contribution_frequency: Frequency = Frequency.MONTHLY
    auto_invest: bool = False


@dataclass
class Preferences:
    ethical_filter: bool = False
    liquidity_requirement: bool = False


@dataclass(frozen=True)
class PortfolioRecommendation:
    allocation: AssetAllocation
    rationale: str
    investor_type: InvestorType
    adjustments: List[str]
    confidence: Confidence
    suggested_instruments: Dict[str, str]

