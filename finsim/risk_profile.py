"""
Risk-profile questionnaire scoring.

Twelve Likert-scale answers (1-5), two per dimension, are averaged into six
0-100 dimension scores. A weighted sum of the dimension scores gives the
overall score, which is bucketed into one of five investor archetypes.
Liquidity needs and loss aversion are reverse scored: agreeing with those
statements lowers the score.
"""

import math
from datetime import datetime, timezone
from typing import Dict, List, Mapping, Tuple

from .assumptions import ALLOCATION_BANDS, DEFAULT_QUESTIONNAIRE, Questionnaire
from .params import DimensionScore, InvestorType, RiskProfileResult

LIKERT_MIN = 1
LIKERT_MAX = 5

CASH_BUFFER_NOTE = (
    "Consider a larger cash buffer until income stabilizes or emergency fund is adequate."
)


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def validate_answers(answers: Mapping[str, int], questionnaire: Questionnaire = DEFAULT_QUESTIONNAIRE) -> None:
    """
    Check that every question has an integer answer in 1..5.

    Raises:
        ValueError: naming the missing or out-of-range questions
    """
    missing = [q.id for q in questionnaire.questions if q.id not in answers]
    if missing:
        raise ValueError(f"Questionnaire incomplete; missing answers for {', '.join(missing)}")

    out_of_range = [
        q.id for q in questionnaire.questions
        if not LIKERT_MIN <= answers[q.id] <= LIKERT_MAX
    ]
    if out_of_range:
        raise ValueError(
            f"Answers must be between {LIKERT_MIN} and {LIKERT_MAX}; "
            f"invalid for {', '.join(out_of_range)}"
        )


def score_dimensions(
    answers: Mapping[str, int],
    questionnaire: Questionnaire = DEFAULT_QUESTIONNAIRE,
) -> List[DimensionScore]:
    """Per-dimension scores, in the order dimensions first appear in the questionnaire."""
    by_dimension: Dict[str, List[int]] = {}
    for question in questionnaire.questions:
        raw = answers[question.id]
        by_dimension.setdefault(question.dimension, []).append(
            (LIKERT_MAX + 1 - raw) if question.reverse else raw
        )

    return [
        DimensionScore(
            dimension=dimension,
            label=questionnaire.labels.get(dimension, dimension),
            score=sum(values) / len(values) / LIKERT_MAX * 100,
        )
        for dimension, values in by_dimension.items()
    ]


def classify_investor(overall: int, questionnaire: Questionnaire = DEFAULT_QUESTIONNAIRE) -> InvestorType:
    for low, high, investor_type in questionnaire.thresholds:
        if low <= overall <= high:
            return investor_type
    raise ValueError(f"Overall score {overall} is outside every investor-type band")


def score_risk_profile(
    answers: Mapping[str, int],
    questionnaire: Questionnaire = DEFAULT_QUESTIONNAIRE,
) -> RiskProfileResult:
    """
    Score a completed questionnaire.

    Callers are expected to block submission until every question is
    answered; an incomplete answer set raises instead of defaulting.

    Returns:
        RiskProfileResult with unrounded dimension scores and the overall
        score rounded half-up to an integer.
    """
    validate_answers(answers, questionnaire)
    dimensions = score_dimensions(answers, questionnaire)

    weighted = sum(d.score * questionnaire.weights[d.dimension] for d in dimensions)
    overall = _round_half_up(weighted)

    return RiskProfileResult(
        answers={q.id: int(answers[q.id]) for q in questionnaire.questions},
        dimensions=dimensions,
        overall=overall,
        investor_type=classify_investor(overall, questionnaire),
        created_at=datetime.now(timezone.utc).isoformat(),
    )


def allocation_band(investor_type: InvestorType) -> Mapping[str, str]:
    """Indicative equity/debt/gold/cash ranges for an archetype."""
    return ALLOCATION_BANDS[InvestorType(investor_type)]


def special_notes(dimensions: List[DimensionScore]) -> List[str]:
    """Advisory notes for weak capacity or liquidity scores; a missing score counts as weak."""
    scores = {d.dimension: d.score for d in dimensions}
    if scores.get('capacity', 0) < 50 or scores.get('liquidity', 0) < 50:
        return [CASH_BUFFER_NOTE]
    return []


def top_drivers(dimensions: List[DimensionScore], n: int = 3) -> List[Tuple[str, float]]:
    """Highest-scoring dimensions as (label, score) pairs."""
    ranked = sorted(dimensions, key=lambda d: d.score, reverse=True)
    return [(d.label, d.score) for d in ranked[:n]]
