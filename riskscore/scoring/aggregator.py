"""Aggregation of per-question scores into a single score.

Rounding policy: every final score is rounded half-up to one decimal place on
exact decimal arithmetic. Risk range matching runs against the rounded value.
"""

from decimal import ROUND_HALF_UP, Decimal

from riskscore.errors import NoScorableAnswers
from riskscore.schemas.scoring_config import ScoringMethod
from riskscore.scoring.items import ZERO, ItemScore

SCORE_DECIMAL_PLACES = 1
SCORE_QUANTUM = Decimal(1).scaleb(-SCORE_DECIMAL_PLACES)


def round_score(value: Decimal) -> Decimal:
    """Round a score to the fixed precision (half-up)."""
    return value.quantize(SCORE_QUANTUM, rounding=ROUND_HALF_UP)


def _contributing(items: list[ItemScore]) -> list[ItemScore]:
    return [item for item in items if item.contributes]


def aggregate_sum(items: list[ItemScore]) -> Decimal:
    """Arithmetic sum of weighted scores."""
    return sum((item.weighted for item in _contributing(items)), ZERO)  # type: ignore[misc]


def aggregate_average(items: list[ItemScore]) -> Decimal:
    """Sum of weighted scores divided by the number of contributing questions."""
    contributing = _contributing(items)
    if not contributing:
        raise NoScorableAnswers(ScoringMethod.AVERAGE.value)
    return aggregate_sum(contributing) / Decimal(len(contributing))


def aggregate_weighted_average(items: list[ItemScore]) -> Decimal:
    """Sum of weighted scores divided by the sum of applied weights."""
    contributing = _contributing(items)
    total_weight = sum((item.weight for item in contributing), ZERO)
    if total_weight == ZERO:
        raise NoScorableAnswers(ScoringMethod.WEIGHTED_AVERAGE.value)
    return aggregate_sum(contributing) / total_weight


AGGREGATORS = {
    ScoringMethod.SUM: aggregate_sum,
    ScoringMethod.AVERAGE: aggregate_average,
    ScoringMethod.WEIGHTED_AVERAGE: aggregate_weighted_average,
}


def aggregate(method: ScoringMethod, items: list[ItemScore]) -> Decimal:
    """Aggregate item scores with a built-in method and round the result.

    Raises:
        ValueError: If the method has no built-in aggregator (``custom``)
        NoScorableAnswers: If an average has nothing to divide by
    """
    aggregator = AGGREGATORS.get(method)
    if aggregator is None:
        raise ValueError(f"Unsupported aggregation method: {method}")
    return round_score(aggregator(items))
