"""Risk classification of numeric scores.

A score maps to the single range with ``min <= score <= max`` (``max`` of
None is unbounded). A score in no range or in several ranges is a
configuration defect and is raised, never defaulted.
"""

from dataclasses import dataclass
from decimal import ROUND_FLOOR, Decimal
from typing import Optional

from riskscore.errors import AmbiguousRangeConfig, ScoreUnclassifiable, ScoringError
from riskscore.schemas.scoring_config import RiskRange
from riskscore.scoring.items import to_decimal


@dataclass
class RiskClassification:
    """Matched risk range."""

    label: str
    description: str
    min: Decimal
    max: Optional[Decimal]


def range_contains(risk_range: RiskRange, score: Decimal) -> bool:
    """Inclusive containment check."""
    if score < to_decimal(risk_range.min):
        return False
    return risk_range.max is None or score <= to_decimal(risk_range.max)


def classify(score: Decimal, ranges: list[RiskRange]) -> RiskClassification:
    """Map a score to its risk level.

    Raises:
        ScoreUnclassifiable: If no range contains the score
        AmbiguousRangeConfig: If more than one range contains the score
    """
    matched = [r for r in ranges if range_contains(r, score)]

    if not matched:
        raise ScoreUnclassifiable(score)
    if len(matched) > 1:
        raise AmbiguousRangeConfig(score, [r.label for r in matched])

    risk_range = matched[0]
    return RiskClassification(
        label=risk_range.label,
        description=risk_range.description,
        min=to_decimal(risk_range.min),
        max=None if risk_range.max is None else to_decimal(risk_range.max),
    )


def _next_grid_point(value: Decimal, step: Decimal) -> Decimal:
    """Smallest multiple of ``step`` strictly greater than ``value``."""
    return (value / step).to_integral_value(rounding=ROUND_FLOOR) * step + step


def check_range_coverage(
    ranges: list[RiskRange],
    lower: Optional[Decimal],
    upper: Optional[Decimal],
    step: Decimal,
) -> list[ScoringError]:
    """Find overlaps and gaps over the attainable score grid.

    Args:
        ranges: Configured risk ranges
        lower: Lowest attainable score (None if unbounded)
        upper: Highest attainable score (None if unbounded)
        step: Score resolution (1 for integral sums, 0.1 otherwise)

    Returns:
        List of AmbiguousRangeConfig / ScoreUnclassifiable issues (empty if valid)
    """
    issues: list[ScoringError] = []
    if not ranges:
        issues.append(ScoreUnclassifiable(lower if lower is not None else Decimal(0)))
        return issues

    ordered = sorted(ranges, key=lambda r: r.min)

    # Overlaps: consecutive ranges sharing any point
    for prev, nxt in zip(ordered, ordered[1:]):
        if prev.max is None or to_decimal(nxt.min) <= to_decimal(prev.max):
            issues.append(AmbiguousRangeConfig(
                to_decimal(nxt.min), [prev.label, nxt.label]
            ))

    # Uncovered bottom of the attainable interval
    first_min = to_decimal(ordered[0].min)
    if lower is not None and first_min > lower:
        issues.append(ScoreUnclassifiable(lower))

    # Gaps between consecutive ranges that an attainable score can fall into
    for prev, nxt in zip(ordered, ordered[1:]):
        if prev.max is None:
            continue
        candidate = _next_grid_point(to_decimal(prev.max), step)
        if lower is not None:
            candidate = max(candidate, lower)
        if candidate < to_decimal(nxt.min) and (upper is None or candidate <= upper):
            issues.append(ScoreUnclassifiable(candidate))

    # Uncovered top of the attainable interval
    top = max(
        ordered,
        key=lambda r: Decimal("Infinity") if r.max is None else to_decimal(r.max),
    )
    if upper is not None and top.max is not None and to_decimal(top.max) < upper:
        issues.append(ScoreUnclassifiable(upper))

    return issues
