"""Summary statistics over scored responses."""

from dataclasses import dataclass, field
from typing import Iterable, Optional

from riskscore.schemas.questionnaire import Response
from riskscore.scoring.aggregator import round_score
from riskscore.scoring.items import to_decimal


@dataclass
class RiskLevelVolume:
    """Response count for one risk level."""

    label: str
    count: int
    percentage: float


@dataclass
class ScoreSummary:
    """Score and risk distribution for a set of responses."""

    count: int
    mean_score: Optional[float]
    min_score: Optional[float]
    max_score: Optional[float]
    flagged_count: int
    passed_count: Optional[int]
    risk_distribution: list[RiskLevelVolume] = field(default_factory=list)


def _percentage(count: int, total: int) -> float:
    return round(count / total * 100, 1) if total > 0 else 0.0


def summarize_scores(
    responses: Iterable[Response],
    labels: Optional[list[str]] = None,
    passing_score: Optional[float] = None,
) -> ScoreSummary:
    """Summarize scored responses.

    Unscored responses are ignored.

    Args:
        responses: Responses to summarize
        labels: Risk labels in display order; labels with no responses are
            reported with a zero count. Unlisted labels follow in first-seen order.
        passing_score: If set, count responses scoring at or above it

    Returns:
        ScoreSummary
    """
    scored = [r for r in responses if r.is_scored and r.score is not None]
    total = len(scored)

    counts: dict[str, int] = {label: 0 for label in labels or []}
    for response in scored:
        label = response.risk_level or "unclassified"
        counts[label] = counts.get(label, 0) + 1

    distribution = [
        RiskLevelVolume(label=label, count=count, percentage=_percentage(count, total))
        for label, count in counts.items()
    ]

    passed_count = None
    if passing_score is not None:
        passed_count = sum(1 for r in scored if r.score >= passing_score)

    if not scored:
        return ScoreSummary(
            count=0,
            mean_score=None,
            min_score=None,
            max_score=None,
            flagged_count=0,
            passed_count=passed_count,
            risk_distribution=distribution,
        )

    scores = [to_decimal(r.score) for r in scored]
    mean = round_score(sum(scores) / len(scores))

    return ScoreSummary(
        count=total,
        mean_score=float(mean),
        min_score=float(min(scores)),
        max_score=float(max(scores)),
        flagged_count=sum(1 for r in scored if r.flagged_for_review),
        passed_count=passed_count,
        risk_distribution=distribution,
    )
