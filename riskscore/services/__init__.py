"""Response lifecycle and reporting services."""

from riskscore.services.scoring import (
    RescoreReasonRequiredError,
    ResponseAlreadyScoredError,
    ResponseScoringError,
    ScoringService,
    SnapshotMismatchError,
)
from riskscore.services.statistics import RiskLevelVolume, ScoreSummary, summarize_scores

__all__ = [
    "ScoringService",
    "ResponseScoringError",
    "ResponseAlreadyScoredError",
    "RescoreReasonRequiredError",
    "SnapshotMismatchError",
    "RiskLevelVolume",
    "ScoreSummary",
    "summarize_scores",
]
