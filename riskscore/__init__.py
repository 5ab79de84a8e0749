"""Questionnaire scoring and risk classification engine."""

from riskscore.errors import (
    AmbiguousRangeConfig,
    DuplicateAnswer,
    InvalidOptionValue,
    InvalidScoringConfig,
    MalformedRule,
    MissingRequiredAnswer,
    NoScorableAnswers,
    ScoreUnclassifiable,
    ScoringError,
    UnknownQuestion,
)
from riskscore.scoring.engine import ScoringResult, evaluate

__version__ = "1.0.0"

__all__ = [
    "evaluate",
    "ScoringResult",
    "ScoringError",
    "MissingRequiredAnswer",
    "InvalidOptionValue",
    "UnknownQuestion",
    "DuplicateAnswer",
    "NoScorableAnswers",
    "MalformedRule",
    "ScoreUnclassifiable",
    "AmbiguousRangeConfig",
    "InvalidScoringConfig",
]
