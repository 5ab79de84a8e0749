"""Scoring error taxonomy.

Every error is an evaluation-time validation failure. Evaluation aborts on the
first one and never returns a partial score. Each error carries enough context
(question id, rule index, score) for the caller to log it and to map it to a
client-error response:

- ``incomplete_submission``: the respondent left something out
- ``invalid_submission``: the answers do not fit the questionnaire
- ``questionnaire_misconfigured``: the ScoringConfig itself is defective
"""

from decimal import Decimal
from typing import Any, Optional

INCOMPLETE_SUBMISSION = "incomplete_submission"
INVALID_SUBMISSION = "invalid_submission"
QUESTIONNAIRE_MISCONFIGURED = "questionnaire_misconfigured"


class ScoringError(Exception):
    """Base exception for scoring errors."""

    kind = "scoring_error"
    category = QUESTIONNAIRE_MISCONFIGURED

    def __init__(
        self,
        message: str,
        *,
        question_id: Optional[str] = None,
        rule_index: Optional[int] = None,
        score: Optional[Decimal] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.question_id = question_id
        self.rule_index = rule_index
        self.score = score
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Serialize error for logging and API error bodies."""
        data: dict[str, Any] = {
            "kind": self.kind,
            "category": self.category,
            "message": self.message,
        }
        if self.question_id is not None:
            data["question_id"] = self.question_id
        if self.rule_index is not None:
            data["rule_index"] = self.rule_index
        if self.score is not None:
            data["score"] = float(self.score)
        if self.details:
            data["details"] = self.details
        return data


class MissingRequiredAnswer(ScoringError):
    """Raised when a required question has no answer."""

    kind = "missing_required_answer"
    category = INCOMPLETE_SUBMISSION

    def __init__(self, question_id: str) -> None:
        super().__init__(
            f"Required question '{question_id}' has no answer",
            question_id=question_id,
        )


class InvalidOptionValue(ScoringError):
    """Raised when an answer value matches no declared option."""

    kind = "invalid_option_value"
    category = INVALID_SUBMISSION

    def __init__(self, question_id: str, value: Any, reason: str = "") -> None:
        message = f"Invalid value {value!r} for question '{question_id}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, question_id=question_id, details={"value": value})


class UnknownQuestion(ScoringError):
    """Raised when an answer references a question not in the questionnaire."""

    kind = "unknown_question"
    category = INVALID_SUBMISSION

    def __init__(self, question_id: str) -> None:
        super().__init__(
            f"Answer references unknown question '{question_id}'",
            question_id=question_id,
        )


class DuplicateAnswer(ScoringError):
    """Raised when a submission holds more than one answer for a question."""

    kind = "duplicate_answer"
    category = INVALID_SUBMISSION

    def __init__(self, question_id: str) -> None:
        super().__init__(
            f"More than one answer for question '{question_id}'",
            question_id=question_id,
        )


class NoScorableAnswers(ScoringError):
    """Raised when an average has a zero denominator."""

    kind = "no_scorable_answers"
    category = INCOMPLETE_SUBMISSION

    def __init__(self, method: str) -> None:
        super().__init__(
            f"No scorable answers for '{method}' scoring",
            details={"method": method},
        )


class MalformedRule(ScoringError):
    """Raised when a custom rule cannot be applied to the questionnaire."""

    kind = "malformed_rule"

    def __init__(
        self,
        rule_index: int,
        reason: str,
        question_id: Optional[str] = None,
    ) -> None:
        super().__init__(
            f"Rule {rule_index} is malformed: {reason}",
            question_id=question_id,
            rule_index=rule_index,
        )


class ScoreUnclassifiable(ScoringError):
    """Raised when no risk range contains a score (coverage gap)."""

    kind = "score_unclassifiable"

    def __init__(self, score: Decimal) -> None:
        super().__init__(f"No risk range contains score {score}", score=score)


class AmbiguousRangeConfig(ScoringError):
    """Raised when more than one risk range contains a score (overlap)."""

    kind = "ambiguous_range_config"

    def __init__(self, score: Decimal, labels: list[str]) -> None:
        super().__init__(
            f"Score {score} falls in overlapping ranges: {', '.join(labels)}",
            score=score,
            details={"labels": labels},
        )


class InvalidScoringConfig(ScoringError):
    """Raised when a scoring configuration fails authoring-time validation."""

    kind = "invalid_scoring_config"
