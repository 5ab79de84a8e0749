"""Deterministic scoring and risk classification engine.

``evaluate`` turns a questionnaire snapshot, the submitted answers and a
scoring configuration into a score, a risk level and a review flag:

1. Validate answers and score every answered question
2. Aggregate (sum / average / weighted_average) or run the custom rules
3. Round to one decimal place
4. Classify the score against the configured risk ranges
5. Apply the flag policy

The engine is a pure function over the snapshots it is handed. It never
fetches "current" state, keeps nothing between calls and either returns a
complete result or raises a ScoringError.
"""

from dataclasses import asdict, dataclass, field
from decimal import Decimal
from typing import Any, Optional

from riskscore.errors import InvalidScoringConfig
from riskscore.schemas.questionnaire import Answer, Questionnaire
from riskscore.schemas.scoring_config import ScoringConfig, ScoringMethod, compute_snapshot_hash
from riskscore.scoring.aggregator import aggregate
from riskscore.scoring.bounds import score_bounds
from riskscore.scoring.classifier import classify
from riskscore.scoring.custom_rules import evaluate_custom_rules
from riskscore.scoring.flags import decide_flag
from riskscore.scoring.items import score_items, to_decimal
from riskscore.scoring.validation import validate_scoring_config


@dataclass
class ScoringResult:
    """Complete result of scoring one response."""

    score: float
    risk_level: str
    risk_description: str
    flagged: bool
    flag_reasons: list[str]
    per_question_scores: dict[str, float]
    method: str
    max_score: Optional[float]
    passed: Optional[bool]
    snapshot_hash: str
    missing_required: list[str] = field(default_factory=list)
    rules_fired: list[str] = field(default_factory=list)
    explanations: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the full result."""
        return asdict(self)

    def to_response_fields(self) -> dict[str, Any]:
        """Fields persisted onto the response record."""
        return {
            "score": self.score,
            "risk_level": self.risk_level,
            "flagged_for_review": self.flagged,
        }


def _max_score(questionnaire: Questionnaire, config: ScoringConfig) -> Optional[float]:
    if config.max_score is not None:
        return config.max_score
    bounds = score_bounds(questionnaire, config)
    return None if bounds.upper is None else float(bounds.upper)


def evaluate(
    questionnaire: Questionnaire,
    answers: list[Answer],
    config: ScoringConfig,
    *,
    allow_incomplete: bool = False,
    validate_config: bool = False,
) -> ScoringResult:
    """Score a set of answers against a questionnaire and scoring config.

    Args:
        questionnaire: Questionnaire snapshot as it was when the response was submitted
        answers: Submitted answers
        config: Scoring configuration snapshot for that questionnaire version
        allow_incomplete: Lenient path; missing required answers are reported
            in ``missing_required`` (and may flag) instead of raising
        validate_config: Run full authoring validation before scoring

    Returns:
        ScoringResult

    Raises:
        ScoringError: Any validation failure; nothing is partially applied
    """
    if validate_config:
        validate_scoring_config(questionnaire, config)

    if config.questionnaire_id != questionnaire.id:
        raise InvalidScoringConfig(
            f"Config '{config.id}' does not belong to questionnaire '{questionnaire.id}'"
        )

    scored = score_items(questionnaire, answers, allow_incomplete=allow_incomplete)

    rules_fired: list[str] = []
    explanations: list[str] = []

    if config.method == ScoringMethod.CUSTOM:
        if config.custom_rules is None:
            raise InvalidScoringConfig(
                f"Config '{config.id}' uses custom scoring without a rule set"
            )
        outcome = evaluate_custom_rules(config.custom_rules, questionnaire, scored.answers)
        score = outcome.score
        per_question: dict[str, Decimal] = outcome.per_question
        for match in outcome.matches:
            rules_fired.append(match.rule_id or f"rule_{match.rule_index}")
            explanations.append(match.explanation)
    else:
        score = aggregate(config.method, list(scored.items.values()))
        per_question = {
            qid: item.weighted
            for qid, item in scored.items.items()
            if item.weighted is not None
        }

    classification = classify(score, config.ranges)

    decision = decide_flag(
        config.flag_policy,
        score,
        classification.label,
        scored.missing_required,
        questionnaire,
        scored.answers,
    )

    passed = None
    if config.passing_score is not None:
        passed = score >= to_decimal(config.passing_score)

    return ScoringResult(
        score=float(score),
        risk_level=classification.label,
        risk_description=classification.description,
        flagged=decision.flagged,
        flag_reasons=decision.reasons,
        per_question_scores={qid: float(value) for qid, value in per_question.items()},
        method=config.method.value,
        max_score=_max_score(questionnaire, config),
        passed=passed,
        snapshot_hash=compute_snapshot_hash(questionnaire, config),
        missing_required=scored.missing_required,
        rules_fired=rules_fired,
        explanations=explanations,
    )
