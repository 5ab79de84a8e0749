"""Flag policy: should a scored response go to human review?

A response is flagged when any of these hold:
- its risk level is one of ``flag_on_risk_levels``
- its score is at or above ``flag_on_score_at_or_above``
- ``flag_on_incomplete_required`` is set and a required question was left
  unanswered (only possible under lenient evaluation)
- an ``flag_on_answers`` trigger matches its answer

The policy only decides. Notifying anyone is the caller's job.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from riskscore.schemas.questionnaire import Answer, Questionnaire
from riskscore.schemas.scoring_config import FlagPolicy
from riskscore.scoring.custom_rules import condition_matches, resolve_targets
from riskscore.scoring.items import to_decimal

REASON_RISK_LEVEL = "risk_level"
REASON_SCORE_THRESHOLD = "score_threshold"
REASON_INCOMPLETE_REQUIRED = "incomplete_required"


@dataclass
class FlagDecision:
    """Outcome of the flag policy."""

    flagged: bool
    reasons: list[str] = field(default_factory=list)


def decide_flag(
    policy: FlagPolicy,
    score: Decimal,
    risk_level: str,
    missing_required: list[str],
    questionnaire: Questionnaire,
    answers: dict[str, Answer],
) -> FlagDecision:
    """Apply the flag policy to a scored submission.

    Args:
        policy: Flag policy from the scoring configuration
        score: Rounded score
        risk_level: Classified risk label
        missing_required: Required question IDs left unanswered
        questionnaire: Questionnaire snapshot (for answer triggers)
        answers: Answered questions keyed by question ID

    Returns:
        FlagDecision with reasons in policy order

    Raises:
        MalformedRule: If an answer trigger cannot apply to the questionnaire
    """
    reasons: list[str] = []

    if risk_level in policy.flag_on_risk_levels:
        reasons.append(REASON_RISK_LEVEL)

    threshold = policy.flag_on_score_at_or_above
    if threshold is not None and score >= to_decimal(threshold):
        reasons.append(REASON_SCORE_THRESHOLD)

    if policy.flag_on_incomplete_required and missing_required:
        reasons.append(REASON_INCOMPLETE_REQUIRED)

    for index, trigger in enumerate(policy.flag_on_answers):
        targets = resolve_targets(trigger.question, trigger.condition, questionnaire, index)
        for question in targets:
            answer = answers.get(question.id)
            value = answer.value if answer is not None else None
            if condition_matches(trigger.condition, question, value):
                if trigger.reason_label not in reasons:
                    reasons.append(trigger.reason_label)
                break

    return FlagDecision(flagged=bool(reasons), reasons=reasons)
