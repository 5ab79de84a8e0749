"""Pydantic schemas for questionnaire snapshots and scoring configurations."""

from riskscore.schemas.questionnaire import (
    Answer,
    Option,
    Question,
    Questionnaire,
    QuestionnaireType,
    QuestionType,
    Response,
    ResponseStatus,
)
from riskscore.schemas.scoring_config import (
    AnswerTrigger,
    ConditionType,
    CustomRule,
    CustomRuleSet,
    FlagPolicy,
    RiskRange,
    RuleCondition,
    ScoringConfig,
    ScoringMethod,
    compute_snapshot_hash,
)

__all__ = [
    "Answer",
    "Option",
    "Question",
    "Questionnaire",
    "QuestionnaireType",
    "QuestionType",
    "Response",
    "ResponseStatus",
    "AnswerTrigger",
    "ConditionType",
    "CustomRule",
    "CustomRuleSet",
    "FlagPolicy",
    "RiskRange",
    "RuleCondition",
    "ScoringConfig",
    "ScoringMethod",
    "compute_snapshot_hash",
]
