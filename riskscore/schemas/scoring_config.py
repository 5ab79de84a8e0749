"""Pydantic models for scoring configurations.

A ScoringConfig is declarative data: the aggregation method, the risk ranges,
an optional custom rule set and the flag policy. Nothing in it is executable.
"""

import hashlib
import json
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from riskscore.schemas.questionnaire import Identifier, Questionnaire

WILDCARD = "*"


class ScoringMethod(str, Enum):
    """How per-question scores are combined."""

    SUM = "sum"
    AVERAGE = "average"
    WEIGHTED_AVERAGE = "weighted_average"
    CUSTOM = "custom"


class ConditionType(str, Enum):
    """Conditions a custom rule or answer trigger can test."""

    EQUALS = "equals"
    ONE_OF = "one_of"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    BETWEEN = "between"
    ANSWERED = "answered"
    NOT_ANSWERED = "not_answered"


class RuleCondition(BaseModel):
    """A condition on a single answer.

    Accepts the full form ``{"type": "between", "min": 1, "max": 3}`` or the
    shorthand ``{"between": [1, 3]}`` / ``{"equals": "yes"}`` /
    ``{"answered": true}``.
    """

    type: ConditionType
    value: Any = None
    values: list[Any] | None = None
    min: float | None = None
    max: float | None = None

    model_config = {"frozen": True}

    @model_validator(mode="before")
    @classmethod
    def _expand_shorthand(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "type" in data or len(data) != 1:
            return data

        key, arg = next(iter(data.items()))
        if key == ConditionType.ONE_OF.value:
            return {"type": key, "values": arg}
        if key == ConditionType.BETWEEN.value:
            if isinstance(arg, (list, tuple)) and len(arg) == 2:
                return {"type": key, "min": arg[0], "max": arg[1]}
            return {"type": key}
        if key in (ConditionType.ANSWERED.value, ConditionType.NOT_ANSWERED.value):
            return {"type": key}
        return {"type": key, "value": arg}

    def describe(self) -> str:
        """Human-readable form used in explanations."""
        if self.type == ConditionType.ONE_OF:
            return f"one_of {self.values}"
        if self.type == ConditionType.BETWEEN:
            return f"between {self.min} and {self.max}"
        if self.type in (ConditionType.ANSWERED, ConditionType.NOT_ANSWERED):
            return self.type.value
        return f"{self.type.value} {self.value!r}"


class CustomRule(BaseModel):
    """Adds ``delta`` to the score when the condition matches the answer."""

    question: Identifier
    condition: RuleCondition
    delta: float
    id: str | None = None
    description: str = ""

    model_config = {"frozen": True}

    @property
    def is_wildcard(self) -> bool:
        return self.question == WILDCARD


class CustomRuleSet(BaseModel):
    """Ordered rules for the ``custom`` scoring method."""

    base_score: float = 0
    rules: list[CustomRule] = Field(default_factory=list)

    model_config = {"frozen": True}


class RiskRange(BaseModel):
    """Score interval mapped to a risk level. Both ends inclusive."""

    min: float
    max: float | None = None  # None means unbounded
    label: str
    description: str = ""

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_bounds(self) -> "RiskRange":
        if self.max is not None and self.max < self.min:
            raise ValueError(
                f"Range '{self.label}' has max {self.max} below min {self.min}"
            )
        return self


class AnswerTrigger(BaseModel):
    """Flags a response when a specific answer matches a condition."""

    question: Identifier
    condition: RuleCondition
    reason: str | None = None

    model_config = {"frozen": True}

    @property
    def reason_label(self) -> str:
        return self.reason or f"answer:{self.question}"


class FlagPolicy(BaseModel):
    """When a scored response should be flagged for human review."""

    flag_on_risk_levels: list[str] = Field(default_factory=list)
    flag_on_score_at_or_above: float | None = None
    flag_on_incomplete_required: bool = False
    flag_on_answers: list[AnswerTrigger] = Field(default_factory=list)

    model_config = {"frozen": True}


class ScoringConfig(BaseModel):
    """Declarative scoring configuration for one questionnaire."""

    id: Identifier
    questionnaire_id: Identifier
    name: str
    description: str = ""
    version: str = "1"
    method: ScoringMethod = ScoringMethod.SUM
    ranges: list[RiskRange] = Field(default_factory=list)
    max_score: float | None = None
    passing_score: float | None = None
    custom_rules: CustomRuleSet | None = None
    flag_policy: FlagPolicy = Field(default_factory=FlagPolicy)
    is_active: bool = True

    model_config = {"frozen": True}

    @field_validator("method", mode="before")
    @classmethod
    def _normalize_method(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @property
    def labels(self) -> list[str]:
        return [r.label for r in self.ranges]


def compute_snapshot_hash(questionnaire: Questionnaire, config: ScoringConfig) -> str:
    """Compute SHA-256 of the questionnaire and config snapshot.

    Stored on every scored response so the exact question set and
    configuration that produced a score can be identified later.
    """
    content = {
        "questionnaire": questionnaire.model_dump(mode="json"),
        "config": config.model_dump(mode="json"),
    }
    content_str = json.dumps(content, sort_keys=True, default=str)
    return hashlib.sha256(content_str.encode("utf-8")).hexdigest()
