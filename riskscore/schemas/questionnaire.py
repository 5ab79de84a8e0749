"""Pydantic snapshot models for questionnaires, answers and responses."""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Union

from pydantic import BaseModel, BeforeValidator, Field, field_validator, model_validator


class QuestionnaireType(str, Enum):
    """Kinds of survey instrument."""

    STANDARD = "standard"
    ADAPTIVE = "adaptive"
    TEMPLATE = "template"


class QuestionType(str, Enum):
    """Question input types."""

    TEXT = "text"
    SINGLE_CHOICE = "single_choice"
    MULTIPLE_CHOICE = "multiple_choice"
    RATING = "rating"
    YES_NO = "yes_no"
    SCALE = "scale"
    DATE = "date"


# Types whose answers are looked up against declared options
OPTION_TYPES = frozenset({
    QuestionType.SINGLE_CHOICE,
    QuestionType.MULTIPLE_CHOICE,
    QuestionType.YES_NO,
    QuestionType.SCALE,
})

# Types whose answers carry a numeric value
NUMERIC_TYPES = frozenset({QuestionType.RATING, QuestionType.SCALE})


def _as_str_id(value: Any) -> Any:
    """Normalize integer identifiers (as stored by the platform) to strings."""
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


Identifier = Annotated[str, BeforeValidator(_as_str_id)]
AnswerValue = Union[bool, int, float, str, list[str], None]


class Option(BaseModel):
    """One selectable option of a choice, scale or rating question."""

    label: str
    value: str
    score: float | None = None

    model_config = {"frozen": True}

    @field_validator("value", mode="before")
    @classmethod
    def _normalize_value(cls, value: Any) -> Any:
        if isinstance(value, bool):
            return "yes" if value else "no"
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        if isinstance(value, (int, float)):
            return str(value)
        return value


# yes/no questions are authored without options
DEFAULT_YES_NO_OPTIONS = (
    Option(label="Yes", value="yes", score=1),
    Option(label="No", value="no", score=0),
)


class Question(BaseModel):
    """A single question belonging to a questionnaire."""

    id: Identifier
    text: str
    type: QuestionType
    required: bool = True
    order: int
    options: list[Option] = Field(default_factory=list)
    scoring_weight: float = Field(default=1, ge=0)
    conditional_logic: dict[str, Any] | None = None
    validation_rules: dict[str, Any] | None = None

    model_config = {"frozen": True}

    @property
    def effective_options(self) -> tuple[Option, ...]:
        """Declared options, or the implicit yes/no pair."""
        if not self.options and self.type == QuestionType.YES_NO:
            return DEFAULT_YES_NO_OPTIONS
        return tuple(self.options)

    @property
    def is_scored(self) -> bool:
        """Whether answers to this question can produce a score."""
        return self.scoring_weight != 0 and self.type not in (
            QuestionType.TEXT,
            QuestionType.DATE,
        )


class Questionnaire(BaseModel):
    """A survey instrument snapshot with its ordered questions."""

    id: Identifier
    title: str
    type: QuestionnaireType = QuestionnaireType.STANDARD
    version: str = "1"
    is_active: bool = True
    questions: list[Question] = Field(default_factory=list)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_questions(self) -> "Questionnaire":
        seen_ids: set[str] = set()
        seen_orders: set[int] = set()
        for question in self.questions:
            if question.id in seen_ids:
                raise ValueError(f"Duplicate question id '{question.id}'")
            if question.order in seen_orders:
                raise ValueError(f"Duplicate question order {question.order}")
            seen_ids.add(question.id)
            seen_orders.add(question.order)
        # Keep questions in display order
        ordered = sorted(self.questions, key=lambda q: q.order)
        object.__setattr__(self, "questions", ordered)
        return self

    def get_question(self, question_id: str) -> Question | None:
        """Get a question by its ID."""
        for question in self.questions:
            if question.id == question_id:
                return question
        return None


class Answer(BaseModel):
    """One response value for one question."""

    question_id: Identifier
    value: AnswerValue = None

    model_config = {"frozen": True}


class ResponseStatus(str, Enum):
    """Lifecycle of a response."""

    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class Response(BaseModel):
    """A respondent's submission against a questionnaire."""

    id: Identifier
    questionnaire_id: Identifier
    answers: list[Answer] = Field(default_factory=list)
    status: ResponseStatus = ResponseStatus.IN_PROGRESS

    # Populated exactly once by the scoring service
    score: float | None = None
    risk_level: str | None = None
    flagged_for_review: bool = False
    flag_reasons: list[str] = Field(default_factory=list)
    scored_at: datetime | None = None
    snapshot_hash: str | None = None

    model_config = {"frozen": True}

    @property
    def is_scored(self) -> bool:
        """Whether the scoring engine has already populated this response."""
        return self.scored_at is not None
