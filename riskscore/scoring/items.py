"""Answer normalization and per-question scoring.

Per-question score by question type:
- single_choice / yes_no / scale: the chosen option's declared score
- multiple_choice: sum of the selected options' scores
- rating: the numeric answer itself, bounded by the declared options
- text / date: no score

The weighted score is the per-question score multiplied by the question's
scoring weight. A weight of 0 marks a question that is collected but never
scored.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from riskscore.errors import (
    DuplicateAnswer,
    InvalidOptionValue,
    MissingRequiredAnswer,
    UnknownQuestion,
)
from riskscore.schemas.questionnaire import (
    Answer,
    Option,
    Question,
    Questionnaire,
    QuestionType,
)

ZERO = Decimal("0")


@dataclass
class ItemScore:
    """Score of a single answered question."""

    question_id: str
    raw: Optional[Decimal]  # None when the question type yields no score
    weight: Decimal

    @property
    def contributes(self) -> bool:
        """Whether this item counts toward the aggregate score."""
        return self.raw is not None and self.weight != ZERO

    @property
    def weighted(self) -> Optional[Decimal]:
        if not self.contributes:
            return None
        return self.raw * self.weight  # type: ignore[operator]


@dataclass
class ScoredItems:
    """All item scores of a submission plus what was left unanswered."""

    items: dict[str, ItemScore]
    answers: dict[str, Answer]
    missing_required: list[str]


def to_decimal(value: Any) -> Decimal:
    """Convert a number to Decimal through its string form."""
    return Decimal(str(value))


def is_answered(value: Any) -> bool:
    """Null, blank strings and empty selections count as unanswered."""
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ""
    if isinstance(value, (list, tuple)):
        return len(value) > 0
    return True


def normalize_token(value: Any) -> str:
    """Normalize an answer value to an option token."""
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def numeric_value(value: Any) -> Optional[Decimal]:
    """Parse a numeric answer, returning None for anything non-numeric."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = to_decimal(value)
    elif isinstance(value, str):
        try:
            number = Decimal(value.strip())
        except InvalidOperation:
            return None
    else:
        return None
    if not number.is_finite():
        return None
    return number


def option_score(option: Option) -> Decimal:
    """Declared score contribution of an option (0 when undeclared)."""
    if option.score is None:
        return ZERO
    return to_decimal(option.score)


def option_numeric(option: Option) -> Optional[Decimal]:
    """Numeric value of an option: its score, else its numeric token."""
    if option.score is not None:
        return to_decimal(option.score)
    return numeric_value(option.value)


def match_option(question: Question, token: str) -> Optional[Option]:
    """Find the option for a token, exact match first then case-insensitive."""
    options = question.effective_options
    for option in options:
        if option.value == token:
            return option
    folded = token.casefold()
    for option in options:
        if option.value.casefold() == folded:
            return option
    return None


def rating_bounds(question: Question) -> Optional[tuple[Decimal, Decimal]]:
    """Min/max of the declared rating options, or None when unbounded."""
    values = [v for v in (option_numeric(o) for o in question.options) if v is not None]
    if not values:
        return None
    return min(values), max(values)


def selected_options(question: Question, value: Any) -> list[Option]:
    """Resolve an answer value to the declared options it selects.

    Raises:
        InvalidOptionValue: If any token matches no declared option.
    """
    if question.type == QuestionType.MULTIPLE_CHOICE:
        raw_tokens = value if isinstance(value, (list, tuple)) else [value]
    else:
        if isinstance(value, (list, tuple)):
            raise InvalidOptionValue(question.id, value, "expected a single value")
        raw_tokens = [value]

    selected: list[Option] = []
    for raw in raw_tokens:
        option = match_option(question, normalize_token(raw))
        if option is None:
            raise InvalidOptionValue(question.id, raw, "no matching option")
        # Selecting the same option twice counts once
        if option not in selected:
            selected.append(option)
    return selected


def rating_value(question: Question, value: Any) -> Decimal:
    """Validate and return the numeric value of a rating answer."""
    number = numeric_value(value)
    if number is None:
        raise InvalidOptionValue(question.id, value, "rating must be numeric")

    bounds = rating_bounds(question)
    if bounds is not None:
        low, high = bounds
        if not low <= number <= high:
            raise InvalidOptionValue(
                question.id, value, f"rating must be between {low} and {high}"
            )
    return number


def score_item(question: Question, value: Any) -> ItemScore:
    """Compute the unweighted score of one answered question."""
    weight = to_decimal(question.scoring_weight)

    if question.type in (QuestionType.TEXT, QuestionType.DATE):
        return ItemScore(question_id=question.id, raw=None, weight=weight)

    if question.type == QuestionType.RATING:
        raw = rating_value(question, value)
    else:
        raw = sum((option_score(o) for o in selected_options(question, value)), ZERO)

    return ItemScore(question_id=question.id, raw=raw, weight=weight)


def index_answers(questionnaire: Questionnaire, answers: list[Answer]) -> dict[str, Answer]:
    """Map answered question IDs to answers.

    Raises:
        UnknownQuestion: If an answer targets a question not in the questionnaire.
        DuplicateAnswer: If a question is answered more than once.
    """
    known = {q.id for q in questionnaire.questions}
    indexed: dict[str, Answer] = {}

    for answer in answers:
        if answer.question_id not in known:
            raise UnknownQuestion(answer.question_id)
        if answer.question_id in indexed:
            raise DuplicateAnswer(answer.question_id)
        indexed[answer.question_id] = answer

    return indexed


def score_items(
    questionnaire: Questionnaire,
    answers: list[Answer],
    allow_incomplete: bool = False,
) -> ScoredItems:
    """Validate a submission and score every answered question.

    Args:
        questionnaire: Questionnaire snapshot the answers were given against
        answers: Submitted answers
        allow_incomplete: Report missing required answers instead of failing

    Returns:
        ScoredItems keyed by question ID, in questionnaire order

    Raises:
        MissingRequiredAnswer: A required question is unanswered (strict mode)
        InvalidOptionValue: An answer does not fit its question
    """
    indexed = index_answers(questionnaire, answers)

    items: dict[str, ItemScore] = {}
    answered: dict[str, Answer] = {}
    missing_required: list[str] = []

    for question in questionnaire.questions:
        answer = indexed.get(question.id)
        if answer is None or not is_answered(answer.value):
            if question.required:
                if not allow_incomplete:
                    raise MissingRequiredAnswer(question.id)
                missing_required.append(question.id)
            continue

        answered[question.id] = answer
        items[question.id] = score_item(question, answer.value)

    return ScoredItems(items=items, answers=answered, missing_required=missing_required)
