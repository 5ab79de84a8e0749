"""Declarative custom rule evaluator.

Evaluates the ``custom`` scoring method. A rule set is data, never code:

    base_score: 0
    rules:
      - question: q5
        condition: {equals: "yes"}
        delta: 10
      - question: "*"
        condition: {greater_than: 3}
        delta: 1

Semantics:
- Rules are walked in declared order starting from ``base_score``.
- Every matching rule applies (cumulative, not first-match-wins).
- A wildcard rule is tested against each question whose type supports its
  condition and adds its delta once per matching question.
- Numeric conditions (greater_than, less_than, between) only apply to
  rating and scale questions.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Optional

from riskscore.errors import MalformedRule
from riskscore.schemas.questionnaire import (
    NUMERIC_TYPES,
    OPTION_TYPES,
    Answer,
    Question,
    Questionnaire,
    QuestionType,
)
from riskscore.schemas.scoring_config import (
    WILDCARD,
    ConditionType,
    CustomRule,
    CustomRuleSet,
    RuleCondition,
)
from riskscore.scoring.aggregator import round_score
from riskscore.scoring.items import (
    ZERO,
    is_answered,
    normalize_token,
    numeric_value,
    option_score,
    selected_options,
    to_decimal,
)

NUMERIC_CONDITIONS = frozenset({
    ConditionType.GREATER_THAN,
    ConditionType.LESS_THAN,
    ConditionType.BETWEEN,
})


@dataclass
class RuleMatch:
    """A rule that fired against one question."""

    rule_index: int
    rule_id: Optional[str]
    question_id: str
    delta: Decimal
    explanation: str


@dataclass
class CustomRuleOutcome:
    """Result of evaluating a custom rule set."""

    score: Decimal
    per_question: dict[str, Decimal] = field(default_factory=dict)
    matches: list[RuleMatch] = field(default_factory=list)


def condition_supported(condition_type: ConditionType, question_type: QuestionType) -> bool:
    """Check whether a condition can be tested against a question type."""
    if condition_type in NUMERIC_CONDITIONS:
        return question_type in NUMERIC_TYPES
    return True


def check_condition_arguments(condition: RuleCondition, index: int, question_id: str) -> None:
    """Validate the arguments a condition needs.

    Raises:
        MalformedRule: If a required argument is missing or not numeric.
    """
    ctype = condition.type

    if ctype == ConditionType.EQUALS and condition.value is None:
        raise MalformedRule(index, "equals requires a value", question_id)
    if ctype == ConditionType.ONE_OF and not condition.values:
        raise MalformedRule(index, "one_of requires a non-empty list of values", question_id)
    if ctype in (ConditionType.GREATER_THAN, ConditionType.LESS_THAN):
        if numeric_value(condition.value) is None:
            raise MalformedRule(index, f"{ctype.value} requires a numeric value", question_id)
    if ctype == ConditionType.BETWEEN:
        if condition.min is None or condition.max is None:
            raise MalformedRule(index, "between requires min and max", question_id)
        if condition.min > condition.max:
            raise MalformedRule(index, "between has min greater than max", question_id)


def resolve_targets(
    question_ref: str,
    condition: RuleCondition,
    questionnaire: Questionnaire,
    index: int,
) -> list[Question]:
    """Resolve the questions a rule (or answer trigger) applies to.

    Raises:
        MalformedRule: Unknown question, incompatible condition, bad arguments,
            or a wildcard that no question supports.
    """
    check_condition_arguments(condition, index, question_ref)

    if question_ref == WILDCARD:
        targets = [
            q for q in questionnaire.questions
            if condition_supported(condition.type, q.type)
        ]
        if not targets:
            raise MalformedRule(
                index,
                f"no question supports condition '{condition.type.value}'",
                question_ref,
            )
        return targets

    question = questionnaire.get_question(question_ref)
    if question is None:
        raise MalformedRule(index, "references unknown question", question_ref)
    if not condition_supported(condition.type, question.type):
        raise MalformedRule(
            index,
            f"condition '{condition.type.value}' is not supported for "
            f"{question.type.value} questions",
            question_ref,
        )
    return [question]


def validate_rule_set(rule_set: CustomRuleSet, questionnaire: Questionnaire) -> None:
    """Check every rule against the questionnaire without evaluating it."""
    for index, rule in enumerate(rule_set.rules):
        resolve_targets(rule.question, rule.condition, questionnaire, index)


def _answer_number(question: Question, value: Any) -> Optional[Decimal]:
    """Numeric view of an answer for numeric conditions."""
    if question.type == QuestionType.RATING:
        return numeric_value(value)
    options = selected_options(question, value)
    if not options:
        return None
    number = numeric_value(options[0].value)
    return number if number is not None else option_score(options[0])


def _equals(question: Question, value: Any, expected: Any) -> bool:
    """Compare an answer to an expected value according to question type."""
    if question.type == QuestionType.RATING:
        actual = numeric_value(value)
        target = numeric_value(expected)
        return actual is not None and target is not None and actual == target

    if question.type in OPTION_TYPES:
        tokens = {o.value.casefold() for o in selected_options(question, value)}
        return normalize_token(expected).casefold() in tokens

    return normalize_token(value).casefold() == normalize_token(expected).casefold()


def condition_matches(condition: RuleCondition, question: Question, value: Any) -> bool:
    """Evaluate a condition against one (possibly missing) answer value."""
    answered = is_answered(value)
    ctype = condition.type

    if ctype == ConditionType.ANSWERED:
        return answered
    if ctype == ConditionType.NOT_ANSWERED:
        return not answered
    if not answered:
        return False

    if ctype == ConditionType.EQUALS:
        return _equals(question, value, condition.value)
    if ctype == ConditionType.ONE_OF:
        return any(_equals(question, value, v) for v in condition.values or [])

    number = _answer_number(question, value)
    if number is None:
        return False
    if ctype == ConditionType.GREATER_THAN:
        return number > numeric_value(condition.value)  # type: ignore[operator]
    if ctype == ConditionType.LESS_THAN:
        return number < numeric_value(condition.value)  # type: ignore[operator]
    if ctype == ConditionType.BETWEEN:
        return to_decimal(condition.min) <= number <= to_decimal(condition.max)

    return False


def _explain(rule: CustomRule, question_id: str) -> str:
    if rule.description:
        return rule.description
    return (
        f"{question_id} {rule.condition.describe()} "
        f"({'+' if rule.delta >= 0 else ''}{rule.delta})"
    )


def evaluate_custom_rules(
    rule_set: CustomRuleSet,
    questionnaire: Questionnaire,
    answers: dict[str, Answer],
) -> CustomRuleOutcome:
    """Evaluate a custom rule set against answered questions.

    Args:
        rule_set: Rules from the scoring configuration
        questionnaire: Questionnaire snapshot
        answers: Answers keyed by question ID (unanswered questions absent)

    Returns:
        CustomRuleOutcome with the rounded score, per-question deltas and matches

    Raises:
        MalformedRule: If any rule cannot be applied to the questionnaire
    """
    # Reject the whole rule set before applying any of it
    targets_by_rule = [
        resolve_targets(rule.question, rule.condition, questionnaire, index)
        for index, rule in enumerate(rule_set.rules)
    ]

    total = to_decimal(rule_set.base_score)
    per_question: dict[str, Decimal] = {}
    matches: list[RuleMatch] = []

    for index, (rule, targets) in enumerate(zip(rule_set.rules, targets_by_rule)):
        delta = to_decimal(rule.delta)
        for question in targets:
            answer = answers.get(question.id)
            value = answer.value if answer is not None else None
            if not condition_matches(rule.condition, question, value):
                continue

            total += delta
            per_question[question.id] = per_question.get(question.id, ZERO) + delta
            matches.append(RuleMatch(
                rule_index=index,
                rule_id=rule.id,
                question_id=question.id,
                delta=delta,
                explanation=_explain(rule, question.id),
            ))

    return CustomRuleOutcome(
        score=round_score(total),
        per_question=per_question,
        matches=matches,
    )
