"""Attainable score bounds and score resolution for a configuration."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from riskscore.schemas.questionnaire import Question, Questionnaire, QuestionType
from riskscore.schemas.scoring_config import ScoringConfig, ScoringMethod
from riskscore.scoring.aggregator import SCORE_QUANTUM
from riskscore.scoring.custom_rules import resolve_targets
from riskscore.scoring.items import ZERO, option_score, rating_bounds, to_decimal

INTEGER_STEP = Decimal(1)


@dataclass
class ScoreBounds:
    """Lowest and highest attainable score (None when unbounded)."""

    lower: Optional[Decimal]
    upper: Optional[Decimal]
    step: Decimal


def _is_integral(values: Iterable[Decimal]) -> bool:
    return all(v == v.to_integral_value() for v in values)


def question_bounds(question: Question) -> Optional[tuple[Decimal, Decimal]]:
    """Unweighted score interval of one answered question.

    Returns None for questions that never score, and for rating questions
    without declared options (unbounded).
    """
    if not question.is_scored:
        return None

    if question.type == QuestionType.RATING:
        return rating_bounds(question)

    scores = [option_score(o) for o in question.effective_options]
    if not scores:
        return ZERO, ZERO

    if question.type == QuestionType.MULTIPLE_CHOICE:
        low = sum((s for s in scores if s < 0), ZERO)
        high = sum((s for s in scores if s > 0), ZERO)
        return low, high

    return min(scores), max(scores)


def _question_numbers(question: Question) -> list[Decimal]:
    return [option_score(o) for o in question.effective_options]


def _sum_bounds(questionnaire: Questionnaire) -> ScoreBounds:
    lower = upper = ZERO
    numbers: list[Decimal] = []
    fractional = False

    for question in questionnaire.questions:
        if not question.is_scored:
            continue
        bounds = question_bounds(question)
        if bounds is None:
            return ScoreBounds(lower=None, upper=None, step=SCORE_QUANTUM)

        weight = to_decimal(question.scoring_weight)
        low, high = bounds[0] * weight, bounds[1] * weight
        # Skipped optional questions contribute nothing
        if not question.required:
            low, high = min(low, ZERO), max(high, ZERO)
        lower += low
        upper += high
        numbers.extend(_question_numbers(question))
        numbers.append(weight)
        # Ratings accept any number between their bounds
        if question.type == QuestionType.RATING:
            fractional = True

    step = INTEGER_STEP if not fractional and _is_integral(numbers) else SCORE_QUANTUM
    return ScoreBounds(lower=lower, upper=upper, step=step)


def _average_bounds(questionnaire: Questionnaire, weighted: bool) -> ScoreBounds:
    lows: list[Decimal] = []
    highs: list[Decimal] = []

    for question in questionnaire.questions:
        if not question.is_scored:
            continue
        bounds = question_bounds(question)
        if bounds is None:
            return ScoreBounds(lower=None, upper=None, step=SCORE_QUANTUM)
        # A weighted average stays within the unweighted item bounds
        weight = INTEGER_STEP if weighted else to_decimal(question.scoring_weight)
        lows.append(bounds[0] * weight)
        highs.append(bounds[1] * weight)

    if not lows:
        return ScoreBounds(lower=ZERO, upper=ZERO, step=SCORE_QUANTUM)
    return ScoreBounds(lower=min(lows), upper=max(highs), step=SCORE_QUANTUM)


def _custom_bounds(questionnaire: Questionnaire, config: ScoringConfig) -> ScoreBounds:
    rule_set = config.custom_rules
    if rule_set is None:
        return ScoreBounds(lower=ZERO, upper=ZERO, step=INTEGER_STEP)

    base = to_decimal(rule_set.base_score)
    lower = upper = base
    numbers = [base]

    for index, rule in enumerate(rule_set.rules):
        targets = resolve_targets(rule.question, rule.condition, questionnaire, index)
        swing = to_decimal(rule.delta) * len(targets)
        if swing < 0:
            lower += swing
        else:
            upper += swing
        numbers.append(to_decimal(rule.delta))

    step = INTEGER_STEP if _is_integral(numbers) else SCORE_QUANTUM
    return ScoreBounds(lower=lower, upper=upper, step=step)


def score_bounds(questionnaire: Questionnaire, config: ScoringConfig) -> ScoreBounds:
    """Compute the attainable score interval for a strict (complete) submission.

    Raises:
        MalformedRule: If a custom rule cannot be resolved
    """
    if config.method == ScoringMethod.SUM:
        return _sum_bounds(questionnaire)
    if config.method == ScoringMethod.AVERAGE:
        return _average_bounds(questionnaire, weighted=False)
    if config.method == ScoringMethod.WEIGHTED_AVERAGE:
        return _average_bounds(questionnaire, weighted=True)
    return _custom_bounds(questionnaire, config)
