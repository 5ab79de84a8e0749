"""Authoring-time validation of scoring configurations.

Meant to run when a ScoringConfig is saved, so that coverage gaps, overlaps
and malformed rules are rejected before any response is scored against them.
The engine still re-checks everything it relies on at evaluation time.
"""

from riskscore.errors import InvalidScoringConfig, MalformedRule, ScoringError
from riskscore.schemas.questionnaire import Questionnaire
from riskscore.schemas.scoring_config import ScoringConfig, ScoringMethod
from riskscore.scoring.bounds import score_bounds
from riskscore.scoring.classifier import check_range_coverage
from riskscore.scoring.custom_rules import resolve_targets
from riskscore.scoring.items import to_decimal


def _rule_issues(questionnaire: Questionnaire, config: ScoringConfig) -> list[ScoringError]:
    issues: list[ScoringError] = []

    if config.custom_rules is not None:
        for index, rule in enumerate(config.custom_rules.rules):
            try:
                resolve_targets(rule.question, rule.condition, questionnaire, index)
            except MalformedRule as exc:
                issues.append(exc)

    for index, trigger in enumerate(config.flag_policy.flag_on_answers):
        try:
            resolve_targets(trigger.question, trigger.condition, questionnaire, index)
        except MalformedRule as exc:
            issues.append(InvalidScoringConfig(
                f"Answer trigger {index} is malformed: {exc.message}",
                question_id=trigger.question,
                rule_index=index,
            ))

    return issues


def collect_config_issues(
    questionnaire: Questionnaire,
    config: ScoringConfig,
) -> list[ScoringError]:
    """Collect every problem with a scoring configuration.

    Args:
        questionnaire: Questionnaire the configuration scores
        config: Configuration to check

    Returns:
        List of issues, empty when the configuration is valid
    """
    issues: list[ScoringError] = []

    if config.questionnaire_id != questionnaire.id:
        issues.append(InvalidScoringConfig(
            f"Config '{config.id}' belongs to questionnaire "
            f"'{config.questionnaire_id}', not '{questionnaire.id}'"
        ))

    if not config.ranges:
        issues.append(InvalidScoringConfig(f"Config '{config.id}' defines no risk ranges"))

    if config.method == ScoringMethod.CUSTOM and config.custom_rules is None:
        issues.append(InvalidScoringConfig(
            f"Config '{config.id}' uses custom scoring without a rule set"
        ))

    unknown_labels = sorted(set(config.flag_policy.flag_on_risk_levels) - set(config.labels))
    if unknown_labels:
        issues.append(InvalidScoringConfig(
            f"Flag policy references unknown risk levels: {', '.join(unknown_labels)}",
            details={"labels": unknown_labels},
        ))

    rule_issues = _rule_issues(questionnaire, config)
    issues.extend(rule_issues)
    if rule_issues or not config.ranges:
        # Bounds cannot be computed reliably from broken rules
        return issues

    bounds = score_bounds(questionnaire, config)
    issues.extend(check_range_coverage(config.ranges, bounds.lower, bounds.upper, bounds.step))

    if config.passing_score is not None:
        passing = to_decimal(config.passing_score)
        if (bounds.lower is not None and passing < bounds.lower) or (
            bounds.upper is not None and passing > bounds.upper
        ):
            issues.append(InvalidScoringConfig(
                f"Passing score {passing} is outside the attainable range "
                f"{bounds.lower}..{bounds.upper}"
            ))

    if config.max_score is not None and bounds.upper is not None:
        if to_decimal(config.max_score) < bounds.upper:
            issues.append(InvalidScoringConfig(
                f"max_score {config.max_score} is below the attainable maximum {bounds.upper}"
            ))

    return issues


def validate_scoring_config(questionnaire: Questionnaire, config: ScoringConfig) -> None:
    """Validate a scoring configuration, raising the first issue found.

    Raises:
        ScoringError: The first problem reported by collect_config_issues
    """
    issues = collect_config_issues(questionnaire, config)
    if issues:
        raise issues[0]
