"""Deterministic questionnaire scoring engine.

All scoring decisions are deterministic, explainable and computed from the
snapshots handed in. No AI/ML is used for risk classification.
"""

from riskscore.scoring.aggregator import SCORE_DECIMAL_PLACES, aggregate, round_score
from riskscore.scoring.bounds import ScoreBounds, score_bounds
from riskscore.scoring.classifier import RiskClassification, check_range_coverage, classify
from riskscore.scoring.custom_rules import CustomRuleOutcome, evaluate_custom_rules
from riskscore.scoring.engine import ScoringResult, evaluate
from riskscore.scoring.flags import FlagDecision, decide_flag
from riskscore.scoring.validation import collect_config_issues, validate_scoring_config

__all__ = [
    "SCORE_DECIMAL_PLACES",
    "aggregate",
    "round_score",
    "ScoreBounds",
    "score_bounds",
    "RiskClassification",
    "check_range_coverage",
    "classify",
    "CustomRuleOutcome",
    "evaluate_custom_rules",
    "ScoringResult",
    "evaluate",
    "FlagDecision",
    "decide_flag",
    "collect_config_issues",
    "validate_scoring_config",
]
