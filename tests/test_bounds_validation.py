"""Tests for attainable score bounds and configuration validation."""

from decimal import Decimal

import pytest

from riskscore.errors import (
    AmbiguousRangeConfig,
    InvalidScoringConfig,
    MalformedRule,
    ScoreUnclassifiable,
)
from riskscore.schemas.questionnaire import Answer, Questionnaire
from riskscore.schemas.scoring_config import ScoringConfig
from riskscore.scoring.bounds import score_bounds
from riskscore.scoring.classifier import classify
from riskscore.scoring.engine import evaluate
from riskscore.scoring.validation import collect_config_issues, validate_scoring_config


def _config(questionnaire_id="gad7", **kwargs) -> ScoringConfig:
    data = {
        "id": "cfg",
        "questionnaire_id": questionnaire_id,
        "name": "Test config",
        "ranges": [{"min": 0, "label": "all"}],
    }
    data.update(kwargs)
    return ScoringConfig.model_validate(data)


@pytest.fixture
def pain_questionnaire() -> Questionnaire:
    """One required 0-4 rating with whole-number options."""
    return Questionnaire(
        id="pain",
        title="Pain check",
        questions=[
            {
                "id": "pain",
                "text": "Pain today",
                "type": "rating",
                "order": 1,
                "options": [
                    {"label": "None", "value": "0"},
                    {"label": "Worst", "value": "4"},
                ],
            }
        ],
    )


class TestScoreBounds:
    """Tests for score_bounds."""

    def test_sum_bounds(self, gad7_questionnaire) -> None:
        """Test seven 0-3 items span 0..21 on the integer grid."""
        bounds = score_bounds(gad7_questionnaire, _config(method="sum"))

        assert (bounds.lower, bounds.upper, bounds.step) == (Decimal(0), Decimal(21), Decimal(1))

    def test_sum_bounds_with_fractional_weight(self, frequency_questionnaire) -> None:
        """Test fractional weights move scores onto the 0.1 grid."""
        questionnaire = frequency_questionnaire(count=2, weights=[1, 0.5])

        bounds = score_bounds(questionnaire, _config(method="sum"))

        assert bounds.upper == Decimal("4.5")
        assert bounds.step == Decimal("0.1")

    def test_sum_optional_question_can_add_zero(self, mixed_questionnaire) -> None:
        """Test optional items widen the interval to include skipping them."""
        bounds = score_bounds(mixed_questionnaire, _config("mixed", method="sum"))

        # mood 1-5, symptoms 0-3 (optional), support 0-1, stress 0-3
        assert (bounds.lower, bounds.upper) == (Decimal(1), Decimal(12))

    def test_weighted_average_bounds(self, frequency_questionnaire) -> None:
        """Test weighted averages stay within unweighted item bounds."""
        questionnaire = frequency_questionnaire(count=4, weights=[1, 1, 2, 2])

        bounds = score_bounds(questionnaire, _config(method="weighted_average"))

        assert (bounds.lower, bounds.upper) == (Decimal(0), Decimal(3))

    def test_average_bounds_use_weights(self, frequency_questionnaire) -> None:
        """Test plain averages of weighted items can exceed item bounds."""
        questionnaire = frequency_questionnaire(count=4, weights=[1, 1, 2, 2])

        bounds = score_bounds(questionnaire, _config(method="average"))

        assert bounds.upper == Decimal(6)

    def test_unbounded_rating(self) -> None:
        """Test a rating without declared options has no finite bounds."""
        questionnaire = Questionnaire(
            id="open",
            title="Open rating",
            questions=[{"id": "pain", "text": "Pain", "type": "rating", "order": 1}],
        )

        bounds = score_bounds(questionnaire, _config("open", method="sum"))

        assert bounds.lower is None and bounds.upper is None

    def test_rating_sum_uses_fractional_grid(self, pain_questionnaire) -> None:
        """Test whole-number rating options still allow fractional answers."""
        bounds = score_bounds(pain_questionnaire, _config("pain", method="sum"))

        assert (bounds.lower, bounds.upper, bounds.step) == (Decimal(0), Decimal(4), Decimal("0.1"))

    def test_custom_bounds(self, screening_questionnaire) -> None:
        """Test custom bounds from base score and rule swings."""
        config = _config(
            "screen",
            method="custom",
            custom_rules={
                "base_score": 1,
                "rules": [
                    {"question": "*", "condition": {"equals": "yes"}, "delta": 2},
                    {"question": "Q1", "condition": {"equals": "no"}, "delta": -1},
                ],
            },
        )

        bounds = score_bounds(screening_questionnaire, config)

        assert (bounds.lower, bounds.upper, bounds.step) == (Decimal(0), Decimal(11), Decimal(1))


class TestConfigValidation:
    """Tests for authoring-time validation."""

    def test_valid_config(self, gad7_questionnaire, gad7_config) -> None:
        """Test a well-formed config has no issues."""
        assert collect_config_issues(gad7_questionnaire, gad7_config) == []
        validate_scoring_config(gad7_questionnaire, gad7_config)

    def test_every_attainable_integer_classified_once(self, gad7_questionnaire, gad7_config) -> None:
        """Test that a valid config classifies its whole integer grid."""
        bounds = score_bounds(gad7_questionnaire, gad7_config)

        for score in range(int(bounds.lower), int(bounds.upper) + 1):
            classify(Decimal(score), gad7_config.ranges)

    def test_wrong_questionnaire(self, gad7_questionnaire) -> None:
        """Test configs are bound to one questionnaire."""
        issues = collect_config_issues(gad7_questionnaire, _config("other"))

        assert isinstance(issues[0], InvalidScoringConfig)

    def test_no_ranges(self, gad7_questionnaire) -> None:
        """Test a config must define risk ranges."""
        with pytest.raises(InvalidScoringConfig, match="no risk ranges"):
            validate_scoring_config(gad7_questionnaire, _config(ranges=[]))

    def test_custom_without_rules(self, gad7_questionnaire) -> None:
        """Test custom scoring needs a rule set."""
        with pytest.raises(InvalidScoringConfig, match="without a rule set"):
            validate_scoring_config(gad7_questionnaire, _config(method="custom"))

    def test_unknown_flag_label(self, gad7_questionnaire) -> None:
        """Test the flag policy may only name configured levels."""
        config = _config(flag_policy={"flag_on_risk_levels": ["critical"]})

        with pytest.raises(InvalidScoringConfig, match="critical"):
            validate_scoring_config(gad7_questionnaire, config)

    def test_malformed_rule_reported(self, screening_questionnaire) -> None:
        """Test malformed rules surface at authoring time."""
        config = _config(
            "screen",
            method="custom",
            custom_rules={"rules": [{"question": "Q1", "condition": {"less_than": 1}, "delta": 1}]},
        )

        with pytest.raises(MalformedRule):
            validate_scoring_config(screening_questionnaire, config)

    def test_malformed_trigger_reported(self, gad7_questionnaire) -> None:
        """Test malformed answer triggers surface as config errors."""
        config = _config(
            flag_policy={"flag_on_answers": [{"question": "nope", "condition": {"answered": True}}]}
        )

        with pytest.raises(InvalidScoringConfig, match="Answer trigger 0"):
            validate_scoring_config(gad7_questionnaire, config)

    def test_coverage_gap(self, gad7_questionnaire) -> None:
        """Test gaps in range coverage are rejected."""
        config = _config(ranges=[{"min": 0, "max": 9, "label": "low"}, {"min": 11, "label": "high"}])

        with pytest.raises(ScoreUnclassifiable) as exc_info:
            validate_scoring_config(gad7_questionnaire, config)

        assert exc_info.value.score == Decimal(10)

    def test_coverage_overlap(self, gad7_questionnaire) -> None:
        """Test overlapping ranges are rejected."""
        config = _config(ranges=[{"min": 0, "max": 10, "label": "low"}, {"min": 10, "label": "high"}])

        with pytest.raises(AmbiguousRangeConfig):
            validate_scoring_config(gad7_questionnaire, config)

    def test_gap_between_whole_number_rating_ranges(self, pain_questionnaire) -> None:
        """Test ranges 0-2 and 3-4 leave a gap a 2.5 rating falls into."""
        config = _config(
            "pain",
            method="sum",
            ranges=[{"min": 0, "max": 2, "label": "low"}, {"min": 3, "max": 4, "label": "high"}],
        )

        issues = collect_config_issues(pain_questionnaire, config)

        assert [type(i) for i in issues] == [ScoreUnclassifiable]
        assert issues[0].score == Decimal("2.1")
        with pytest.raises(ScoreUnclassifiable):
            evaluate(
                pain_questionnaire,
                [Answer(question_id="pain", value=2.5)],
                config,
                validate_config=True,
            )

    def test_contiguous_rating_ranges_valid(self, pain_questionnaire) -> None:
        """Test ranges meeting on the 0.1 grid accept any rating."""
        config = _config(
            "pain",
            method="sum",
            ranges=[{"min": 0, "max": 2.4, "label": "low"}, {"min": 2.5, "max": 4, "label": "high"}],
        )

        assert collect_config_issues(pain_questionnaire, config) == []
        result = evaluate(pain_questionnaire, [Answer(question_id="pain", value=2.5)], config)
        assert result.risk_level == "high"

    def test_passing_score_out_of_range(self, gad7_questionnaire) -> None:
        """Test passing score must be attainable."""
        with pytest.raises(InvalidScoringConfig, match="Passing score"):
            validate_scoring_config(gad7_questionnaire, _config(passing_score=30))

    def test_max_score_below_attainable(self, gad7_questionnaire) -> None:
        """Test declared max_score cannot undercut the real maximum."""
        with pytest.raises(InvalidScoringConfig, match="max_score"):
            validate_scoring_config(gad7_questionnaire, _config(max_score=20))

    def test_all_issues_collected(self, gad7_questionnaire) -> None:
        """Test that collect_config_issues reports everything at once."""
        config = _config(
            ranges=[{"min": 1, "max": 9, "label": "low"}, {"min": 11, "max": 15, "label": "high"}],
            flag_policy={"flag_on_risk_levels": ["critical"]},
        )

        issues = collect_config_issues(gad7_questionnaire, config)

        # unknown label, bottom 0, gap at 10, top 21
        assert len(issues) == 4
