"""Pytest configuration and fixtures."""

from typing import Any, Callable

import pytest

from riskscore.schemas.questionnaire import Answer, Questionnaire, Response
from riskscore.schemas.scoring_config import ScoringConfig

FREQUENCY_OPTIONS = [
    {"label": "Not at all", "value": "0", "score": 0},
    {"label": "Several days", "value": "1", "score": 1},
    {"label": "More than half the days", "value": "2", "score": 2},
    {"label": "Nearly every day", "value": "3", "score": 3},
]

GAD7_RANGES = [
    {"min": 0, "max": 4, "label": "minimal", "description": "Minimal anxiety"},
    {"min": 5, "max": 9, "label": "mild", "description": "Mild anxiety"},
    {"min": 10, "max": 14, "label": "moderate", "description": "Moderate anxiety"},
    {"min": 15, "max": 21, "label": "severe", "description": "Severe anxiety"},
]


def make_answers(values: dict[str, Any]) -> list[Answer]:
    return [Answer(question_id=qid, value=value) for qid, value in values.items()]


@pytest.fixture
def frequency_questionnaire() -> Callable[..., Questionnaire]:
    """Factory for questionnaires of 0-3 single-choice items."""

    def _build(
        count: int = 7,
        weights: list[float] | None = None,
        questionnaire_id: str = "gad7",
    ) -> Questionnaire:
        weights = weights or [1] * count
        return Questionnaire(
            id=questionnaire_id,
            title="Frequency questionnaire",
            questions=[
                {
                    "id": f"q{i + 1}",
                    "text": f"Question {i + 1}",
                    "type": "single_choice",
                    "order": i + 1,
                    "options": FREQUENCY_OPTIONS,
                    "scoring_weight": weights[i],
                }
                for i in range(count)
            ],
        )

    return _build


@pytest.fixture
def gad7_questionnaire(frequency_questionnaire) -> Questionnaire:
    """Seven 0-3 items, weight 1."""
    return frequency_questionnaire()


@pytest.fixture
def gad7_config() -> ScoringConfig:
    """GAD-7 style sum config with four severity ranges."""
    return ScoringConfig(
        id="gad7-scoring",
        questionnaire_id="gad7",
        name="GAD-7 severity",
        method="sum",
        ranges=GAD7_RANGES,
        flag_policy={"flag_on_risk_levels": ["severe"]},
    )


@pytest.fixture
def gad7_answers() -> list[Answer]:
    """Answers [2,1,2,0,1,3,2], total 11."""
    return make_answers({f"q{i + 1}": v for i, v in enumerate([2, 1, 2, 0, 1, 3, 2])})


@pytest.fixture
def mixed_questionnaire() -> Questionnaire:
    """One question of every type."""
    return Questionnaire(
        id="mixed",
        title="Mixed wellbeing check",
        questions=[
            {
                "id": "mood",
                "text": "Mood today",
                "type": "rating",
                "order": 1,
                "options": [
                    {"label": "Very low", "value": "1"},
                    {"label": "Very good", "value": "5"},
                ],
            },
            {
                "id": "symptoms",
                "text": "Which apply?",
                "type": "multiple_choice",
                "order": 2,
                "required": False,
                "options": [
                    {"label": "Poor sleep", "value": "sleep", "score": 2},
                    {"label": "Low appetite", "value": "appetite", "score": 1},
                    {"label": "None", "value": "none", "score": 0},
                ],
            },
            {
                "id": "support",
                "text": "Do you have support at home?",
                "type": "yes_no",
                "order": 3,
            },
            {
                "id": "stress",
                "text": "Stress level",
                "type": "scale",
                "order": 4,
                "options": FREQUENCY_OPTIONS,
            },
            {
                "id": "notes",
                "text": "Anything else?",
                "type": "text",
                "order": 5,
                "required": False,
            },
            {
                "id": "last_visit",
                "text": "Date of last visit",
                "type": "date",
                "order": 6,
                "required": False,
            },
        ],
    )


@pytest.fixture
def screening_questionnaire() -> Questionnaire:
    """Five yes/no screening questions without declared options."""
    return Questionnaire(
        id="screen",
        title="Safety screen",
        questions=[
            {"id": f"Q{i}", "text": f"Screening question {i}", "type": "yes_no", "order": i}
            for i in range(1, 6)
        ],
    )


@pytest.fixture
def response_factory() -> Callable[..., Response]:
    """Factory for unscored responses."""

    def _build(
        answers: list[Answer],
        questionnaire_id: str = "gad7",
        response_id: str = "resp-1",
    ) -> Response:
        return Response(id=response_id, questionnaire_id=questionnaire_id, answers=answers)

    return _build
