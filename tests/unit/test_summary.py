"""
Unit tests for whole-quiz summary statistics.
"""

import pytest

from config import AnalyticsThresholds
from src.analytics.models import QuestionAnalysis
from src.analytics.summary import get_quiz_summary_stats


def qa(number, rate, avg_time=5.0, problematic=False):
    return QuestionAnalysis(
        question_number=number,
        text=f"Q{number}",
        success_rate=rate,
        average_time=avg_time,
        is_potentially_problematic=problematic,
    )


def test_empty_quiz_has_no_summary():
    assert get_quiz_summary_stats([]) is None


def test_averages_and_counts():
    summary = get_quiz_summary_stats(
        [qa(1, 80, 4), qa(2, 20, 10, problematic=True), qa(3, 50, 7)]
    )

    assert summary.total_questions == 3
    assert summary.problematic_count == 1
    assert summary.avg_success_rate == pytest.approx(50)
    assert summary.avg_time == pytest.approx(7)
    assert summary.hardest_question.number == 2
    assert summary.easiest_question.number == 1
    assert summary.needs_review is True


def test_ties_use_stable_order():
    summary = get_quiz_summary_stats([qa(1, 50), qa(2, 50), qa(3, 50)])

    assert summary.hardest_question.number == 1
    assert summary.easiest_question.number == 3


def test_single_question_is_hardest_and_easiest():
    summary = get_quiz_summary_stats([qa(1, 70)])

    assert summary.hardest_question == summary.easiest_question


@pytest.mark.parametrize(
    "problematic, expected",
    [(2, False), (3, False), (4, True)],
)
def test_needs_review_is_strictly_above_ratio(problematic, expected):
    analytics = [qa(i + 1, 50, problematic=i < problematic) for i in range(10)]

    assert get_quiz_summary_stats(analytics).needs_review is expected


def test_review_ratio_is_tunable():
    analytics = [qa(1, 50, problematic=True)] + [qa(i, 90) for i in range(2, 11)]

    assert get_quiz_summary_stats(analytics).needs_review is False
    thresholds = AnalyticsThresholds(needs_review_ratio=0.05)
    assert get_quiz_summary_stats(analytics, thresholds).needs_review is True


def test_to_dict_shape():
    data = get_quiz_summary_stats([qa(1, 25)]).to_dict()

    assert data["hardestQuestion"] == {"number": 1, "text": "Q1", "successRate": 25}
    assert set(data) == {
        "totalQuestions",
        "problematicCount",
        "avgSuccessRate",
        "avgTime",
        "hardestQuestion",
        "easiestQuestion",
        "needsReview",
    }
