"""
Quiz Summarizer - whole-quiz aggregates over the question analyses.
"""

from __future__ import annotations

from collections.abc import Sequence

from config import AnalyticsThresholds
from src.analytics.models import QuestionAnalysis, QuestionHighlight, QuizSummary
from src.analytics.utils import mean


def _highlight(analysis: QuestionAnalysis) -> QuestionHighlight:
    return QuestionHighlight(
        number=analysis.question_number,
        text=analysis.text,
        success_rate=analysis.success_rate,
    )


def get_quiz_summary_stats(
    question_analytics: Sequence[QuestionAnalysis],
    thresholds: AnalyticsThresholds | None = None,
) -> QuizSummary | None:
    """
    Get summary statistics for the entire quiz.

    Hardest/easiest come from a stable ascending sort on success rate, so
    ties resolve to the earliest question for hardest and the latest for
    easiest.

    Args:
        question_analytics: Output of calculate_question_analytics
        thresholds: Review ratio threshold (defaults when None)

    Returns:
        QuizSummary, or None when question_analytics is empty. None stands
        for the empty summary object; SessionSummary.to_dict and
        SessionReport.to_dict serialize it as {}.
    """
    if not question_analytics:
        return None

    t = thresholds or AnalyticsThresholds()
    total_questions = len(question_analytics)
    problematic_count = sum(1 for q in question_analytics if q.is_potentially_problematic)

    by_success = sorted(question_analytics, key=lambda q: q.success_rate)

    return QuizSummary(
        total_questions=total_questions,
        problematic_count=problematic_count,
        avg_success_rate=mean([q.success_rate for q in question_analytics]),
        avg_time=mean([q.average_time for q in question_analytics]),
        hardest_question=_highlight(by_success[0]),
        easiest_question=_highlight(by_success[-1]),
        needs_review=problematic_count / total_questions > t.needs_review_ratio,
    )
