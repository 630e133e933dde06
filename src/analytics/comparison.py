"""
Comparative Analyzer - trends across several runs of the same quiz.

Each session is analyzed on its own (question analytics + summary), the
sessions are ordered by their saved timestamp, and the first and last are
compared overall and question by question.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from loguru import logger

from config import AnalyticsThresholds
from src.analytics.models import (
    ComparisonReport,
    QuestionTrend,
    SessionRecord,
    SessionSummary,
    TrendDirection,
    ensure_record,
)
from src.analytics.question_analyzer import calculate_question_analytics
from src.analytics.report import with_resolved_questions
from src.analytics.summary import get_quiz_summary_stats
from src.analytics.utils import mean, parse_timestamp, round_half_up


def summarize_session(
    record: SessionRecord | Mapping[str, Any],
    thresholds: AnalyticsThresholds | None = None,
) -> SessionSummary:
    """Analyze one session and pack it for comparison."""
    record = with_resolved_questions(ensure_record(record))
    question_analytics = calculate_question_analytics(record, thresholds)
    summary = get_quiz_summary_stats(question_analytics, thresholds)
    return SessionSummary(
        date=record.saved,
        filename=record.filename,
        participant_count=record.participant_count,
        question_analytics=question_analytics,
        summary=summary,
        overall_success_rate=summary.avg_success_rate if summary else 0.0,
    )


def get_trend_direction(
    overall_trend: float, thresholds: AnalyticsThresholds | None = None
) -> TrendDirection:
    """Classify a success-rate change against the +/- trend band."""
    band = (thresholds or AnalyticsThresholds()).trend_band
    if overall_trend > band:
        return TrendDirection.IMPROVING
    if overall_trend < -band:
        return TrendDirection.DECLINING
    return TrendDirection.STABLE


def compare_sessions(
    records: Sequence[SessionRecord | Mapping[str, Any]],
    thresholds: AnalyticsThresholds | None = None,
) -> ComparisonReport | None:
    """
    Compare several sessions of the same quiz.

    Args:
        records: Two or more saved sessions, in any order
        thresholds: Flag and trend thresholds (defaults when None)

    Returns:
        ComparisonReport, or None with fewer than two sessions
    """
    if not isinstance(records, Sequence) or isinstance(records, str) or len(records) < 2:
        return None

    # sorted() is stable, so equal timestamps keep input order
    sessions = sorted(
        (summarize_session(record, thresholds) for record in records),
        key=lambda s: parse_timestamp(s.date),
    )
    first, last = sessions[0], sessions[-1]
    logger.debug(f"Comparing {len(sessions)} sessions from {first.date} to {last.date}")

    overall_trend = last.overall_success_rate - first.overall_success_rate

    question_count = min(len(s.question_analytics) for s in sessions)
    question_trends = []
    for index in range(question_count):
        first_rate = first.question_analytics[index].success_rate
        last_rate = last.question_analytics[index].success_rate
        question_trends.append(
            QuestionTrend(
                question_number=index + 1,
                first_rate=first_rate,
                last_rate=last_rate,
                trend=last_rate - first_rate,
            )
        )

    most_improved = max(question_trends, key=lambda q: q.trend, default=None)
    if most_improved is not None and most_improved.trend <= 0:
        most_improved = None
    most_declined = min(question_trends, key=lambda q: q.trend, default=None)
    if most_declined is not None and most_declined.trend >= 0:
        most_declined = None

    return ComparisonReport(
        sessions=sessions,
        overall_trend=overall_trend,
        trend_direction=get_trend_direction(overall_trend, thresholds),
        question_trends=question_trends,
        most_improved=most_improved,
        most_declined=most_declined,
        average_participants=round_half_up(mean([s.participant_count for s in sessions])),
    )
