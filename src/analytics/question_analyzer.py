"""
Question Analyzer - per-question diagnostics for a saved quiz session.

For every question the analyzer sweeps all players' answers at that
position and derives response counts, success rate, timing, points,
the roster of struggling players and a histogram of wrong answers.

Problem flags (evaluated in this order):
- low_success:          success < 40%                       (high)
- moderate_success:     40% <= success < 60%                (medium)
- time_vs_success:      avg time > 15s and success < 50%    (high)
- quick_wrong:          avg time < 8s and success < 70%    (medium)
- common_wrong_answer:  one wrong answer >= 40% of answers  (medium)

A question is "potentially problematic" when it carries a high flag.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from loguru import logger

from config import AnalyticsThresholds
from src.analytics.models import (
    FlagType,
    PlayerResult,
    ProblemFlag,
    Question,
    QuestionAnalysis,
    SessionRecord,
    Severity,
    StrugglingPlayer,
    ensure_record,
)
from src.analytics.utils import stringify_answer


def analyze_question(
    question: Question,
    question_index: int,
    players: Sequence[PlayerResult],
    thresholds: AnalyticsThresholds | None = None,
) -> QuestionAnalysis:
    """
    Roll up every player's answer to one question and flag it.

    Args:
        question: Question metadata
        question_index: Zero-based position used to read each player's answers
        players: Player rows of the session
        thresholds: Flag thresholds (defaults when None)

    Returns:
        Fully populated QuestionAnalysis
    """
    analysis = QuestionAnalysis(
        question_number=question_index + 1,
        text=question.text,
        type=question.type,
        difficulty=question.difficulty,
        correct_answer=question.correct_answer,
    )

    for player in players:
        answer = player.answer_at(question_index)
        if answer is None:
            continue

        analysis.total_responses += 1
        analysis.total_time += answer.time_seconds
        analysis.total_points += answer.points

        if answer.is_correct:
            analysis.correct_responses += 1
            continue

        analysis.struggling_players.append(
            StrugglingPlayer(
                name=player.name,
                answer=answer.answer,
                time=answer.time_seconds,
                points=answer.points,
            )
        )
        key = stringify_answer(answer.answer)
        analysis.common_wrong_answers[key] = analysis.common_wrong_answers.get(key, 0) + 1

    if analysis.total_responses > 0:
        analysis.success_rate = analysis.correct_responses / analysis.total_responses * 100
        analysis.average_time = analysis.total_time / analysis.total_responses
        analysis.average_points = analysis.total_points / analysis.total_responses
        analysis.time_efficiency = analysis.success_rate / max(analysis.average_time, 1)

    flag_problematic_question(analysis, thresholds)
    return analysis


def most_common_wrong_answer(common_wrong_answers: Mapping[str, int]) -> tuple[str | None, int]:
    """Modal wrong answer; ties go to the first one seen."""
    best: tuple[str | None, int] = (None, 0)
    for answer, count in common_wrong_answers.items():
        if count > best[1]:
            best = (answer, count)
    return best


def flag_problematic_question(
    analysis: QuestionAnalysis,
    thresholds: AnalyticsThresholds | None = None,
) -> list[ProblemFlag]:
    """
    Evaluate the problem-flag rules against a question analysis.

    Replaces `problem_flags` and sets `is_potentially_problematic` when any
    high-severity flag was raised.

    Returns:
        The flags, in rule order
    """
    t = thresholds or AnalyticsThresholds()
    rate = analysis.success_rate
    avg_time = analysis.average_time
    flags: list[ProblemFlag] = []

    # Knowledge gap
    if rate < t.low_success_rate:
        flags.append(
            ProblemFlag(
                FlagType.LOW_SUCCESS,
                Severity.HIGH,
                f"Only {rate:.1f}% success rate - potential knowledge gap",
            )
        )
    elif rate < t.moderate_success_rate:
        flags.append(
            ProblemFlag(
                FlagType.MODERATE_SUCCESS,
                Severity.MEDIUM,
                f"{rate:.1f}% success rate - room for improvement",
            )
        )

    # Conceptual difficulty
    if avg_time > t.slow_answer_seconds and rate < t.slow_answer_success_rate:
        flags.append(
            ProblemFlag(
                FlagType.TIME_VS_SUCCESS,
                Severity.HIGH,
                f"High time ({avg_time:.1f}s) with low success - conceptual difficulty",
            )
        )

    # Misconceptions
    if avg_time < t.quick_answer_seconds and rate < t.quick_answer_success_rate:
        flags.append(
            ProblemFlag(
                FlagType.QUICK_WRONG,
                Severity.MEDIUM,
                "Quick responses with errors - potential misconceptions",
            )
        )

    # Misleading option
    wrong_answer, count = most_common_wrong_answer(analysis.common_wrong_answers)
    if (
        analysis.total_responses > 0
        and count > 0
        and count >= analysis.total_responses * t.common_wrong_answer_ratio
    ):
        flags.append(
            ProblemFlag(
                FlagType.COMMON_WRONG_ANSWER,
                Severity.MEDIUM,
                f'{count} students chose "{wrong_answer}" - potentially misleading option',
            )
        )

    analysis.problem_flags = flags
    analysis.is_potentially_problematic = any(f.severity is Severity.HIGH for f in flags)
    return flags


def calculate_question_analytics(
    record: SessionRecord | Mapping[str, Any],
    thresholds: AnalyticsThresholds | None = None,
) -> list[QuestionAnalysis]:
    """
    Calculate per-question analytics for a saved session.

    Uses the record's `questions` (or its `questionMetadata` alias). Records
    without a question list yield an empty list; run the reconstructor first
    to get placeholder analytics for those.

    Args:
        record: Parsed SessionRecord or raw JSON document
        thresholds: Flag thresholds (defaults when None)

    Returns:
        One QuestionAnalysis per question, in question order
    """
    record = ensure_record(record)
    if record.questions is None or record.results is None:
        logger.warning(
            f"No question analytics for {record.filename or 'session'}: "
            "missing question list or player results"
        )
        return []

    return [
        analyze_question(question, index, record.results, thresholds)
        for index, question in enumerate(record.questions)
    ]
