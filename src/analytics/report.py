"""
Session report - one-call analytics for a saved quiz session.

Resolves the question list (declared, alias, or reconstructed), then runs
the question analyzer, the summarizer and the concept passes.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from loguru import logger

from config import AnalyticsThresholds
from src.analytics.concept_mastery import (
    calculate_concept_mastery,
    detect_concept_dependencies,
    generate_concept_insights,
)
from src.analytics.models import (
    ConceptDependency,
    ConceptInsight,
    ConceptMastery,
    Question,
    QuestionAnalysis,
    QuizSummary,
    SessionRecord,
    ensure_record,
)
from src.analytics.question_analyzer import calculate_question_analytics
from src.analytics.reconstruction import reconstruct_questions_from_results
from src.analytics.results_filter import calculate_average_score
from src.analytics.summary import get_quiz_summary_stats


@dataclass
class SessionReport:
    """Everything the results viewer shows for a single session."""

    quiz_title: str | None
    filename: str | None
    saved: Any
    participant_count: int
    average_score: int
    reconstructed: bool
    question_analytics: list[QuestionAnalysis] = field(default_factory=list)
    summary: QuizSummary | None = None
    concept_mastery: ConceptMastery = field(default_factory=ConceptMastery)
    concept_dependencies: list[ConceptDependency] = field(default_factory=list)
    concept_insights: list[ConceptInsight] = field(default_factory=list)

    @property
    def problematic_questions(self) -> list[QuestionAnalysis]:
        return [q for q in self.question_analytics if q.is_potentially_problematic]

    def to_dict(self) -> dict[str, Any]:
        return {
            "quizTitle": self.quiz_title,
            "filename": self.filename,
            "saved": self.saved,
            "participantCount": self.participant_count,
            "averageScore": self.average_score,
            "reconstructed": self.reconstructed,
            "questionAnalytics": [q.to_dict() for q in self.question_analytics],
            "summary": self.summary.to_dict() if self.summary else {},
            "conceptMastery": self.concept_mastery.to_dict(),
            "conceptDependencies": [d.to_dict() for d in self.concept_dependencies],
            "conceptInsights": [i.to_dict() for i in self.concept_insights],
        }


def resolve_questions(record: SessionRecord | Mapping[str, Any]) -> list[Question]:
    """
    Question list for a record.

    Declared questions (or the questionMetadata alias) win; otherwise the
    list is reconstructed from player answers when anybody answered.
    """
    record = ensure_record(record)
    if record.questions is not None:
        return record.questions
    if not record.has_answers:
        return []
    logger.info(f"No question metadata in {record.filename or 'session'}, reconstructing from answers")
    return reconstruct_questions_from_results(record.players)


def with_resolved_questions(record: SessionRecord) -> SessionRecord:
    """Copy of the record whose `questions` is always populated."""
    if record.questions is not None:
        return record
    return replace(record, questions=resolve_questions(record))


def build_session_report(
    record: SessionRecord | Mapping[str, Any],
    thresholds: AnalyticsThresholds | None = None,
) -> SessionReport:
    """
    Run every single-session analysis.

    Args:
        record: Parsed SessionRecord or raw JSON document
        thresholds: Heuristic thresholds (defaults when None)

    Returns:
        SessionReport
    """
    original = ensure_record(record)
    resolved = with_resolved_questions(original)

    question_analytics = calculate_question_analytics(resolved, thresholds)
    mastery = calculate_concept_mastery(resolved, thresholds)
    dependencies = detect_concept_dependencies(resolved, mastery, thresholds)

    return SessionReport(
        quiz_title=resolved.quiz_title,
        filename=resolved.filename,
        saved=resolved.saved,
        participant_count=resolved.participant_count,
        average_score=calculate_average_score(resolved),
        reconstructed=original.questions is None and bool(resolved.questions),
        question_analytics=question_analytics,
        summary=get_quiz_summary_stats(question_analytics, thresholds),
        concept_mastery=mastery,
        concept_dependencies=dependencies,
        concept_insights=generate_concept_insights(mastery, dependencies, thresholds),
    )
