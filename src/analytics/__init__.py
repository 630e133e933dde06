"""
Results analytics engine for saved quiz sessions.

Pure, synchronous computations over saved session records:
- reconstruct_questions_from_results: placeholder questions for old records
- calculate_question_analytics: per-question stats and problem flags
- get_quiz_summary_stats: whole-quiz aggregates
- calculate_concept_mastery / detect_concept_dependencies / generate_concept_insights
- compare_sessions: trends across runs of the same quiz
- build_session_report: everything above for one session
"""

from .comparison import compare_sessions, summarize_session
from .concept_mastery import (
    calculate_concept_mastery,
    detect_concept_dependencies,
    generate_concept_insights,
)
from .models import (
    ComparisonReport,
    ConceptDependency,
    ConceptInsight,
    ConceptMastery,
    ConceptStats,
    MasteryLevel,
    ProblemFlag,
    Question,
    QuestionAnalysis,
    QuizSummary,
    SessionRecord,
    Severity,
    TrendDirection,
)
from .question_analyzer import calculate_question_analytics, flag_problematic_question
from .reconstruction import infer_correct_answer, reconstruct_questions_from_results
from .report import SessionReport, build_session_report, resolve_questions
from .results_filter import calculate_average_score, filter_and_sort_results
from .summary import get_quiz_summary_stats

__all__ = [
    "ComparisonReport",
    "ConceptDependency",
    "ConceptInsight",
    "ConceptMastery",
    "ConceptStats",
    "MasteryLevel",
    "ProblemFlag",
    "Question",
    "QuestionAnalysis",
    "QuizSummary",
    "SessionRecord",
    "SessionReport",
    "Severity",
    "TrendDirection",
    "build_session_report",
    "calculate_average_score",
    "calculate_concept_mastery",
    "calculate_question_analytics",
    "compare_sessions",
    "detect_concept_dependencies",
    "filter_and_sort_results",
    "flag_problematic_question",
    "generate_concept_insights",
    "get_quiz_summary_stats",
    "infer_correct_answer",
    "reconstruct_questions_from_results",
    "resolve_questions",
    "summarize_session",
]
