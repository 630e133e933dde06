"""
Data model for the results analytics engine.

Input side:
- SessionRecord: one saved quiz run (questions + per-player answers)
- Question, PlayerResult, PlayerAnswer

Derived side:
- QuestionAnalysis + ProblemFlag: per-question diagnostics
- QuizSummary + QuestionHighlight: whole-quiz aggregates
- ConceptStats, ConceptMastery, ConceptDependency, ConceptInsight
- SessionSummary, QuestionTrend, ComparisonReport

Input constructors are lenient: malformed fields fall back to defaults
instead of raising. Derived entities serialize with to_dict() to the
camelCase JSON shape consumed by renderers and exporters.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from config import AnalyticsThresholds
from src.analytics.utils import get_list, to_number

DEFAULT_QUESTION_TYPE = "multiple-choice"
DEFAULT_DIFFICULTY = "medium"


# =============================================================================
# ENUMS
# =============================================================================


class Severity(str, Enum):
    """Severity attached to flags, dependencies and insights."""

    HIGH = "high"
    MEDIUM = "medium"
    SUCCESS = "success"  # Insights only


class FlagType(str, Enum):
    """Heuristic problem flags, in the order they are evaluated."""

    LOW_SUCCESS = "low_success"
    MODERATE_SUCCESS = "moderate_success"
    TIME_VS_SUCCESS = "time_vs_success"
    QUICK_WRONG = "quick_wrong"
    COMMON_WRONG_ANSWER = "common_wrong_answer"


class MasteryLevel(str, Enum):
    """Bucketed concept mastery."""

    MASTERED = "mastered"
    PROFICIENT = "proficient"
    DEVELOPING = "developing"
    NEEDS_WORK = "needs-work"

    @classmethod
    def from_rate(
        cls, rate: float, thresholds: AnalyticsThresholds | None = None
    ) -> MasteryLevel:
        """
        Convert a 0-100 mastery rate to a level.

        Args:
            rate: Mastery rate percentage
            thresholds: Band boundaries (defaults 80/60/40)

        Returns:
            Corresponding MasteryLevel
        """
        thresholds = thresholds or AnalyticsThresholds()
        if rate >= thresholds.mastered_rate:
            return cls.MASTERED
        elif rate >= thresholds.proficient_rate:
            return cls.PROFICIENT
        elif rate >= thresholds.developing_rate:
            return cls.DEVELOPING
        else:
            return cls.NEEDS_WORK

    @property
    def color(self) -> str:
        """Rich color for CLI display."""
        return {
            MasteryLevel.MASTERED: "green",
            MasteryLevel.PROFICIENT: "cyan",
            MasteryLevel.DEVELOPING: "yellow",
            MasteryLevel.NEEDS_WORK: "red",
        }[self]


class TrendDirection(str, Enum):
    """Direction of the overall success-rate change across sessions."""

    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


class InsightType(str, Enum):
    """Kinds of concept insight."""

    FOCUS_AREAS = "focus-areas"
    STRENGTHS = "strengths"
    DEPENDENCY = "dependency"


# =============================================================================
# INPUT MODELS
# =============================================================================


@dataclass
class PlayerAnswer:
    """One player's answer to one question."""

    answer: Any = None  # scalar, string, or list of those
    is_correct: bool = False
    time_ms: float = 0.0
    points: float = 0.0

    @property
    def time_seconds(self) -> float:
        return self.time_ms / 1000

    @classmethod
    def from_dict(cls, data: Any) -> PlayerAnswer | None:
        """Build from a saved answer slot; None when the slot is empty or not an object."""
        if not isinstance(data, Mapping):
            return None
        return cls(
            answer=data.get("answer"),
            is_correct=bool(data.get("isCorrect")),
            time_ms=to_number(data.get("timeMs")),
            points=to_number(data.get("points")),
        )


@dataclass
class PlayerResult:
    """A player's row: positional answers plus optional per-question scores."""

    name: str | None = None
    score: float = 0.0
    completed_at: Any = None
    answers: list[PlayerAnswer | None] = field(default_factory=list)
    scores: list[float] | None = None

    def answer_at(self, index: int) -> PlayerAnswer | None:
        """Answer for a question index, None when absent."""
        if 0 <= index < len(self.answers):
            return self.answers[index]
        return None

    def score_at(self, index: int) -> float:
        """Points recorded for a question index (reconstruction only)."""
        if self.scores is not None and 0 <= index < len(self.scores):
            return self.scores[index]
        return 0.0

    @classmethod
    def from_dict(cls, data: Any) -> PlayerResult:
        if not isinstance(data, Mapping):
            return cls()
        raw_answers = get_list(data, "answers") or []
        raw_scores = get_list(data, "scores")
        name = data.get("name")
        return cls(
            name=str(name) if name is not None else None,
            score=to_number(data.get("score")),
            completed_at=data.get("completedAt"),
            answers=[PlayerAnswer.from_dict(item) for item in raw_answers],
            scores=[to_number(item) for item in raw_scores] if raw_scores is not None else None,
        )


@dataclass
class Question:
    """Question metadata as saved with a session (or reconstructed)."""

    text: str = ""
    type: str = DEFAULT_QUESTION_TYPE
    difficulty: str = DEFAULT_DIFFICULTY
    correct_answer: Any = None
    concepts: list[str] = field(default_factory=list)
    reconstructed: bool = False

    @classmethod
    def from_dict(cls, data: Any) -> Question:
        if not isinstance(data, Mapping):
            return cls()
        text = data.get("text") or data.get("question") or ""
        concepts = get_list(data, "concepts") or []
        return cls(
            text=str(text),
            type=str(data.get("type") or DEFAULT_QUESTION_TYPE),
            difficulty=str(data.get("difficulty") or DEFAULT_DIFFICULTY),
            correct_answer=data.get("correctAnswer"),
            concepts=list(dict.fromkeys(c for c in concepts if isinstance(c, str) and c)),
            reconstructed=bool(data.get("reconstructed", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "text": self.text,
            "type": self.type,
            "difficulty": self.difficulty,
            "correctAnswer": self.correct_answer,
        }
        if self.concepts:
            out["concepts"] = list(self.concepts)
        if self.reconstructed:
            out["reconstructed"] = True
        return out


@dataclass
class SessionRecord:
    """
    One saved run of a quiz.

    `questions` is None when the file carried neither `questions` nor the
    `questionMetadata` alias, and `results` is None when it is missing or not
    a list. Unknown fields are ignored.
    """

    filename: str | None = None
    quiz_title: str | None = None
    game_pin: str | None = None
    saved: Any = None
    questions: list[Question] | None = None
    results: list[PlayerResult] | None = None

    @property
    def players(self) -> list[PlayerResult]:
        return self.results or []

    @property
    def participant_count(self) -> int:
        return len(self.players)

    @property
    def has_answers(self) -> bool:
        """True when at least one player answered at least one question."""
        return any(player.answers for player in self.players)

    @classmethod
    def from_dict(cls, data: Any) -> SessionRecord:
        if not isinstance(data, Mapping):
            return cls()
        raw_questions = get_list(data, "questions")
        if raw_questions is None:
            raw_questions = get_list(data, "questionMetadata")
        raw_results = get_list(data, "results")
        game_pin = data.get("gamePin")
        return cls(
            filename=data.get("filename"),
            quiz_title=data.get("quizTitle"),
            game_pin=str(game_pin) if game_pin is not None else None,
            saved=data.get("saved"),
            questions=(
                [Question.from_dict(q) for q in raw_questions] if raw_questions is not None else None
            ),
            results=(
                [PlayerResult.from_dict(p) for p in raw_results] if raw_results is not None else None
            ),
        )


def ensure_record(record: SessionRecord | Mapping[str, Any] | Any) -> SessionRecord:
    """Accept either a parsed record or a raw JSON document."""
    if isinstance(record, SessionRecord):
        return record
    return SessionRecord.from_dict(record)


# =============================================================================
# QUESTION ANALYSIS
# =============================================================================


@dataclass
class ProblemFlag:
    """A heuristic problem flag raised on a question."""

    type: FlagType
    severity: Severity
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"type": self.type.value, "severity": self.severity.value, "message": self.message}


@dataclass
class StrugglingPlayer:
    """A player who answered a question incorrectly."""

    name: str | None
    answer: Any
    time: float  # seconds
    points: float

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "answer": self.answer, "time": self.time, "points": self.points}


@dataclass
class QuestionAnalysis:
    """Per-question rollup with heuristic problem flags."""

    question_number: int
    text: str = ""
    type: str = DEFAULT_QUESTION_TYPE
    difficulty: str = DEFAULT_DIFFICULTY
    correct_answer: Any = None

    # Performance metrics
    total_responses: int = 0
    correct_responses: int = 0
    total_time: float = 0.0  # seconds
    average_time: float = 0.0
    total_points: float = 0.0
    average_points: float = 0.0

    # Analysis metrics
    success_rate: float = 0.0
    # No consumer reads this yet; kept for renderers and exports.
    time_efficiency: float = 0.0
    struggling_players: list[StrugglingPlayer] = field(default_factory=list)
    common_wrong_answers: dict[str, int] = field(default_factory=dict)

    # Flags
    is_potentially_problematic: bool = False
    problem_flags: list[ProblemFlag] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "questionNumber": self.question_number,
            "text": self.text,
            "type": self.type,
            "difficulty": self.difficulty,
            "correctAnswer": self.correct_answer,
            "totalResponses": self.total_responses,
            "correctResponses": self.correct_responses,
            "totalTime": self.total_time,
            "averageTime": self.average_time,
            "totalPoints": self.total_points,
            "averagePoints": self.average_points,
            "successRate": self.success_rate,
            "timeEfficiency": self.time_efficiency,
            "strugglingPlayers": [p.to_dict() for p in self.struggling_players],
            "commonWrongAnswers": dict(self.common_wrong_answers),
            "isPotentiallyProblematic": self.is_potentially_problematic,
            "problemFlags": [f.to_dict() for f in self.problem_flags],
        }


# =============================================================================
# QUIZ SUMMARY
# =============================================================================


@dataclass
class QuestionHighlight:
    """Reference to the hardest or easiest question."""

    number: int
    text: str
    success_rate: float

    def to_dict(self) -> dict[str, Any]:
        return {"number": self.number, "text": self.text, "successRate": self.success_rate}


@dataclass
class QuizSummary:
    """Whole-quiz aggregates over the question analyses."""

    total_questions: int
    problematic_count: int
    avg_success_rate: float
    avg_time: float
    hardest_question: QuestionHighlight
    easiest_question: QuestionHighlight
    needs_review: bool

    @property
    def problematic_ratio(self) -> float:
        return self.problematic_count / self.total_questions if self.total_questions else 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalQuestions": self.total_questions,
            "problematicCount": self.problematic_count,
            "avgSuccessRate": self.avg_success_rate,
            "avgTime": self.avg_time,
            "hardestQuestion": self.hardest_question.to_dict(),
            "easiestQuestion": self.easiest_question.to_dict(),
            "needsReview": self.needs_review,
        }


# =============================================================================
# CONCEPT MASTERY
# =============================================================================


@dataclass
class ConceptStats:
    """Rollup of every question tagged with one concept."""

    name: str
    question_count: int = 0
    total_responses: int = 0
    correct_responses: int = 0
    total_time: float = 0.0
    question_indices: list[int] = field(default_factory=list)
    mastery_rate: float = 0.0
    average_time: float = 0.0
    mastery_level: MasteryLevel = MasteryLevel.NEEDS_WORK

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "questionCount": self.question_count,
            "totalResponses": self.total_responses,
            "correctResponses": self.correct_responses,
            "totalTime": self.total_time,
            "questionIndices": list(self.question_indices),
            "masteryRate": self.mastery_rate,
            "averageTime": self.average_time,
            "masteryLevel": self.mastery_level.value,
        }


@dataclass
class ConceptMastery:
    """Per-concept rollup, keyed by concept name in discovery order."""

    concepts: dict[str, ConceptStats] = field(default_factory=dict)

    @property
    def has_concepts(self) -> bool:
        return bool(self.concepts)

    def to_dict(self) -> dict[str, Any]:
        return {
            "concepts": {name: stats.to_dict() for name, stats in self.concepts.items()},
            "hasConcepts": self.has_concepts,
        }


@dataclass
class ConceptDependency:
    """Co-occurrence signal that weakness in one concept travels with another."""

    foundational: str
    dependent: str
    confidence: str  # "0".."100"
    severity: Severity
    message: str

    def to_dict(self) -> dict[str, str]:
        return {
            "foundational": self.foundational,
            "dependent": self.dependent,
            "confidence": self.confidence,
            "severity": self.severity.value,
            "message": self.message,
        }


@dataclass
class ConceptInsight:
    """Instructor-facing recommendation derived from concept mastery."""

    type: InsightType
    severity: Severity
    title: str
    message: str
    concepts: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "severity": self.severity.value,
            "title": self.title,
            "message": self.message,
            "concepts": list(self.concepts),
        }


# =============================================================================
# SESSION COMPARISON
# =============================================================================


@dataclass
class SessionSummary:
    """One session packed for comparison."""

    date: Any
    filename: str | None
    participant_count: int
    question_analytics: list[QuestionAnalysis]
    summary: QuizSummary | None
    overall_success_rate: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "filename": self.filename,
            "participantCount": self.participant_count,
            "questionAnalytics": [q.to_dict() for q in self.question_analytics],
            "summary": self.summary.to_dict() if self.summary else {},
            "overallSuccessRate": self.overall_success_rate,
        }


@dataclass
class QuestionTrend:
    """Success-rate change of one question between first and last session."""

    question_number: int
    first_rate: float
    last_rate: float
    trend: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "questionNumber": self.question_number,
            "firstRate": self.first_rate,
            "lastRate": self.last_rate,
            "trend": self.trend,
        }


@dataclass
class ComparisonReport:
    """Cross-session comparison of several runs of the same quiz."""

    sessions: list[SessionSummary]
    overall_trend: float
    trend_direction: TrendDirection
    question_trends: list[QuestionTrend]
    most_improved: QuestionTrend | None
    most_declined: QuestionTrend | None
    average_participants: int

    @property
    def session_count(self) -> int:
        return len(self.sessions)

    def to_dict(self) -> dict[str, Any]:
        return {
            "sessions": [s.to_dict() for s in self.sessions],
            "sessionCount": self.session_count,
            "overallTrend": self.overall_trend,
            "trendDirection": self.trend_direction.value,
            "questionTrends": [t.to_dict() for t in self.question_trends],
            "mostImproved": self.most_improved.to_dict() if self.most_improved else None,
            "mostDeclined": self.most_declined.to_dict() if self.most_declined else None,
            "averageParticipants": self.average_participants,
        }
