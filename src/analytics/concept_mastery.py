"""
Concept Mastery - per-concept rollup, dependency inference and insights.

Questions may carry concept tags. Each tagged question contributes its
responses to every concept it lists, which gives a mastery rate and level
per concept.

Dependency inference is a co-occurrence heuristic, not a causal model:
for each pair of concepts we look at players who have data for both and
count how often they are weak in both. When that happens often enough the
pair is reported, with the lower-mastery concept named "foundational".
That naming is a policy choice: the weaker concept is assumed to gate the
stronger one.

Rules for a pair (A, B):
- skip when both mastery rates >= 70% or both < 40%
- players with data for both >= 3
- both-weak (per-player performance < 0.5) share > 40%
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from itertools import combinations
from typing import Any

from loguru import logger

from config import AnalyticsThresholds
from src.analytics.models import (
    ConceptDependency,
    ConceptInsight,
    ConceptMastery,
    ConceptStats,
    InsightType,
    MasteryLevel,
    PlayerResult,
    SessionRecord,
    Severity,
    ensure_record,
)
from src.analytics.utils import round_half_up

# player index -> concept name -> share correct (None when no answers)
PerformanceMatrix = list[dict[str, float | None]]


def _tally_question(players: Sequence[PlayerResult], question_index: int) -> tuple[int, int, float]:
    """(correct, total, total_time_seconds) over every player's answer to one question."""
    correct = 0
    total = 0
    total_time = 0.0
    for player in players:
        answer = player.answer_at(question_index)
        if answer is None:
            continue
        total += 1
        total_time += answer.time_seconds
        if answer.is_correct:
            correct += 1
    return correct, total, total_time


def calculate_concept_mastery(
    record: SessionRecord | Mapping[str, Any],
    thresholds: AnalyticsThresholds | None = None,
) -> ConceptMastery:
    """
    Roll question results up to the concepts they are tagged with.

    Args:
        record: Parsed SessionRecord or raw JSON document
        thresholds: Mastery level bands (defaults when None)

    Returns:
        ConceptMastery keyed by concept name in discovery order
    """
    record = ensure_record(record)
    mastery = ConceptMastery()
    if not record.questions or not record.results:
        return mastery

    for index, question in enumerate(record.questions):
        if not question.concepts:
            continue

        correct, total, total_time = _tally_question(record.results, index)
        for concept in question.concepts:
            stats = mastery.concepts.setdefault(concept, ConceptStats(name=concept))
            stats.question_count += 1
            stats.question_indices.append(index)
            stats.correct_responses += correct
            stats.total_responses += total
            stats.total_time += total_time

    for stats in mastery.concepts.values():
        if stats.total_responses > 0:
            stats.mastery_rate = stats.correct_responses / stats.total_responses * 100
            stats.average_time = stats.total_time / stats.total_responses
        stats.mastery_level = MasteryLevel.from_rate(stats.mastery_rate, thresholds)

    return mastery


def build_performance_matrix(
    players: Sequence[PlayerResult],
    mastery: ConceptMastery,
) -> PerformanceMatrix:
    """
    Per-player share of correct answers for every concept.

    A value is None when the player answered none of that concept's questions.
    """
    matrix: PerformanceMatrix = []
    for player in players:
        row: dict[str, float | None] = {}
        for name, stats in mastery.concepts.items():
            answers = [
                answer
                for answer in (player.answer_at(i) for i in stats.question_indices)
                if answer is not None
            ]
            if answers:
                row[name] = sum(1 for a in answers if a.is_correct) / len(answers)
            else:
                row[name] = None
        matrix.append(row)
    return matrix


def detect_concept_dependencies(
    record: SessionRecord | Mapping[str, Any],
    mastery: ConceptMastery | None = None,
    thresholds: AnalyticsThresholds | None = None,
) -> list[ConceptDependency]:
    """
    Infer concept dependencies from co-occurring weakness.

    Args:
        record: Parsed SessionRecord or raw JSON document
        mastery: Precomputed concept mastery (computed when None)
        thresholds: Dependency thresholds (defaults when None)

    Returns:
        Dependencies in concept discovery order of the pair
    """
    t = thresholds or AnalyticsThresholds()
    record = ensure_record(record)
    if mastery is None:
        mastery = calculate_concept_mastery(record, t)

    if len(mastery.concepts) < 2 or not record.results:
        return []

    matrix = build_performance_matrix(record.results, mastery)
    dependencies: list[ConceptDependency] = []

    for concept_a, concept_b in combinations(mastery.concepts.values(), 2):
        rate_a = concept_a.mastery_rate
        rate_b = concept_b.mastery_rate

        # Nothing to learn when both are strong or both are weak
        if rate_a >= t.dependency_strong_rate and rate_b >= t.dependency_strong_rate:
            continue
        if rate_a < t.dependency_weak_rate and rate_b < t.dependency_weak_rate:
            continue

        both_weak = 0
        valid_pairs = 0
        for row in matrix:
            perf_a = row.get(concept_a.name)
            perf_b = row.get(concept_b.name)
            if perf_a is None or perf_b is None:
                continue
            valid_pairs += 1
            if perf_a < t.weak_performance and perf_b < t.weak_performance:
                both_weak += 1

        if valid_pairs < t.min_valid_pairs:
            continue
        ratio = both_weak / valid_pairs
        if ratio <= t.co_occurrence_ratio:
            continue

        if rate_b < rate_a:
            foundational, dependent = concept_b, concept_a
        else:
            foundational, dependent = concept_a, concept_b

        confidence = str(round_half_up(ratio * 100))
        severity = (
            Severity.HIGH
            if min(rate_a, rate_b) < t.dependency_high_severity_rate
            else Severity.MEDIUM
        )
        dependencies.append(
            ConceptDependency(
                foundational=foundational.name,
                dependent=dependent.name,
                confidence=confidence,
                severity=severity,
                message=(
                    f'{confidence}% of students weak in "{foundational.name}" also struggle '
                    f'with "{dependent.name}" - consider reviewing "{foundational.name}" first'
                ),
            )
        )
        logger.debug(
            f"Concept dependency {foundational.name} -> {dependent.name} "
            f"({both_weak}/{valid_pairs} both weak)"
        )

    return dependencies


def generate_concept_insights(
    mastery: ConceptMastery,
    dependencies: Sequence[ConceptDependency] = (),
    thresholds: AnalyticsThresholds | None = None,
) -> list[ConceptInsight]:
    """
    Turn concept mastery and dependencies into recommendations.

    Order: focus areas, strengths, then one item per dependency.
    """
    t = thresholds or AnalyticsThresholds()
    insights: list[ConceptInsight] = []

    focus = [c for c in mastery.concepts.values() if c.mastery_rate < t.focus_area_rate]
    if focus:
        critical = any(c.mastery_rate < t.critical_focus_rate for c in focus)
        insights.append(
            ConceptInsight(
                type=InsightType.FOCUS_AREAS,
                severity=Severity.HIGH if critical else Severity.MEDIUM,
                title="Focus Areas",
                message="Concepts needing attention: "
                + ", ".join(f"{c.name} ({c.mastery_rate:.0f}%)" for c in focus),
                concepts=[c.name for c in focus],
            )
        )

    strengths = [c for c in mastery.concepts.values() if c.mastery_rate >= t.strength_rate]
    if strengths:
        insights.append(
            ConceptInsight(
                type=InsightType.STRENGTHS,
                severity=Severity.SUCCESS,
                title="Strengths",
                message="Well-mastered concepts: "
                + ", ".join(f"{c.name} ({c.mastery_rate:.0f}%)" for c in strengths),
                concepts=[c.name for c in strengths],
            )
        )

    for dependency in dependencies:
        insights.append(
            ConceptInsight(
                type=InsightType.DEPENDENCY,
                severity=dependency.severity,
                title="Concept Dependency",
                message=dependency.message,
                concepts=[dependency.foundational, dependency.dependent],
            )
        )

    return insights
