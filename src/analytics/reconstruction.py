"""
Question reconstruction for saved results without question metadata.

Older result files only carry player answers. This module rebuilds a
placeholder question list from answer positions so the rest of the
analytics still has something to work on:

- one question per answer slot of the first player
- correct answer inferred from which answer earned points
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from loguru import logger

from src.analytics.models import PlayerResult, Question
from src.analytics.utils import stringify_answer

UNKNOWN_ANSWER = "Unknown"


@dataclass
class _AnswerStats:
    value: Any
    count: int = 0
    total_score: float = 0.0

    @property
    def average_score(self) -> float:
        return self.total_score / self.count if self.count else 0.0


def _coerce_results(results: Any) -> list[PlayerResult]:
    if not isinstance(results, Sequence) or isinstance(results, (str, bytes)):
        logger.warning(f"Cannot reconstruct questions from {type(results).__name__} results")
        return []
    return [
        player if isinstance(player, PlayerResult) else PlayerResult.from_dict(player)
        for player in results
    ]


def infer_correct_answer(results: Sequence[PlayerResult], question_index: int) -> Any:
    """
    Infer the correct answer by looking at which answers received points.

    The first answer (in player order) that scored above zero wins. Otherwise
    the answer with the highest positive average score is used, and when no
    answer earned anything the "Unknown" sentinel is returned.

    Args:
        results: Player rows with per-question `scores`
        question_index: Zero-based question position

    Returns:
        The inferred answer value, or "Unknown"
    """
    answer_stats: dict[str, _AnswerStats] = {}

    for player in results:
        slot = player.answer_at(question_index)
        if slot is None:
            continue

        score = player.score_at(question_index)
        stats = answer_stats.setdefault(stringify_answer(slot.answer), _AnswerStats(slot.answer))
        stats.count += 1
        stats.total_score += score

        if score > 0:
            return slot.answer

    best: _AnswerStats | None = None
    for stats in answer_stats.values():
        if stats.average_score > (best.average_score if best else 0):
            best = stats

    return best.value if best else UNKNOWN_ANSWER


def reconstruct_questions_from_results(results: Any) -> list[Question]:
    """
    Rebuild placeholder questions from player answer arrays.

    The number of questions is taken from the first player's answers.
    Malformed input yields an empty list.

    Args:
        results: Player rows (PlayerResult objects or raw JSON dicts)

    Returns:
        Reconstructed questions, flagged with `reconstructed=True`
    """
    players = _coerce_results(results)
    if not players:
        return []

    question_count = len(players[0].answers)
    questions = [
        Question(
            text=f"Question {index + 1}",
            type="multiple-choice",
            difficulty="unknown",
            correct_answer=infer_correct_answer(players, index),
            reconstructed=True,
        )
        for index in range(question_count)
    ]

    logger.debug(f"Reconstructed {len(questions)} questions from {len(players)} player rows")
    return questions
