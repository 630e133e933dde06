"""
Results filtering, sorting and scoring helpers for saved session lists.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, TypeVar

from src.analytics.models import SessionRecord, ensure_record
from src.analytics.utils import parse_timestamp, round_half_up

__all__ = [
    "SORT_KEYS",
    "calculate_average_score",
    "filter_and_sort_results",
    "filter_by_search",
    "get_score_class",
    "get_success_rate_class",
    "parse_timestamp",
    "sort_results",
]

RecordT = TypeVar("RecordT", SessionRecord, Mapping[str, Any])

SORT_KEYS = ("date-desc", "date-asc", "title-asc", "participants-desc")


def calculate_average_score(record: SessionRecord | Mapping[str, Any]) -> int:
    """
    Average score of a session as a 0-100 percentage of correct answers.

    Uses correct answers rather than raw points so difficulty multipliers
    and time bonuses do not inflate it.
    """
    record = ensure_record(record)
    total_correct = 0
    total_answers = 0
    for player in record.players:
        total_answers += len(player.answers)
        total_correct += sum(1 for a in player.answers if a is not None and a.is_correct)
    if total_answers == 0:
        return 0
    return round_half_up(total_correct / total_answers * 100)


def get_score_class(percentage: float) -> str:
    """CSS class for a score percentage."""
    if percentage >= 90:
        return "score-excellent"
    if percentage >= 75:
        return "score-good"
    if percentage >= 60:
        return "score-average"
    return "score-poor"


def get_success_rate_class(rate: float) -> str:
    """CSS class (and CLI color key) for a question success rate."""
    if rate >= 80:
        return "excellent"
    if rate >= 60:
        return "good"
    if rate >= 40:
        return "fair"
    return "poor"


def filter_by_search(records: Sequence[RecordT], search_term: str | None) -> list[RecordT]:
    """Keep records whose quiz title or game PIN contains the search term."""
    if not search_term:
        return list(records)

    term = search_term.lower()
    matched = []
    for item in records:
        record = ensure_record(item)
        if (record.quiz_title and term in record.quiz_title.lower()) or (
            record.game_pin and term in record.game_pin
        ):
            matched.append(item)
    return matched


def sort_results(records: Sequence[RecordT], sort_by: str | None) -> list[RecordT]:
    """
    Sort saved sessions.

    Supported keys: date-desc, date-asc, title-asc, participants-desc.
    Unknown keys keep the input order. Returns a new list.
    """
    items = list(records)
    if sort_by == "date-desc":
        items.sort(key=lambda r: parse_timestamp(ensure_record(r).saved), reverse=True)
    elif sort_by == "date-asc":
        items.sort(key=lambda r: parse_timestamp(ensure_record(r).saved))
    elif sort_by == "title-asc":
        items.sort(key=lambda r: (ensure_record(r).quiz_title or "").casefold())
    elif sort_by == "participants-desc":
        items.sort(key=lambda r: ensure_record(r).participant_count, reverse=True)
    return items


def filter_and_sort_results(
    records: Sequence[RecordT],
    search_term: str | None,
    sort_by: str | None,
) -> list[RecordT]:
    """Apply the search filter, then the sort."""
    return sort_results(filter_by_search(records, search_term), sort_by)
