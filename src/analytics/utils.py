"""
Shared helpers for the analytics engine.

Small coercions used by every analyzer: lenient number
parsing, answer stringification, half-up rounding and timestamp parsing.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from typing import Any

from dateutil import parser as date_parser

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def to_number(value: Any) -> float:
    """
    Coerce a JSON value to a finite float.

    Missing, boolean, non-numeric and non-finite values become 0.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    number = float(value)
    if not math.isfinite(number):
        return 0.0
    return number


def format_scalar(value: Any) -> str:
    """String form of a scalar answer, matching how saved records display it."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def stringify_answer(answer: Any) -> str:
    """
    Key used to group wrong answers.

    List answers are joined with ", " and None elements render as empty
    strings; anything else uses its string form.
    """
    if isinstance(answer, Sequence) and not isinstance(answer, (str, bytes)):
        return ", ".join("" if item is None else format_scalar(item) for item in answer)
    return format_scalar(answer)


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up."""
    return int(math.floor(value + 0.5))


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean, 0 for an empty sequence."""
    if not values:
        return 0.0
    return sum(values) / len(values)


def parse_timestamp(value: Any) -> datetime:
    """
    Parse a saved-record timestamp into an aware UTC datetime.

    Accepts datetimes, epoch milliseconds, ISO-8601 strings and any other
    date string dateutil understands ("2024/05/01 10:00", "March 1, 2024").
    Naive values are taken as UTC. Missing or unparseable values map to the
    Unix epoch so they sort first.
    """
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value / 1000, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return EPOCH
    if not isinstance(value, str) or not value.strip():
        return EPOCH

    text = value.strip()
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        try:
            parsed = date_parser.parse(text)
        except (ValueError, OverflowError):
            return EPOCH
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def get_list(data: Mapping[str, Any], key: str) -> list[Any] | None:
    """Return data[key] when it is a list, else None."""
    value = data.get(key)
    return value if isinstance(value, list) else None
