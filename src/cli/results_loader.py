"""
Results Loader: reading saved quiz session files for the CLI.

Saved sessions are JSON documents named results_<pin>_<millis>.json.
This is the only place that touches the filesystem; the analytics engine
works on the loaded documents.
"""

from __future__ import annotations

import json
import re
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from loguru import logger

from src.analytics.results_filter import sort_results

RESULTS_FILENAME_RE = re.compile(r"^results_\d+_\d+\.json$")


class ResultsFileError(Exception):
    """Raised when a saved results file cannot be used."""
    pass


def validate_filename(filename: str | None) -> bool:
    """Check a saved results filename (results_<pin>_<millis>.json)."""
    return bool(filename) and RESULTS_FILENAME_RE.match(filename) is not None


def load_session_record(path: Path | str) -> dict[str, Any]:
    """
    Load one saved session document.

    Args:
        path: JSON file to read

    Returns:
        The parsed document, with `filename` filled from the path when absent

    Raises:
        ResultsFileError: Missing file, invalid JSON, or not a JSON object
    """
    path = Path(path)
    if not path.is_file():
        raise ResultsFileError(f"Result file not found: {path}")

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.error(f"Failed to parse result file {path.name}: {e}")
        raise ResultsFileError(f"Result file is corrupted or invalid JSON: {path}") from e

    if not isinstance(data, dict):
        raise ResultsFileError(f"Result file does not contain a JSON object: {path}")

    data.setdefault("filename", path.name)
    logger.debug(f"Loaded {path.name} ({len(data.get('results') or [])} players)")
    return data


def get_saved_result(results_dir: Path | str, filename: str) -> dict[str, Any]:
    """
    Load a saved session by filename from the results directory.

    Raises:
        ResultsFileError: Invalid filename format, or the file cannot be loaded
    """
    if not validate_filename(filename):
        raise ResultsFileError(f"Invalid filename format: {filename}")
    return load_session_record(Path(results_dir) / filename)


def list_session_records(
    results_dir: Path | str,
    pattern: str = "results_*.json",
) -> list[dict[str, Any]]:
    """
    Load every saved session in a directory, newest first.

    Unreadable files are logged and skipped. Sessions without a `saved`
    timestamp get the file modification time.
    """
    results_dir = Path(results_dir)
    logger.info(f"Listing results in {results_dir}")

    if not results_dir.is_dir():
        logger.info("Results directory does not exist")
        return []

    records = []
    for path in sorted(results_dir.glob(pattern)):
        try:
            data = load_session_record(path)
        except ResultsFileError as e:
            logger.error(f"Error reading result file {path.name}: {e}")
            continue
        if not data.get("saved"):
            mtime = datetime.fromtimestamp(path.stat().st_mtime, tz=UTC)
            data["saved"] = mtime.isoformat()
        records.append(data)

    records = sort_results(records, "date-desc")
    logger.info(f"Found {len(records)} result files")
    return records
