"""
Unit tests for loading saved session files.
"""

import json

import pytest

from src.cli.results_loader import (
    ResultsFileError,
    get_saved_result,
    list_session_records,
    load_session_record,
    validate_filename,
)


def _write(directory, name, data):
    path = directory / name
    path.write_text(data if isinstance(data, str) else json.dumps(data), encoding="utf-8")
    return path


@pytest.mark.parametrize(
    "filename, valid",
    [
        ("results_123456_1700000000000.json", True),
        ("results_1_2.json", True),
        ("results_abc_123.json", False),
        ("../results_1_2.json", False),
        ("results_1_2.json.bak", False),
        ("", False),
        (None, False),
    ],
)
def test_validate_filename(filename, valid):
    assert validate_filename(filename) is valid


class TestLoadSessionRecord:
    def test_loads_and_fills_filename(self, tmp_path, basic_record):
        del basic_record["filename"]
        path = _write(tmp_path, "results_1_2.json", basic_record)

        data = load_session_record(path)

        assert data["filename"] == "results_1_2.json"
        assert data["quizTitle"] == "Fractions Warm-up"

    def test_keeps_existing_filename(self, tmp_path, basic_record):
        path = _write(tmp_path, "copy.json", basic_record)

        assert load_session_record(path)["filename"] == basic_record["filename"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(ResultsFileError, match="not found"):
            load_session_record(tmp_path / "results_1_2.json")

    def test_invalid_json(self, tmp_path):
        path = _write(tmp_path, "results_1_2.json", "{not json")

        with pytest.raises(ResultsFileError, match="invalid JSON"):
            load_session_record(path)

    def test_not_an_object(self, tmp_path):
        path = _write(tmp_path, "results_1_2.json", [1, 2, 3])

        with pytest.raises(ResultsFileError, match="JSON object"):
            load_session_record(path)


class TestGetSavedResult:
    def test_loads_by_name(self, tmp_path, basic_record):
        _write(tmp_path, basic_record["filename"], basic_record)

        data = get_saved_result(tmp_path, basic_record["filename"])

        assert data["gamePin"] == "123456"

    def test_rejects_bad_names(self, tmp_path):
        with pytest.raises(ResultsFileError, match="Invalid filename"):
            get_saved_result(tmp_path, "../../etc/passwd")


class TestListSessionRecords:
    def test_newest_first_and_skips_broken(self, tmp_path):
        _write(tmp_path, "results_1_1.json", {"quizTitle": "Old", "saved": "2024-01-01T00:00:00Z"})
        _write(tmp_path, "results_2_2.json", {"quizTitle": "New", "saved": "2024-06-01T00:00:00Z"})
        _write(tmp_path, "results_3_3.json", "garbage")
        _write(tmp_path, "notes.json", {"quizTitle": "Ignored"})

        records = list_session_records(tmp_path)

        assert [r["quizTitle"] for r in records] == ["New", "Old"]
        assert records[0]["filename"] == "results_2_2.json"

    def test_missing_saved_uses_mtime(self, tmp_path):
        _write(tmp_path, "results_1_1.json", {"quizTitle": "Undated"})

        [record] = list_session_records(tmp_path)

        assert record["saved"]

    def test_missing_directory(self, tmp_path):
        assert list_session_records(tmp_path / "nope") == []
