"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import pytest
import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


def answer(value, correct, time_ms=5000, points=None):
    """Build one saved answer slot."""
    slot = {"answer": value, "isCorrect": correct, "timeMs": time_ms}
    slot["points"] = points if points is not None else (100 if correct else 0)
    return slot


def outcomes_to_results(outcomes, time_ms=5000):
    """
    Build player rows from a grid of outcomes.

    outcomes[player][question] is True/False (or None for no answer).
    """
    results = []
    for p, row in enumerate(outcomes):
        answers = [
            None if ok is None else answer("A" if ok else "B", ok, time_ms)
            for ok in row
        ]
        results.append({"name": f"Player {p + 1}", "score": 0, "answers": answers})
    return results


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def make_answer():
    """Factory for saved answer slots."""
    return answer


@pytest.fixture
def make_results():
    """Factory turning an outcome grid into player rows."""
    return outcomes_to_results


@pytest.fixture
def basic_record():
    """One question, four players: correct, wrong, correct, wrong."""
    return {
        "filename": "results_123456_1700000000000.json",
        "quizTitle": "Fractions Warm-up",
        "gamePin": "123456",
        "saved": "2024-03-01T10:00:00.000Z",
        "questions": [
            {"text": "What is 1/2 + 1/4?", "type": "multiple-choice", "correctAnswer": "3/4"},
        ],
        "results": [
            {"name": "Ana", "score": 100, "answers": [answer("3/4", True, 4000)]},
            {"name": "Ben", "score": 0, "answers": [answer("2/6", False, 12000)]},
            {"name": "Cai", "score": 100, "answers": [answer("3/4", True, 6000)]},
            {"name": "Dee", "score": 0, "answers": [answer("1/3", False, 20000)]},
        ],
    }


@pytest.fixture
def concept_record():
    """
    Three questions tagged algebra / algebra+geometry / geometry.

    Players 1-3 miss everything, player 4 gets everything, player 5 misses
    only the first question. Algebra mastery 30%, geometry 40%.
    """
    outcomes = [
        [False, False, False],
        [False, False, False],
        [False, False, False],
        [True, True, True],
        [False, True, True],
    ]
    return {
        "filename": "results_222222_1700000000000.json",
        "quizTitle": "Shapes and Equations",
        "gamePin": "222222",
        "saved": "2024-03-02T10:00:00.000Z",
        "questions": [
            {"text": "Solve 2x = 6", "concepts": ["algebra"]},
            {"text": "Area of a 2x by 3 rectangle", "concepts": ["algebra", "geometry"]},
            {"text": "Sum of angles in a triangle", "concepts": ["geometry"]},
        ],
        "results": outcomes_to_results(outcomes),
    }
