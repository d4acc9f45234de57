import pytest

from quizbank.loader import process_questions


def make_raw_questions(choice_count=0, fill_count=0):
    """Build raw dataset entries: choice questions answer 'a', fill-ins answer 'Hà Nội'."""
    raw = []
    for i in range(1, choice_count + 1):
        raw.append({
            "id": i,
            "type": "multiple_choice_one_correct",
            "type_description": "Single correct choice",
            "question": f"Question {i}?",
            "options": [
                {"id": "a", "text": "A", "is_correct": True},
                {"id": "b", "text": "B", "is_correct": False},
                {"id": "c", "text": "C", "is_correct": False},
            ],
        })
    for i in range(choice_count + 1, choice_count + fill_count + 1):
        raw.append({
            "id": i,
            "type": "fill_in_blank",
            "type_description": "Fill in the blank",
            "question": f"Capital {i}?",
            "answer": "Hà Nội",
        })
    return raw


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_progress.db")
    return db_path


@pytest.fixture
def raw_bank():
    """A two-question document: one true/false, one fill-in-blank."""
    return {
        "meta": {
            "title": "Test Bank",
            "creator": "tests",
            "description": "Tiny bank",
            "total_questions": 2,
        },
        "questions": [
            {
                "id": 1,
                "type": "true_false",
                "type_description": "True / False",
                "question": "The sky is blue.",
                "options": [
                    {"id": "a", "text": "True", "is_correct": True},
                    {"id": "b", "text": "False", "is_correct": False},
                ],
                "explanation": "Rayleigh scattering.",
            },
            {
                "id": 2,
                "type": "fill_in_blank",
                "type_description": "Fill in the blank",
                "question": "The capital of Vietnam is ____.",
                "answer": "Hà Nội",
            },
        ],
    }


@pytest.fixture
def small_bank(raw_bank):
    return process_questions(raw_bank["questions"])


@pytest.fixture
def bank_50():
    return process_questions(make_raw_questions(choice_count=40, fill_count=10))
