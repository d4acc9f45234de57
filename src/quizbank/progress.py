"""Durable per-question study progress.

The snapshot mirrors the persisted document: four maps from question id to
seen/wrong/correct counts and starred flags. Update functions never modify a
snapshot in place; they return a new one. ``ProgressStore`` writes every new
snapshot through to SQLite before exposing it.
"""
import json
import logging
import sqlite3
from dataclasses import dataclass, field, replace
from pathlib import Path

from quizbank.db import init_db, read_value, write_value, delete_value
from quizbank.models import ProgressRecord

logger = logging.getLogger(__name__)

PROGRESS_KEY = "quizbank_progress_v2"
COUNT_SECTIONS = ("seen", "wrong", "correct")


@dataclass(frozen=True)
class Progress:
    seen: dict = field(default_factory=dict)
    wrong: dict = field(default_factory=dict)
    correct: dict = field(default_factory=dict)
    starred: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "seen": dict(self.seen),
            "wrong": dict(self.wrong),
            "correct": dict(self.correct),
            "starred": dict(self.starred),
        }


def empty_progress() -> Progress:
    return Progress()


def _clean_counts(section) -> dict:
    if not isinstance(section, dict):
        return {}
    return {
        str(k): v for k, v in section.items()
        if isinstance(v, int) and not isinstance(v, bool) and v >= 0
    }


def _clean_flags(section) -> dict:
    if not isinstance(section, dict):
        return {}
    return {str(k): v for k, v in section.items() if isinstance(v, bool)}


def progress_from_dict(data) -> Progress:
    """Build a snapshot from a decoded document, dropping malformed entries."""
    if not isinstance(data, dict):
        raise ValueError("progress document is not an object")
    return Progress(
        seen=_clean_counts(data.get("seen")),
        wrong=_clean_counts(data.get("wrong")),
        correct=_clean_counts(data.get("correct")),
        starred=_clean_flags(data.get("starred")),
    )


def record(progress: Progress, question_id: str) -> ProgressRecord:
    return ProgressRecord(
        seen=progress.seen.get(question_id, 0),
        correct=progress.correct.get(question_id, 0),
        wrong=progress.wrong.get(question_id, 0),
        starred=progress.starred.get(question_id, False),
    )


def is_weak(progress: Progress, question_id: str) -> bool:
    """Missed more often than answered correctly."""
    return progress.wrong.get(question_id, 0) > progress.correct.get(question_id, 0)


def _bump(counts: dict, question_id: str) -> dict:
    return {**counts, question_id: counts.get(question_id, 0) + 1}


def record_answer(progress: Progress, question_id: str, correct: bool) -> Progress:
    """One graded submission: seen +1, then correct or wrong +1."""
    if correct:
        return replace(
            progress,
            seen=_bump(progress.seen, question_id),
            correct=_bump(progress.correct, question_id),
        )
    return replace(
        progress,
        seen=_bump(progress.seen, question_id),
        wrong=_bump(progress.wrong, question_id),
    )


def toggle_star(progress: Progress, question_id: str) -> Progress:
    flipped = not progress.starred.get(question_id, False)
    return replace(progress, starred={**progress.starred, question_id: flipped})


class ProgressStore:
    """Process-wide progress snapshot persisted after every mutation."""

    def __init__(self, db_path: str, progress: Progress = None):
        self.db_path = db_path
        self._progress = progress if progress is not None else empty_progress()

    @property
    def progress(self) -> Progress:
        return self._progress

    @classmethod
    def load(cls, db_path: str) -> "ProgressStore":
        """Read the persisted snapshot. Missing or corrupt data yields an empty store."""
        return cls(db_path, _read_progress(db_path))

    def record(self, question_id: str) -> ProgressRecord:
        return record(self._progress, question_id)

    def mutate(self, fn) -> Progress:
        """Apply ``fn(snapshot) -> snapshot``, persist the result, then expose it."""
        updated = fn(self._progress)
        _write_progress(self.db_path, updated)
        self._progress = updated
        return updated

    def wipe(self) -> None:
        init_db(self.db_path)
        delete_value(self.db_path, PROGRESS_KEY)
        self._progress = empty_progress()
        logger.info("Progress wiped")


def _read_progress(db_path: str) -> Progress:
    if not Path(db_path).exists():
        return empty_progress()
    try:
        init_db(db_path)
        raw = read_value(db_path, PROGRESS_KEY)
    except sqlite3.DatabaseError as e:
        moved = _move_aside(db_path)
        logger.warning("Progress database %s unreadable (%s), moved to %s; starting fresh", db_path, e, moved)
        return empty_progress()
    if raw is None:
        return empty_progress()
    try:
        return progress_from_dict(json.loads(raw))
    except ValueError as e:
        logger.warning("Discarding corrupt progress data: %s", e)
        return empty_progress()


def _move_aside(db_path: str) -> str:
    """Rename an unreadable database so a fresh one can be created in its place."""
    path = Path(db_path)
    target = path.with_name(path.name + ".corrupt")
    path.replace(target)
    return str(target)


def _write_progress(db_path: str, progress: Progress) -> None:
    init_db(db_path)
    write_value(db_path, PROGRESS_KEY, json.dumps(progress.to_dict(), ensure_ascii=False))
