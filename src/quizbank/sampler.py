"""Derive the working set of questions from the bank and the active filters."""
import logging
import random

from quizbank.models import FilterConfig, MODE_RANDOM20, MODE_WRONG_ONLY, TYPE_ALL
from quizbank.progress import Progress, is_weak

logger = logging.getLogger(__name__)

RANDOM_SAMPLE_SIZE = 20


def build_working_set(
    questions,
    filters: FilterConfig,
    progress: Progress = None,
    rng=None,
) -> list:
    """Filter, optionally shuffle, and truncate the question list.

    Args:
        questions: Full bank in source order. Never modified.
        filters: Active type filter, mode and shuffle flag.
        progress: Progress snapshot, only consulted for wrong-only mode.
        rng: Object with a ``shuffle(list)`` method. Defaults to ``random``.

    Returns:
        A new list of questions.
    """
    working = list(questions)

    if filters.type_filter != TYPE_ALL:
        working = [q for q in working if q.kind == filters.type_filter]

    if filters.mode == MODE_WRONG_ONLY:
        snapshot = progress if progress is not None else Progress()
        working = [q for q in working if is_weak(snapshot, q.id)]

    if filters.shuffle:
        (rng or random).shuffle(working)

    if filters.mode == MODE_RANDOM20:
        working = working[:RANDOM_SAMPLE_SIZE]

    logger.debug(
        "Working set rebuilt: type=%s mode=%s shuffle=%s -> %d questions",
        filters.type_filter, filters.mode, filters.shuffle, len(working),
    )
    return working


def count_by_kind(questions) -> dict:
    counts = {}
    for q in questions:
        counts[q.kind] = counts.get(q.kind, 0) + 1
    return counts
