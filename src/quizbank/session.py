"""Study session state machine.

A session walks through the working set one question at a time. Each
position is either being answered or has been revealed (graded). The
transition functions below are pure: they take a ``SessionState`` and return
a new one. ``QuizSession`` ties them to the bank, the filters and the
progress store.
"""
import logging
from dataclasses import dataclass, replace

from quizbank.models import FilterConfig, GRADE_CORRECT, GRADE_INCORRECT
from quizbank.normalize import answers_match
from quizbank.progress import ProgressStore, record_answer, toggle_star
from quizbank.sampler import build_working_set

logger = logging.getLogger(__name__)

EMPTY = "empty"
ANSWERING = "answering"
REVEALED = "revealed"


@dataclass(frozen=True)
class SessionState:
    position: int | None = None
    answer: int | str | None = None
    revealed: bool = False
    result: str | None = None

    @property
    def status(self) -> str:
        if self.position is None:
            return EMPTY
        return REVEALED if self.revealed else ANSWERING


def start_state(working_set) -> SessionState:
    return SessionState(position=0 if working_set else None)


def move_to(position: int) -> SessionState:
    """Fresh per-question state; nothing carries over from the previous position."""
    return SessionState(position=position)


def set_answer(state: SessionState, answer) -> SessionState:
    if state.status != ANSWERING:
        return state
    return replace(state, answer=answer)


def is_valid_answer(question, answer) -> bool:
    if question.is_choice:
        return (
            isinstance(answer, int)
            and not isinstance(answer, bool)
            and 0 <= answer < len(question.options)
        )
    return isinstance(answer, str) and bool(answer.strip())


def grade(question, answer) -> bool:
    if question.is_choice:
        return answer == question.correct_index
    return answers_match(answer, question.correct_answer)


def reveal(state: SessionState, answer, correct: bool) -> SessionState:
    return replace(
        state,
        answer=answer,
        revealed=True,
        result=GRADE_CORRECT if correct else GRADE_INCORRECT,
    )


def advance(state: SessionState, total: int) -> SessionState:
    if state.status != REVEALED or state.position >= total - 1:
        return state
    return move_to(state.position + 1)


def retreat(state: SessionState) -> SessionState:
    if state.status == EMPTY or state.position == 0:
        return state
    return move_to(state.position - 1)


class QuizSession:
    """One run through a working set, driven by user actions."""

    def __init__(self, questions, store: ProgressStore, filters: FilterConfig = None, rng=None):
        self.questions = tuple(questions)
        self.store = store
        self.filters = filters or FilterConfig()
        self.rng = rng
        self.restart()

    def restart(self) -> None:
        """Re-sample with the current filters and go back to the first question."""
        self.working_set = build_working_set(
            self.questions, self.filters, self.store.progress, self.rng,
        )
        self.state = start_state(self.working_set)
        self.score = {GRADE_CORRECT: 0, GRADE_INCORRECT: 0}

    def set_filters(self, **changes) -> bool:
        """Change filter fields. Returns True if the working set was rebuilt."""
        updated = replace(self.filters, **changes)
        if updated == self.filters:
            return False
        self.filters = updated
        self.restart()
        return True

    @property
    def status(self) -> str:
        return self.state.status

    @property
    def total(self) -> int:
        return len(self.working_set)

    @property
    def position(self) -> int | None:
        return self.state.position

    @property
    def current(self):
        if self.state.position is None:
            return None
        return self.working_set[self.state.position]

    @property
    def finished(self) -> bool:
        return self.status == REVEALED and self.state.position == self.total - 1

    def current_record(self):
        question = self.current
        return self.store.record(question.id) if question else None

    def set_answer(self, answer) -> None:
        self.state = set_answer(self.state, answer)

    def submit(self, answer=None) -> bool | None:
        """Grade the answer for the current question.

        Returns True/False for the grade, or None when nothing happened
        (no current question, already revealed, or an invalid answer).
        """
        if self.status != ANSWERING:
            return None
        if answer is None:
            answer = self.state.answer
        question = self.current
        if not is_valid_answer(question, answer):
            return None
        correct = grade(question, answer)
        self.store.mutate(lambda p: record_answer(p, question.id, correct))
        self.state = reveal(self.state, answer, correct)
        self.score[self.state.result] += 1
        logger.debug("Question %s graded %s", question.id, self.state.result)
        return correct

    def advance(self) -> bool:
        before = self.state.position
        self.state = advance(self.state, self.total)
        return self.state.position != before

    def retreat(self) -> bool:
        before = self.state.position
        self.state = retreat(self.state)
        return self.state.position != before

    def toggle_star(self) -> bool | None:
        """Flip the star on the current question and return the new flag."""
        question = self.current
        if question is None:
            return None
        progress = self.store.mutate(lambda p: toggle_star(p, question.id))
        return progress.starred[question.id]

    def reset_progress(self) -> None:
        self.store.wipe()
