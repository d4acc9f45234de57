"""Data classes for the question bank and study session."""
from dataclasses import dataclass
from typing import Optional

TRUE_FALSE = "true_false"
SINGLE_CORRECT = "multiple_choice_one_correct"
BEST_ANSWER = "multiple_choice_best_answer"
FILL_IN_BLANK = "fill_in_blank"

CHOICE_KINDS = (TRUE_FALSE, SINGLE_CORRECT, BEST_ANSWER)
KINDS = (TRUE_FALSE, SINGLE_CORRECT, BEST_ANSWER, FILL_IN_BLANK)

KIND_LABELS = {
    TRUE_FALSE: "True / False",
    SINGLE_CORRECT: "Single correct choice",
    BEST_ANSWER: "Best answer",
    FILL_IN_BLANK: "Fill in the blank",
}

TYPE_ALL = "all"

MODE_RANDOM20 = "random20"
MODE_ALL = "all"
MODE_WRONG_ONLY = "wrongOnly"
MODES = (MODE_RANDOM20, MODE_ALL, MODE_WRONG_ONLY)

MODE_LABELS = {
    MODE_RANDOM20: "Random 20",
    MODE_ALL: "All matching",
    MODE_WRONG_ONLY: "Review wrong answers",
}

GRADE_CORRECT = "correct"
GRADE_INCORRECT = "incorrect"


def kind_label(kind: str) -> str:
    if kind == TYPE_ALL:
        return "All types"
    return KIND_LABELS.get(kind, kind)


@dataclass(frozen=True)
class Question:
    id: str
    kind: str
    kind_label: str
    prompt: str
    options: Optional[tuple] = None
    correct_index: Optional[int] = None
    correct_answer: Optional[str] = None
    explanation: Optional[str] = None

    @property
    def is_choice(self) -> bool:
        return self.kind in CHOICE_KINDS


@dataclass(frozen=True)
class BankMeta:
    title: str = ""
    creator: str = ""
    description: str = ""
    total_questions: int = 0


@dataclass(frozen=True)
class QuestionBank:
    meta: BankMeta
    questions: tuple

    def __len__(self) -> int:
        return len(self.questions)


@dataclass(frozen=True)
class FilterConfig:
    type_filter: str = TYPE_ALL
    mode: str = MODE_RANDOM20
    shuffle: bool = True

    def __post_init__(self):
        if self.type_filter != TYPE_ALL and self.type_filter not in KINDS:
            raise ValueError(f"Unknown question type filter: {self.type_filter!r}")
        if self.mode not in MODES:
            raise ValueError(f"Unknown mode: {self.mode!r}")


@dataclass(frozen=True)
class ProgressRecord:
    seen: int = 0
    correct: int = 0
    wrong: int = 0
    starred: bool = False
