"""Progress statistics for the stats screen."""
from quizbank.models import KINDS, kind_label
from quizbank.progress import Progress, is_weak


def totals(progress: Progress) -> dict:
    return {
        "seen": sum(progress.seen.values()),
        "correct": sum(progress.correct.values()),
        "wrong": sum(progress.wrong.values()),
    }


def accuracy(progress: Progress) -> float:
    """Percent of graded answers that were correct."""
    t = totals(progress)
    graded = t["correct"] + t["wrong"]
    if graded == 0:
        return 0.0
    return round((t["correct"] / graded) * 100, 1)


def get_accuracy_color(score: float) -> str:
    if score >= 80:
        return "green"
    elif score >= 65:
        return "yellow"
    elif score >= 50:
        return "dark_orange"
    return "red"


def kind_breakdown(questions, progress: Progress) -> list[dict]:
    """Per question type: how many questions exist and how they have been answered."""
    rows = []
    for kind in KINDS:
        ids = [q.id for q in questions if q.kind == kind]
        if not ids:
            continue
        rows.append({
            "kind": kind,
            "label": kind_label(kind),
            "questions": len(ids),
            "seen": sum(progress.seen.get(i, 0) for i in ids),
            "correct": sum(progress.correct.get(i, 0) for i in ids),
            "wrong": sum(progress.wrong.get(i, 0) for i in ids),
        })
    return rows


def starred_questions(questions, progress: Progress) -> list:
    return [q for q in questions if progress.starred.get(q.id)]


def weak_questions(questions, progress: Progress) -> list:
    return [q for q in questions if is_weak(progress, q.id)]
