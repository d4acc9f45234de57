"""Interactive CLI application."""
import argparse
import logging
import sys

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import Prompt, Confirm
from rich.table import Table

from quizbank.db import init_db, default_db_path
from quizbank.loader import load_bank, default_bank_path, DataIntegrityError
from quizbank.models import (
    GRADE_CORRECT, GRADE_INCORRECT, KINDS, MODES, MODE_LABELS, MODE_WRONG_ONLY, TYPE_ALL,
    kind_label,
)
from quizbank.progress import ProgressStore
from quizbank.sampler import count_by_kind
from quizbank.session import QuizSession, EMPTY, ANSWERING, REVEALED
from quizbank.settings import load_filters, save_filters
from quizbank.stats import (
    totals, accuracy, get_accuracy_color, kind_breakdown, starred_questions, weak_questions,
)

console = Console()

EXIT_WORDS = ("q", "menu")


class SessionExitRequested(Exception):
    """Raised when the user asks to leave a running quiz."""


def session_prompt(prompt: str, **kwargs) -> str:
    answer = Prompt.ask(prompt, **kwargs)
    if answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


def handle_key(session: QuizSession, key: str) -> str | None:
    """Map one line of input to a session action.

    Enter submits a pending answer or moves on, a digit picks an option,
    ``b`` goes back, ``s`` toggles the star, anything else is a typed answer
    for fill-in questions. While a fill-in question is unanswered, bare ``b``
    and ``s`` are answers; ``:b`` and ``:s`` work everywhere. Returns the
    action taken, or None.
    """
    key = key.strip()
    question = session.current
    if question is None:
        return None

    typing = session.status == ANSWERING and not question.is_choice
    command = key.lower()
    if command.startswith(":"):
        command = command[1:]
    elif typing:
        command = ""
    if command == "b":
        return "retreat" if session.retreat() else None
    if command == "s":
        session.toggle_star()
        return "star"

    if session.status == REVEALED:
        if key:
            return None
        if session.finished:
            return "finish"
        session.advance()
        return "advance"

    if question.is_choice:
        if key.isdecimal():
            if session.submit(int(key) - 1) is not None:
                return "submit"
        return None

    if key:
        session.set_answer(key)
    return "submit" if session.submit() is not None else None


def show_welcome(bank):
    title = bank.meta.title or "Question Bank"
    body = f"[bold]{title}[/bold]"
    if bank.meta.description:
        body += f"\n[dim]{bank.meta.description}[/dim]"
    console.print(Panel(body, title="Welcome", border_style="blue"))


def show_menu(session: QuizSession):
    f = session.filters
    console.print(
        f"\n[dim]Filters: {kind_label(f.type_filter)} | {MODE_LABELS[f.mode]} | "
        f"shuffle {'on' if f.shuffle else 'off'} | {session.total} questions[/dim]"
    )
    console.print("[bold]Commands:[/bold]")
    commands = [
        ("quiz", "Start or resume the quiz"),
        ("filters", "Change type, mode and shuffle"),
        ("stats", "Progress statistics"),
        ("starred", "List starred questions"),
        ("reset", "Erase all progress"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def show_question(session: QuizSession):
    q = session.current
    record = session.current_record()
    star = " [yellow]★[/yellow]" if record.starred else ""
    console.print(Panel(
        q.prompt,
        title=f"Question {session.position + 1}/{session.total}",
        subtitle=f"{q.kind_label}{star}",
        border_style="cyan",
    ))
    if not q.is_choice:
        return
    state = session.state
    for i, option in enumerate(q.options):
        mark = ""
        if state.revealed and i == q.correct_index:
            mark = " [green]✓[/green]"
        elif state.revealed and i == state.answer:
            mark = " [red]✗[/red]"
        console.print(f"  [cyan]{i + 1})[/cyan] {option}{mark}")


def show_result(session: QuizSession):
    q = session.current
    if session.state.result == GRADE_CORRECT:
        console.print("[green]Correct![/green]")
    elif q.is_choice:
        console.print(f"[red]Incorrect.[/red] Answer: [green]{q.options[q.correct_index]}[/green]")
    else:
        console.print(f"[red]Incorrect.[/red] Answer: [green]{q.correct_answer}[/green]")
    if q.explanation:
        console.print(f"[dim]{q.explanation}[/dim]")


def _input_hint(session: QuizSession) -> str:
    if session.status == REVEALED:
        return "[dim]Enter for next, b back, s star, q menu[/dim]"
    if session.current.is_choice:
        return f"Your answer [dim](1-{len(session.current.options)}, b back, s star, q menu)[/dim]"
    return "Your answer [dim](:b back, :s star, q menu)[/dim]"


def run_quiz_session(session: QuizSession) -> tuple[int, int]:
    """Drive the session until it ends or the user leaves. Returns (correct, graded)."""
    if session.status == EMPTY:
        console.print("[yellow]No questions match these filters. Try changing them.[/yellow]")
        return 0, 0
    if session.finished:
        session.restart()
    console.print(f"\n[bold]Quiz[/bold] — {session.total} questions\n")
    try:
        show_question(session)
        while True:
            key = session_prompt(_input_hint(session), default="", show_default=False)
            action = handle_key(session, key)
            if action == "finish":
                break
            if action == "submit":
                show_question(session)
                show_result(session)
            elif action in ("advance", "retreat", "star"):
                console.print()
                show_question(session)
            elif session.status == ANSWERING and session.current.is_choice:
                console.print("[dim]Pick one of the numbered options.[/dim]")
    except SessionExitRequested:
        console.print("[dim]Leaving the quiz. Your progress is saved.[/dim]")
    correct = session.score[GRADE_CORRECT]
    graded = correct + session.score[GRADE_INCORRECT]
    if graded:
        console.print(f"[bold]Score: {correct}/{graded} ({correct/graded*100:.0f}%)[/bold]\n")
    return correct, graded


def cmd_filters(session: QuizSession, db_path: str):
    counts = count_by_kind(session.questions)
    console.print(f"  [cyan]{TYPE_ALL}[/cyan]) {kind_label(TYPE_ALL)} ({len(session.questions)})")
    for kind in KINDS:
        if kind in counts:
            console.print(f"  [cyan]{kind}[/cyan]) {kind_label(kind)} ({counts[kind]})")
    type_filter = Prompt.ask(
        "Question type", choices=[TYPE_ALL] + [k for k in KINDS if k in counts],
        default=session.filters.type_filter,
    )
    for mode in MODES:
        console.print(f"  [cyan]{mode}[/cyan]) {MODE_LABELS[mode]}")
    mode = Prompt.ask("Mode", choices=list(MODES), default=session.filters.mode)
    shuffle = Confirm.ask("Shuffle questions?", default=session.filters.shuffle)
    if session.set_filters(type_filter=type_filter, mode=mode, shuffle=shuffle):
        save_filters(db_path, session.filters)
    console.print(f"[green]{session.total} questions selected.[/green]")


def cmd_stats(session: QuizSession):
    progress = session.store.progress
    score = accuracy(progress)
    color = get_accuracy_color(score)
    t = totals(progress)
    console.print(f"\n  Answered: [bold]{t['seen']}[/bold]  |  "
                  f"Correct: [green]{t['correct']}[/green]  |  "
                  f"Wrong: [red]{t['wrong']}[/red]  |  "
                  f"Accuracy: [{color}]{score}%[/{color}]\n")

    table = Table(title="By Question Type")
    table.add_column("Type", style="cyan")
    table.add_column("Questions", justify="right")
    table.add_column("Answered", justify="right")
    table.add_column("Correct", justify="right")
    table.add_column("Wrong", justify="right")
    for row in kind_breakdown(session.questions, progress):
        table.add_row(
            row["label"], str(row["questions"]), str(row["seen"]),
            str(row["correct"]), str(row["wrong"]),
        )
    console.print(table)

    weak = weak_questions(session.questions, progress)
    if weak:
        console.print(f"\n  [yellow]{len(weak)} questions to review in '{MODE_LABELS[MODE_WRONG_ONLY]}' mode[/yellow]")


def cmd_starred(session: QuizSession):
    starred = starred_questions(session.questions, session.store.progress)
    if not starred:
        console.print("[yellow]No starred questions yet. Press 's' during a quiz to star one.[/yellow]")
        return
    table = Table(title="Starred Questions")
    table.add_column("#", justify="right")
    table.add_column("Type")
    table.add_column("Question")
    for q in starred:
        table.add_row(q.id, q.kind_label, q.prompt)
    console.print(table)


def cmd_reset(session: QuizSession):
    if Confirm.ask("[red]Erase all progress?[/red]", default=False):
        session.reset_progress()
        console.print("[green]Progress erased.[/green]")


def setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level, format="%(message)s", datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="quizbank", description="Study a multiple-choice question bank.")
    parser.add_argument("--bank", default=None, help="question bank file (.json or .yaml)")
    parser.add_argument("--db", default=None, help="progress database path")
    parser.add_argument("-v", "--verbose", action="count", default=0)
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    setup_logging(args.verbose)
    db_path = args.db or default_db_path()
    bank_path = args.bank or default_bank_path()

    try:
        bank = load_bank(bank_path)
    except DataIntegrityError as e:
        console.print(f"[red]Invalid question bank: {e}[/red]")
        sys.exit(1)
    except OSError as e:
        console.print(f"[red]Cannot read question bank: {e}[/red]")
        sys.exit(1)

    store = ProgressStore.load(db_path)
    init_db(db_path)
    session = QuizSession(bank.questions, store, load_filters(db_path))

    show_welcome(bank)

    while True:
        show_menu(session)
        choice = Prompt.ask("\n[bold]>[/bold]", default="quiz").strip().lower()
        try:
            if choice == "quiz":
                run_quiz_session(session)
            elif choice == "filters":
                cmd_filters(session, db_path)
            elif choice == "stats":
                cmd_stats(session)
            elif choice == "starred":
                cmd_starred(session)
            elif choice == "reset":
                cmd_reset(session)
            elif choice in ("quit", "exit", "q"):
                console.print("[dim]Good luck on your exam![/dim]")
                break
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
