import json
import random

import pytest
from unittest.mock import patch

from quizbank.app import (
    SessionExitRequested, session_prompt, handle_key, run_quiz_session, main,
)
from quizbank.models import FilterConfig
from quizbank.progress import ProgressStore
from quizbank.session import QuizSession, ANSWERING, REVEALED

IN_ORDER = FilterConfig(mode="all", shuffle=False)


def _session(questions, tmp_db):
    return QuizSession(questions, ProgressStore(tmp_db), IN_ORDER, rng=random.Random(0))


def test_session_exit_requested_is_exception():
    with pytest.raises(SessionExitRequested):
        raise SessionExitRequested()


def test_session_prompt_raises_on_q():
    with patch("quizbank.app.Prompt.ask", return_value="q"):
        with pytest.raises(SessionExitRequested):
            session_prompt("test prompt")


def test_session_prompt_raises_on_menu():
    with patch("quizbank.app.Prompt.ask", return_value="menu"):
        with pytest.raises(SessionExitRequested):
            session_prompt("test prompt")


def test_session_prompt_returns_normal_input():
    with patch("quizbank.app.Prompt.ask", return_value="hello"):
        assert session_prompt("test prompt") == "hello"


# --- Key handling ---


def test_digit_selects_option_by_one_based_position(small_bank, tmp_db):
    session = _session(small_bank, tmp_db)
    assert handle_key(session, "1") == "submit"
    assert session.state.answer == 0
    assert session.state.result == "correct"


def test_out_of_range_digit_is_ignored(small_bank, tmp_db):
    session = _session(small_bank, tmp_db)
    assert handle_key(session, "3") is None
    assert handle_key(session, "0") is None
    assert handle_key(session, "") is None
    assert session.status == ANSWERING


def test_enter_advances_after_reveal(small_bank, tmp_db):
    session = _session(small_bank, tmp_db)
    handle_key(session, "2")
    assert handle_key(session, "") == "advance"
    assert session.position == 1
    assert session.status == ANSWERING


def test_text_answer_submits_fill_in(small_bank, tmp_db):
    session = _session(small_bank, tmp_db)
    handle_key(session, "1")
    handle_key(session, "")
    assert handle_key(session, "ha noi") == "submit"
    assert session.state.result == "correct"
    assert handle_key(session, "") == "finish"


def test_back_and_star_keys(small_bank, tmp_db):
    session = _session(small_bank, tmp_db)
    assert handle_key(session, "b") is None
    assert handle_key(session, "s") == "star"
    assert session.current_record().starred is True
    handle_key(session, "1")
    handle_key(session, "")
    assert handle_key(session, ":B") == "retreat"
    assert session.position == 0


def test_typing_after_reveal_is_ignored(small_bank, tmp_db):
    session = _session(small_bank, tmp_db)
    handle_key(session, "1")
    assert handle_key(session, "2") is None
    assert session.status == REVEALED
    assert session.store.record("1").seen == 1


# --- Quiz loop ---


def test_run_quiz_session_full_pass(small_bank, tmp_db):
    session = _session(small_bank, tmp_db)
    with patch("quizbank.app.Prompt.ask", side_effect=["1", "", "Hà Nội", ""]):
        correct, graded = run_quiz_session(session)
    assert (correct, graded) == (2, 2)
    assert session.store.record("2").correct == 1


def test_run_quiz_session_exits_on_q(small_bank, tmp_db):
    session = _session(small_bank, tmp_db)
    with patch("quizbank.app.Prompt.ask", side_effect=["2", "q"]):
        correct, graded = run_quiz_session(session)
    assert (correct, graded) == (0, 1)
    assert session.store.record("1").wrong == 1
    assert session.store.record("2").seen == 0


def test_run_quiz_session_empty(tmp_db):
    session = _session([], tmp_db)
    with patch("quizbank.app.Prompt.ask") as ask:
        assert run_quiz_session(session) == (0, 0)
    ask.assert_not_called()


# --- Entry point ---


def test_main_quits(tmp_path, raw_bank):
    bank = tmp_path / "bank.json"
    bank.write_text(json.dumps(raw_bank), encoding="utf-8")
    db = tmp_path / "progress.db"
    with patch("quizbank.app.Prompt.ask", side_effect=["stats", "quit"]):
        main(["--bank", str(bank), "--db", str(db)])
    assert db.exists()


def test_main_rejects_invalid_bank(tmp_path, raw_bank):
    raw_bank["questions"][0]["options"][1]["is_correct"] = True
    bank = tmp_path / "bank.json"
    bank.write_text(json.dumps(raw_bank), encoding="utf-8")
    with pytest.raises(SystemExit) as exc:
        main(["--bank", str(bank), "--db", str(tmp_path / "p.db")])
    assert exc.value.code == 1


def test_non_ascii_digit_is_ignored(small_bank, tmp_db):
    session = _session(small_bank, tmp_db)
    assert handle_key(session, "²") is None
    assert session.status == ANSWERING
    assert session.store.record("1").seen == 0


def test_fill_in_accepts_command_letters_as_answers(small_bank, tmp_db):
    session = _session(small_bank, tmp_db)
    handle_key(session, "1")
    handle_key(session, "")
    assert handle_key(session, "b") == "submit"
    assert session.state.answer == "b"
    assert session.state.result == "incorrect"
    assert session.position == 1


def test_prefixed_commands_on_fill_in(small_bank, tmp_db):
    session = _session(small_bank, tmp_db)
    handle_key(session, "1")
    handle_key(session, "")
    assert handle_key(session, ":s") == "star"
    assert session.current_record().starred is True
    assert session.status == ANSWERING
    assert handle_key(session, ":b") == "retreat"
    assert session.position == 0


def test_main_recovers_from_corrupt_database(tmp_path, raw_bank):
    bank = tmp_path / "bank.json"
    bank.write_text(json.dumps(raw_bank), encoding="utf-8")
    db = tmp_path / "progress.db"
    db.write_bytes(b"\x00garbage, not sqlite" * 50)
    with patch("quizbank.app.Prompt.ask", side_effect=["stats", "quit"]):
        main(["--bank", str(bank), "--db", str(db)])
    assert (tmp_path / "progress.db.corrupt").exists()
    assert ProgressStore.load(str(db)).progress.seen == {}
