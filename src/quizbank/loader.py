"""Load the static question bank and turn it into Question objects."""
import json
import logging
import os
from pathlib import Path

from quizbank.models import (
    BankMeta, Question, QuestionBank, CHOICE_KINDS, FILL_IN_BLANK, KINDS, kind_label,
)

logger = logging.getLogger(__name__)

CONTENT_DIR = Path(__file__).parent / "content"
DEFAULT_BANK_PATH = str(CONTENT_DIR / "sample_bank.json")


class DataIntegrityError(ValueError):
    """A dataset entry cannot be turned into a valid question."""


def default_bank_path() -> str:
    return os.environ.get("QUIZBANK_BANK", DEFAULT_BANK_PATH)


def read_bank_document(file_path: str) -> dict:
    path = Path(file_path)
    suffix = path.suffix.lower()
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise DataIntegrityError(f"{path.name} is not valid UTF-8: {e}") from e
    if suffix in (".yaml", ".yml"):
        import yaml
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise DataIntegrityError(f"Invalid YAML in {path.name}: {e}") from e
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise DataIntegrityError(
                f"Invalid JSON in {path.name} (line {e.lineno}, col {e.colno}): {e.msg}"
            ) from e
    if not isinstance(data, dict) or not isinstance(data.get("questions"), list):
        raise DataIntegrityError(f"{path.name}: expected a document with a 'questions' list")
    return data


def _correct_index(qid: str, options: list) -> int:
    flags = [opt.get("is_correct", False) for opt in options]
    if not all(isinstance(flag, bool) for flag in flags):
        raise DataIntegrityError(f"Question {qid}: is_correct must be true or false")
    flagged = [i for i, flag in enumerate(flags) if flag]
    if not flagged:
        raise DataIntegrityError(f"Question {qid}: no option is flagged correct")
    if len(flagged) > 1:
        raise DataIntegrityError(
            f"Question {qid}: {len(flagged)} options are flagged correct (positions {flagged})"
        )
    return flagged[0]


def process_question(raw: dict) -> Question:
    """Convert one raw dataset entry into a Question."""
    if not isinstance(raw, dict):
        raise DataIntegrityError(f"Question entry is not an object: {raw!r}")
    if "id" not in raw:
        raise DataIntegrityError(f"Question without id: {raw!r}")
    qid = str(raw["id"])
    kind = raw.get("type")
    if kind not in KINDS:
        raise DataIntegrityError(f"Question {qid}: unknown type {kind!r}")
    prompt = raw.get("question")
    if not isinstance(prompt, str) or not prompt.strip():
        raise DataIntegrityError(f"Question {qid}: missing question text")

    base = {
        "id": qid,
        "kind": kind,
        "kind_label": raw.get("type_description") or kind_label(kind),
        "prompt": prompt,
        "explanation": raw.get("explanation") or None,
    }

    if kind == FILL_IN_BLANK:
        answer = raw.get("answer")
        if not isinstance(answer, str) or not answer.strip():
            raise DataIntegrityError(f"Question {qid}: fill-in-blank question has no answer")
        # Verbatim; normalization only happens when grading.
        return Question(correct_answer=answer, **base)

    options = raw.get("options")
    if not options:
        raise DataIntegrityError(f"Question {qid}: {kind} question has no options")
    if not isinstance(options, list) or not all(isinstance(opt, dict) for opt in options):
        raise DataIntegrityError(f"Question {qid}: options must be a list of objects")
    return Question(
        options=tuple(str(opt.get("text", "")) for opt in options),
        correct_index=_correct_index(qid, options),
        **base,
    )


def process_questions(raw_questions: list) -> list[Question]:
    """Convert raw entries in source order, rejecting duplicate ids."""
    questions = []
    seen_ids = set()
    for raw in raw_questions:
        question = process_question(raw)
        if question.id in seen_ids:
            raise DataIntegrityError(f"Duplicate question id {question.id}")
        seen_ids.add(question.id)
        questions.append(question)
    return questions


def load_bank(file_path: str = None) -> QuestionBank:
    """Read and validate a question bank document. Raises DataIntegrityError on bad data."""
    file_path = file_path or default_bank_path()
    data = read_bank_document(file_path)
    questions = process_questions(data["questions"])
    raw_meta = data.get("meta") or {}
    if not isinstance(raw_meta, dict):
        raise DataIntegrityError(f"{Path(file_path).name}: meta must be an object")
    meta = BankMeta(
        title=raw_meta.get("title", ""),
        creator=raw_meta.get("creator", ""),
        description=raw_meta.get("description", ""),
        total_questions=raw_meta.get("total_questions", len(questions)),
    )
    if meta.total_questions != len(questions):
        logger.warning(
            "Bank %s declares %s questions but contains %d",
            Path(file_path).name, meta.total_questions, len(questions),
        )
    logger.info("Loaded %d questions from %s", len(questions), file_path)
    return QuestionBank(meta=meta, questions=tuple(questions))
