"""
JSON question-bank loader.

Document parsing lives outside quizlo; what arrives here is an already
structured bank, either a bare list of records or an object:

    {
      "subject": "Human Anatomy",
      "questions": [
        {"id": 1, "question": "...", "answer": "...", "options": ["...", "..."]},
        {"question": "...", "answer": "..."}
      ]
    }

Records without an id are numbered after the highest id seen so far.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from loguru import logger
from pydantic import BaseModel, Field, ValidationError, field_validator

from quizlo.core.models import Question


class BankFormatError(ValueError):
    """Raised when a question bank file cannot be used."""


class QuestionRecord(BaseModel):
    """One record as it appears in a bank file."""

    id: int | None = Field(default=None, ge=0)
    question: str
    answer: str
    options: list[str] = Field(default_factory=list)

    @field_validator("question", "answer")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    @field_validator("options")
    @classmethod
    def _clean_options(cls, value: list[str]) -> list[str]:
        return [o.strip() for o in value if o.strip()]


class BankFile(BaseModel):
    subject: str | None = None
    questions: list[QuestionRecord]


@dataclass(frozen=True)
class QuestionBank:
    subject: str
    questions: list[Question]


def parse_bank(data: object, default_subject: str = "") -> QuestionBank:
    """
    Validate decoded JSON and build Question records.

    Raises:
        BankFormatError: structure or record validation failed
    """
    if isinstance(data, list):
        data = {"questions": data}
    try:
        bank = BankFile.model_validate(data)
    except ValidationError as e:
        raise BankFormatError(f"Invalid question bank: {e.error_count()} problem(s)\n{e}") from e

    questions: list[Question] = []
    seen: set[int] = set()
    next_id = max((r.id for r in bank.questions if r.id is not None), default=0) + 1
    for record in bank.questions:
        qid = record.id
        if qid is None:
            qid = next_id
            next_id += 1
        if qid in seen:
            raise BankFormatError(f"Duplicate question id {qid}.")
        seen.add(qid)

        options = tuple(record.options)
        if options and record.answer.strip() not in options:
            logger.warning(f"Question {qid}: answer missing from its options, adding it")
            options = options + (record.answer.strip(),)
        questions.append(Question(id=qid, question=record.question.strip(), answer=record.answer, options=options))

    return QuestionBank(subject=(bank.subject or default_subject).strip(), questions=questions)


def load_question_bank(path: Path | str) -> QuestionBank:
    """Read and validate a bank file; the subject defaults to the file stem."""
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise BankFormatError(f"File not found: {path}") from e
    except json.JSONDecodeError as e:
        raise BankFormatError(f"{path.name} is not valid JSON: {e}") from e

    bank = parse_bank(data, default_subject=path.stem)
    logger.info(f"Loaded {len(bank.questions)} questions from {path.name}")
    return bank


def extract_questions(path: Path | str) -> list[Question]:
    """Question extractor for QuizEngine.import_document."""
    return load_question_bank(path).questions
