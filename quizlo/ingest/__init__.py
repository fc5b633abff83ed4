"""
Ingestion boundary: turns structured bank files into Question records.
"""

from quizlo.ingest.json_bank import (
    BankFormatError,
    QuestionBank,
    QuestionRecord,
    extract_questions,
    load_question_bank,
    parse_bank,
)

__all__ = [
    "BankFormatError",
    "QuestionBank",
    "QuestionRecord",
    "extract_questions",
    "load_question_bank",
    "parse_bank",
]
