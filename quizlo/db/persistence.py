"""
Persistence Adapter.

Pure pass-through between engine state and a key-value store. Each field
lives under its own key and is read and written independently; a missing
or malformed key yields the documented default. Writes are
fire-and-forget: a failing store is logged, never raised into the command
that triggered the write.
"""
from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Any

from loguru import logger

from quizlo.core.errors import StoreError
from quizlo.core.models import Question
from quizlo.db.store import KeyValueStore
from quizlo.quiz.repository import DEFAULT_SUBJECT

KEY_QUESTIONS = "quiz_questions"
KEY_SUBJECT = "quiz_subject"
KEY_SCORE = "quiz_score"
KEY_ATTEMPTS = "quiz_attempts"
KEY_WRONG = "quiz_wrong"
KEY_BOOKMARKS = "quiz_bookmarks"


class PersistenceAdapter:
    """Loads and saves the persisted quiz fields."""

    def __init__(self, store: KeyValueStore, default_subject: str = DEFAULT_SUBJECT):
        self.store = store
        self.default_subject = default_subject

    # ------------------------------------------------------------------
    # Low-level helpers
    # ------------------------------------------------------------------

    def _read(self, key: str) -> str | None:
        try:
            return self.store.get(key)
        except StoreError as e:
            logger.warning(f"Could not read '{key}': {e}")
            return None

    def _write(self, key: str, value: str) -> None:
        try:
            self.store.set(key, value)
        except StoreError as e:
            logger.warning(f"Could not save '{key}': {e}")

    def _read_json(self, key: str, default: Any) -> Any:
        raw = self._read(key)
        if raw is None or not raw.strip():
            return default
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Ignoring malformed value for '{key}'")
            return default

    def _read_int(self, key: str) -> int:
        raw = self._read(key)
        try:
            return max(0, int(raw)) if raw is not None else 0
        except ValueError:
            return 0

    def _read_ids(self, key: str) -> list[int]:
        data = self._read_json(key, [])
        if not isinstance(data, list):
            return []
        ids: list[int] = []
        for value in data:
            try:
                ids.append(int(value))
            except (TypeError, ValueError):
                continue
        return list(dict.fromkeys(ids))

    # ------------------------------------------------------------------
    # Fields
    # ------------------------------------------------------------------

    def load_questions(self) -> list[Question]:
        data = self._read_json(KEY_QUESTIONS, [])
        if not isinstance(data, list):
            return []
        questions: list[Question] = []
        for item in data:
            try:
                questions.append(Question.from_dict(item))
            except (KeyError, TypeError, ValueError):
                logger.warning(f"Skipping malformed stored question: {item!r}")
        return questions

    def save_questions(self, questions: Iterable[Question]) -> None:
        self._write(KEY_QUESTIONS, json.dumps([q.to_dict() for q in questions], ensure_ascii=False))

    def load_subject(self) -> str:
        raw = self._read(KEY_SUBJECT)
        return raw.strip() if raw and raw.strip() else self.default_subject

    def save_subject(self, subject: str) -> None:
        self._write(KEY_SUBJECT, subject)

    def load_tally(self) -> tuple[int, int]:
        """Return (score, attempts)."""
        return self._read_int(KEY_SCORE), self._read_int(KEY_ATTEMPTS)

    def save_tally(self, score: int, attempts: int) -> None:
        self._write(KEY_SCORE, str(score))
        self._write(KEY_ATTEMPTS, str(attempts))

    def load_wrong(self) -> list[int]:
        return self._read_ids(KEY_WRONG)

    def save_wrong(self, ids: Iterable[int]) -> None:
        self._write(KEY_WRONG, json.dumps(list(ids)))

    def load_bookmarks(self) -> list[int]:
        return self._read_ids(KEY_BOOKMARKS)

    def save_bookmarks(self, ids: Iterable[int]) -> None:
        self._write(KEY_BOOKMARKS, json.dumps(list(ids)))

    def clear(self) -> None:
        try:
            self.store.clear()
        except StoreError as e:
            logger.warning(f"Could not clear stored state: {e}")
