"""
Question Repository.

Holds the imported question bank for the session plus the subject label
shown to the tutoring assistant. The bank is only ever replaced as a
whole; there is no partial update.
"""
from __future__ import annotations

from collections.abc import Iterable

from loguru import logger

from quizlo.core.errors import InvalidConfig
from quizlo.core.models import Question

DEFAULT_SUBJECT = "General Subject"


class QuestionRepository:
    """Ordered, immutable-per-session list of questions."""

    def __init__(
        self,
        questions: Iterable[Question] = (),
        subject: str | None = None,
        default_subject: str = DEFAULT_SUBJECT,
    ):
        self.default_subject = default_subject
        self._questions: tuple[Question, ...] = ()
        self._positions: dict[int, int] = {}
        self.subject = default_subject
        self._install(tuple(questions))
        self.rename_subject(subject)

    @property
    def questions(self) -> tuple[Question, ...]:
        return self._questions

    @property
    def size(self) -> int:
        return len(self._questions)

    @property
    def is_empty(self) -> bool:
        return not self._questions

    def __len__(self) -> int:
        return len(self._questions)

    def __iter__(self):
        return iter(self._questions)

    def replace(self, questions: Iterable[Question], subject: str | None) -> None:
        """Swap the entire bank in one step."""
        self._install(tuple(questions))
        self.rename_subject(subject)
        logger.info(f"Repository replaced: {self.size} questions, subject '{self.subject}'")

    def reset(self) -> None:
        self._questions = ()
        self._positions = {}
        self.subject = self.default_subject
        logger.info("Repository reset")

    def rename_subject(self, subject: str | None) -> None:
        clean = (subject or "").strip()
        self.subject = clean or self.default_subject

    def position_of(self, question_id: int) -> int | None:
        return self._positions.get(question_id)

    def get(self, question_id: int) -> Question | None:
        pos = self._positions.get(question_id)
        return None if pos is None else self._questions[pos]

    def search(self, term: str, limit: int = 5) -> list[Question]:
        """
        Find questions whose text or id contains the term.

        Matching is case-insensitive; results keep repository order.
        """
        needle = (term or "").strip().lower()
        if not needle:
            return []
        hits = [
            q for q in self._questions
            if needle in str(q.id) or needle in q.question.lower()
        ]
        return hits[: max(0, limit)]

    def _install(self, questions: tuple[Question, ...]) -> None:
        positions: dict[int, int] = {}
        for pos, question in enumerate(questions):
            if question.id in positions:
                raise InvalidConfig(f"Duplicate question id {question.id} in bank.")
            positions[question.id] = pos
        self._questions = questions
        self._positions = positions
