"""
Domain models for the quiz session engine.

Question records are immutable; every engine command returns a fresh,
immutable snapshot of the state it touched.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class FilterMode(str, Enum):
    """Which subset of the repository forms the active view."""

    ALL = "all"
    ERRORS = "errors"
    BOOKMARKS = "bookmarks"


class PracticePhase(str, Enum):
    UNANSWERED = "unanswered"
    ANSWERED = "answered"


class ExamPhase(str, Enum):
    CONFIGURING = "configuring"
    RUNNING = "running"
    FINISHED = "finished"


class AppMode(str, Enum):
    """Which state machine is currently being driven."""

    PRACTICE = "practice"
    EXAM = "exam"
    EXAM_RESULT = "exam_result"


@dataclass(frozen=True)
class Question:
    """A single question record from the bank."""

    id: int
    question: str
    answer: str
    options: tuple[str, ...] = ()

    @property
    def correct(self) -> str:
        """The answer as compared against a selection."""
        return self.answer.strip()

    @property
    def has_options(self) -> bool:
        return len(self.options) > 0

    def is_correct(self, option: str | None) -> bool:
        return option is not None and option == self.correct

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "question": self.question,
            "answer": self.answer,
        }
        if self.options:
            data["options"] = list(self.options)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Question":
        return cls(
            id=int(data["id"]),
            question=str(data["question"]),
            answer=str(data["answer"]),
            options=tuple(str(o) for o in data.get("options") or ()),
        )


@dataclass(frozen=True)
class ViewSnapshot:
    """Immutable result of one view recompute."""

    questions: tuple[Question, ...]
    current_index: int
    filter_mode: FilterMode
    shuffled: bool

    @property
    def is_empty(self) -> bool:
        return len(self.questions) == 0

    @property
    def size(self) -> int:
        return len(self.questions)

    @property
    def current(self) -> Question | None:
        if self.is_empty:
            return None
        return self.questions[self.current_index]


@dataclass(frozen=True)
class PracticeSnapshot:
    phase: PracticePhase
    question: Question | None
    options: tuple[str, ...]
    hidden_options: tuple[str, ...]
    selected: str | None
    is_correct: bool | None
    bookmarked: bool

    @property
    def visible_options(self) -> tuple[str, ...]:
        return tuple(o for o in self.options if o not in self.hidden_options)


@dataclass(frozen=True)
class ReviewRow:
    """One line of the exam review table."""

    question: Question
    chosen: str | None
    correct: bool


@dataclass(frozen=True)
class ExamResult:
    correct_count: int
    total: int
    passed: bool
    pass_mark: int
    timed_out: bool
    review: tuple[ReviewRow, ...] = ()

    @property
    def percentage(self) -> float:
        if self.total == 0:
            return 0.0
        return round(100.0 * self.correct_count / self.total, 1)

    @property
    def answered_count(self) -> int:
        return sum(1 for row in self.review if row.chosen is not None)


@dataclass(frozen=True)
class ExamSnapshot:
    phase: ExamPhase
    question: Question | None
    options: tuple[str, ...]
    selected: str | None
    current_index: int
    total: int
    time_remaining: int
    answered: int
    result: ExamResult | None = None

    @property
    def is_last(self) -> bool:
        return self.total > 0 and self.current_index == self.total - 1


@dataclass(frozen=True)
class TutorContext:
    """Read-only context handed to a tutoring assistant."""

    question: str
    options: tuple[str, ...]
    correct_answer: str
    subject: str


@dataclass(frozen=True)
class EngineSnapshot:
    mode: AppMode
    subject: str
    repository_size: int
    score: int
    attempts: int
    wrong_ids: tuple[int, ...]
    bookmark_ids: tuple[int, ...]
    view: ViewSnapshot
    practice: PracticeSnapshot
    exam: ExamSnapshot | None = None
    notes: tuple[str, ...] = field(default_factory=tuple)

    @property
    def accuracy(self) -> float:
        if self.attempts == 0:
            return 0.0
        return round(100.0 * self.score / self.attempts, 1)
