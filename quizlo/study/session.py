"""
Quiz session state.

The single owned object holding everything the practice loop reads and
writes: the repository, the view settings, the wrong-answer and bookmark
sets, and the score tally. Controllers receive it by reference.
"""
from __future__ import annotations

from dataclasses import dataclass, field

from quizlo.core.models import ViewSnapshot
from quizlo.quiz.repository import QuestionRepository
from quizlo.quiz.views import ChangeKind, ViewState, resolve


@dataclass
class QuizSession:
    """Practice-side state shared by the controllers."""

    repository: QuestionRepository = field(default_factory=QuestionRepository)
    view: ViewState = field(default_factory=ViewState)
    wrong_ids: dict[int, None] = field(default_factory=dict)
    bookmark_ids: dict[int, None] = field(default_factory=dict)
    score: int = 0
    attempts: int = 0

    def recompute(self, trigger: ChangeKind) -> ViewSnapshot:
        """Derive a fresh view snapshot after a mutation."""
        return resolve(
            self.view,
            self.repository.questions,
            self.wrong_ids,
            self.bookmark_ids,
            trigger,
        )

    # Wrong-answer set

    def mark_wrong(self, question_id: int) -> bool:
        if question_id in self.wrong_ids:
            return False
        self.wrong_ids[question_id] = None
        return True

    def clear_wrong(self, question_id: int) -> bool:
        if question_id not in self.wrong_ids:
            return False
        del self.wrong_ids[question_id]
        return True

    # Bookmarks

    def is_bookmarked(self, question_id: int) -> bool:
        return question_id in self.bookmark_ids

    def toggle_bookmark(self, question_id: int) -> bool:
        """Flip membership; returns the new state."""
        if question_id in self.bookmark_ids:
            del self.bookmark_ids[question_id]
            return False
        self.bookmark_ids[question_id] = None
        return True

    def clear_progress(self) -> None:
        self.wrong_ids.clear()
        self.bookmark_ids.clear()
        self.score = 0
        self.attempts = 0
        self.view.reset()
