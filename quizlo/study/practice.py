"""
Practice Session Controller.

Untimed study loop over the active view:

    UNANSWERED --select_answer--> ANSWERED --next/prev/jump--> UNANSWERED
                                     |
                                     +--retry--> UNANSWERED (same question)

The practice list loops forever in ALL and BOOKMARKS mode. In ERRORS
mode a correct answer removes the question from the review queue, so the
reviewer keeps cycling through unresolved errors until none remain.

The answered question stays on screen until the user navigates, even if
the answer just removed it from the active view.
"""
from __future__ import annotations

from loguru import logger

from quizlo.core.errors import InvalidState, NotFound
from quizlo.core.models import (
    FilterMode,
    PracticePhase,
    PracticeSnapshot,
    Question,
    ViewSnapshot,
)
from quizlo.core.shuffle import Shuffler
from quizlo.quiz.distractors import DistractorGenerator
from quizlo.quiz.views import ChangeKind, index_of
from quizlo.study.session import QuizSession

# Triggers after which options are rebuilt even when the id is unchanged.
_FORCE_RELOAD = {ChangeKind.IMPORT, ChangeKind.RESET, ChangeKind.RESTORE}


class PracticeController:
    """State machine for untimed practice."""

    def __init__(
        self,
        session: QuizSession,
        generator: DistractorGenerator,
        shuffler: Shuffler | None = None,
        hint_hide_count: int = 2,
    ):
        self.session = session
        self.generator = generator
        self.shuffler = shuffler or generator.shuffler
        self.hint_hide_count = hint_hide_count

        self.phase = PracticePhase.UNANSWERED
        self.question: Question | None = None
        self.options: list[str] = []
        self.hidden: list[str] = []
        self.selected: str | None = None
        self._hinted = False
        self._answered_index: int | None = None
        self.view: ViewSnapshot = self.reload(ChangeKind.RESTORE)

    # ------------------------------------------------------------------
    # View tracking
    # ------------------------------------------------------------------

    def refresh(self, trigger: ChangeKind) -> ViewSnapshot:
        """
        Recompute the view and follow its current question.

        While a question is answered it stays pinned; the view underneath
        still reconciles its index.
        """
        self.view = self.session.recompute(trigger)
        if self.phase == PracticePhase.UNANSWERED:
            self._show(self.view.current, force=trigger in _FORCE_RELOAD)
        return self.view

    def reload(self, trigger: ChangeKind) -> ViewSnapshot:
        """Drop any in-flight answer and show the view's current question."""
        self._reset_answer()
        return self.refresh(trigger)

    def _show(self, question: Question | None, force: bool = False) -> None:
        if question is None:
            self.question = None
            self.options = []
            self.hidden = []
            self._hinted = False
            return
        if not force and self.question is not None and self.question.id == question.id:
            return
        self.question = question
        self.options = self.generator.generate(question, self.session.repository.questions)
        self.hidden = []
        self._hinted = False
        logger.debug(f"Showing question {question.id} with {len(self.options)} options")

    def _reset_answer(self) -> None:
        self.phase = PracticePhase.UNANSWERED
        self.selected = None
        self._answered_index = None

    def _navigate(self, index: int) -> ViewSnapshot:
        self.session.view.current_index = index
        self._reset_answer()
        return self.refresh(ChangeKind.NAVIGATION)

    def _require_question(self) -> Question:
        if self.question is None:
            raise InvalidState("There is no question to work on in the current list.")
        return self.question

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def select_answer(self, option: str) -> bool:
        """
        Record an answer for the current question.

        Returns:
            True when the option matches the trimmed correct answer
        """
        question = self._require_question()
        if self.phase != PracticePhase.UNANSWERED:
            raise InvalidState("This question is already answered. Retry or move on.")
        if option not in self.options or option in self.hidden:
            raise InvalidState(f"'{option}' is not one of the offered options.")

        position = index_of(self.view.questions, question.id)
        self._answered_index = position if position is not None else self.session.view.current_index
        self.selected = option
        self.phase = PracticePhase.ANSWERED
        self.session.attempts += 1

        correct = question.is_correct(option)
        trigger = ChangeKind.NAVIGATION
        if correct:
            self.session.score += 1
            if self.session.view.filter_mode == FilterMode.ERRORS and self.session.clear_wrong(question.id):
                trigger = ChangeKind.WRONG_SET
                logger.info(f"Question {question.id} resolved from the review queue")
        elif self.session.mark_wrong(question.id):
            trigger = ChangeKind.WRONG_SET

        self.view = self.session.recompute(trigger)
        return correct

    def retry(self) -> None:
        """Give the same question a fresh attempt; the tally is kept."""
        self._require_question()
        self._reset_answer()
        self.hidden = []
        self._hinted = False

    def hint(self) -> list[str]:
        """Hide wrong options, once per question instance."""
        question = self._require_question()
        if self.phase != PracticePhase.UNANSWERED:
            raise InvalidState("Hints are only available before answering.")
        if self._hinted:
            return list(self.hidden)

        wrong = [o for o in self.options if o != question.correct]
        self.hidden = self.shuffler.sample(wrong, min(self.hint_hide_count, len(wrong)))
        self._hinted = True
        return list(self.hidden)

    def next(self) -> ViewSnapshot:
        items = self.view.questions
        if not items:
            return self._navigate(0)

        current = self.session.view.current_index
        question = self.question
        position = index_of(items, question.id) if question is not None else None
        if question is not None and position is None:
            # The pinned question left the view; its successor slid into this slot.
            slot = self._answered_index if self._answered_index is not None else current
            return self._navigate(slot if slot < len(items) else 0)

        base = position if position is not None else current
        return self._navigate((base + 1) % len(items))

    def prev(self) -> ViewSnapshot:
        items = self.view.questions
        current = self.session.view.current_index
        if current > 0:
            return self._navigate(current - 1)
        if self.session.view.filter_mode == FilterMode.ERRORS and len(items) > 1:
            return self._navigate(len(items) - 1)
        return self._navigate(0)

    def jump_to(self, question_id: int) -> ViewSnapshot:
        position = index_of(self.view.questions, question_id)
        if position is None:
            raise NotFound(question_id, self.session.view.filter_mode.value.upper())
        return self._navigate(position)

    def toggle_bookmark(self) -> bool:
        question = self._require_question()
        marked = self.session.toggle_bookmark(question.id)
        self.refresh(ChangeKind.BOOKMARKS)
        return marked

    def set_filter(self, mode: FilterMode) -> ViewSnapshot:
        self.session.view.set_filter(mode)
        self._reset_answer()
        return self.refresh(ChangeKind.FILTER)

    def toggle_shuffle(self) -> ViewSnapshot:
        self.session.view.toggle_shuffle(self.session.repository.size, self.shuffler)
        self._reset_answer()
        return self.refresh(ChangeKind.SHUFFLE)

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def snapshot(self) -> PracticeSnapshot:
        question = self.question
        return PracticeSnapshot(
            phase=self.phase,
            question=question,
            options=tuple(self.options),
            hidden_options=tuple(self.hidden),
            selected=self.selected,
            is_correct=None if question is None or self.selected is None else question.is_correct(self.selected),
            bookmarked=question is not None and self.session.is_bookmarked(question.id),
        )
