"""
Quiz Engine - command facade over the practice and exam controllers.

The engine owns one QuizSession (no module-level state), restores it
from persistence on construction, and mirrors every change back out.
Each command returns a fresh EngineSnapshot or raises a QuizError.

Modes:
- practice: untimed loop over the active view
- exam: a timed exam is running; practice commands are refused
- exam_result: results are shown until finish_exam() acknowledges them
"""
from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

from loguru import logger

from quizlo.config import Settings, get_settings
from quizlo.core.errors import InvalidConfig, InvalidState, NotFound
from quizlo.core.models import (
    AppMode,
    EngineSnapshot,
    ExamPhase,
    ExamResult,
    FilterMode,
    Question,
    TutorContext,
)
from quizlo.core.shuffle import Shuffler
from quizlo.db.persistence import PersistenceAdapter
from quizlo.quiz.distractors import DistractorGenerator
from quizlo.quiz.repository import QuestionRepository
from quizlo.quiz.views import ChangeKind, index_of
from quizlo.study.countdown import Scheduler
from quizlo.study.exam import ExamController
from quizlo.study.practice import PracticeController
from quizlo.study.session import QuizSession

QuestionExtractor = Callable[[Any], Sequence[Question]]


class QuizEngine:
    """Entry point for every command the UI layer can issue."""

    def __init__(
        self,
        persistence: PersistenceAdapter,
        settings: Settings | None = None,
        shuffler: Shuffler | None = None,
        scheduler: Scheduler | None = None,
    ):
        self.settings = settings or get_settings()
        self.persistence = persistence
        self.shuffler = shuffler or Shuffler()
        self.generator = DistractorGenerator(
            self.shuffler,
            radius=self.settings.neighborhood_radius,
            distractor_count=self.settings.distractor_count,
            stop_tokens=self.settings.stop_tokens,
        )
        self.session = self._restore()
        self.practice = PracticeController(
            self.session,
            self.generator,
            self.shuffler,
            hint_hide_count=self.settings.hint_hide_count,
        )
        self.exam = ExamController(
            self.session.repository,
            self.generator,
            self.shuffler,
            scheduler=scheduler,
            tick_seconds=self.settings.tick_seconds,
        )

    def _restore(self) -> QuizSession:
        default_subject = self.settings.default_subject
        questions = self.persistence.load_questions()
        try:
            repository = QuestionRepository(questions, self.persistence.load_subject(), default_subject)
        except InvalidConfig as e:
            logger.warning(f"Stored question bank ignored: {e}")
            repository = QuestionRepository(default_subject=default_subject)

        known = {q.id for q in repository}
        session = QuizSession(repository=repository)
        session.score, session.attempts = self.persistence.load_tally()
        session.wrong_ids = dict.fromkeys(i for i in self.persistence.load_wrong() if i in known)
        session.bookmark_ids = dict.fromkeys(i for i in self.persistence.load_bookmarks() if i in known)
        logger.debug(
            f"Restored {repository.size} questions, {len(session.wrong_ids)} errors, "
            f"{len(session.bookmark_ids)} bookmarks"
        )
        return session

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def repository(self) -> QuestionRepository:
        return self.session.repository

    @property
    def mode(self) -> AppMode:
        if self.exam.phase == ExamPhase.RUNNING:
            return AppMode.EXAM
        if self.exam.phase == ExamPhase.FINISHED:
            return AppMode.EXAM_RESULT
        return AppMode.PRACTICE

    def snapshot(self) -> EngineSnapshot:
        return EngineSnapshot(
            mode=self.mode,
            subject=self.repository.subject,
            repository_size=self.repository.size,
            score=self.session.score,
            attempts=self.session.attempts,
            wrong_ids=tuple(self.session.wrong_ids),
            bookmark_ids=tuple(self.session.bookmark_ids),
            view=self.practice.view,
            practice=self.practice.snapshot(),
            exam=self.exam.snapshot(),
        )

    def tutor_context(self) -> TutorContext | None:
        """Read-only context for a tutoring assistant, None when nothing is shown."""
        if self.mode == AppMode.EXAM:
            exam = self.exam.snapshot()
            question, options = (exam.question, exam.options) if exam else (None, ())
        else:
            question, options = self.practice.question, tuple(self.practice.options)
        if question is None:
            return None
        return TutorContext(
            question=question.question,
            options=tuple(options),
            correct_answer=question.correct,
            subject=self.repository.subject,
        )

    def _require_practice(self) -> None:
        if self.mode == AppMode.EXAM:
            raise InvalidState("An exam is in progress.")
        if self.mode == AppMode.EXAM_RESULT:
            raise InvalidState("Close the exam results first.")

    # ------------------------------------------------------------------
    # Persistence mirroring
    # ------------------------------------------------------------------

    def _save_progress(self) -> None:
        self.persistence.save_tally(self.session.score, self.session.attempts)
        self.persistence.save_wrong(self.session.wrong_ids)

    def _save_all(self) -> None:
        self.persistence.save_questions(self.repository.questions)
        self.persistence.save_subject(self.repository.subject)
        self._save_progress()
        self.persistence.save_bookmarks(self.session.bookmark_ids)

    # ------------------------------------------------------------------
    # Bank commands
    # ------------------------------------------------------------------

    def import_document(
        self, document: Any, extractor: QuestionExtractor, subject: str | None = None
    ) -> EngineSnapshot:
        """Run an external extractor over a document and import its questions."""
        return self.import_questions(extractor(document), subject)

    def import_questions(self, questions: Sequence[Question], subject: str | None = None) -> EngineSnapshot:
        """
        Replace the whole bank; all prior progress is cleared.

        Zero questions leaves everything untouched.
        """
        questions = list(questions)
        if not questions:
            logger.warning("Import produced no questions; keeping the current bank")
            return self.snapshot()

        self.repository.replace(questions, subject)
        self.exam.abandon()
        self.session.clear_progress()
        self.practice.reload(ChangeKind.IMPORT)
        self._save_all()
        return self.snapshot()

    def reset(self) -> EngineSnapshot:
        self.exam.abandon()
        self.repository.reset()
        self.session.clear_progress()
        self.persistence.clear()
        self.practice.reload(ChangeKind.RESET)
        return self.snapshot()

    def rename_subject(self, subject: str) -> EngineSnapshot:
        self.repository.rename_subject(subject)
        self.persistence.save_subject(self.repository.subject)
        return self.snapshot()

    def search(self, term: str) -> list[Question]:
        self._require_practice()
        return self.repository.search(term, self.settings.search_limit)

    # ------------------------------------------------------------------
    # Practice commands
    # ------------------------------------------------------------------

    def set_filter_mode(self, mode: FilterMode | str) -> EngineSnapshot:
        self._require_practice()
        self.practice.set_filter(FilterMode(mode))
        return self.snapshot()

    def toggle_shuffle(self) -> EngineSnapshot:
        self._require_practice()
        self.practice.toggle_shuffle()
        return self.snapshot()

    def select_answer(self, option: str) -> EngineSnapshot:
        self._require_practice()
        self.practice.select_answer(option)
        self._save_progress()
        return self.snapshot()

    def next(self) -> EngineSnapshot:
        self._require_practice()
        self.practice.next()
        return self.snapshot()

    def prev(self) -> EngineSnapshot:
        self._require_practice()
        self.practice.prev()
        return self.snapshot()

    def retry(self) -> EngineSnapshot:
        self._require_practice()
        self.practice.retry()
        return self.snapshot()

    def hint(self) -> EngineSnapshot:
        self._require_practice()
        self.practice.hint()
        return self.snapshot()

    def toggle_bookmark(self) -> EngineSnapshot:
        self._require_practice()
        self.practice.toggle_bookmark()
        self.persistence.save_bookmarks(self.session.bookmark_ids)
        return self.snapshot()

    def jump_to(self, question_id: int) -> EngineSnapshot:
        self._require_practice()
        self.practice.jump_to(question_id)
        return self.snapshot()

    def open_question(self, question_id: int) -> EngineSnapshot:
        """Jump to a question, widening the filter to ALL if it is not in view."""
        self._require_practice()
        if self.repository.get(question_id) is None:
            raise NotFound(question_id, "bank")
        if index_of(self.practice.view.questions, question_id) is None:
            self.practice.set_filter(FilterMode.ALL)
        self.practice.jump_to(question_id)
        return self.snapshot()

    # ------------------------------------------------------------------
    # Exam commands
    # ------------------------------------------------------------------

    def exam_defaults(self) -> tuple[int, int]:
        """Suggested (count, minutes) for a new exam."""
        return (
            min(self.settings.exam_default_max_questions, self.repository.size),
            self.settings.exam_default_minutes,
        )

    def start_exam(self, count: int, minutes: int) -> EngineSnapshot:
        """Start a new exam; unacknowledged results survive an invalid request."""
        self.exam.start(count, minutes)
        return self.snapshot()

    def exam_select_answer(self, option: str) -> EngineSnapshot:
        self.exam.select_answer(option)
        return self.snapshot()

    def exam_next(self) -> EngineSnapshot:
        self.exam.next()
        return self.snapshot()

    def exam_prev(self) -> EngineSnapshot:
        self.exam.prev()
        return self.snapshot()

    def submit_exam(self) -> ExamResult:
        return self.exam.submit()

    def finish_exam(self) -> EngineSnapshot:
        """Acknowledge results and return to practice."""
        if self.mode == AppMode.EXAM:
            raise InvalidState("Submit the exam before closing it.")
        self.exam.discard()
        return self.snapshot()

    def abandon_exam(self) -> EngineSnapshot:
        self.exam.abandon()
        return self.snapshot()

    def close(self) -> None:
        """Release the countdown if an exam is still running."""
        self.exam.abandon()
