"""
Exam Session Controller.

Timed mock exam over a fixed random sample of the bank:

    CONFIGURING --start--> RUNNING --submit / next on last / timeout--> FINISHED

Exam state is disjoint from practice: it keeps its own index and never
touches the wrong-answer or bookmark sets. Answers may be changed freely
until the exam is submitted. The countdown is owned by the RUNNING state
and released on every path out of it.
"""
from __future__ import annotations

import math
import threading
from contextlib import ExitStack
from dataclasses import dataclass, field
from fractions import Fraction

from loguru import logger

from quizlo.core.errors import InvalidConfig, InvalidState
from quizlo.core.models import ExamPhase, ExamResult, ExamSnapshot, Question, ReviewRow
from quizlo.core.shuffle import Shuffler
from quizlo.quiz.distractors import DistractorGenerator
from quizlo.quiz.repository import QuestionRepository
from quizlo.study.countdown import Countdown, Scheduler, ThreadingScheduler

PASS_RATIO = Fraction(3, 5)


def pass_mark(total: int) -> int:
    """Minimum correct answers needed to pass an exam of this size."""
    return math.ceil(PASS_RATIO * total)


@dataclass
class ExamSession:
    """One timed exam; discarded when its results are acknowledged."""

    questions: tuple[Question, ...]
    time_remaining: int
    answers: dict[int, str] = field(default_factory=dict)
    options: dict[int, tuple[str, ...]] = field(default_factory=dict)
    current_index: int = 0
    timed_out: bool = False
    result: ExamResult | None = None

    @property
    def current(self) -> Question:
        return self.questions[self.current_index]

    @property
    def total(self) -> int:
        return len(self.questions)


class ExamController:
    """State machine for timed exams."""

    def __init__(
        self,
        repository: QuestionRepository,
        generator: DistractorGenerator,
        shuffler: Shuffler | None = None,
        scheduler: Scheduler | None = None,
        tick_seconds: float = 1.0,
    ):
        self.repository = repository
        self.generator = generator
        self.shuffler = shuffler or generator.shuffler
        self.scheduler = scheduler or ThreadingScheduler()
        self.tick_seconds = tick_seconds

        self.phase = ExamPhase.CONFIGURING
        self.exam: ExamSession | None = None
        self.selected: str | None = None
        self._lock = threading.RLock()
        self._scope = ExitStack()
        self._countdown: Countdown | None = None

    @property
    def countdown_active(self) -> bool:
        return self._countdown is not None and self._countdown.active

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, count: int, minutes: int) -> ExamSnapshot:
        """
        Sample questions and start the countdown.

        Raises:
            InvalidConfig: count outside 1..bank size, or minutes below 1
            InvalidState: an exam is already running

        A finished exam is discarded only once the new configuration is valid.
        """
        with self._lock:
            self.validate(count, minutes)
            self._drop()

            questions = tuple(self.shuffler.sample(self.repository.questions, count))
            self.exam = ExamSession(questions=questions, time_remaining=minutes * 60)
            self.selected = None
            self.phase = ExamPhase.RUNNING

            self._scope = ExitStack()
            self._countdown = self._scope.enter_context(
                Countdown(self.scheduler, self.tick_seconds, self.tick)
            )
            logger.info(f"Exam started: {count} questions, {minutes} min")
            return self.snapshot()

    def validate(self, count: int, minutes: int) -> None:
        """Check a start request without touching any state."""
        if self.phase == ExamPhase.RUNNING:
            raise InvalidState("An exam is already running.")
        size = self.repository.size
        if size == 0:
            raise InvalidConfig("The question bank is empty.")
        if not 1 <= count <= size:
            raise InvalidConfig(f"Question count must be between 1 and {size}.")
        if minutes < 1:
            raise InvalidConfig("Exam duration must be at least 1 minute.")

    def tick(self) -> None:
        """One countdown second; reaching zero submits whatever was answered."""
        with self._lock:
            if self.phase != ExamPhase.RUNNING or self.exam is None:
                return
            self.exam.time_remaining = max(0, self.exam.time_remaining - 1)
            if self.exam.time_remaining == 0:
                self.exam.timed_out = True
                logger.info("Exam time is up, submitting")
                self._finish()

    def submit(self) -> ExamResult:
        with self._lock:
            self._require_running()
            return self._finish()

    def abandon(self) -> None:
        """Leave a running exam without results."""
        with self._lock:
            if self.phase == ExamPhase.RUNNING:
                logger.info("Exam abandoned")
            self._drop()

    def discard(self) -> None:
        """Acknowledge results and throw the exam away."""
        with self._lock:
            self._drop()

    def _finish(self) -> ExamResult:
        exam = self._require_running()
        self._release()
        self.phase = ExamPhase.FINISHED
        exam.result = self._score(exam)
        logger.info(
            f"Exam finished: {exam.result.correct_count}/{exam.result.total} correct, "
            f"{'passed' if exam.result.passed else 'failed'}"
            f"{' (timed out)' if exam.timed_out else ''}"
        )
        return exam.result

    def _drop(self) -> None:
        self._release()
        self.exam = None
        self.selected = None
        self.phase = ExamPhase.CONFIGURING

    def _release(self) -> None:
        self._scope.close()
        self._countdown = None

    @staticmethod
    def _score(exam: ExamSession) -> ExamResult:
        review = tuple(
            ReviewRow(question=q, chosen=exam.answers.get(q.id), correct=q.is_correct(exam.answers.get(q.id)))
            for q in exam.questions
        )
        correct_count = sum(1 for row in review if row.correct)
        mark = pass_mark(exam.total)
        return ExamResult(
            correct_count=correct_count,
            total=exam.total,
            passed=correct_count >= mark,
            pass_mark=mark,
            timed_out=exam.timed_out,
            review=review,
        )

    # ------------------------------------------------------------------
    # Answering & navigation
    # ------------------------------------------------------------------

    def options_for(self, question: Question) -> tuple[str, ...]:
        exam = self.exam
        if exam is None:
            raise InvalidState("No exam is in progress.")
        if question.id not in exam.options:
            exam.options[question.id] = tuple(
                self.generator.generate(question, self.repository.questions)
            )
        return exam.options[question.id]

    def select_answer(self, option: str) -> None:
        with self._lock:
            exam = self._require_running()
            question = exam.current
            if option not in self.options_for(question):
                raise InvalidState(f"'{option}' is not one of the offered options.")
            exam.answers[question.id] = option
            self.selected = option

    def next(self) -> ExamSnapshot:
        with self._lock:
            exam = self._require_running()
            if exam.current_index < exam.total - 1:
                self._move(exam, exam.current_index + 1)
            else:
                self._finish()
            return self.snapshot()

    def prev(self) -> ExamSnapshot:
        with self._lock:
            exam = self._require_running()
            if exam.current_index > 0:
                self._move(exam, exam.current_index - 1)
            return self.snapshot()

    def _move(self, exam: ExamSession, index: int) -> None:
        exam.current_index = index
        self.selected = exam.answers.get(exam.current.id)

    def _require_running(self) -> ExamSession:
        if self.phase != ExamPhase.RUNNING or self.exam is None:
            raise InvalidState("No exam is running.")
        return self.exam

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def snapshot(self) -> ExamSnapshot | None:
        with self._lock:
            exam = self.exam
            if exam is None:
                return None
            question = exam.current if exam.questions else None
            return ExamSnapshot(
                phase=self.phase,
                question=question,
                options=self.options_for(question) if question is not None else (),
                selected=self.selected,
                current_index=exam.current_index,
                total=exam.total,
                time_remaining=exam.time_remaining,
                answered=len(exam.answers),
                result=exam.result,
            )


def format_clock(seconds: int) -> str:
    """mm:ss rendering of a remaining-time value."""
    minutes, secs = divmod(max(0, seconds), 60)
    return f"{minutes:02d}:{secs:02d}"
