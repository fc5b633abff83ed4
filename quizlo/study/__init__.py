"""
Study Module - the interactive state machines.

Provides:
- QuizSession: owned practice state (bank, view, wrong set, bookmarks, tally)
- PracticeController: untimed answer / retry / hint / navigation loop
- ExamController: timed exam with forced submission on timeout
- QuizEngine: command facade used by the CLI
"""

from quizlo.study.countdown import Countdown, Scheduler, ThreadingScheduler
from quizlo.study.engine import QuestionExtractor, QuizEngine
from quizlo.study.exam import PASS_RATIO, ExamController, ExamSession, format_clock, pass_mark
from quizlo.study.practice import PracticeController
from quizlo.study.session import QuizSession

__all__ = [
    "PASS_RATIO",
    "Countdown",
    "ExamController",
    "ExamSession",
    "PracticeController",
    "QuestionExtractor",
    "QuizEngine",
    "QuizSession",
    "Scheduler",
    "ThreadingScheduler",
    "format_clock",
    "pass_mark",
]
