"""
Core Module - Shared domain models, errors and randomness.

All other modules (quiz/, study/, db/) import from quizlo.core rather
than redefining questions, snapshots or error types.
"""

from quizlo.core.errors import (
    InvalidConfig,
    InvalidState,
    NotFound,
    QuizError,
    StoreError,
)
from quizlo.core.models import (
    AppMode,
    EngineSnapshot,
    ExamPhase,
    ExamResult,
    ExamSnapshot,
    FilterMode,
    PracticePhase,
    PracticeSnapshot,
    Question,
    ReviewRow,
    TutorContext,
    ViewSnapshot,
)
from quizlo.core.shuffle import Shuffler

__all__ = [
    "AppMode",
    "EngineSnapshot",
    "ExamPhase",
    "ExamResult",
    "ExamSnapshot",
    "FilterMode",
    "InvalidConfig",
    "InvalidState",
    "NotFound",
    "PracticePhase",
    "PracticeSnapshot",
    "Question",
    "QuizError",
    "ReviewRow",
    "Shuffler",
    "StoreError",
    "TutorContext",
    "ViewSnapshot",
]
