"""
Error taxonomy for the quiz engine.

Every failure is reported synchronously to the caller; nothing in the
engine retries. An empty filtered view is a state, not an error.
"""

from __future__ import annotations


class QuizError(Exception):
    """Base class for engine errors surfaced to the UI layer."""


class InvalidConfig(QuizError):
    """Raised when exam or import configuration is out of range."""


class NotFound(QuizError):
    """Raised when a question id is absent from the view being navigated."""

    def __init__(self, question_id: int, scope: str):
        self.question_id = question_id
        self.scope = scope
        super().__init__(f"Question #{question_id} is not in the current list ({scope}).")


class InvalidState(QuizError):
    """Raised when an operation is not legal in the current state."""


class StoreError(Exception):
    """Raised by key-value stores when the backing storage fails."""
