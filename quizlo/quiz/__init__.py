"""
Quiz module for the question bank and what is derived from it.

This module provides:
- QuestionRepository: the imported bank plus its subject label
- DistractorGenerator: option sets for questions without explicit options
- ViewState / resolve: filtered, optionally shuffled views with index reconciliation

Filter Modes:
- all: every question in the bank
- errors: questions with an unresolved wrong answer
- bookmarks: questions the user starred
"""

from .distractors import DistractorGenerator
from .repository import DEFAULT_SUBJECT, QuestionRepository
from .views import ChangeKind, ViewState, active_list, clamp_index, index_of, resolve

__all__ = [
    "ChangeKind",
    "DEFAULT_SUBJECT",
    "DistractorGenerator",
    "QuestionRepository",
    "ViewState",
    "active_list",
    "clamp_index",
    "index_of",
    "resolve",
]
