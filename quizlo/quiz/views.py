"""
View & Index Resolver.

Derives the active question list from the repository, the filter mode,
the wrong-answer and bookmark sets and the shuffle state, and keeps the
current index inside that list whenever any of them changes.
"""
from __future__ import annotations

from collections.abc import Collection, Sequence
from dataclasses import dataclass, field
from enum import Enum

from loguru import logger

from quizlo.core.models import FilterMode, Question, ViewSnapshot
from quizlo.core.shuffle import Shuffler


class ChangeKind(str, Enum):
    """What triggered a view recompute."""

    IMPORT = "import"
    RESTORE = "restore"
    RESET = "reset"
    FILTER = "filter"
    SHUFFLE = "shuffle"
    WRONG_SET = "wrong_set"
    BOOKMARKS = "bookmarks"
    NAVIGATION = "navigation"


def active_list(
    questions: Sequence[Question],
    filter_mode: FilterMode,
    wrong_ids: Collection[int],
    bookmark_ids: Collection[int],
    shuffle_order: Sequence[int] | None = None,
) -> tuple[Question, ...]:
    """
    Compute the ordered list of questions currently being navigated.

    Starts from repository order (or the frozen shuffle permutation), then
    keeps only wrong-set or bookmark members for ERRORS / BOOKMARKS.
    """
    if shuffle_order is not None and len(shuffle_order) == len(questions):
        base = [questions[pos] for pos in shuffle_order]
    else:
        base = list(questions)

    if filter_mode == FilterMode.ERRORS:
        wanted = set(wrong_ids)
        base = [q for q in base if q.id in wanted]
    elif filter_mode == FilterMode.BOOKMARKS:
        wanted = set(bookmark_ids)
        base = [q for q in base if q.id in wanted]
    return tuple(base)


def clamp_index(index: int, length: int) -> int:
    if length <= 0:
        return 0
    return min(max(0, index), length - 1)


def index_of(questions: Sequence[Question], question_id: int) -> int | None:
    for i, q in enumerate(questions):
        if q.id == question_id:
            return i
    return None


@dataclass
class ViewState:
    """Mutable view settings owned by the quiz session."""

    filter_mode: FilterMode = FilterMode.ALL
    shuffled: bool = False
    shuffle_order: tuple[int, ...] = field(default_factory=tuple)
    current_index: int = 0

    def reset(self) -> None:
        self.filter_mode = FilterMode.ALL
        self.shuffled = False
        self.shuffle_order = ()
        self.current_index = 0

    def set_filter(self, mode: FilterMode) -> None:
        self.filter_mode = FilterMode(mode)
        self.current_index = 0

    def toggle_shuffle(self, size: int, shuffler: Shuffler) -> bool:
        """Freeze a new permutation (or drop it) and restart from the top."""
        if self.shuffled:
            self.shuffled = False
            self.shuffle_order = ()
        else:
            self.shuffled = True
            self.shuffle_order = shuffler.permutation(size)
        self.current_index = 0
        return self.shuffled

    @property
    def order(self) -> tuple[int, ...] | None:
        return self.shuffle_order if self.shuffled else None


def resolve(
    state: ViewState,
    questions: Sequence[Question],
    wrong_ids: Collection[int],
    bookmark_ids: Collection[int],
    trigger: ChangeKind,
) -> ViewSnapshot:
    """Recompute the active list, reconcile the index and snapshot the result."""
    items = active_list(questions, state.filter_mode, wrong_ids, bookmark_ids, state.order)
    clamped = clamp_index(state.current_index, len(items))
    if clamped != state.current_index:
        logger.debug(
            f"View index clamped {state.current_index} -> {clamped} "
            f"after {trigger.value} ({len(items)} in view)"
        )
        state.current_index = clamped
    return ViewSnapshot(
        questions=items,
        current_index=state.current_index,
        filter_mode=state.filter_mode,
        shuffled=state.shuffled,
    )
