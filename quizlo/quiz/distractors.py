"""
Distractor Generator.

Builds a multiple-choice option set for questions that ship without
explicit options. Wrong answers are borrowed from other questions in the
bank, preferring neighbours in source order (adjacent questions in a
document usually share a sub-topic).

Selection tiers:
1. Explicit options on the question (shuffled, never generated)
2. Neighbourhood window of +/- radius positions, quality-filtered
3. Top-up from the whole bank when the window runs dry
"""
from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

from loguru import logger

from quizlo.core.models import Question
from quizlo.core.shuffle import Shuffler

DEFAULT_STOP_TOKENS = (
    "PAGE", "CHAPTER", "LESSON", "QUESTION",
    "PAGINA", "CAPITOLO", "LEZIONE", "DOMANDA",
)

# Answers this short are parsing noise, not options.
MIN_LENGTH = 3

_INTEGER = re.compile(r"^\d+$")
_DECIMAL = re.compile(r"^\d+[.,]\d+$")


def is_numeric(text: str) -> bool:
    return bool(_INTEGER.match(text) or _DECIMAL.match(text))


class DistractorGenerator:
    """Produces shuffled option lists containing the correct answer once."""

    def __init__(
        self,
        shuffler: Shuffler | None = None,
        radius: int = 20,
        distractor_count: int = 3,
        stop_tokens: Iterable[str] = DEFAULT_STOP_TOKENS,
    ):
        self.shuffler = shuffler or Shuffler()
        self.radius = radius
        self.distractor_count = distractor_count
        self.stop_tokens = tuple(t.upper() for t in stop_tokens if t)

    def generate(self, question: Question, questions: Sequence[Question]) -> list[str]:
        """
        Build the option list for a question.

        Args:
            question: Question being presented
            questions: Full repository in source order

        Returns:
            Shuffled options with the trimmed correct answer exactly once
        """
        if question.has_options:
            return self.shuffler.shuffle(question.options)

        correct = question.correct
        position = next((i for i, q in enumerate(questions) if q.id == question.id), None)

        if position is None:
            others = _unique(
                ans for ans in (q.answer.strip() for q in questions if q.id != question.id)
                if ans != correct
            )
            drawn = self.shuffler.sample(others, self.distractor_count)
            logger.debug(f"Question {question.id} not in bank, drew {len(drawn)} random distractors")
            return self.shuffler.shuffle(drawn + [correct])

        start = max(0, position - self.radius)
        end = min(len(questions), position + self.radius + 1)
        neighbours = questions[start:end]

        candidates = _unique(
            ans for ans in (q.answer.strip() for q in neighbours)
            if self.is_plausible(ans, correct)
        )
        selected = self.shuffler.shuffle(candidates)[: self.distractor_count]

        if len(selected) < self.distractor_count:
            needed = self.distractor_count - len(selected)
            excluded = set(candidates)
            pool = _unique(
                ans for ans in (q.answer.strip() for q in questions if q.id != question.id)
                if ans not in excluded and len(ans) >= MIN_LENGTH and ans != correct
            )
            top_up = self.shuffler.shuffle(pool)[:needed]
            logger.debug(
                f"Question {question.id}: {len(selected)} neighbour distractors, "
                f"{len(top_up)} from the whole bank"
            )
            selected.extend(top_up)

        return self.shuffler.shuffle(selected + [correct])

    def is_plausible(self, candidate: str, correct: str) -> bool:
        """Quality filter for a neighbourhood candidate."""
        if candidate == correct:
            return False
        if len(candidate) < MIN_LENGTH:
            return False
        # Numeric answers are treated as parsing noise, even in numeric banks.
        if is_numeric(candidate):
            return False
        upper = candidate.upper()
        return not any(token in upper for token in self.stop_tokens)


def _unique(items: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(items))
