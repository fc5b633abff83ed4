"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from quizlo.config import Settings
from quizlo.core.models import Question
from quizlo.core.shuffle import Shuffler
from quizlo.db.persistence import PersistenceAdapter
from quizlo.db.store import MemoryStore
from quizlo.study.engine import QuizEngine


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(autouse=True)
def setup_logging():
    """Send loguru output to stderr at DEBUG for the duration of a test."""
    from loguru import logger

    logger.remove()
    logger.add(sys.stderr, level="DEBUG", format="<level>{level: <8}</level> | {message}")
    yield
    logger.remove()


# ============================================================================
# Test doubles
# ============================================================================


class IdentityShuffler(Shuffler):
    """Never reorders; sample() takes the first k items."""

    def shuffle(self, items):
        return list(items)


class ReversingShuffler(Shuffler):
    """Reverses order, so a shuffled view is easy to predict."""

    def shuffle(self, items):
        return list(reversed(list(items)))


class ManualTask:
    def __init__(self, interval, callback):
        self.interval = interval
        self.callback = callback
        self.cancelled = False
        self.elapsed = 0.0

    def cancel(self):
        self.cancelled = True


class ManualScheduler:
    """Fires periodic callbacks only when the test advances time."""

    def __init__(self):
        self.tasks: list[ManualTask] = []

    def every(self, interval, callback):
        task = ManualTask(interval, callback)
        self.tasks.append(task)
        return task

    @property
    def active_tasks(self) -> list[ManualTask]:
        return [t for t in self.tasks if not t.cancelled]

    def advance(self, seconds: float) -> None:
        steps = int(round(seconds))
        for _ in range(steps):
            for task in self.active_tasks:
                task.elapsed += 1
                if task.elapsed >= task.interval:
                    task.elapsed = 0.0
                    task.callback()


# ============================================================================
# Question banks
# ============================================================================

ANATOMY = [
    ("Which bone protects the brain?", "Skull"),
    ("Longest bone of the human body?", "Femur"),
    ("Bone of the upper arm?", "Humerus"),
    ("Kneecap is also called?", "Patella"),
    ("Collarbone is also called?", "Clavicle"),
    ("Shoulder blade is also called?", "Scapula"),
    ("Lower jaw bone?", "Mandible"),
    ("Breastbone is also called?", "Sternum"),
    ("Smallest bone in the body?", "Stapes"),
    ("Outer bone of the forearm?", "Radius"),
]


def make_questions(count: int, start: int = 1) -> list[Question]:
    """Bank of distinct, non-numeric text answers."""
    return [
        Question(id=start + i, question=f"Question text {start + i}?", answer=f"Answer {chr(65 + i % 26)}{i}")
        for i in range(count)
    ]


@pytest.fixture
def anatomy_bank() -> list[Question]:
    return [Question(id=i, question=q, answer=a) for i, (q, a) in enumerate(ANATOMY, 1)]


@pytest.fixture
def shuffler() -> IdentityShuffler:
    return IdentityShuffler()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(data_dir=tmp_path, log_file=None)


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def engine(store, settings, shuffler, scheduler):
    """Engine over an empty in-memory store."""
    engine = QuizEngine(PersistenceAdapter(store), settings=settings, shuffler=shuffler, scheduler=scheduler)
    yield engine
    engine.close()


@pytest.fixture
def loaded_engine(engine, anatomy_bank):
    """Engine with the ten-question anatomy bank imported."""
    engine.import_questions(anatomy_bank, "Anatomy")
    return engine


@pytest.fixture
def bank_factory():
    return make_questions


@pytest.fixture
def reversing_shuffler() -> ReversingShuffler:
    return ReversingShuffler()
