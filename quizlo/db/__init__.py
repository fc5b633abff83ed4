"""
State storage for quizlo.

- store: key-value backends (JSON file, SQLAlchemy table, memory)
- persistence: field-level load/save with documented defaults
"""

from quizlo.db.persistence import PersistenceAdapter
from quizlo.db.store import (
    JsonFileStore,
    KeyValueStore,
    MemoryStore,
    SqlKeyValueStore,
    build_store,
)

__all__ = [
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "PersistenceAdapter",
    "SqlKeyValueStore",
    "build_store",
]
