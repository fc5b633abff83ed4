"""
Key-value stores for persisted quiz state.

Backends:
- JsonFileStore: one JSON document on disk (default, offline friendly)
- SqlKeyValueStore: a single SQLAlchemy table, SQLite by default
- MemoryStore: in-process dict, for tests and throwaway sessions

Values are always strings; the persistence adapter owns (de)serialization.
"""
from __future__ import annotations

import json
import os
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Protocol

from loguru import logger
from sqlalchemy import String, Text, create_engine, delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker

from quizlo.config import Settings
from quizlo.core.errors import StoreError


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...

    def clear(self) -> None: ...


class MemoryStore:
    """Dict-backed store."""

    def __init__(self, data: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(data or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)

    def clear(self) -> None:
        self.data.clear()


class JsonFileStore:
    """
    All keys in one JSON object on disk.

    A missing or corrupted file reads as empty. Writes go to a temporary
    file first and replace the original in one step.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning(f"State file {self.path} is corrupted, starting empty")
            return {}
        except OSError as e:
            raise StoreError(f"Cannot read {self.path}: {e}") from e
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _write(self, data: dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(self.path.suffix + ".tmp")
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp, self.path)
        except OSError as e:
            raise StoreError(f"Cannot write {self.path}: {e}") from e

    def get(self, key: str) -> str | None:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def delete(self, key: str) -> None:
        data = self._read()
        if data.pop(key, None) is not None:
            self._write(data)

    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            raise StoreError(f"Cannot remove {self.path}: {e}") from e


class Base(DeclarativeBase):
    pass


class StateEntry(Base):
    __tablename__ = "quiz_state"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)


class SqlKeyValueStore:
    """Key-value pairs in the quiz_state table."""

    def __init__(self, database_url: str):
        self.database_url = database_url
        if database_url.startswith("sqlite:///"):
            Path(database_url.removeprefix("sqlite:///")).parent.mkdir(parents=True, exist_ok=True)
        self.engine = create_engine(database_url, pool_pre_ping=True)
        self._sessions = sessionmaker(bind=self.engine, autoflush=False)
        try:
            Base.metadata.create_all(bind=self.engine)
        except SQLAlchemyError as e:
            raise StoreError(f"Cannot initialize state table: {e}") from e

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """Provide a transactional scope around a series of operations."""
        session = self._sessions()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise StoreError(str(e)) from e
        finally:
            session.close()

    def get(self, key: str) -> str | None:
        with self.session_scope() as session:
            return session.scalar(select(StateEntry.value).where(StateEntry.key == key))

    def set(self, key: str, value: str) -> None:
        with self.session_scope() as session:
            session.merge(StateEntry(key=key, value=value))

    def delete(self, key: str) -> None:
        with self.session_scope() as session:
            session.execute(delete(StateEntry).where(StateEntry.key == key))

    def clear(self) -> None:
        with self.session_scope() as session:
            session.execute(delete(StateEntry))


def build_store(settings: Settings) -> KeyValueStore:
    """Pick the backend named by settings.state_backend."""
    if settings.state_backend == "sql":
        url = settings.get_database_url()
        logger.debug(f"Using SQL state store at {url}")
        return SqlKeyValueStore(url)
    logger.debug(f"Using JSON state store at {settings.state_path}")
    return JsonFileStore(settings.state_path)
