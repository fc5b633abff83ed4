"""
Unit tests for state stores and the persistence adapter.

Run: pytest tests/unit/test_persistence.py -v
"""

import json

import pytest

from quizlo.config import Settings
from quizlo.core.errors import StoreError
from quizlo.core.models import FilterMode
from quizlo.db.persistence import (
    KEY_ATTEMPTS,
    KEY_BOOKMARKS,
    KEY_QUESTIONS,
    KEY_SCORE,
    KEY_SUBJECT,
    KEY_WRONG,
    PersistenceAdapter,
)
from quizlo.db.store import JsonFileStore, MemoryStore, SqlKeyValueStore, build_store
from quizlo.study.engine import QuizEngine


class BrokenStore:
    """Every operation fails the way an unavailable backend would."""

    def get(self, key):
        raise StoreError("disk unavailable")

    def set(self, key, value):
        raise StoreError("disk unavailable")

    def delete(self, key):
        raise StoreError("disk unavailable")

    def clear(self):
        raise StoreError("disk unavailable")


@pytest.fixture(params=["memory", "json", "sql"])
def any_store(request, tmp_path):
    if request.param == "memory":
        return MemoryStore()
    if request.param == "json":
        return JsonFileStore(tmp_path / "state.json")
    return SqlKeyValueStore(f"sqlite:///{tmp_path / 'state.db'}")


# ============================================================================
# Stores
# ============================================================================


class TestStores:
    def test_set_get_roundtrip(self, any_store):
        any_store.set("quiz_subject", "Anatomia")
        any_store.set("quiz_subject", "Anatomy")
        assert any_store.get("quiz_subject") == "Anatomy"

    def test_missing_key(self, any_store):
        assert any_store.get("nope") is None

    def test_delete(self, any_store):
        any_store.set("a", "1")
        any_store.set("b", "2")
        any_store.delete("a")
        any_store.delete("missing")

        assert any_store.get("a") is None
        assert any_store.get("b") == "2"

    def test_clear(self, any_store):
        any_store.set("a", "1")
        any_store.clear()
        assert any_store.get("a") is None


class TestJsonFileStore:
    def test_corrupted_file_reads_empty(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("{not json", encoding="utf-8")

        store = JsonFileStore(path)
        assert store.get("quiz_score") is None

        store.set("quiz_score", "3")
        assert json.loads(path.read_text(encoding="utf-8")) == {"quiz_score": "3"}

    def test_creates_parent_directory(self, tmp_path):
        store = JsonFileStore(tmp_path / "nested" / "dir" / "state.json")
        store.set("k", "v")
        assert (tmp_path / "nested" / "dir" / "state.json").exists()

    def test_no_temp_file_left_behind(self, tmp_path):
        store = JsonFileStore(tmp_path / "state.json")
        store.set("k", "v")
        assert [p.name for p in tmp_path.iterdir()] == ["state.json"]


class TestBuildStore:
    def test_json_by_default(self, tmp_path):
        store = build_store(Settings(data_dir=tmp_path))
        assert isinstance(store, JsonFileStore)
        assert store.path == tmp_path / "state.json"

    def test_sql_backend_defaults_to_sqlite(self, tmp_path):
        store = build_store(Settings(data_dir=tmp_path, state_backend="sql"))
        assert isinstance(store, SqlKeyValueStore)
        store.set("k", "v")
        assert (tmp_path / "quizlo.db").exists()


# ============================================================================
# Persistence adapter
# ============================================================================


class TestPersistenceAdapter:
    def test_defaults_on_empty_store(self):
        adapter = PersistenceAdapter(MemoryStore())

        assert adapter.load_questions() == []
        assert adapter.load_subject() == "General Subject"
        assert adapter.load_tally() == (0, 0)
        assert adapter.load_wrong() == []
        assert adapter.load_bookmarks() == []

    def test_roundtrip(self, anatomy_bank):
        adapter = PersistenceAdapter(MemoryStore())
        adapter.save_questions(anatomy_bank)
        adapter.save_subject("Anatomy")
        adapter.save_tally(4, 7)
        adapter.save_wrong([3, 1])
        adapter.save_bookmarks([9])

        assert adapter.load_questions() == anatomy_bank
        assert adapter.load_subject() == "Anatomy"
        assert adapter.load_tally() == (4, 7)
        assert adapter.load_wrong() == [3, 1]
        assert adapter.load_bookmarks() == [9]

    def test_values_stored_as_documented(self):
        store = MemoryStore()
        adapter = PersistenceAdapter(store)
        adapter.save_tally(2, 5)
        adapter.save_wrong([4])

        assert store.data[KEY_SCORE] == "2"
        assert store.data[KEY_ATTEMPTS] == "5"
        assert json.loads(store.data[KEY_WRONG]) == [4]

    def test_malformed_values_fall_back(self):
        store = MemoryStore(
            {
                KEY_QUESTIONS: "[{broken",
                KEY_SUBJECT: "   ",
                KEY_SCORE: "many",
                KEY_ATTEMPTS: "-4",
                KEY_WRONG: '{"id": 1}',
                KEY_BOOKMARKS: '[2, "x", 2, "5"]',
            }
        )
        adapter = PersistenceAdapter(store, default_subject="Materia Generale")

        assert adapter.load_questions() == []
        assert adapter.load_subject() == "Materia Generale"
        assert adapter.load_tally() == (0, 0)
        assert adapter.load_wrong() == []
        assert adapter.load_bookmarks() == [2, 5]

    def test_malformed_question_skipped(self):
        store = MemoryStore(
            {KEY_QUESTIONS: json.dumps([{"id": 1, "question": "Q?", "answer": "A"}, {"id": 2}])}
        )
        questions = PersistenceAdapter(store).load_questions()
        assert [q.id for q in questions] == [1]

    def test_failing_store_is_not_raised(self, anatomy_bank):
        adapter = PersistenceAdapter(BrokenStore())

        adapter.save_questions(anatomy_bank)
        adapter.save_tally(1, 1)
        adapter.clear()

        assert adapter.load_tally() == (0, 0)
        assert adapter.load_questions() == []


# ============================================================================
# Engine restore
# ============================================================================


def build_engine(store, settings, shuffler, scheduler):
    return QuizEngine(PersistenceAdapter(store), settings=settings, shuffler=shuffler, scheduler=scheduler)


class TestEngineRestore:
    def test_state_survives_restart(self, store, settings, shuffler, scheduler, anatomy_bank):
        first = build_engine(store, settings, shuffler, scheduler)
        first.import_questions(anatomy_bank, "Anatomy")
        first.jump_to(3)
        first.select_answer("Femur")
        first.toggle_bookmark()
        first.close()

        second = build_engine(store, settings, shuffler, scheduler)
        snap = second.snapshot()

        assert snap.subject == "Anatomy"
        assert snap.repository_size == 10
        assert (snap.score, snap.attempts) == (0, 1)
        assert snap.wrong_ids == (3,)
        assert snap.bookmark_ids == (3,)
        assert snap.view.filter_mode == FilterMode.ALL
        assert snap.practice.question.id == 1

    def test_unknown_ids_dropped(self, settings, shuffler, scheduler, anatomy_bank):
        store = MemoryStore()
        adapter = PersistenceAdapter(store)
        adapter.save_questions(anatomy_bank[:3])
        adapter.save_wrong([2, 99])
        adapter.save_bookmarks([42])

        snap = build_engine(store, settings, shuffler, scheduler).snapshot()

        assert snap.wrong_ids == (2,)
        assert snap.bookmark_ids == ()

    def test_duplicate_stored_bank_ignored(self, settings, shuffler, scheduler):
        store = MemoryStore(
            {
                KEY_QUESTIONS: json.dumps(
                    [{"id": 1, "question": "A?", "answer": "a"}, {"id": 1, "question": "B?", "answer": "b"}]
                )
            }
        )
        snap = build_engine(store, settings, shuffler, scheduler).snapshot()
        assert snap.repository_size == 0

    def test_reset_clears_store(self, store, loaded_engine):
        loaded_engine.select_answer("Femur")
        snap = loaded_engine.reset()

        assert store.data == {}
        assert snap.repository_size == 0
        assert snap.subject == "General Subject"
        assert (snap.score, snap.attempts) == (0, 0)
        assert snap.wrong_ids == ()
        assert snap.practice.question is None

    def test_engine_keeps_working_without_storage(self, settings, shuffler, scheduler, anatomy_bank):
        engine = build_engine(BrokenStore(), settings, shuffler, scheduler)
        engine.import_questions(anatomy_bank, "Anatomy")

        snap = engine.select_answer("Skull")

        assert snap.score == 1
        engine.close()
