"""Tests for the lifecycle manager and data access facade."""

import threading
import pytest

from bakery import db as db_module
from bakery.db import IMAGE_KEY, SQLITE_HEADER, Database, DatabaseState
from bakery.errors import (
    BakeryDBError,
    CorruptImageError,
    EngineLoadError,
    ImageUnreadableError,
    InitializationError,
    NotInitializedError,
    PersistenceError,
    QueryError,
    StoreReadError,
)
from bakery.schema import TABLES
from bakery.store import MemoryStore


class CountingDatabase(Database):
    """Database that records how many times initialize() actually ran."""

    def __init__(self, store):
        super().__init__(store)
        self.init_calls = 0

    def initialize(self):
        self.init_calls += 1
        super().initialize()


class TestInitialization:
    """Tests for first start, reload and failure handling."""

    def test_starts_uninitialized(self, store):
        database = Database(store)
        assert database.state is DatabaseState.UNINITIALIZED
        assert database.is_initialized() is False

    def test_fresh_start_creates_schema_and_saves(self, store):
        database = Database(store)
        database.ensure_initialized()
        assert database.is_initialized()
        assert database.state is DatabaseState.READY

        names = {r["name"] for r in database.query("SELECT name FROM sqlite_master WHERE type = 'table'")}
        assert set(TABLES) <= names

        image = store.get(IMAGE_KEY)
        assert image is not None
        assert image.startswith(SQLITE_HEADER)
        database.close()

    def test_fresh_start_seeds_users_and_settings(self, db):
        roles = sorted(r["role"] for r in db.query("SELECT role FROM users"))
        assert roles == ["admin", "kasir"]
        assert db.query_single("SELECT pin FROM admin_settings WHERE id = 1")["pin"] == "123456"

    def test_reload_does_not_reseed(self, store, db, reopen):
        db.execute("DELETE FROM users WHERE role = 'kasir'")
        again = reopen(store)
        assert [r["role"] for r in again.query("SELECT role FROM users")] == ["admin"]

    def test_ensure_initialized_is_idempotent(self, store):
        database = CountingDatabase(store)
        database.ensure_initialized()
        database.ensure_initialized()
        assert database.init_calls == 1
        database.close()

    def test_concurrent_callers_share_one_attempt(self, blocking_store):
        database = CountingDatabase(blocking_store)
        errors = []

        def worker():
            try:
                database.ensure_initialized()
            except Exception as exc:  # pragma: no cover - reported below
                errors.append(exc)

        first = threading.Thread(target=worker)
        first.start()
        assert blocking_store.entered.wait(timeout=5)
        assert database.state is DatabaseState.INITIALIZING

        others = [threading.Thread(target=worker) for _ in range(4)]
        for t in others:
            t.start()
        blocking_store.release.set()
        for t in [first, *others]:
            t.join(timeout=5)

        assert errors == []
        assert database.init_calls == 1
        assert blocking_store.get_calls == 1
        assert database.is_initialized()
        database.close()

    def test_store_read_failure_is_retryable(self, failing_store):
        database = Database(failing_store)
        failing_store.fail_get = True
        with pytest.raises(StoreReadError):
            database.ensure_initialized()
        assert database.state is DatabaseState.UNINITIALIZED

        failing_store.fail_get = False
        database.ensure_initialized()
        assert database.is_initialized()
        database.close()

    def test_engine_failure_is_initialization_error(self, store, monkeypatch):
        def broken():
            raise EngineLoadError("no serialize support")

        monkeypatch.setattr(db_module, "_load_engine", broken)
        database = Database(store)
        with pytest.raises(InitializationError):
            database.ensure_initialized()
        assert not database.is_initialized()
        assert store.get(IMAGE_KEY) is None

    def test_unreadable_image_fails_without_overwriting(self, store):
        store.set(IMAGE_KEY, b"definitely not sqlite")
        database = Database(store)
        with pytest.raises(ImageUnreadableError):
            database.ensure_initialized()
        assert store.get(IMAGE_KEY) == b"definitely not sqlite"

    def test_facade_requires_connection(self, store):
        database = Database(store)
        with pytest.raises(NotInitializedError):
            database.query("SELECT 1")

    def test_context_manager(self, store):
        with Database(store) as database:
            assert database.is_initialized()
        assert not database.is_initialized()


class TestFacade:
    """Tests for query/execute/insert."""

    def test_query_returns_dicts(self, db):
        rows = db.query("SELECT 1 AS a, 'x' AS b")
        assert rows == [{"a": 1, "b": "x"}]

    def test_query_single(self, db):
        assert db.query_single("SELECT name FROM users WHERE role = ?", ("admin",)) == {"name": "Admin"}
        assert db.query_single("SELECT name FROM users WHERE role = ?", ("nobody",)) is None

    def test_named_parameters(self, db):
        assert db.query_single("SELECT :value AS v", {"value": 42}) == {"v": 42}

    def test_insert_returns_new_id(self, db):
        first = db.insert("INSERT INTO cities (name) VALUES (?)", ("Semarang",))
        second = db.insert("INSERT INTO cities (name) VALUES (?)", ("Solo",))
        assert isinstance(first, int)
        assert second == first + 1

    def test_execute_returns_true(self, db):
        city_id = db.insert("INSERT INTO cities (name) VALUES (?)", ("Semarang",))
        assert db.execute("UPDATE cities SET name = ? WHERE id = ?", ("Solo", city_id)) is True
        assert db.query_single("SELECT name FROM cities WHERE id = ?", (city_id,))["name"] == "Solo"

    def test_bad_sql_raises_query_error(self, db):
        with pytest.raises(QueryError):
            db.query("SELECT * FROM no_such_table")
        with pytest.raises(QueryError):
            db.execute("INSERT INTO users (name) VALUES (?)", ("missing role and pin",))

    def test_query_error_is_bakery_error(self):
        assert issubclass(QueryError, BakeryDBError)


class TestPersistence:
    """Tests for write-through flushing."""

    def test_every_write_is_saved(self, store, db, reopen):
        db.insert("INSERT INTO cities (name) VALUES (?)", ("Semarang",))
        again = reopen(store)
        assert [r["name"] for r in again.query("SELECT name FROM cities")] == ["Semarang"]

    def test_reads_do_not_write(self, failing_store):
        database = Database(failing_store)
        database.ensure_initialized()
        calls = failing_store.set_calls
        database.query("SELECT * FROM users")
        database.query_single("SELECT * FROM admin_settings")
        database.export_image()
        assert failing_store.set_calls == calls
        database.close()

    def test_write_failure_is_surfaced_and_change_kept(self, failing_store):
        database = Database(failing_store)
        database.ensure_initialized()
        failing_store.fail_set = True
        with pytest.raises(PersistenceError):
            database.insert("INSERT INTO cities (name) VALUES (?)", ("Semarang",))
        assert database.query_single("SELECT COUNT(*) AS n FROM cities")["n"] == 1

        failing_store.fail_set = False
        database.insert("INSERT INTO cities (name) VALUES (?)", ("Solo",))
        reloaded = Database(failing_store)
        reloaded.ensure_initialized()
        assert reloaded.query_single("SELECT COUNT(*) AS n FROM cities")["n"] == 2
        reloaded.close()
        database.close()

    def test_persist_is_explicit_too(self, store, db):
        db.persist()
        assert store.get(IMAGE_KEY) == db.export_image()


class TestTransactions:
    """Tests for grouped writes."""

    def test_commit_saves_once(self, failing_store):
        database = Database(failing_store)
        database.ensure_initialized()
        before = failing_store.set_calls
        with database.transaction():
            database.insert("INSERT INTO cities (name) VALUES (?)", ("A",))
            database.insert("INSERT INTO cities (name) VALUES (?)", ("B",))
        assert failing_store.set_calls == before + 1
        assert database.query_single("SELECT COUNT(*) AS n FROM cities")["n"] == 2
        database.close()

    def test_error_rolls_back_everything(self, failing_store):
        database = Database(failing_store)
        database.ensure_initialized()
        before = failing_store.set_calls
        with pytest.raises(RuntimeError):
            with database.transaction():
                database.insert("INSERT INTO cities (name) VALUES (?)", ("A",))
                raise RuntimeError("boom")
        assert database.query_single("SELECT COUNT(*) AS n FROM cities")["n"] == 0
        assert failing_store.set_calls == before
        database.close()

    def test_nested_joins_outer(self, db):
        with pytest.raises(QueryError):
            with db.transaction():
                db.insert("INSERT INTO cities (name) VALUES (?)", ("A",))
                with db.transaction():
                    db.insert("INSERT INTO cities (name) VALUES (?)", ("B",))
                db.execute("INSERT INTO nowhere VALUES (1)")
        assert db.query_single("SELECT COUNT(*) AS n FROM cities")["n"] == 0


class TestImageExchange:
    """Tests for export_image/load_image on the database itself."""

    def test_load_rejects_garbage_and_keeps_state(self, store, db):
        db.insert("INSERT INTO cities (name) VALUES (?)", ("Semarang",))
        saved = store.get(IMAGE_KEY)
        with pytest.raises(CorruptImageError):
            db.load_image(b"garbage")
        with pytest.raises(CorruptImageError):
            db.load_image(b"")
        assert db.query_single("SELECT name FROM cities")["name"] == "Semarang"
        assert store.get(IMAGE_KEY) == saved
        assert db.state is DatabaseState.READY

    def test_load_inside_transaction_is_refused(self, db):
        image = db.export_image()
        with pytest.raises(BakeryDBError):
            with db.transaction():
                db.load_image(image)


class TestRecovery:
    """Getting out of a saved image that no longer loads."""

    def test_restore_backup_over_unreadable_image(self, store, reopen):
        good = reopen(MemoryStore())
        good.insert("INSERT INTO cities (name) VALUES (?)", ("Semarang",))
        snapshot = good.export_image()

        store.set(IMAGE_KEY, b"broken image")
        database = Database(store)
        with pytest.raises(ImageUnreadableError):
            database.ensure_initialized()

        database.load_image(snapshot)
        assert database.state is DatabaseState.READY
        database.ensure_initialized()
        assert database.query_single("SELECT name FROM cities")["name"] == "Semarang"
        assert store.get(IMAGE_KEY).startswith(SQLITE_HEADER)
        database.close()

    def test_discard_unreadable_image_starts_fresh(self, store):
        store.set(IMAGE_KEY, b"broken image")
        database = Database(store)
        with pytest.raises(ImageUnreadableError):
            database.ensure_initialized()

        database.discard_image()
        assert store.get(IMAGE_KEY) is None
        database.ensure_initialized()
        assert database.query_single("SELECT COUNT(*) AS n FROM users")["n"] == 2
        assert store.get(IMAGE_KEY).startswith(SQLITE_HEADER)
        database.close()

    def test_discard_refused_while_running(self, store, db):
        with pytest.raises(BakeryDBError):
            db.discard_image()
        assert store.get(IMAGE_KEY) is not None

    def test_discard_removes_file(self, tmp_path):
        from bakery.store import FileStore

        store = FileStore(tmp_path)
        store.set(IMAGE_KEY, b"broken image")
        Database(store).discard_image()
        assert not (tmp_path / f"{IMAGE_KEY}.bin").exists()
