from __future__ import annotations

import enum
import logging
import sqlite3
import threading
from collections.abc import Mapping
from concurrent.futures import Future
from contextlib import contextmanager
from typing import Any, Iterable, Optional

from bakery.errors import (
    BakeryDBError,
    CorruptImageError,
    EngineLoadError,
    ImageUnreadableError,
    InitializationError,
    NotInitializedError,
    PersistenceError,
    QueryError,
    StorageWriteError,
    StoreReadError,
)
from bakery.schema import bootstrap_schema

logger = logging.getLogger(__name__)

IMAGE_KEY = "bakery_database"
SQLITE_HEADER = b"SQLite format 3\x00"


class DatabaseState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    RESTORING = "restoring"


def _load_engine() -> None:
    # serialize()/deserialize() landed in Python 3.11 and need a SQLite
    # built with the serialize API.
    missing = [name for name in ("serialize", "deserialize") if not hasattr(sqlite3.Connection, name)]
    if missing:
        raise EngineLoadError(
            f"sqlite3 {sqlite3.sqlite_version} lacks {', '.join(missing)}; Python 3.11+ is required"
        )


def _connect() -> sqlite3.Connection:
    # isolation_level=None: autocommit, every statement is its own transaction
    # unless transaction() opens one explicitly.
    conn = sqlite3.connect(":memory:", check_same_thread=False, isolation_level=None)
    conn.row_factory = sqlite3.Row
    return conn


def _hydrate(image: bytes) -> sqlite3.Connection:
    """Open a fresh connection over ``image`` and prove SQLite can read it."""
    data = bytes(image or b"")
    if not data.startswith(SQLITE_HEADER):
        raise ImageUnreadableError("Not a SQLite database image (bad header or empty).")

    conn = _connect()
    try:
        conn.deserialize(data)
        result = conn.execute("PRAGMA quick_check").fetchone()[0]
        if result != "ok":
            raise ImageUnreadableError(f"Integrity check failed: {result}")
        conn.execute("SELECT COUNT(*) FROM sqlite_master").fetchone()
    except sqlite3.Error as exc:
        conn.close()
        raise ImageUnreadableError(f"Database image could not be loaded: {exc}") from exc
    except ImageUnreadableError:
        conn.close()
        raise
    return conn


def _bind(params: Any) -> Any:
    if params is None:
        return ()
    if isinstance(params, Mapping):
        return params
    return tuple(params)


class Database:
    """Owns the single in-memory SQLite connection and its saved image.

    Every mutating call (execute, insert, a committed transaction, a restore)
    ends by serializing the whole database and writing it to ``store`` under
    ``key``. Reads never touch the store.

    One RLock guards the connection, so statements, the lastrowid read that
    follows an insert, whole transactions and flushes never interleave across
    threads.
    """

    def __init__(self, store, *, key: str = IMAGE_KEY):
        self.store = store
        self.key = key

        self._conn: Optional[sqlite3.Connection] = None
        self._state = DatabaseState.UNINITIALIZED
        self._state_lock = threading.Lock()
        self._pending: Optional[Future] = None

        self._write_lock = threading.RLock()
        self._tx_depth = 0

    # ---- lifecycle ----

    @property
    def state(self) -> DatabaseState:
        return self._state

    def is_initialized(self) -> bool:
        return self._state in (DatabaseState.READY, DatabaseState.RESTORING)

    def ensure_initialized(self) -> None:
        """Initialize once; concurrent callers wait on the same attempt.

        A failed attempt is not remembered: the pending future is dropped and
        the next caller starts over.
        """
        with self._state_lock:
            if self._state in (DatabaseState.READY, DatabaseState.RESTORING):
                return
            pending = self._pending
            owner = pending is None
            if owner:
                pending = Future()
                self._pending = pending
                self._state = DatabaseState.INITIALIZING

        if not owner:
            pending.result()
            return

        try:
            self.initialize()
        except BaseException as exc:
            with self._state_lock:
                self._pending = None
                self._state = DatabaseState.UNINITIALIZED
            pending.set_exception(exc)
            raise

        with self._state_lock:
            self._pending = None
        pending.set_result(None)

    def initialize(self) -> None:
        """Load the saved image, or create and save a fresh database."""
        _load_engine()

        try:
            image = self.store.get(self.key)
        except OSError as exc:
            logger.exception("Failed to read database image")
            raise StoreReadError(f"Could not read saved database: {exc}") from exc

        if image:
            conn = _hydrate(image)
            created = False
        else:
            conn = _connect()
            try:
                bootstrap_schema(conn)
            except sqlite3.Error as exc:
                conn.close()
                raise InitializationError(f"Schema bootstrap failed: {exc}") from exc
            created = True

        with self._write_lock:
            old, self._conn = self._conn, conn
            if old is not None and old is not conn:
                old.close()
            if created:
                try:
                    self.persist()
                except PersistenceError:
                    self._conn = None
                    conn.close()
                    raise

        with self._state_lock:
            self._state = DatabaseState.READY
        logger.info("Created new database" if created else "Loaded existing database")

    def persist(self) -> None:
        """Write the full current image to the store, replacing the old one."""
        with self._write_lock:
            image = self._require_conn().serialize()
            try:
                self.store.set(self.key, image)
            except PersistenceError:
                logger.exception("Failed to save database")
                raise
            except OSError as exc:
                logger.exception("Failed to save database")
                raise StorageWriteError(f"Could not save database: {exc}") from exc
        logger.debug("Database saved (%d bytes)", len(image))

    def close(self) -> None:
        with self._write_lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
        with self._state_lock:
            self._state = DatabaseState.UNINITIALIZED
            self._pending = None

    def __enter__(self):
        self.ensure_initialized()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def _require_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise NotInitializedError("Database not initialized")
        return self._conn

    # ---- statements ----

    def query(self, sql: str, params: Iterable[Any] = ()) -> list[dict]:
        with self._write_lock:
            conn = self._require_conn()
            try:
                cur = conn.execute(sql, _bind(params))
                rows = cur.fetchall()
                cur.close()
            except sqlite3.Error as exc:
                logger.error("Query error: %s", exc)
                raise QueryError(str(exc)) from exc
        return [dict(r) for r in rows]

    def query_single(self, sql: str, params: Iterable[Any] = ()) -> Optional[dict]:
        rows = self.query(sql, params)
        return rows[0] if rows else None

    def execute(self, sql: str, params: Iterable[Any] = ()) -> bool:
        with self._write_lock:
            conn = self._require_conn()
            try:
                conn.execute(sql, _bind(params)).close()
            except sqlite3.Error as exc:
                logger.error("Execute error: %s", exc)
                raise QueryError(str(exc)) from exc
            self._flush()
        return True

    def insert(self, sql: str, params: Iterable[Any] = ()) -> int:
        with self._write_lock:
            conn = self._require_conn()
            try:
                cur = conn.execute(sql, _bind(params))
                last = cur.lastrowid
                cur.close()
            except sqlite3.Error as exc:
                logger.error("Insert error: %s", exc)
                raise QueryError(str(exc)) from exc
            self._flush()
        return int(last)

    def _flush(self) -> None:
        # Inside transaction() the flush happens once, after COMMIT.
        if self._tx_depth == 0:
            self.persist()

    @contextmanager
    def transaction(self):
        """Group several writes into one atomic unit with a single flush.

        Nested use joins the outer transaction. On error the whole unit is
        rolled back and nothing is written to the store.
        """
        with self._write_lock:
            conn = self._require_conn()
            if self._tx_depth:
                self._tx_depth += 1
                try:
                    yield self
                finally:
                    self._tx_depth -= 1
                return

            try:
                conn.execute("BEGIN")
            except sqlite3.Error as exc:
                raise QueryError(str(exc)) from exc
            self._tx_depth = 1
            try:
                yield self
            except BaseException:
                self._tx_depth = 0
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise
            self._tx_depth = 0
            try:
                conn.execute("COMMIT")
            except sqlite3.Error as exc:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise QueryError(str(exc)) from exc
            self.persist()

    # ---- image exchange ----

    def export_image(self) -> bytes:
        with self._write_lock:
            return self._require_conn().serialize()

    def load_image(self, image: bytes) -> None:
        """Replace the whole database with ``image`` and save it.

        The new image is opened and checked on its own connection first; if
        that fails the running database is left exactly as it was. Also works
        on a database that never started, e.g. because its saved image is
        unreadable.
        """
        try:
            new_conn = _hydrate(image)
        except ImageUnreadableError as exc:
            logger.error("Import error: %s", exc)
            raise CorruptImageError(str(exc)) from exc

        with self._write_lock:
            if self._tx_depth:
                new_conn.close()
                raise BakeryDBError("Cannot restore a backup inside a transaction")

            with self._state_lock:
                if self._state is DatabaseState.INITIALIZING:
                    new_conn.close()
                    raise BakeryDBError("Cannot restore while the database is starting")
                self._state = DatabaseState.RESTORING
            old, self._conn = self._conn, new_conn
            try:
                self.persist()
            finally:
                with self._state_lock:
                    self._state = DatabaseState.READY
                    self._pending = None
                if old is not None:
                    old.close()
        logger.info("Database restored from backup (%d bytes)", len(image))

    def discard_image(self) -> None:
        """Delete the saved image so the next start creates a fresh database.

        Only allowed while uninitialized: this is the way out when the saved
        image can no longer be loaded.
        """
        with self._write_lock, self._state_lock:
            if self._state is not DatabaseState.UNINITIALIZED:
                raise BakeryDBError("Cannot discard the saved image of a running database")
            self.store.remove(self.key)
        logger.warning("Discarded saved database image")
