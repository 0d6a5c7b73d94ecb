"""Shared fixtures for bakery tests."""

import sys
import threading
import pytest
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from bakery.db import Database
from bakery.gateway import Gateway
from bakery.store import MemoryStore


# ============================================================================
# Store doubles
# ============================================================================

class FailingStore(MemoryStore):
    """MemoryStore whose reads and/or writes raise OSError on demand."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.fail_get = False
        self.fail_set = False
        self.set_calls = 0

    def get(self, key):
        if self.fail_get:
            raise OSError("disk unavailable")
        return super().get(key)

    def set(self, key, data):
        self.set_calls += 1
        if self.fail_set:
            raise OSError("disk full")
        super().set(key, data)


class BlockingStore(MemoryStore):
    """MemoryStore whose first read waits until ``release`` is set."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.entered = threading.Event()
        self.release = threading.Event()
        self.get_calls = 0

    def get(self, key):
        self.get_calls += 1
        self.entered.set()
        self.release.wait(timeout=5)
        return super().get(key)


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest.fixture
def store():
    """Empty in-memory store."""
    return MemoryStore()


@pytest.fixture
def failing_store():
    return FailingStore()


@pytest.fixture
def db(store):
    """Initialized database backed by the in-memory store."""
    database = Database(store)
    database.ensure_initialized()
    yield database
    database.close()


@pytest.fixture
def api(db):
    """Gateway bound to the initialized database."""
    return Gateway(db)


@pytest.fixture
def lazy_api(store):
    """Gateway over a database nobody has initialized yet."""
    database = Database(store)
    yield Gateway(database)
    database.close()


@pytest.fixture
def blocking_store():
    return BlockingStore()


@pytest.fixture
def reopen():
    """Start another database over a store (simulates an app restart)."""
    opened = []

    def _open(store):
        database = Database(store)
        database.ensure_initialized()
        opened.append(database)
        return database

    yield _open
    for database in opened:
        database.close()
