from __future__ import annotations


class BakeryDBError(Exception):
    """Base class for everything the persistence layer raises."""


class NotInitializedError(BakeryDBError):
    pass


class InitializationError(BakeryDBError):
    """Database unavailable. Safe to retry by initializing again."""


class EngineLoadError(InitializationError):
    pass


class StoreReadError(InitializationError):
    pass


class ImageUnreadableError(InitializationError):
    pass


class QueryError(BakeryDBError):
    """The engine rejected a statement (bad SQL, constraint, binding)."""


class PersistenceError(BakeryDBError):
    """The change is applied in memory but the saved image is stale."""


class StorageWriteError(PersistenceError):
    pass


class CorruptImageError(BakeryDBError):
    pass
