"""Entry point the UI uses to reach the data operations.

Every service function decorated with :func:`operation` takes the
:class:`~bakery.db.Database` as its first argument and, when called, makes
sure the database is initialized before any SQL runs. Callers therefore never
have to sequence initialization themselves.

:class:`Gateway` binds all registered operations to one database so pages can
write ``api.add_city("Semarang")``.
"""

from __future__ import annotations

import functools
from typing import Callable

OPERATIONS: dict[str, Callable] = {}


def operation(fn: Callable) -> Callable:
    @functools.wraps(fn)
    def wrapper(db, *args, **kwargs):
        db.ensure_initialized()
        return fn(db, *args, **kwargs)

    if fn.__name__ in OPERATIONS and OPERATIONS[fn.__name__].__module__ != fn.__module__:
        raise ValueError(f"Duplicate data operation name: {fn.__name__}")
    OPERATIONS[fn.__name__] = wrapper
    return wrapper


def _load_operations() -> None:
    # Importing the service modules fills OPERATIONS.
    from bakery.services import (  # noqa: F401
        assets,
        auth,
        backup,
        bookkeeping,
        dashboard,
        deliveries,
        demo_data,
        employees,
        factory,
        hpp,
        locations,
        products,
        returns,
    )


class Gateway:
    """All data operations, bound to a single database."""

    def __init__(self, db):
        _load_operations()
        self.db = db

    def __getattr__(self, name: str):
        try:
            fn = OPERATIONS[name]
        except KeyError:
            raise AttributeError(f"{type(self).__name__!r} has no operation {name!r}") from None
        return functools.partial(fn, self.db)

    def __dir__(self):
        return sorted(set(super().__dir__()) | set(OPERATIONS))

    def ensure_ready(self) -> None:
        self.db.ensure_initialized()
