# complyark/db/store/__init__.py
"""Case store backends and the request-scoped store dependency"""
from typing import AsyncGenerator

from complyark.core.config import settings
from complyark.db.database import get_db
from complyark.db.store.base import CaseStore
from complyark.db.store.memory import InMemoryCaseStore
from complyark.db.store.sql import SqlCaseStore

_memory_store: InMemoryCaseStore = InMemoryCaseStore()


def get_memory_store() -> InMemoryCaseStore:
    """The process-wide in-memory store"""
    return _memory_store


async def get_store() -> AsyncGenerator[CaseStore, None]:
    """FastAPI dependency yielding the configured case store"""
    if settings.STORE_BACKEND == "database":
        async for session in get_db():
            yield SqlCaseStore(session)
    else:
        yield _memory_store


__all__ = ["CaseStore", "InMemoryCaseStore", "SqlCaseStore", "get_store", "get_memory_store"]
