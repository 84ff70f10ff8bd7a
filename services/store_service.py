"""
Store Service
Key-value store adapters: get(key) -> JSON | None, set(key, JSON)
"""

import copy
import logging
from contextlib import contextmanager
from typing import Any, Dict, Generator, Optional
from sqlalchemy.orm import Session

from database import get_db_context
import models


logger = logging.getLogger(__name__)


class KeyValueStore:
    """Local key-value store holding whole JSON documents per key"""

    def get(self, key: str) -> Optional[Any]:
        raise NotImplementedError

    def set(self, key: str, value: Any) -> None:
        raise NotImplementedError


class InMemoryKeyValueStore(KeyValueStore):
    """Dict-backed store; values are copied in and out like a serializing store"""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def get(self, key: str) -> Optional[Any]:
        return copy.deepcopy(self._data.get(key))

    def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)


class SQLKeyValueStore(KeyValueStore):
    """
    Store backed by the store_entries table.
    Each set() commits so the next read in the process sees it.
    """

    def __init__(self, db: Session):
        self.db = db

    def get(self, key: str) -> Optional[Any]:
        entry = self.db.query(models.StoreEntry).filter(
            models.StoreEntry.key == key
        ).first()
        return copy.deepcopy(entry.value) if entry else None

    def set(self, key: str, value: Any) -> None:
        entry = self.db.query(models.StoreEntry).filter(
            models.StoreEntry.key == key
        ).first()

        if entry is None:
            entry = models.StoreEntry(key=key, value=value)
            self.db.add(entry)
        else:
            entry.value = value

        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.exception(f"Failed to write store key {key}")
            raise

        logger.debug(f"Stored key {key}")


def run_with_store(fn, store: Optional[KeyValueStore] = None, db: Optional[Session] = None):
    """
    Call fn(store). Without an explicit store, wrap the given session, or
    open a fresh one for background tasks.
    """
    if store is not None:
        return fn(store)
    if db is not None:
        return fn(SQLKeyValueStore(db))

    with get_db_context() as session:
        return fn(SQLKeyValueStore(session))


@contextmanager
def open_store() -> Generator[KeyValueStore, None, None]:
    """Database-backed store for code running outside a request"""
    with get_db_context() as session:
        yield SQLKeyValueStore(session)
