"""
Key-value storage backends for the tracker store.

The store only ever needs three calls — get, set, delete — on opaque
bytes under a handful of fixed keys, so any backend that offers those can
hold the data. Two are provided:

  SqlKeyValueStorage — one SQLModel table, one row per key.
  MemoryStorage      — a dict, for tests and throwaway runs.

Storage errors never reach the caller: a failed read looks like a missing
key, and a failed write is logged and dropped.
"""
import logging
from datetime import datetime
from typing import Dict, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from smokefree.models.storage import StoredValue

logger = logging.getLogger(__name__)


class KeyValueStorage(Protocol):
    def get(self, key: str) -> Optional[bytes]:
        ...

    def set(self, key: str, value: bytes) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


class SqlKeyValueStorage:
    """Persists each key as a StoredValue row. Every call uses its own session."""

    def __init__(self, engine):
        """
        Args:
            engine: SQLAlchemy engine (SQLModel create_engine result). The
                    storedvalue table must already exist.
        """
        self.engine = engine

    def get(self, key: str) -> Optional[bytes]:
        try:
            with Session(self.engine) as s:
                row = s.get(StoredValue, key)
                return row.value if row is not None else None
        except SQLAlchemyError as exc:
            logger.warning("Read of %r failed, treating as absent: %s", key, exc)
            return None

    def set(self, key: str, value: bytes) -> None:
        try:
            with Session(self.engine) as s:
                row = s.get(StoredValue, key)
                if row is None:
                    row = StoredValue(key=key, value=value)
                else:
                    row.value = value
                    row.updated_at = datetime.utcnow()
                s.add(row)
                s.commit()
        except SQLAlchemyError as exc:
            logger.error("Write of %r failed: %s", key, exc)

    def delete(self, key: str) -> None:
        try:
            with Session(self.engine) as s:
                row = s.get(StoredValue, key)
                if row is not None:
                    s.delete(row)
                    s.commit()
        except SQLAlchemyError as exc:
            logger.error("Delete of %r failed: %s", key, exc)


class MemoryStorage:
    """Dict-backed storage. Nothing survives the process."""

    def __init__(self, initial: Optional[Dict[str, bytes]] = None):
        self.data: Dict[str, bytes] = dict(initial or {})

    def get(self, key: str) -> Optional[bytes]:
        return self.data.get(key)

    def set(self, key: str, value: bytes) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)
