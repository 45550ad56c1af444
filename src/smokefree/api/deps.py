"""Store dependency for the API. Tests override get_store via app.dependency_overrides."""
from typing import Optional

from smokefree.db.engine import get_engine
from smokefree.db.storage import SqlKeyValueStorage
from smokefree.tracker.store import TrackerStore

_store: Optional[TrackerStore] = None


def get_store() -> TrackerStore:
    """Return the API's store, building and loading it on first call."""
    global _store
    if _store is None:
        _store = TrackerStore(SqlKeyValueStorage(get_engine()))
        _store.load()
    return _store
