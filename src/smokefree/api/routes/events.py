"""Event polling route for notification consumers."""
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from smokefree.api.deps import get_store
from smokefree.tracker.store import TrackerStore

router = APIRouter()


class EventOut(BaseModel):
    kind: str
    key: str
    occurred_at: datetime


@router.get("/", response_model=List[EventOut])
def poll_events(store: TrackerStore = Depends(get_store)):
    """Return and clear events published since the last poll."""
    return [
        EventOut(kind=e.kind, key=e.key, occurred_at=e.occurred_at)
        for e in store.events.poll()
    ]
