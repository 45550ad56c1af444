"""Daily check-in and craving log routes."""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from smokefree.api.deps import get_store
from smokefree.models.records import CravingRecord, DailyRecord
from smokefree.tracker.store import TrackerStore

router = APIRouter()


class DailyRecordSaved(BaseModel):
    record: DailyRecord
    unlocked_achievements: List[str]


@router.get("/daily", response_model=List[DailyRecord])
def list_daily_records(
    limit: int = Query(default=30, ge=0),
    offset: int = Query(default=0, ge=0),
    store: TrackerStore = Depends(get_store),
):
    """Daily records, newest first."""
    return store.daily_records[offset:offset + limit]


@router.put("/daily", response_model=DailyRecordSaved)
def upsert_daily_record(record: DailyRecord, store: TrackerStore = Depends(get_store)):
    """Save the check-in for the record's day, replacing any existing one."""
    unlocked = store.upsert_daily_record(record)
    return DailyRecordSaved(record=record, unlocked_achievements=unlocked)


@router.get("/daily/today", response_model=DailyRecord)
def today_record(store: TrackerStore = Depends(get_store)):
    record = store.record_for_today()
    if record is None:
        raise HTTPException(status_code=404, detail="No record for today")
    return record


@router.get("/daily/window", response_model=List[DailyRecord])
def records_in_window(
    days: int = Query(default=7, ge=0),
    store: TrackerStore = Depends(get_store),
):
    """Records dated within the last `days` days."""
    return store.records_in_window(days)


@router.get("/cravings", response_model=List[CravingRecord])
def list_cravings(
    limit: int = Query(default=30, ge=0),
    offset: int = Query(default=0, ge=0),
    store: TrackerStore = Depends(get_store),
):
    """Craving log, newest first."""
    return store.craving_records[offset:offset + limit]


@router.post("/cravings", response_model=CravingRecord, status_code=201)
def add_craving(record: CravingRecord, store: TrackerStore = Depends(get_store)):
    store.append_craving_record(record)
    return record
