"""Aggregated statistics routes. Everything is computed per request."""
from fastapi import APIRouter, Depends, Query

from smokefree.analysis.metrics import build_progress_report
from smokefree.api.deps import get_store
from smokefree.tracker.store import TrackerStore

router = APIRouter()


@router.get("/")
def progress_report(store: TrackerStore = Depends(get_store)):
    """Full ProgressReport: profile figures, weekly view, moods, cravings, completion ratios."""
    return build_progress_report(store)


@router.get("/success-rate")
def success_rate(
    days: int = Query(default=7, ge=0),
    store: TrackerStore = Depends(get_store),
):
    """Smoke-free fraction over the `days` most recent records."""
    return {"days": days, "success_rate": store.success_rate(days)}
