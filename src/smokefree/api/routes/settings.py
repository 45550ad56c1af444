"""App settings and data reset routes."""
from fastapi import APIRouter, Depends

from smokefree.api.deps import get_store
from smokefree.models.settings import AppSettings
from smokefree.tracker.store import TrackerStore

router = APIRouter()


@router.get("/settings", response_model=AppSettings)
def read_settings(store: TrackerStore = Depends(get_store)):
    return store.settings


@router.put("/settings", response_model=AppSettings)
def write_settings(settings: AppSettings, store: TrackerStore = Depends(get_store)):
    store.save_settings(settings)
    return settings


@router.post("/reset")
def reset(store: TrackerStore = Depends(get_store)):
    """Delete all tracker data. Defaults are recreated on the next load."""
    store.reset_all()
    store.load()
    return {"message": "All data reset"}
