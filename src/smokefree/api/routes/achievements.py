"""Achievement routes."""
from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from smokefree.api.deps import get_store
from smokefree.models.achievement import UserAchievement
from smokefree.tracker.store import TrackerStore

router = APIRouter()


class EvaluationResult(BaseModel):
    unlocked_achievements: List[str]
    reached_milestones: List[str]


@router.get("/", response_model=List[UserAchievement])
def list_achievements(store: TrackerStore = Depends(get_store)):
    """All achievements in catalog order, locked and unlocked."""
    return store.achievements


@router.post("/evaluate", response_model=EvaluationResult)
def evaluate(store: TrackerStore = Depends(get_store)):
    """Re-run unlock rules and milestone checks without writing a record."""
    return EvaluationResult(
        unlocked_achievements=store.evaluate_achievements(),
        reached_milestones=store.check_milestones(),
    )
