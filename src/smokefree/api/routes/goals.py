"""Goal routes."""
from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from smokefree.api.deps import get_store
from smokefree.models.goal import UserGoal
from smokefree.tracker.store import TrackerStore

router = APIRouter()


class GoalView(BaseModel):
    goal: UserGoal
    progress: float


@router.get("/", response_model=List[GoalView])
def list_goals(store: TrackerStore = Depends(get_store)):
    return [GoalView(goal=g, progress=g.progress) for g in store.goals]


@router.put("/", response_model=GoalView)
def upsert_goal(goal: UserGoal, store: TrackerStore = Depends(get_store)):
    """Replace the goal with the same id, or add it."""
    store.upsert_goal(goal)
    return GoalView(goal=goal, progress=goal.progress)
