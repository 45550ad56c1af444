"""Profile and onboarding routes."""
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from smokefree.api.deps import get_store
from smokefree.models.profile import UserProfile
from smokefree.tracker.store import TrackerStore

router = APIRouter()


class ProfileStats(BaseModel):
    days_since_quit: int
    cigarettes_avoided: int
    money_saved: float
    health_score: int


class ProfileResponse(BaseModel):
    profile: UserProfile
    stats: ProfileStats


class OnboardingStatus(BaseModel):
    has_completed_onboarding: bool


@router.get("/", response_model=ProfileResponse)
def get_profile(store: TrackerStore = Depends(get_store)):
    """Profile plus its derived figures, computed now."""
    profile = store.profile
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    now = store.now()
    return ProfileResponse(
        profile=profile,
        stats=ProfileStats(
            days_since_quit=profile.days_since_quit(now),
            cigarettes_avoided=profile.cigarettes_avoided(now),
            money_saved=profile.money_saved(now),
            health_score=profile.health_score(now),
        ),
    )


@router.put("/", response_model=UserProfile)
def put_profile(profile: UserProfile, store: TrackerStore = Depends(get_store)):
    store.save_profile(profile)
    return profile


@router.get("/onboarding", response_model=OnboardingStatus)
def onboarding_status(store: TrackerStore = Depends(get_store)):
    return OnboardingStatus(has_completed_onboarding=store.has_completed_onboarding)


@router.post("/onboarding/complete", response_model=OnboardingStatus)
def complete_onboarding(store: TrackerStore = Depends(get_store)):
    """Mark onboarding done. Requires a saved profile."""
    if store.profile is None:
        raise HTTPException(status_code=409, detail="Save a profile before completing onboarding")
    store.complete_onboarding()
    return OnboardingStatus(has_completed_onboarding=True)
