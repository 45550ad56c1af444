"""
Health-recovery milestones.

Fixed timeline of what the body recovers after the last cigarette. A
milestone is reached once the time since quitting meets its threshold;
thresholds only grow, so the reached set is monotonic for a fixed profile.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional

from smokefree.models.profile import UserProfile


@dataclass(frozen=True)
class HealthMilestone:
    key: str          # stable id, persisted once announced
    after: timedelta  # time since quitting
    label: str        # short human label, e.g. "20 minutes"
    title: str
    description: str


HEALTH_MILESTONES: List[HealthMilestone] = [
    HealthMilestone(
        key="20_minutes",
        after=timedelta(minutes=20),
        label="20 minutes",
        title="Heart rate normalises",
        description="Heart rhythm and blood pressure start to settle.",
    ),
    HealthMilestone(
        key="8_hours",
        after=timedelta(hours=8),
        label="8 hours",
        title="Carbon monoxide falls",
        description="Carbon monoxide in the blood has dropped by half.",
    ),
    HealthMilestone(
        key="24_hours",
        after=timedelta(hours=24),
        label="24 hours",
        title="Heart attack risk falls",
        description="Heart attack risk begins to drop as blood vessels relax.",
    ),
    HealthMilestone(
        key="48_hours",
        after=timedelta(hours=48),
        label="48 hours",
        title="Taste and smell return",
        description="Nerve endings recover; tastes and smells get sharper.",
    ),
]


def reached_milestones(
    profile: Optional[UserProfile], now: Optional[datetime] = None
) -> List[HealthMilestone]:
    """Milestones whose threshold has passed, in timeline order. Empty without a profile."""
    if profile is None:
        return []
    elapsed = profile.time_since_quit(now)
    return [m for m in HEALTH_MILESTONES if m.after <= elapsed]


def next_milestone(
    profile: Optional[UserProfile], now: Optional[datetime] = None
) -> Optional[HealthMilestone]:
    """The first milestone not yet reached. None when all are reached or there is no profile."""
    if profile is None:
        return None
    elapsed = profile.time_since_quit(now)
    return next((m for m in HEALTH_MILESTONES if m.after > elapsed), None)
