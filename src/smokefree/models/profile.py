"""
Quit-attempt profile and the progress figures derived from it.

Derived values depend on wall-clock time, so they are methods taking an
optional `now` rather than stored fields; nothing here is cached.
"""
from datetime import datetime, timedelta
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from smokefree.models.timestamps import local_naive

HEALTH_SCORE_MAX = 100
HEALTH_POINTS_PER_DAY = 2


class UserProfile(BaseModel):
    """Facts about the quit attempt, supplied once by onboarding."""

    name: str
    quit_date: datetime
    cigarettes_per_day: int = Field(gt=0)
    price_per_pack: float = Field(gt=0)
    cigarettes_per_pack: int = Field(gt=0)
    motivations: List[str] = Field(default_factory=list)
    profile_image: Optional[str] = None

    @field_validator("quit_date")
    @classmethod
    def _local_quit_date(cls, value: datetime) -> datetime:
        return local_naive(value)

    @field_validator("motivations")
    @classmethod
    def _dedupe_motivations(cls, value: List[str]) -> List[str]:
        # motivations are a set; keep first-seen order for display
        return list(dict.fromkeys(value))

    def time_since_quit(self, now: Optional[datetime] = None) -> timedelta:
        now = local_naive(now) if now is not None else datetime.now()
        return max(timedelta(0), now - self.quit_date)

    def days_since_quit(self, now: Optional[datetime] = None) -> int:
        return self.time_since_quit(now) // timedelta(days=1)

    def cigarettes_avoided(self, now: Optional[datetime] = None) -> int:
        return self.days_since_quit(now) * self.cigarettes_per_day

    def money_saved(self, now: Optional[datetime] = None) -> float:
        packs_avoided = self.cigarettes_avoided(now) / self.cigarettes_per_pack
        return packs_avoided * self.price_per_pack

    def health_score(self, now: Optional[datetime] = None) -> int:
        """0-100, two points per smoke-free day."""
        return min(HEALTH_SCORE_MAX, self.days_since_quit(now) * HEALTH_POINTS_PER_DAY)
