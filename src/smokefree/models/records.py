"""Daily check-in and craving log models."""
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator

from smokefree.models.timestamps import local_naive


class MoodLevel(str, Enum):
    """Five ordered mood levels, worst to best."""

    VERY_BAD = "very_bad"
    BAD = "bad"
    NEUTRAL = "neutral"
    GOOD = "good"
    VERY_GOOD = "very_good"

    @property
    def rank(self) -> int:
        return _MOOD_ORDER.index(self)

    @property
    def emoji(self) -> str:
        return _MOOD_EMOJI[self]

    @property
    def color(self) -> str:
        return _MOOD_COLOR[self]


_MOOD_ORDER = list(MoodLevel)

_MOOD_EMOJI = {
    MoodLevel.VERY_BAD: "😢",
    MoodLevel.BAD: "😕",
    MoodLevel.NEUTRAL: "😐",
    MoodLevel.GOOD: "🙂",
    MoodLevel.VERY_GOOD: "😊",
}

_MOOD_COLOR = {
    MoodLevel.VERY_BAD: "#F25C6B",
    MoodLevel.BAD: "#FF8A3D",
    MoodLevel.NEUTRAL: "#8E8E93",
    MoodLevel.GOOD: "#61BAFF",
    MoodLevel.VERY_GOOD: "#5CD6A6",
}


class DailyRecord(BaseModel):
    """One check-in per calendar day. A second write for the same day replaces the first."""

    id: UUID = Field(default_factory=uuid4)
    date: datetime
    did_smoke: bool
    mood: MoodLevel = MoodLevel.NEUTRAL
    craving_count: int = Field(default=0, ge=0)
    notes: Optional[str] = None

    @field_validator("date")
    @classmethod
    def _local_date(cls, value: datetime) -> datetime:
        return local_naive(value)


class CravingRecord(BaseModel):
    """A single craving episode. Any number per day."""

    id: UUID = Field(default_factory=uuid4)
    date: datetime
    intensity: int = Field(ge=1, le=10)
    trigger: Optional[str] = None
    coping_strategy: Optional[str] = None
    duration_seconds: Optional[float] = Field(default=None, ge=0)
    was_successful: bool

    @field_validator("date")
    @classmethod
    def _local_date(cls, value: datetime) -> datetime:
        return local_naive(value)
