"""Per-user achievement unlock state."""
from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator

from smokefree.models.timestamps import local_naive


class UserAchievement(BaseModel):
    """
    Unlock state for one catalog entry.

    Locked: unlocked_at is None and progress < 1.
    Unlocked: unlocked_at is set and progress is 1.0. Never reverts.
    """

    id: UUID = Field(default_factory=uuid4)
    achievement_id: str
    unlocked_at: Optional[datetime] = None
    progress: float = Field(default=0.0, ge=0, le=1)

    @field_validator("unlocked_at")
    @classmethod
    def _local_unlocked_at(cls, value: Optional[datetime]) -> Optional[datetime]:
        return local_naive(value)

    @property
    def is_unlocked(self) -> bool:
        return self.unlocked_at is not None
