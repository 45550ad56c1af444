"""User-defined numeric goals."""
from datetime import datetime, timedelta
from typing import List, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator

from smokefree.models.timestamps import local_naive


class UserGoal(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    title: str
    target_value: float
    current_value: float = Field(default=0.0, ge=0)
    unit: str = ""
    icon: str = ""
    color: str = ""
    deadline: Optional[datetime] = None
    is_completed: bool = False

    @field_validator("deadline")
    @classmethod
    def _local_deadline(cls, value: Optional[datetime]) -> Optional[datetime]:
        return local_naive(value)

    @property
    def progress(self) -> float:
        """Fraction complete, capped at 1.0. A non-positive target yields 0."""
        if self.target_value <= 0:
            return 0.0
        return min(1.0, self.current_value / self.target_value)


def default_goals(now: datetime) -> List[UserGoal]:
    """Starter goals created the first time goals are loaded."""
    return [
        UserGoal(
            title="Stay smoke-free for 1 month",
            target_value=30,
            unit="days",
            icon="flame.fill",
            color="red",
            deadline=now + timedelta(days=30),
        ),
        UserGoal(
            title="Save 500 TL",
            target_value=500,
            unit="TL",
            icon="banknote.fill",
            color="green",
        ),
        UserGoal(
            title="Complete 20 exercises",
            target_value=20,
            unit="exercises",
            icon="figure.run",
            color="blue",
        ),
    ]
