"""User-facing app preferences (not process configuration; see smokefree.config)."""
from datetime import time
from typing import Optional

from pydantic import BaseModel, Field


class NotificationPreferences(BaseModel):
    enable_daily_reminders: bool = True
    enable_motivation: bool = True
    enable_craving_alerts: bool = True
    enable_milestones: bool = True
    quiet_hours_start: Optional[time] = None
    quiet_hours_end: Optional[time] = None


class AppSettings(BaseModel):
    dark_mode: bool = False
    selected_theme: str = "default"
    enable_sounds: bool = True
    enable_haptics: bool = True
    language: str = "tr"
    notification_preferences: NotificationPreferences = Field(
        default_factory=NotificationPreferences
    )
