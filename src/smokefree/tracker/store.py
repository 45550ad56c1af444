"""
TrackerStore — the single owner of all persisted tracker state.

Holds the profile, daily records, craving log, goals, achievements, app
settings and the onboarding flag in memory, and writes each one back to a
KeyValueStorage under a fixed key whenever it changes.

Lifecycle:
  1. Construct with a storage backend (and optionally an EventBus / clock).
  2. load() once at startup.
  3. Mutate through the methods below; each persists the entity it touched.

Load is fail-soft: a missing or undecodable key becomes the empty/default
value. Goals and achievements have built-in defaults which are written
back immediately the first time they are missing.

Writing a daily record triggers achievement evaluation and a milestone
check; newly unlocked achievements and reached milestones are published on
the EventBus exactly once.

Models are copied on the way in and on the way out. All timestamps are
naive local time (see smokefree.models.timestamps).
"""
import json
import logging
import threading
from datetime import datetime
from typing import Callable, List, Optional

from pydantic import BaseModel, TypeAdapter

from smokefree.analysis import metrics
from smokefree.analysis.achievements import default_achievements, evaluate_achievements
from smokefree.analysis.milestones import reached_milestones
from smokefree.db.storage import KeyValueStorage
from smokefree.models.achievement import UserAchievement
from smokefree.models.goal import UserGoal, default_goals
from smokefree.models.profile import UserProfile
from smokefree.models.records import CravingRecord, DailyRecord
from smokefree.models.settings import AppSettings
from smokefree.models.timestamps import local_naive
from smokefree.tracker.events import (
    ACHIEVEMENT_UNLOCKED,
    MILESTONE_REACHED,
    EventBus,
    TrackerEvent,
)

logger = logging.getLogger(__name__)

# ── Storage keys ──────────────────────────────────────────────────────────────

USER_PROFILE = "userProfile"
DAILY_RECORDS = "dailyRecords"
CRAVING_RECORDS = "cravingRecords"
USER_GOALS = "userGoals"
ACHIEVEMENTS = "achievements"
APP_SETTINGS = "appSettings"
HAS_COMPLETED_ONBOARDING = "hasCompletedOnboarding"
REACHED_MILESTONES = "reachedMilestones"

ALL_KEYS = [
    USER_PROFILE,
    DAILY_RECORDS,
    CRAVING_RECORDS,
    USER_GOALS,
    ACHIEVEMENTS,
    APP_SETTINGS,
    HAS_COMPLETED_ONBOARDING,
    REACHED_MILESTONES,
]

_daily_list = TypeAdapter(List[DailyRecord])
_craving_list = TypeAdapter(List[CravingRecord])
_goal_list = TypeAdapter(List[UserGoal])
_achievement_list = TypeAdapter(List[UserAchievement])
_str_list = TypeAdapter(List[str])
_flag = TypeAdapter(bool)


class TrackerStore:
    """In-memory tracker state backed by a KeyValueStorage."""

    def __init__(
        self,
        storage: KeyValueStorage,
        events: Optional[EventBus] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Args:
            storage: Backend for persisted state (SqlKeyValueStorage, MemoryStorage).
            events: Bus for unlock/milestone events; a private one is created if omitted.
            clock: Zero-arg callable returning the current time (default: datetime.now).
                Aware results are converted to naive local time.
        """
        self.storage = storage
        self.events = events if events is not None else EventBus()
        self._clock = clock or datetime.now
        # upsert is read-modify-write-evaluate; threaded hosts must not interleave it
        self._lock = threading.RLock()

        self._profile: Optional[UserProfile] = None
        self._daily_records: List[DailyRecord] = []
        self._craving_records: List[CravingRecord] = []
        self._goals: List[UserGoal] = []
        self._achievements: List[UserAchievement] = []
        self._settings = AppSettings()
        self._has_completed_onboarding = False
        self._reached_milestones: List[str] = []

    def now(self) -> datetime:
        return local_naive(self._clock())

    # ─── Read accessors ───────────────────────────────────────────────────────

    @property
    def profile(self) -> Optional[UserProfile]:
        return _copy_out(self._profile)

    @property
    def daily_records(self) -> List[DailyRecord]:
        return [_copy_out(r) for r in self._daily_records]

    @property
    def craving_records(self) -> List[CravingRecord]:
        return [_copy_out(r) for r in self._craving_records]

    @property
    def goals(self) -> List[UserGoal]:
        return [_copy_out(g) for g in self._goals]

    @property
    def achievements(self) -> List[UserAchievement]:
        return [_copy_out(a) for a in self._achievements]

    @property
    def settings(self) -> AppSettings:
        return _copy_out(self._settings)

    @property
    def has_completed_onboarding(self) -> bool:
        return self._has_completed_onboarding

    @property
    def reached_milestone_keys(self) -> List[str]:
        return list(self._reached_milestones)

    # ─── Load ─────────────────────────────────────────────────────────────────

    def load(self) -> None:
        """Read every entity from storage. Never raises."""
        with self._lock:
            self._profile = self._read(USER_PROFILE, UserProfile.model_validate_json)
            self._daily_records = metrics.sort_newest_first(
                self._read(DAILY_RECORDS, _daily_list.validate_json) or []
            )
            self._craving_records = metrics.sort_newest_first(
                self._read(CRAVING_RECORDS, _craving_list.validate_json) or []
            )
            self._settings = self._read(APP_SETTINGS, AppSettings.model_validate_json) or AppSettings()
            self._has_completed_onboarding = bool(
                self._read(HAS_COMPLETED_ONBOARDING, _flag.validate_json)
            )
            self._reached_milestones = self._read(REACHED_MILESTONES, _str_list.validate_json) or []

            goals = self._read(USER_GOALS, _goal_list.validate_json)
            if goals is None:
                logger.info("No stored goals; creating defaults")
                self._goals = default_goals(self.now())
                self._save_goals()
            else:
                self._goals = goals

            achievements = self._read(ACHIEVEMENTS, _achievement_list.validate_json)
            if achievements is None:
                logger.info("No stored achievements; creating default catalog")
                self._achievements = default_achievements()
                self._save_achievements()
            else:
                self._achievements = achievements

    def _read(self, key: str, decode):
        """Decode the value under key, or None if it is missing or undecodable."""
        raw = self.storage.get(key)
        if raw is None:
            return None
        try:
            return decode(raw)
        except ValueError as exc:
            # pydantic ValidationError is a ValueError; covers bad JSON too
            logger.warning("Discarding undecodable %s: %s", key, exc)
            return None

    # ─── Mutations ────────────────────────────────────────────────────────────

    def save_profile(self, profile: UserProfile) -> None:
        with self._lock:
            profile = _copy_in(profile)
            self._profile = profile
            self.storage.set(USER_PROFILE, profile.model_dump_json().encode())

    def upsert_daily_record(self, record: DailyRecord) -> List[str]:
        """
        Store record as the check-in for its calendar day, replacing any
        existing one for that day, then evaluate achievements and milestones.

        Returns:
            Achievement ids unlocked by this write (usually empty).
        """
        with self._lock:
            record = _copy_in(record)
            day = metrics.calendar_day(record.date)
            records = [r for r in self._daily_records if metrics.calendar_day(r.date) != day]
            records.append(record)
            records = metrics.sort_newest_first(records)

            self._daily_records = records
            self.storage.set(DAILY_RECORDS, _daily_list.dump_json(records))

            unlocked = self.evaluate_achievements()
            self.check_milestones()
            return unlocked

    def append_craving_record(self, record: CravingRecord) -> None:
        with self._lock:
            records = metrics.sort_newest_first(self._craving_records + [_copy_in(record)])
            self._craving_records = records
            self.storage.set(CRAVING_RECORDS, _craving_list.dump_json(records))

    def upsert_goal(self, goal: UserGoal) -> None:
        """Replace the goal with the same id, or append it."""
        with self._lock:
            goal = _copy_in(goal)
            goals = list(self._goals)
            for i, existing in enumerate(goals):
                if existing.id == goal.id:
                    goals[i] = goal
                    break
            else:
                goals.append(goal)
            self._goals = goals
            self._save_goals()

    def save_settings(self, settings: AppSettings) -> None:
        with self._lock:
            settings = _copy_in(settings)
            self._settings = settings
            self.storage.set(APP_SETTINGS, settings.model_dump_json().encode())

    def complete_onboarding(self) -> None:
        with self._lock:
            self._has_completed_onboarding = True
            self.storage.set(HAS_COMPLETED_ONBOARDING, json.dumps(True).encode())

    def reset_all(self) -> None:
        """Wipe every entity, in memory and in storage. Irreversible."""
        with self._lock:
            self._profile = None
            self._daily_records = []
            self._craving_records = []
            self._goals = []
            self._achievements = []
            self._settings = AppSettings()
            self._has_completed_onboarding = False
            self._reached_milestones = []
            for key in ALL_KEYS:
                self.storage.delete(key)
            logger.info("All tracker data reset")

    # ─── Achievements & milestones ────────────────────────────────────────────

    def evaluate_achievements(self) -> List[str]:
        """
        Unlock every locked achievement whose rule now holds.

        Unlocked achievements are never modified again. Publishes one
        ACHIEVEMENT_UNLOCKED event per newly unlocked id, then persists.

        Returns:
            Newly unlocked achievement ids.
        """
        with self._lock:
            now = self.now()
            to_unlock = evaluate_achievements(self._achievements, self._profile, now)
            if not to_unlock:
                return []

            for achievement in self._achievements:
                if achievement.achievement_id in to_unlock and not achievement.is_unlocked:
                    achievement.unlocked_at = now
                    achievement.progress = 1.0

            for achievement_id in to_unlock:
                logger.info("Achievement unlocked: %s", achievement_id)
                self.events.publish(TrackerEvent(ACHIEVEMENT_UNLOCKED, achievement_id, now))
            self._save_achievements()
            return to_unlock

    def check_milestones(self) -> List[str]:
        """
        Publish MILESTONE_REACHED once for each health milestone newly passed.

        Returns:
            Labels of milestones announced by this call.
        """
        with self._lock:
            now = self.now()
            announced = []
            for milestone in reached_milestones(self._profile, now):
                if milestone.key in self._reached_milestones:
                    continue
                self._reached_milestones.append(milestone.key)
                announced.append(milestone.label)
                logger.info("Milestone reached: %s", milestone.label)
                self.events.publish(TrackerEvent(MILESTONE_REACHED, milestone.label, now))

            if announced:
                self.storage.set(REACHED_MILESTONES, _str_list.dump_json(self._reached_milestones))
            return announced

    # ─── Queries ──────────────────────────────────────────────────────────────

    def record_for_today(self) -> Optional[DailyRecord]:
        today = metrics.calendar_day(self.now())
        return next(
            (_copy_out(r) for r in self._daily_records if metrics.calendar_day(r.date) == today),
            None,
        )

    def records_in_window(self, days: int) -> List[DailyRecord]:
        return [_copy_out(r) for r in metrics.records_in_window(self._daily_records, days, self.now())]

    def success_rate(self, days: int = metrics.RECENT_LIMIT) -> float:
        return metrics.success_rate(self._daily_records, days)

    # ─── Internal helpers ─────────────────────────────────────────────────────

    def _save_goals(self) -> None:
        self.storage.set(USER_GOALS, _goal_list.dump_json(self._goals))

    def _save_achievements(self) -> None:
        self.storage.set(ACHIEVEMENTS, _achievement_list.dump_json(self._achievements))


def _copy_in(model: BaseModel) -> BaseModel:
    """Revalidated copy of a caller's model, so later edits to it don't reach the store."""
    return type(model).model_validate(model.model_dump())


def _copy_out(model: Optional[BaseModel]) -> Optional[BaseModel]:
    return model.model_copy(deep=True) if model is not None else None
