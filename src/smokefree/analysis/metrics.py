"""
Read-only progress metrics over daily and craving records.

Two windowing styles are used, and the function names say which:

  records_in_window(records, days, now) — calendar window: every record
      dated on or after `now - days`.
  success_rate / mood_trend / craving_summary — count window: the first N
      records of a newest-first list, however far back they go.

All functions are pure and expect collections sorted newest first, which
is how the store keeps them. build_progress_report() gathers everything
into one ProgressReport for the API; nothing here is persisted.
"""
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import List, Optional

from smokefree.analysis.milestones import HealthMilestone, next_milestone, reached_milestones
from smokefree.models.achievement import UserAchievement
from smokefree.models.goal import UserGoal
from smokefree.models.records import CravingRecord, DailyRecord, MoodLevel
from smokefree.models.timestamps import local_naive

RECENT_LIMIT = 7


def calendar_day(moment: datetime) -> date:
    """Local calendar day of a timestamp (aware timestamps are converted to local time first)."""
    if moment.tzinfo is not None:
        moment = moment.astimezone()
    return moment.date()


def sort_newest_first(records: list) -> list:
    return sorted(records, key=lambda r: r.date, reverse=True)


# ─── Daily records ────────────────────────────────────────────────────────────

def records_in_window(records: List[DailyRecord], days: int, now: datetime) -> List[DailyRecord]:
    """Records dated within the trailing `days`-day window ending at `now` (boundary inclusive)."""
    cutoff = local_naive(now) - timedelta(days=days)
    return [r for r in records if r.date >= cutoff]


def success_rate(records: List[DailyRecord], days: int = RECENT_LIMIT) -> float:
    """
    Fraction of smoke-free days among the `days` most recent records.

    Counts records, not calendar days: with gaps in logging the slice can
    reach further back than `days` days. Returns 0.0 when the slice is empty.
    """
    recent = records[:max(days, 0)]
    if not recent:
        return 0.0
    smoke_free = sum(1 for r in recent if not r.did_smoke)
    return smoke_free / len(recent)


@dataclass
class MoodPoint:
    date: datetime
    mood: MoodLevel


def mood_trend(records: List[DailyRecord], limit: int = RECENT_LIMIT) -> List[MoodPoint]:
    """Mood of the most recent `limit` records, newest first."""
    return [MoodPoint(date=r.date, mood=r.mood) for r in records[:limit]]


@dataclass
class CalendarDay:
    day: date
    has_record: bool
    is_success: bool
    is_today: bool


def weekly_calendar(records: List[DailyRecord], now: datetime) -> List[CalendarDay]:
    """The seven calendar days ending today, oldest first, with smoke-free status."""
    today = calendar_day(now)
    by_day = {}
    for r in records:
        # newest-first input: keep the first (latest) record seen per day
        by_day.setdefault(calendar_day(r.date), r)

    days = []
    for offset in range(6, -1, -1):
        day = today - timedelta(days=offset)
        record = by_day.get(day)
        days.append(CalendarDay(
            day=day,
            has_record=record is not None,
            is_success=record is not None and not record.did_smoke,
            is_today=offset == 0,
        ))
    return days


# ─── Cravings ─────────────────────────────────────────────────────────────────

@dataclass
class CravingSummary:
    count: int
    average_intensity: int  # truncated mean, 1-10 (0 when no cravings)
    success_rate: float     # percentage 0-100


def craving_summary(cravings: List[CravingRecord], limit: int = RECENT_LIMIT) -> CravingSummary:
    """Summarise the most recent `limit` craving records."""
    recent = cravings[:limit]
    if not recent:
        return CravingSummary(count=0, average_intensity=0, success_rate=0.0)

    total_intensity = sum(c.intensity for c in recent)
    resisted = sum(1 for c in recent if c.was_successful)
    return CravingSummary(
        count=len(recent),
        average_intensity=total_intensity // len(recent),
        success_rate=resisted / len(recent) * 100,
    )


# ─── Achievements & goals ─────────────────────────────────────────────────────

def achievement_completion(achievements: List[UserAchievement]) -> float:
    """Unlocked / total, 0.0 for an empty catalog."""
    if not achievements:
        return 0.0
    return sum(1 for a in achievements if a.is_unlocked) / len(achievements)


def goal_completion(goals: List[UserGoal]) -> float:
    """Completed / total, 0.0 when there are no goals."""
    if not goals:
        return 0.0
    return sum(1 for g in goals if g.is_completed) / len(goals)


# ─── Report ───────────────────────────────────────────────────────────────────

@dataclass
class ProgressReport:
    """Everything a statistics screen needs, computed at `generated_at`."""

    generated_at: datetime
    days_since_quit: int
    cigarettes_avoided: int
    money_saved: float
    health_score: int
    weekly_records: List[DailyRecord]
    weekly_success_rate: float
    weekly_calendar: List[CalendarDay]
    mood_trend: List[MoodPoint]
    cravings: CravingSummary
    achievement_completion: float
    goal_completion: float
    reached_milestones: List[HealthMilestone] = field(default_factory=list)
    next_milestone: Optional[HealthMilestone] = None


def build_progress_report(store) -> ProgressReport:
    """
    Assemble a ProgressReport from the store's current state.

    Args:
        store: TrackerStore (read only).

    Returns:
        ProgressReport. Profile figures are zero when no profile exists.
    """
    now = store.now()
    profile = store.profile
    daily = store.daily_records

    return ProgressReport(
        generated_at=now,
        days_since_quit=profile.days_since_quit(now) if profile else 0,
        cigarettes_avoided=profile.cigarettes_avoided(now) if profile else 0,
        money_saved=profile.money_saved(now) if profile else 0.0,
        health_score=profile.health_score(now) if profile else 0,
        weekly_records=records_in_window(daily, RECENT_LIMIT, now),
        weekly_success_rate=success_rate(daily, RECENT_LIMIT),
        weekly_calendar=weekly_calendar(daily, now),
        mood_trend=mood_trend(daily),
        cravings=craving_summary(store.craving_records),
        achievement_completion=achievement_completion(store.achievements),
        goal_completion=goal_completion(store.goals),
        reached_milestones=reached_milestones(profile, now),
        next_milestone=next_milestone(profile, now),
    )
