"""Tests for TrackerStore: load/save lifecycle, merge-by-day, events."""
from datetime import datetime, timedelta, timezone

import pytest

from smokefree.analysis.achievements import ACHIEVEMENT_CATALOG
from smokefree.db.storage import MemoryStorage, SqlKeyValueStorage
from smokefree.models.goal import UserGoal
from smokefree.models.records import CravingRecord, DailyRecord, MoodLevel
from smokefree.models.settings import AppSettings
from smokefree.tracker.events import ACHIEVEMENT_UNLOCKED, MILESTONE_REACHED, EventBus
from smokefree.tracker.store import (
    ACHIEVEMENTS,
    ALL_KEYS,
    APP_SETTINGS,
    CRAVING_RECORDS,
    DAILY_RECORDS,
    USER_GOALS,
    USER_PROFILE,
    TrackerStore,
)

NOW = datetime(2025, 3, 15, 12, 0)


def reopen(storage, clock) -> TrackerStore:
    store = TrackerStore(storage, clock=clock)
    store.load()
    return store


def daily(days_ago: int = 0, hour: int = 12, did_smoke: bool = False, **kwargs) -> DailyRecord:
    moment = NOW.replace(hour=hour) - timedelta(days=days_ago)
    return DailyRecord(date=moment, did_smoke=did_smoke, **kwargs)


# ─── Load ─────────────────────────────────────────────────────────────────────

class TestLoad:
    def test_empty_storage_gives_empty_state(self, store):
        assert store.profile is None
        assert store.daily_records == []
        assert store.craving_records == []
        assert store.settings == AppSettings()
        assert store.has_completed_onboarding is False

    def test_creates_and_persists_default_goals(self, store, storage):
        assert len(store.goals) == 3
        assert storage.get(USER_GOALS) is not None

    def test_creates_and_persists_default_achievements(self, store, storage):
        assert [a.achievement_id for a in store.achievements] == ACHIEVEMENT_CATALOG
        assert not any(a.is_unlocked for a in store.achievements)
        assert storage.get(ACHIEVEMENTS) is not None

    def test_defaults_created_only_once(self, store, storage, clock):
        goal_ids = [g.id for g in store.goals]
        again = reopen(storage, clock)
        assert [g.id for g in again.goals] == goal_ids

    def test_empty_stored_goal_list_is_kept(self, storage, clock):
        storage.set(USER_GOALS, b"[]")
        store = reopen(storage, clock)
        assert store.goals == []

    @pytest.mark.parametrize("key", [USER_PROFILE, DAILY_RECORDS, CRAVING_RECORDS, APP_SETTINGS])
    def test_corrupt_entry_is_treated_as_absent(self, storage, clock, key):
        storage.set(key, b"{not json")
        store = reopen(storage, clock)
        assert store.profile is None
        assert store.daily_records == []
        assert store.craving_records == []
        assert store.settings == AppSettings()

    def test_corrupt_achievements_heal_to_defaults(self, storage, clock):
        storage.set(ACHIEVEMENTS, b'[{"achievement_id": 5, "progress": "lots"}]')
        store = reopen(storage, clock)
        assert len(store.achievements) == len(ACHIEVEMENT_CATALOG)
        assert store.achievements[0].achievement_id == "first_day"

    def test_corrupt_goals_heal_to_defaults(self, storage, clock):
        storage.set(USER_GOALS, b"\xff\xfe")
        store = reopen(storage, clock)
        assert len(store.goals) == 3

    def test_works_over_sql_storage(self, engine, clock, make_profile):
        storage = SqlKeyValueStorage(engine)
        store = reopen(storage, clock)
        store.save_profile(make_profile())
        store.upsert_daily_record(daily())
        again = reopen(storage, clock)
        assert again.profile == store.profile
        assert again.daily_records == store.daily_records


# ─── Round trips ──────────────────────────────────────────────────────────────

class TestRoundTrip:
    def test_profile(self, store, storage, clock, make_profile):
        profile = make_profile()
        store.save_profile(profile)
        assert reopen(storage, clock).profile == profile

    def test_daily_records(self, store, storage, clock):
        store.upsert_daily_record(daily(0, mood=MoodLevel.GOOD, craving_count=3, notes="ok"))
        store.upsert_daily_record(daily(1, did_smoke=True, mood=MoodLevel.BAD))
        assert reopen(storage, clock).daily_records == store.daily_records

    def test_craving_records(self, store, storage, clock):
        store.append_craving_record(CravingRecord(
            date=NOW, intensity=7, trigger="coffee", coping_strategy="walk",
            duration_seconds=300.0, was_successful=True,
        ))
        assert reopen(storage, clock).craving_records == store.craving_records

    def test_goals(self, store, storage, clock):
        store.upsert_goal(UserGoal(title="Run 5k", target_value=5, current_value=2, unit="km"))
        assert reopen(storage, clock).goals == store.goals

    def test_achievements(self, store, storage, clock, make_profile):
        store.save_profile(make_profile(days=10))
        store.evaluate_achievements()
        assert reopen(storage, clock).achievements == store.achievements

    def test_settings(self, store, storage, clock):
        settings = AppSettings(dark_mode=True, language="en", enable_sounds=False)
        store.save_settings(settings)
        assert reopen(storage, clock).settings == settings

    def test_onboarding_flag(self, store, storage, clock):
        store.complete_onboarding()
        assert reopen(storage, clock).has_completed_onboarding is True


# ─── Daily records ────────────────────────────────────────────────────────────

class TestUpsertDailyRecord:
    def test_same_day_replaces(self, store):
        store.upsert_daily_record(daily(0, hour=8, did_smoke=True))
        store.upsert_daily_record(daily(0, hour=21, did_smoke=False, notes="last"))
        records = store.daily_records
        assert len(records) == 1
        assert records[0].notes == "last"
        assert records[0].did_smoke is False

    def test_many_writes_same_day_keep_last(self, store):
        last = None
        for hour in range(0, 24, 3):
            last = daily(2, hour=hour, craving_count=hour)
            store.upsert_daily_record(last)
        same_day = [r for r in store.daily_records if r.date.date() == last.date.date()]
        assert same_day == [last]

    def test_different_days_append(self, store):
        store.upsert_daily_record(daily(0))
        store.upsert_daily_record(daily(1))
        assert len(store.daily_records) == 2

    def test_sorted_newest_first(self, store):
        for days_ago in (3, 0, 5, 1):
            store.upsert_daily_record(daily(days_ago))
        dates = [r.date for r in store.daily_records]
        assert dates == sorted(dates, reverse=True)

    def test_persists_full_collection(self, store, storage, clock):
        store.upsert_daily_record(daily(0))
        store.upsert_daily_record(daily(1))
        assert len(reopen(storage, clock).daily_records) == 2

    def test_returned_list_is_a_copy(self, store):
        store.upsert_daily_record(daily(0))
        store.daily_records.clear()
        assert len(store.daily_records) == 1

    def test_triggers_achievement_evaluation(self, store, events, make_profile):
        store.save_profile(make_profile(days=8))
        unlocked = store.upsert_daily_record(daily(0))
        assert unlocked == ["first_day", "one_week", "100_tl"]
        kinds = [(e.kind, e.key) for e in events.poll()]
        assert (ACHIEVEMENT_UNLOCKED, "one_week") in kinds


class TestCravingRecords:
    def test_multiple_per_day_allowed(self, store):
        for hour in (9, 13, 18):
            store.append_craving_record(CravingRecord(
                date=NOW.replace(hour=hour), intensity=5, was_successful=True,
            ))
        assert len(store.craving_records) == 3

    def test_sorted_newest_first(self, store):
        store.append_craving_record(CravingRecord(date=NOW - timedelta(days=2), intensity=3, was_successful=True))
        store.append_craving_record(CravingRecord(date=NOW, intensity=8, was_successful=False))
        store.append_craving_record(CravingRecord(date=NOW - timedelta(days=1), intensity=5, was_successful=True))
        assert [c.intensity for c in store.craving_records] == [8, 5, 3]


class TestGoals:
    def test_upsert_replaces_by_id(self, store):
        goal = store.goals[0]
        updated = goal.model_copy(update={"current_value": 12})
        store.upsert_goal(updated)
        assert len(store.goals) == 3
        assert store.goals[0].current_value == 12

    def test_upsert_appends_new(self, store):
        store.upsert_goal(UserGoal(title="Drink water", target_value=8, unit="glasses"))
        assert len(store.goals) == 4
        assert store.goals[-1].title == "Drink water"


# ─── Queries ──────────────────────────────────────────────────────────────────

class TestQueries:
    def test_record_for_today(self, store):
        store.upsert_daily_record(daily(1))
        today = daily(0, hour=7)
        store.upsert_daily_record(today)
        assert store.record_for_today() == today

    def test_record_for_today_absent(self, store):
        store.upsert_daily_record(daily(1))
        assert store.record_for_today() is None

    def test_records_in_window_includes_boundary(self, store):
        store.upsert_daily_record(DailyRecord(date=NOW - timedelta(days=7), did_smoke=False))
        store.upsert_daily_record(DailyRecord(date=NOW - timedelta(days=7, seconds=1), did_smoke=False))
        window = store.records_in_window(7)
        assert [r.date for r in window] == [NOW - timedelta(days=7)]

    def test_records_in_window_excludes_older(self, store):
        for days_ago in range(10):
            store.upsert_daily_record(daily(days_ago))
        assert len(store.records_in_window(3)) == 4  # today + 3 full days back at same hour

    def test_success_rate_empty(self, store):
        assert store.success_rate(7) == 0
        assert store.success_rate(0) == 0

    def test_success_rate_zero_days(self, store):
        store.upsert_daily_record(daily(0))
        assert store.success_rate(0) == 0

    def test_success_rate_over_most_recent_records(self, store):
        store.upsert_daily_record(daily(0, did_smoke=False))
        store.upsert_daily_record(daily(1, did_smoke=True))
        store.upsert_daily_record(daily(30, did_smoke=False))
        store.upsert_daily_record(daily(31, did_smoke=True))
        # the 3 most recent records, regardless of calendar gaps
        assert store.success_rate(3) == pytest.approx(2 / 3)
        assert store.success_rate(100) == pytest.approx(0.5)


# ─── Achievements ─────────────────────────────────────────────────────────────

class TestAchievementEvaluation:
    def test_no_profile_is_noop(self, store, events):
        assert store.evaluate_achievements() == []
        assert events.poll() == []

    def test_first_day_unlocks_once(self, store, events, clock, make_profile):
        store.save_profile(make_profile(days=0, cigarettes_per_day=1))
        assert store.evaluate_achievements() == []

        clock.advance(days=1)
        assert store.evaluate_achievements() == ["first_day"]
        first = next(a for a in store.achievements if a.achievement_id == "first_day")
        unlocked_at = first.unlocked_at
        assert unlocked_at == clock()
        assert first.progress == 1.0

        clock.advance(days=1)
        assert store.evaluate_achievements() == []
        first = next(a for a in store.achievements if a.achievement_id == "first_day")
        assert first.unlocked_at == unlocked_at

        unlock_events = [e for e in events.poll() if e.kind == ACHIEVEMENT_UNLOCKED]
        assert [e.key for e in unlock_events] == ["first_day"]

    def test_money_rule(self, store, make_profile):
        # 1 day * 20 cigs / 20 per pack * 100 per pack = 100
        store.save_profile(make_profile(days=1, price_per_pack=100.0))
        assert "100_tl" in store.evaluate_achievements()

    def test_one_month(self, store, make_profile):
        store.save_profile(make_profile(days=30))
        assert "one_month" in store.evaluate_achievements()

    def test_unwired_ids_stay_locked(self, store, make_profile):
        store.save_profile(make_profile(days=400))
        store.evaluate_achievements()
        locked = {a.achievement_id for a in store.achievements if not a.is_unlocked}
        assert locked == {
            "breath_master", "smoke_free_week", "craving_warrior",
            "three_months", "six_months", "one_year",
        }

    def test_unlock_survives_reload_and_is_not_refired(self, store, storage, clock, make_profile):
        store.save_profile(make_profile(days=10))
        store.evaluate_achievements()

        bus = EventBus()
        again = TrackerStore(storage, events=bus, clock=clock)
        again.load()
        assert again.evaluate_achievements() == []
        assert bus.poll() == []

    def test_nothing_persisted_when_nothing_changes(self, store, storage):
        before = storage.get(ACHIEVEMENTS)
        store.evaluate_achievements()
        assert storage.get(ACHIEVEMENTS) == before


# ─── Milestones ───────────────────────────────────────────────────────────────

class TestMilestones:
    def test_announces_each_milestone_once(self, store, events, clock, make_profile):
        store.save_profile(make_profile(days=0, hours=9))
        assert store.check_milestones() == ["20 minutes", "8 hours"]
        assert store.check_milestones() == []

        clock.advance(hours=20)
        assert store.check_milestones() == ["24 hours"]

        keys = [e.key for e in events.poll() if e.kind == MILESTONE_REACHED]
        assert keys == ["20 minutes", "8 hours", "24 hours"]

    def test_announced_set_survives_reload(self, store, storage, clock, make_profile):
        store.save_profile(make_profile(days=3))
        store.check_milestones()
        again = reopen(storage, clock)
        assert again.check_milestones() == []

    def test_daily_record_triggers_milestone_check(self, store, events, make_profile):
        store.save_profile(make_profile(days=0, hours=1))
        store.upsert_daily_record(daily(0))
        assert (MILESTONE_REACHED, "20 minutes") in [(e.kind, e.key) for e in events.poll()]

    def test_no_profile_announces_nothing(self, store):
        assert store.check_milestones() == []


# ─── Onboarding & reset ───────────────────────────────────────────────────────

class TestResetAll:
    def test_clears_memory(self, store, make_profile):
        store.save_profile(make_profile())
        store.upsert_daily_record(daily(0))
        store.complete_onboarding()
        store.reset_all()
        assert store.profile is None
        assert store.daily_records == []
        assert store.goals == []
        assert store.achievements == []
        assert store.has_completed_onboarding is False

    def test_clears_storage(self, store, storage, make_profile):
        store.save_profile(make_profile())
        store.append_craving_record(CravingRecord(date=NOW, intensity=2, was_successful=True))
        store.save_settings(AppSettings(dark_mode=True))
        store.complete_onboarding()
        store.check_milestones()
        store.reset_all()
        assert all(storage.get(key) is None for key in ALL_KEYS)

    def test_reload_after_reset_yields_defaults(self, store, storage, clock, make_profile):
        store.save_profile(make_profile(days=40))
        store.upsert_daily_record(daily(0))
        store.save_settings(AppSettings(language="en"))
        store.complete_onboarding()
        store.reset_all()

        again = reopen(storage, clock)
        assert again.profile is None
        assert again.daily_records == []
        assert again.craving_records == []
        assert again.settings == AppSettings()
        assert again.has_completed_onboarding is False
        assert len(again.goals) == 3
        assert not any(a.is_unlocked for a in again.achievements)
        assert again.reached_milestone_keys == []


def test_memory_storage_is_independent_per_store(clock):
    a = reopen(MemoryStorage(), clock)
    b = reopen(MemoryStorage(), clock)
    a.complete_onboarding()
    assert b.has_completed_onboarding is False


# ─── Timezone-aware input ─────────────────────────────────────────────────────

UTC_PLUS_3 = timezone(timedelta(hours=3))


class TestAwareTimestamps:
    def test_aware_record_is_stored_as_local_time(self, store):
        store.upsert_daily_record(DailyRecord(date=NOW.astimezone(timezone.utc), did_smoke=False))
        assert store.daily_records[0].date == NOW
        assert store.record_for_today() is not None

    def test_naive_and_aware_records_mix(self, store):
        store.upsert_daily_record(daily(2))
        store.upsert_daily_record(DailyRecord(date=NOW.astimezone(UTC_PLUS_3), did_smoke=False))
        store.upsert_daily_record(daily(1))
        assert len(store.daily_records) == 3
        assert len(store.records_in_window(7)) == 3

    def test_aware_record_replaces_naive_one_on_same_day(self, store):
        store.upsert_daily_record(daily(0, notes="naive"))
        store.upsert_daily_record(
            DailyRecord(date=NOW.astimezone(timezone.utc), did_smoke=True, notes="aware")
        )
        assert [r.notes for r in store.daily_records] == ["aware"]

    def test_aware_clock_is_converted(self, storage):
        store = TrackerStore(storage, clock=lambda: NOW.astimezone(timezone.utc))
        assert store.now() == NOW
        assert store.now().tzinfo is None

    def test_aware_profile_with_wall_clock(self, storage, make_profile):
        store = TrackerStore(storage)
        store.load()
        store.save_profile(make_profile(quit_date=datetime.now(timezone.utc) - timedelta(days=8)))

        unlocked = store.upsert_daily_record(
            DailyRecord(date=datetime.now(UTC_PLUS_3), did_smoke=False)
        )
        assert unlocked == ["first_day", "one_week", "100_tl"]
        assert store.profile.days_since_quit(store.now()) == 8
        assert len(store.records_in_window(7)) == 1


# ─── Snapshots ────────────────────────────────────────────────────────────────

class TestSnapshotsAreDetached:
    def test_editing_returned_achievement_does_not_refire_unlock(self, store, events, make_profile):
        store.save_profile(make_profile(days=1, cigarettes_per_day=1))
        assert store.evaluate_achievements() == ["first_day"]
        events.poll()

        store.achievements[0].unlocked_at = None

        assert store.achievements[0].is_unlocked
        assert store.evaluate_achievements() == []
        assert events.poll() == []

    def test_editing_record_after_upsert(self, store):
        record = daily(0, notes="original")
        store.upsert_daily_record(record)
        record.notes = "changed"
        store.daily_records[0].notes = "changed"
        store.record_for_today().notes = "changed"
        assert store.daily_records[0].notes == "original"

    def test_editing_returned_goal(self, store):
        store.goals[0].current_value = 99
        assert store.goals[0].current_value == 0

    def test_editing_saved_goal(self, store):
        goal = store.goals[0]
        goal.current_value = 10
        store.upsert_goal(goal)
        goal.current_value = 20
        assert store.goals[0].current_value == 10

    def test_editing_returned_settings(self, store):
        store.settings.notification_preferences.enable_milestones = False
        assert store.settings.notification_preferences.enable_milestones is True

    def test_editing_returned_profile(self, store, make_profile):
        store.save_profile(make_profile())
        store.profile.motivations.append("money")
        assert store.profile.motivations == ["health", "family"]
