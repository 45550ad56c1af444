"""
Achievement catalog and unlock rules.

The catalog is the fixed, ordered list of achievement ids a user can earn.
ACHIEVEMENT_RULES maps an id to the predicate that unlocks it; ids in the
catalog with no rule simply stay locked until one is added here. The
evaluation loop never needs to change when the table grows.

Evaluation is pure: it reports which locked achievements should unlock and
leaves applying the transition (timestamp, persistence, events) to the
store.
"""
from datetime import datetime
from typing import Callable, Dict, List, Optional

from smokefree.models.achievement import UserAchievement
from smokefree.models.profile import UserProfile

Rule = Callable[[UserProfile, datetime], bool]

ACHIEVEMENT_CATALOG: List[str] = [
    "first_day",
    "one_week",
    "100_tl",
    "breath_master",
    "one_month",
    "smoke_free_week",
    "craving_warrior",
    "three_months",
    "six_months",
    "one_year",
]

ACHIEVEMENT_RULES: Dict[str, Rule] = {
    "first_day": lambda p, now: p.days_since_quit(now) >= 1,
    "one_week": lambda p, now: p.days_since_quit(now) >= 7,
    "100_tl": lambda p, now: p.money_saved(now) >= 100,
    "one_month": lambda p, now: p.days_since_quit(now) >= 30,
}


def default_achievements() -> List[UserAchievement]:
    """One locked entry per catalog id, in catalog order."""
    return [UserAchievement(achievement_id=aid) for aid in ACHIEVEMENT_CATALOG]


def evaluate_achievements(
    achievements: List[UserAchievement],
    profile: Optional[UserProfile],
    now: datetime,
    rules: Optional[Dict[str, Rule]] = None,
) -> List[str]:
    """
    Return ids of locked achievements whose rule now holds.

    Args:
        achievements: Current unlock state, in display order.
        profile: The quit profile; None means nothing can unlock yet.
        now: Evaluation time.
        rules: Override for ACHIEVEMENT_RULES (tests, experiments).

    Returns:
        Achievement ids to unlock, in the order they appear in `achievements`.
        Already-unlocked ids are never included.
    """
    if profile is None:
        return []

    rules = ACHIEVEMENT_RULES if rules is None else rules
    newly_unlocked = []
    for achievement in achievements:
        if achievement.is_unlocked:
            continue
        rule = rules.get(achievement.achievement_id)
        if rule is not None and rule(profile, now):
            newly_unlocked.append(achievement.achievement_id)
    return newly_unlocked
