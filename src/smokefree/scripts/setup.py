"""
Interactive onboarding wizard.

Collects the quit profile once, saves it, and marks onboarding complete.
Also offers a full data reset.

Usage:
    python -m smokefree setup
    python -m smokefree reset
"""
import sys
from datetime import datetime
from typing import Callable, List, Optional

from pydantic import ValidationError

from smokefree.models.profile import UserProfile
from smokefree.tracker.store import TrackerStore


def _ask(prompt: str, input_fn: Callable[[str], str]) -> str:
    return input_fn(prompt).strip()


def _parse_quit_date(raw: str) -> Optional[datetime]:
    """Blank means now. Accepts YYYY-MM-DD or YYYY-MM-DD HH:MM."""
    if not raw:
        return datetime.now()
    for fmt in ("%Y-%m-%d %H:%M", "%Y-%m-%d"):
        try:
            return datetime.strptime(raw, fmt)
        except ValueError:
            continue
    return None


def run_setup(store: TrackerStore, input_fn: Callable[[str], str] = input) -> None:
    print("\n🚭 Smokefree — Setup\n")

    if store.has_completed_onboarding:
        print("⚠️  Onboarding was already completed.")
        overwrite = _ask("Replace the existing profile? [y/N] ", input_fn).lower()
        if overwrite != "y":
            print("Setup cancelled. Existing profile unchanged.")
            sys.exit(0)

    name = _ask("Your name: ", input_fn)
    if not name:
        print("Error: name cannot be empty.")
        sys.exit(1)

    quit_date = _parse_quit_date(_ask("Quit date [YYYY-MM-DD HH:MM, blank = now]: ", input_fn))
    if quit_date is None:
        print("Error: quit date must look like 2025-01-31 or 2025-01-31 08:00.")
        sys.exit(1)

    motivations: List[str] = [
        m.strip()
        for m in _ask("Motivations (comma separated, optional): ", input_fn).split(",")
        if m.strip()
    ]

    try:
        profile = UserProfile(
            name=name,
            quit_date=quit_date,
            cigarettes_per_day=_ask("Cigarettes per day: ", input_fn),
            price_per_pack=_ask("Price per pack: ", input_fn),
            cigarettes_per_pack=_ask("Cigarettes per pack [20]: ", input_fn) or 20,
            motivations=motivations,
        )
    except ValidationError as exc:
        print(f"\n❌ Invalid profile: {exc}")
        sys.exit(1)

    store.save_profile(profile)
    store.complete_onboarding()
    store.evaluate_achievements()
    store.check_milestones()

    print(f"\n✅ Profile saved for {profile.name}.")
    print(f"   Smoke-free days so far: {profile.days_since_quit()}")
    print(f"   Money saved so far:     {profile.money_saved():.2f}\n")


def run_reset(store: TrackerStore, input_fn: Callable[[str], str] = input) -> None:
    confirm = _ask("Delete ALL tracker data? This cannot be undone. [y/N] ", input_fn).lower()
    if confirm != "y":
        print("Reset cancelled.")
        sys.exit(0)
    store.reset_all()
    print("All data deleted.")
