"""
APScheduler jobs for time-driven progress checks.

Achievements like `one_week` and health milestones like "8 hours" depend
only on time since quitting, so they can come due while the user writes
nothing. The periodic progress check catches them.

The scheduler runs inside the same process as the CLI (wired in __main__).
The job is synchronous, so APScheduler runs it in its thread pool and the
store's blocking storage calls stay off the event loop.
"""
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from smokefree.config import get_settings

logger = logging.getLogger(__name__)


def build_scheduler(store) -> AsyncIOScheduler:
    """
    Create and configure the APScheduler.

    Args:
        store: TrackerStore to evaluate.

    Returns:
        Configured AsyncIOScheduler (not yet started).
    """
    settings = get_settings()
    scheduler = AsyncIOScheduler()

    scheduler.add_job(
        _progress_check,
        trigger="interval",
        minutes=settings.progress_check_minutes,
        id="progress_check",
        replace_existing=True,
        kwargs={"store": store},
    )

    return scheduler


def _progress_check(store) -> None:
    """
    Periodic job: unlock due achievements and announce reached milestones.

    Idempotent: already-unlocked achievements and announced milestones are skipped.
    """
    try:
        unlocked = store.evaluate_achievements()
        milestones = store.check_milestones()
        if unlocked or milestones:
            logger.info(
                "Progress check: %d achievement(s), %d milestone(s)",
                len(unlocked),
                len(milestones),
            )
    except Exception as exc:
        logger.error("Progress check failed: %s", exc)
