"""
Main entrypoint: runs the progress-check scheduler and logs tracker events.

FastAPI runs separately under uvicorn.

Usage:
    python -m smokefree setup       # one-time onboarding (profile)
    python -m smokefree reset       # delete all data
    python -m smokefree             # starts the scheduler
    uvicorn smokefree.api.main:app --host 0.0.0.0 --port 8000  # starts API
"""
import asyncio
import logging
import sys

from smokefree.config import get_settings

logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)
logger = logging.getLogger(__name__)


def _open_store():
    from smokefree.db.engine import get_engine
    from smokefree.db.storage import SqlKeyValueStorage
    from smokefree.tracker.store import TrackerStore

    store = TrackerStore(SqlKeyValueStorage(get_engine()))
    store.load()
    return store


def _log_event(event) -> None:
    logger.info("EVENT %s: %s", event.kind, event.key)


async def _run_scheduler() -> None:
    from smokefree.scheduler.jobs import build_scheduler

    settings = get_settings()
    store = _open_store()

    if not store.has_completed_onboarding:
        logger.error("No profile found. Run `python -m smokefree setup` first.")
        sys.exit(1)

    store.events.subscribe(_log_event)

    # Catch anything that came due while the process was down
    store.evaluate_achievements()
    store.check_milestones()

    scheduler = build_scheduler(store)
    scheduler.start()
    logger.info(
        "Scheduler started (progress check every %d min)",
        settings.progress_check_minutes,
    )

    try:
        await asyncio.Event().wait()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Shutting down...")
    finally:
        scheduler.shutdown()
        logger.info("Goodbye.")


if __name__ == "__main__":
    command = sys.argv[1] if len(sys.argv) > 1 else None
    if command == "setup":
        from smokefree.scripts.setup import run_setup
        run_setup(_open_store())
    elif command == "reset":
        from smokefree.scripts.setup import run_reset
        run_reset(_open_store())
    else:
        asyncio.run(_run_scheduler())
