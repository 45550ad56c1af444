"""FastAPI application factory."""
from fastapi import FastAPI

from smokefree.api.routes import (
    achievements,
    events,
    goals,
    profile,
    records,
    settings as settings_routes,
    stats,
)


def create_app() -> FastAPI:
    """Build and return the FastAPI app. The store is built lazily by get_store."""
    app = FastAPI(
        title="Smokefree API",
        description="Smoking-cessation tracker backend",
        version="0.1.0",
    )

    app.include_router(profile.router, prefix="/profile", tags=["profile"])
    app.include_router(records.router, prefix="/records", tags=["records"])
    app.include_router(goals.router, prefix="/goals", tags=["goals"])
    app.include_router(achievements.router, prefix="/achievements", tags=["achievements"])
    app.include_router(stats.router, prefix="/stats", tags=["stats"])
    app.include_router(events.router, prefix="/events", tags=["events"])
    app.include_router(settings_routes.router, tags=["settings"])

    return app


# Module-level app instance for uvicorn
app = create_app()
