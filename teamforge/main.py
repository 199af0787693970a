"""
TeamForge — FastAPI application entry-point.

Run with:
    uvicorn teamforge.main:app --reload
"""

import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI

from teamforge.config import settings
from teamforge.database import Base, engine

# ── Import models so their tables are registered on Base.metadata ──
import teamforge.models  # noqa: F401

# ── Import routers ──
from teamforge.routers import attempts, challenges, game_rooms, leaderboard, realtime, scoring, teams, users


def configure_logging() -> None:
    root = logging.getLogger("teamforge")
    if root.handlers:
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s %(levelname)s [%(name)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root.addHandler(handler)
    root.setLevel(settings.LOG_LEVEL.upper())
    root.propagate = False


configure_logging()
logger = logging.getLogger(__name__)


# ── Lifespan: create tables on startup, release connections on shutdown ──
@asynccontextmanager
async def lifespan(app: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"{settings.APP_NAME} started")
    yield
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    description="Team challenges with heuristic scoring, compatibility and leaderboards.",
    version="0.1.0",
    lifespan=lifespan,
)

# ── Register API routers ──
app.include_router(users.router)
app.include_router(teams.router)
app.include_router(leaderboard.router)
app.include_router(challenges.router)
app.include_router(attempts.router)
app.include_router(scoring.router)
app.include_router(game_rooms.router)

if settings.WS_ENABLED:
    app.include_router(realtime.router)


@app.get("/")
async def root():
    return {"name": settings.APP_NAME, "status": "ok"}
