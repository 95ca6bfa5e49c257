"""
Bingo games on top of private Advent of Code leaderboards.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from aoc_bingo.api.router import include_routers
from aoc_bingo.core.config import settings
from aoc_bingo.core.exception_handlers import register_exception_handlers
from aoc_bingo.core.startup import initialize_database, shutdown_database

# Configure logging
logging.basicConfig(
    level=logging.INFO if not settings.DEBUG else logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application lifecycle events."""
    logger.info("Starting AoC Bingo ...")
    initialize_database()

    yield

    logger.info("Shutting down AoC Bingo API...")
    shutdown_database()


app = FastAPI(
    title="AoC Bingo",
    description="""
    Bingo games played on private Advent of Code leaderboards.
    Leaderboards are mirrored locally and refreshed at most every 15 minutes.
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan
)

register_exception_handlers(app)

include_routers(app)

# CLI entry point
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info",
        access_log=True
    )
