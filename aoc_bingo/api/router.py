"""
Router registration for the AoC Bingo API.
"""
from fastapi import FastAPI

from aoc_bingo.api import games, health, leaderboard


def include_routers(app: FastAPI) -> None:
    """Include all API routers with the FastAPI application."""
    app.include_router(health.router)
    app.include_router(games.router, prefix="/api/v1", tags=["games"])
    app.include_router(leaderboard.router, prefix="/api/v1", tags=["leaderboard"])
