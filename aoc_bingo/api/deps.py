"""
Dependency injection for API endpoints.
"""
from functools import lru_cache

from fastapi import Depends

from aoc_bingo.core.database import SessionFactory, SessionLocal
from aoc_bingo.services.aoc_client import AdventOfCodeClient
from aoc_bingo.services.bingo_engine import BingoEligibilityEngine
from aoc_bingo.services.game_service import GameService
from aoc_bingo.services.leaderboard_mirror import LeaderboardMirror, RefreshLocks


def get_session_factory() -> SessionFactory:
    """
    Session factory dependency. Services open and release their own
    sessions so no connection is held across an upstream request.
    """
    return SessionLocal


@lru_cache()
def get_aoc_client() -> AdventOfCodeClient:
    return AdventOfCodeClient()


@lru_cache()
def get_refresh_locks() -> RefreshLocks:
    return RefreshLocks()


def get_leaderboard_mirror(
        session_factory: SessionFactory = Depends(get_session_factory),
        client: AdventOfCodeClient = Depends(get_aoc_client),
        locks: RefreshLocks = Depends(get_refresh_locks)
) -> LeaderboardMirror:
    return LeaderboardMirror(session_factory, client, locks=locks)


def get_bingo_engine(
        mirror: LeaderboardMirror = Depends(get_leaderboard_mirror)
) -> BingoEligibilityEngine:
    return BingoEligibilityEngine(mirror)


def get_game_service(
        session_factory: SessionFactory = Depends(get_session_factory),
        mirror: LeaderboardMirror = Depends(get_leaderboard_mirror),
        engine: BingoEligibilityEngine = Depends(get_bingo_engine)
) -> GameService:
    return GameService(session_factory, mirror, engine)
