"""
Leaderboard API endpoints.
"""
from typing import List

from fastapi import APIRouter, Depends

from aoc_bingo.api.bingo import to_square_responses
from aoc_bingo.api.deps import get_bingo_engine, get_leaderboard_mirror
from aoc_bingo.schemas import leaderboard as leaderboard_schemas
from aoc_bingo.schemas.puzzle import PuzzleSquareResponse
from aoc_bingo.services.bingo_engine import BingoEligibilityEngine
from aoc_bingo.services.leaderboard_mirror import LeaderboardMirror


router = APIRouter(
    prefix="/leaderboard",
    tags=["leaderboard"]
)


@router.post("", response_model=leaderboard_schemas.LeaderboardSnapshot)
def get_leaderboard(
        req: leaderboard_schemas.LeaderboardRequest,
        mirror: LeaderboardMirror = Depends(get_leaderboard_mirror)
):
    """
    Get one year of a private leaderboard.

    Served from the local mirror while it is fresh, or when no session
    token is given and an older copy exists.
    """
    return mirror.get_or_refresh(req.year, req.board_id, req.session_token)


@router.post("/bingo-options", response_model=List[PuzzleSquareResponse])
def get_bingo_options(
        req: leaderboard_schemas.BingoOptionsRequest,
        engine: BingoEligibilityEngine = Depends(get_bingo_engine)
):
    """Eligible bingo squares for an arbitrary leaderboard and member set."""
    squares = engine.compute_options(
        req.board_id,
        years=req.years,
        session_token=req.session_token,
        member_ids=req.member_ids,
        cutoff=req.cutoff
    )
    return to_square_responses(squares)
