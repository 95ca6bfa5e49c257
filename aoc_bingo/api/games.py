"""
Game-related API endpoints.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response

from aoc_bingo.api.bingo import to_square_responses
from aoc_bingo.api.deps import get_game_service
from aoc_bingo.schemas import game as game_schemas
from aoc_bingo.schemas.leaderboard import LeaderboardMemberResponse
from aoc_bingo.schemas.puzzle import PuzzleSquareResponse
from aoc_bingo.services.game_service import GameService

router = APIRouter(
    prefix="/games",
    tags=["games"],
    responses={404: {"description": "Game not found"}}
)


@router.post("", response_model=game_schemas.GameResponse)
def create_game(
        game: game_schemas.GameCreate,
        service: GameService = Depends(get_game_service)
):
    """
    Create a new bingo game on a private leaderboard.

    The game gets a random 8-character ID. The session token is stored
    for leaderboard refreshes and never returned.
    """
    return service.create_game(game.leaderboard_id, game.session_token)


@router.get("/{game_id}", response_model=game_schemas.GameResponse)
def get_game(
        game_id: str,
        service: GameService = Depends(get_game_service)
):
    return service.get_game(game_id)


@router.get("/{game_id}/memberships", response_model=List[game_schemas.MembershipResponse])
def list_memberships(
        game_id: str,
        service: GameService = Depends(get_game_service)
):
    """List enrolled members, oldest first."""
    return service.list_memberships(game_id)


@router.post("/{game_id}/memberships", response_model=game_schemas.MembershipResponse)
def create_membership(
        game_id: str,
        membership: game_schemas.MembershipCreate,
        service: GameService = Depends(get_game_service)
):
    """
    Enroll a leaderboard member in the game.

    Enrolling someone twice returns the existing membership.
    """
    return service.create_membership(game_id, membership.member_id, membership.member_name)


@router.delete("/{game_id}/memberships/{member_id}", status_code=204)
def delete_membership(
        game_id: str,
        member_id: int,
        service: GameService = Depends(get_game_service)
):
    service.delete_membership(game_id, member_id)
    return Response(status_code=204)


@router.get("/{game_id}/possible-members", response_model=List[LeaderboardMemberResponse])
def get_possible_members(
        game_id: str,
        service: GameService = Depends(get_game_service)
):
    """Everyone on the game's leaderboard, for the invite picker."""
    return service.possible_members(game_id)


@router.get("/{game_id}/bingo-options", response_model=List[PuzzleSquareResponse])
def get_bingo_options(
        game_id: str,
        years: Optional[List[int]] = Query(None, description="Event years; defaults to all"),
        service: GameService = Depends(get_game_service)
):
    """
    Puzzles the enrolled members can still race on.

    Solves made before the game was created are ignored. Responds 404 with
    error code NO_BINGO_OPTIONS when nothing is left.
    """
    return to_square_responses(service.bingo_options(game_id, years))
