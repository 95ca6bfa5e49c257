"""
Response shaping shared by the bingo endpoints.
"""
from typing import List

from aoc_bingo.schemas.puzzle import PuzzleSquare, PuzzleSquareResponse
from aoc_bingo.services.puzzle_calendar import difficulty_score


def to_square_responses(squares: List[PuzzleSquare]) -> List[PuzzleSquareResponse]:
    return [
        PuzzleSquareResponse(
            year=square.year,
            day=square.day,
            part=int(square.part),
            difficulty=difficulty_score(square)
        )
        for square in squares
    ]
