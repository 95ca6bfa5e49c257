from dataclasses import dataclass
from enum import IntEnum

from pydantic import BaseModel, Field


class PuzzlePart(IntEnum):
    FIRST = 1
    SECOND = 2


@dataclass(frozen=True, order=True)
class PuzzleSquare:
    """A single bingo-playable puzzle, ordered by year, day, then part."""
    year: int
    day: int
    part: PuzzlePart

    def __str__(self) -> str:
        return f"{self.year}/{self.day}/{int(self.part)}"


class PuzzleSquareResponse(BaseModel):
    year: int
    day: int
    part: int = Field(..., ge=1, le=2, description="1 for the first part, 2 for the second")
    difficulty: int = Field(..., description="Rough weighting, grows with day and part")
