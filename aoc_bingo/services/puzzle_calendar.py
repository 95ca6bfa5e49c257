"""
Puzzle calendar: which days exist per event year and when they unlock.
"""
import math
from datetime import datetime
from typing import Iterable, List, Optional

from aoc_bingo.core.clock import utcnow, ensure_utc
from aoc_bingo.core.exceptions import InvalidYear
from aoc_bingo.schemas.puzzle import PuzzlePart, PuzzleSquare

FIRST_YEAR = 2015
SHORT_CALENDAR_FROM = 2025
FULL_CALENDAR_SIZE = 25
SHORT_CALENDAR_SIZE = 12
SECOND_PART_DIFFICULTY_OFFSET = 2


def calendar_size(year: int) -> int:
    """Number of puzzle days in the given event year."""
    if year < FIRST_YEAR:
        raise InvalidYear(year)
    if year < SHORT_CALENDAR_FROM:
        return FULL_CALENDAR_SIZE
    return SHORT_CALENDAR_SIZE


def validate_years(years: Iterable[int]) -> List[int]:
    """Sorted, de-duplicated event years. Raises InvalidYear for any year before the first event."""
    years = sorted(set(years))
    for year in years:
        if year < FIRST_YEAR:
            raise InvalidYear(year)
    return years


def squares_for_day(year: int, day: int) -> List[PuzzleSquare]:
    return [PuzzleSquare(year, day, part) for part in PuzzlePart]


def all_squares(years: Iterable[int]) -> List[PuzzleSquare]:
    """Every square of the given years, in calendar order."""
    squares = []
    for year in validate_years(years):
        for day in range(1, calendar_size(year) + 1):
            squares.extend(squares_for_day(year, day))
    return squares


def latest_open_day(year: int, as_of: Optional[datetime] = None) -> Optional[int]:
    """
    Latest unlocked day of ``year`` as of ``as_of``.

    During December of ``year`` this is today's day of month (capped at the
    calendar size), for past years the whole calendar, and None for years
    that have not started yet.
    """
    size = calendar_size(year)
    as_of = ensure_utc(as_of) if as_of else utcnow()

    if as_of.year == year and as_of.month == 12:
        return min(as_of.day, size)
    if as_of.year > year:
        return size
    return None


def latest_open_year(as_of: Optional[datetime] = None) -> int:
    as_of = ensure_utc(as_of) if as_of else utcnow()
    if latest_open_day(as_of.year, as_of) is not None:
        return as_of.year
    return as_of.year - 1


def default_years(as_of: Optional[datetime] = None) -> List[int]:
    """The full historical range, first event through the latest open one."""
    return list(range(FIRST_YEAR, latest_open_year(as_of) + 1))


def open_squares(years: Iterable[int], as_of: Optional[datetime] = None) -> List[PuzzleSquare]:
    """Like all_squares, but without days that have not unlocked yet."""
    squares = []
    for year in sorted(set(years)):
        last_day = latest_open_day(year, as_of)
        if last_day is None:
            continue
        for day in range(1, last_day + 1):
            squares.extend(squares_for_day(year, day))
    return squares


def difficulty_score(square: PuzzleSquare) -> int:
    """
    Auxiliary weighting that grows through the calendar: 1..6 over the days
    of a year, plus a fixed offset for second parts.
    """
    size = calendar_size(square.year)
    progression = (square.day - 1) / (size - 1)
    score = math.floor(progression * 5) + 1
    if square.part == PuzzlePart.SECOND:
        score += SECOND_PART_DIFFICULTY_OFFSET
    return score
