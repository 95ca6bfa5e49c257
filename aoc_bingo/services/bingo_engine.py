"""
Bingo eligibility: which puzzle squares can still be offered to a game.
"""
import logging
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional

from aoc_bingo.core.clock import utcnow, ensure_utc
from aoc_bingo.core.exceptions import NoOptions
from aoc_bingo.schemas.leaderboard import LeaderboardSnapshot, MemberProgress
from aoc_bingo.schemas.puzzle import PuzzlePart, PuzzleSquare
from aoc_bingo.services import puzzle_calendar
from aoc_bingo.services.leaderboard_mirror import LeaderboardMirror

logger = logging.getLogger(__name__)


class BingoEligibilityEngine:

    def __init__(self, mirror: LeaderboardMirror, clock: Callable[[], datetime] = utcnow):
        self.mirror = mirror
        self.clock = clock

    def compute_options(
        self,
        board_id: int,
        years: Optional[List[int]] = None,
        session_token: Optional[str] = None,
        member_ids: Optional[Iterable[int]] = None,
        cutoff: Optional[datetime] = None
    ) -> List[PuzzleSquare]:
        """
        Squares still eligible for the given members, in calendar order.

        Years whose leaderboard cannot be resolved count as untouched. Solves
        before ``cutoff`` are ignored.
        Raises NoOptions when nothing is left.
        """
        now = self.clock()
        if years is None:
            years = puzzle_calendar.default_years(now)
        years = puzzle_calendar.validate_years(years)

        snapshots: Dict[int, LeaderboardSnapshot] = {}
        for year, result in zip(years, self.mirror.get_or_refresh_range(years, board_id, session_token)):
            if isinstance(result, LeaderboardSnapshot):
                snapshots[year] = result

        cutoff_ts = int(ensure_utc(cutoff).timestamp()) if cutoff else 0
        member_filter = set(member_ids) if member_ids is not None else None

        options = []
        for square in puzzle_calendar.open_squares(years, now):
            snapshot = snapshots.get(square.year)
            # No data means no evidence of any solve
            members = relevant_members(snapshot, member_filter) if snapshot else []
            if is_eligible(square, members, cutoff_ts):
                options.append(square)

        if not options:
            raise NoOptions(f"No valid bingo options for leaderboard {board_id}")

        logger.debug(f"{len(options)} bingo options for leaderboard {board_id} across {len(years)} years")
        return options


def relevant_members(snapshot: LeaderboardSnapshot, member_filter: Optional[set]) -> List[MemberProgress]:
    if member_filter is None:
        return list(snapshot.members.values())
    return [m for m in snapshot.members.values() if m.id in member_filter]


def is_eligible(square: PuzzleSquare, members: List[MemberProgress], cutoff_ts: int = 0) -> bool:
    if square.part == PuzzlePart.FIRST:
        return first_part_eligible(square.day, members, cutoff_ts)
    if square.day == puzzle_calendar.calendar_size(square.year):
        # The last day's second part needs every other star; never offer it
        return False
    return second_part_eligible(square.day, members, cutoff_ts)


def first_part_eligible(day: int, members: List[MemberProgress], cutoff_ts: int) -> bool:
    """Nobody has solved part one since the cutoff."""
    return all(
        not _solved_since(m.solved_at(day, PuzzlePart.FIRST), cutoff_ts)
        for m in members
    )


def second_part_eligible(day: int, members: List[MemberProgress], cutoff_ts: int) -> bool:
    """
    Everyone has part one and nobody has part two since the cutoff, or
    nobody has touched either part since the cutoff.
    """
    ready_for_part_two = all(
        m.solved_at(day, PuzzlePart.FIRST) is not None
        and not _solved_since(m.solved_at(day, PuzzlePart.SECOND), cutoff_ts)
        for m in members
    )
    untouched = all(
        not _solved_since(m.solved_at(day, PuzzlePart.FIRST), cutoff_ts)
        and not _solved_since(m.solved_at(day, PuzzlePart.SECOND), cutoff_ts)
        for m in members
    )
    return ready_for_part_two or untouched


def _solved_since(ts: Optional[int], cutoff_ts: int) -> bool:
    return ts is not None and ts >= cutoff_ts
