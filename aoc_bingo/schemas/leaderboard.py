"""
Leaderboard payloads as served by the upstream private leaderboard endpoint.
"""
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from aoc_bingo.schemas.puzzle import PuzzlePart


class StarInfo(BaseModel):
    get_star_ts: int
    star_index: Optional[int] = None


class MemberProgress(BaseModel):
    id: int
    name: Optional[str] = None  # null for anonymous users
    local_score: int = 0
    stars: int = 0
    last_star_ts: int = 0
    completion_day_level: Dict[int, Dict[int, StarInfo]] = Field(default_factory=dict)

    @property
    def display_name(self) -> str:
        return self.name or f"(anonymous user #{self.id})"

    @property
    def total_stars(self) -> int:
        return self.stars

    def solved_at(self, day: int, part: PuzzlePart) -> Optional[int]:
        """Unix timestamp of the star for ``day``/``part``, or None if unsolved."""
        star = self.completion_day_level.get(day, {}).get(int(part))
        return star.get_star_ts if star else None


class LeaderboardData(BaseModel):
    event: str
    day1_ts: Optional[int] = None
    owner_id: int
    num_days: Optional[int] = None
    members: Dict[int, MemberProgress] = Field(default_factory=dict)


class LeaderboardSnapshot(BaseModel):
    """One year of one private leaderboard, as last mirrored locally."""
    year: int
    board_id: int
    data: LeaderboardData
    created_at: datetime
    updated_at: datetime

    @property
    def owner_member_id(self) -> int:
        return self.data.owner_id

    @property
    def num_days(self) -> Optional[int]:
        return self.data.num_days

    @property
    def members(self) -> Dict[int, MemberProgress]:
        return self.data.members

    @property
    def fetched_at(self) -> datetime:
        return self.created_at

    @property
    def refreshed_at(self) -> datetime:
        return self.updated_at


class LeaderboardRequest(BaseModel):
    year: int = Field(..., ge=2015, description="Event year")
    board_id: int = Field(..., description="Private leaderboard ID")
    session_token: Optional[str] = Field(None, description="Upstream session cookie")


class BingoOptionsRequest(BaseModel):
    board_id: int = Field(..., description="Private leaderboard ID")
    years: Optional[List[int]] = Field(None, description="Defaults to every year up to now")
    session_token: Optional[str] = None
    member_ids: Optional[List[int]] = Field(None, description="Restrict to these members")
    cutoff: Optional[datetime] = Field(None, description="Ignore solves before this instant")


class LeaderboardMemberResponse(BaseModel):
    id: int
    name: str
