from sqlalchemy import Column, Integer, Text, DateTime, UniqueConstraint

from aoc_bingo.core.clock import utcnow
from aoc_bingo.core.database import Base


class LeaderboardCache(Base):
    __tablename__ = "leaderboard_cache"

    id = Column(Integer, primary_key=True, autoincrement=True)
    year = Column(Integer, nullable=False)
    leaderboard_id = Column(Integer, nullable=False)
    data = Column(Text, nullable=False)  # JSON payload as served upstream
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        UniqueConstraint('year', 'leaderboard_id', name='unique_year_leaderboard'),
    )

    def __init__(self, year: int, leaderboard_id: int, data: str, refreshed_at=None):
        self.year = year
        self.leaderboard_id = leaderboard_id
        self.data = data
        refreshed_at = refreshed_at or utcnow()
        self.created_at = refreshed_at
        self.updated_at = refreshed_at
