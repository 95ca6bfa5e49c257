from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship

from aoc_bingo.core.clock import utcnow
from aoc_bingo.core.database import Base


class Game(Base):
    __tablename__ = "games"

    id = Column(String(8), primary_key=True)  # 8-char lowercase alphanumeric
    leaderboard_id = Column(Integer, nullable=False, index=True)
    session_token = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    memberships = relationship(
        "GameMembership",
        back_populates="game",
        cascade="all, delete-orphan"
    )