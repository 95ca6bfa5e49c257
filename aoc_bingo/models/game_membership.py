from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship

from aoc_bingo.core.clock import utcnow
from aoc_bingo.core.database import Base


class GameMembership(Base):
    __tablename__ = "game_memberships"

    id = Column(Integer, primary_key=True, autoincrement=True)
    game_id = Column(String(8), ForeignKey("games.id", ondelete="CASCADE"), nullable=False)
    member_id = Column(Integer, nullable=False)
    member_name = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    # Relationships
    game = relationship("Game", back_populates="memberships")

    __table_args__ = (
        Index('idx_membership_game_member', 'game_id', 'member_id'),
    )
