"""
Data access for games and their memberships.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from sqlalchemy import and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from aoc_bingo.models.game import Game
from aoc_bingo.models.game_membership import GameMembership

logger = logging.getLogger(__name__)


class InsertOutcome(str, Enum):
    INSERTED = "inserted"
    CONFLICT = "conflict"


@dataclass
class InsertResult:
    outcome: InsertOutcome
    game: Optional[Game] = None

    @property
    def inserted(self) -> bool:
        return self.outcome == InsertOutcome.INSERTED


class GameRepository:
    """Queries for the games and game_memberships tables. No business rules."""

    def insert_game(self, db: Session, game_id: str, leaderboard_id: int, session_token: str) -> InsertResult:
        """
        Insert a game, reporting an ID clash as CONFLICT instead of raising.

        Any other integrity failure is re-raised.
        """
        game = Game(id=game_id, leaderboard_id=leaderboard_id, session_token=session_token)
        db.add(game)
        try:
            db.flush()
        except IntegrityError:
            db.rollback()
            if db.get(Game, game_id) is None:
                raise
            return InsertResult(InsertOutcome.CONFLICT)
        return InsertResult(InsertOutcome.INSERTED, game)

    def get_game(self, db: Session, game_id: str) -> Optional[Game]:
        return db.query(Game).filter(Game.id == game_id).first()

    def get_game_for_update(self, db: Session, game_id: str) -> Optional[Game]:
        """Load a game and lock its row until the transaction ends."""
        return db.query(Game).filter(Game.id == game_id).with_for_update().first()

    def get_membership(self, db: Session, game_id: str, member_id: int) -> Optional[GameMembership]:
        return db.query(GameMembership).filter(
            and_(
                GameMembership.game_id == game_id,
                GameMembership.member_id == member_id
            )
        ).first()

    def create_membership(self, db: Session, game_id: str, member_id: int, member_name: str) -> GameMembership:
        membership = GameMembership(game_id=game_id, member_id=member_id, member_name=member_name)
        db.add(membership)
        db.flush()
        return membership

    def delete_membership(self, db: Session, game_id: str, member_id: int) -> int:
        """Returns the number of rows removed."""
        return db.query(GameMembership).filter(
            and_(
                GameMembership.game_id == game_id,
                GameMembership.member_id == member_id
            )
        ).delete(synchronize_session=False)

    def list_memberships(self, db: Session, game_id: str) -> List[GameMembership]:
        return db.query(GameMembership).filter(
            GameMembership.game_id == game_id
        ).order_by(GameMembership.created_at.asc(), GameMembership.id.asc()).all()
