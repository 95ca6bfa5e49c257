import logging
import secrets
import string
from typing import Callable, List, Optional

from aoc_bingo.core.config import settings
from aoc_bingo.core.database import SessionFactory, transaction
from aoc_bingo.core.exceptions import (
    GameNotFound, IdGenerationExhausted, LeaderboardNotFound
)
from aoc_bingo.models.game import Game
from aoc_bingo.models.game_membership import GameMembership
from aoc_bingo.repositories.game_repository import GameRepository
from aoc_bingo.schemas.leaderboard import LeaderboardSnapshot
from aoc_bingo.schemas.puzzle import PuzzleSquare
from aoc_bingo.services.bingo_engine import BingoEligibilityEngine
from aoc_bingo.services.leaderboard_mirror import LeaderboardMirror

logger = logging.getLogger(__name__)

GAME_ID_LENGTH = 8
GAME_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_game_id() -> str:
    return "".join(secrets.choice(GAME_ID_ALPHABET) for _ in range(GAME_ID_LENGTH))


class GameService:
    """Games, their member rosters, and the bingo queries served per game."""

    def __init__(
        self,
        session_factory: SessionFactory,
        mirror: LeaderboardMirror,
        engine: Optional[BingoEligibilityEngine] = None,
        id_generator: Callable[[], str] = generate_game_id
    ):
        self.session_factory = session_factory
        self.mirror = mirror
        self.engine = engine or BingoEligibilityEngine(mirror)
        self.id_generator = id_generator
        self.repository = GameRepository()

    def create_game(
        self,
        leaderboard_id: int,
        session_token: str,
        max_attempts: int = settings.GAME_ID_MAX_ATTEMPTS
    ) -> Game:
        """
        Create a game under a random ID, drawing a new ID on collision.

        Raises IdGenerationExhausted after ``max_attempts`` collisions. Other
        storage errors propagate immediately.
        """
        for attempt in range(1, max_attempts + 1):
            game_id = self.id_generator()
            with transaction(self.session_factory) as db:
                result = self.repository.insert_game(db, game_id, leaderboard_id, session_token)
                if result.inserted:
                    logger.info(f"Game {game_id} created for leaderboard {leaderboard_id}")
                    return result.game

            logger.warning(f"Game ID collision on {game_id} (attempt {attempt}/{max_attempts})")

        raise IdGenerationExhausted(max_attempts)

    def get_game(self, game_id: str) -> Game:
        with transaction(self.session_factory) as db:
            game = self.repository.get_game(db, game_id)
            if not game:
                raise GameNotFound(game_id)
            return game

    def create_membership(self, game_id: str, member_id: int, member_name: str) -> GameMembership:
        """
        Enroll a leaderboard member in a game.

        The game row is locked for the duration so the game cannot vanish
        between the existence check and the insert.
        """
        with transaction(self.session_factory) as db:
            if not self.repository.get_game_for_update(db, game_id):
                raise GameNotFound(game_id)

            existing = self.repository.get_membership(db, game_id, member_id)
            if existing:
                return existing

            membership = self.repository.create_membership(db, game_id, member_id, member_name)

        logger.info(f"Member {member_id} joined game {game_id}")
        return membership

    def delete_membership(self, game_id: str, member_id: int) -> None:
        """Remove a member from a game. Removing an absent member is a no-op."""
        with transaction(self.session_factory) as db:
            if not self.repository.get_game_for_update(db, game_id):
                raise GameNotFound(game_id)

            deleted = self.repository.delete_membership(db, game_id, member_id)

        if deleted:
            logger.info(f"Member {member_id} left game {game_id}")

    def list_memberships(self, game_id: str) -> List[GameMembership]:
        with transaction(self.session_factory) as db:
            if not self.repository.get_game(db, game_id):
                raise GameNotFound(game_id)
            return self.repository.list_memberships(db, game_id)

    def possible_members(self, game_id: str) -> List[dict]:
        """
        Everyone on the game's leaderboard, enrolled or not.

        Uses the first year of the full range that resolves.
        """
        # Resolve the game first; the connection goes back before any fetch
        game = self.get_game(game_id)

        results = self.mirror.get_or_refresh_all(game.leaderboard_id, game.session_token)
        snapshot = next((r for r in results if isinstance(r, LeaderboardSnapshot)), None)
        if snapshot is None:
            raise LeaderboardNotFound(f"No leaderboard data available for game {game_id}")

        members = [
            {"id": member.id, "name": member.display_name}
            for member in snapshot.members.values()
        ]
        return sorted(members, key=lambda m: (m["name"].lower(), m["id"]))

    def bingo_options(self, game_id: str, years: Optional[List[int]] = None) -> List[PuzzleSquare]:
        """
        Squares still open for the game's enrolled members.

        Solves from before the game was created do not count. With nobody
        enrolled yet, the whole leaderboard is considered.
        """
        with transaction(self.session_factory) as db:
            game = self.repository.get_game(db, game_id)
            if not game:
                raise GameNotFound(game_id)
            member_ids = [m.member_id for m in self.repository.list_memberships(db, game_id)]
            leaderboard_id = game.leaderboard_id
            session_token = game.session_token
            created_at = game.created_at

        return self.engine.compute_options(
            leaderboard_id,
            years=years,
            session_token=session_token,
            member_ids=member_ids or None,
            cutoff=created_at
        )
