"""
Data access for mirrored leaderboard snapshots.
"""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from aoc_bingo.core.clock import ensure_utc
from aoc_bingo.models.leaderboard_cache import LeaderboardCache

logger = logging.getLogger(__name__)


class LeaderboardRepository:
    """One row per (year, leaderboard_id); rows are upserted, never deleted here."""

    def get(self, db: Session, year: int, board_id: int) -> Optional[LeaderboardCache]:
        return db.query(LeaderboardCache).filter(
            and_(
                LeaderboardCache.year == year,
                LeaderboardCache.leaderboard_id == board_id
            )
        ).first()

    def upsert(self, db: Session, year: int, board_id: int, data: str, refreshed_at: datetime) -> LeaderboardCache:
        """
        Insert the row for (year, board_id) or replace its data.

        updated_at only moves forward: a refresh that started before the
        stored one was written is dropped rather than regressing the data.
        """
        existing = db.query(LeaderboardCache).filter(
            and_(
                LeaderboardCache.year == year,
                LeaderboardCache.leaderboard_id == board_id
            )
        ).with_for_update().first()

        if existing is None:
            entry = LeaderboardCache(year=year, leaderboard_id=board_id, data=data, refreshed_at=refreshed_at)
            db.add(entry)
            try:
                db.flush()
                return entry
            except IntegrityError:
                # Another writer inserted the row first; fall through to update it
                db.rollback()
                logger.debug(f"Concurrent insert for leaderboard {board_id}/{year}, updating instead")
                existing = self.get(db, year, board_id)
                if existing is None:
                    raise

        if ensure_utc(refreshed_at) < ensure_utc(existing.updated_at):
            logger.debug(f"Discarding stale refresh of leaderboard {board_id}/{year}")
            return existing

        existing.data = data
        existing.updated_at = refreshed_at
        db.flush()
        return existing
