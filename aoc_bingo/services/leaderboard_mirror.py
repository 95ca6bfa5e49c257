"""
Cache-through mirror of upstream private leaderboards.

Snapshots live in the leaderboard_cache table, one row per (year, board).
A row younger than the TTL is served as is; an older one is refreshed when
a session token is available and served stale otherwise. Database
connections are never held across the upstream round-trip.
"""
import logging
import threading
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Tuple, Union

from pydantic import ValidationError

from aoc_bingo.core.clock import utcnow, ensure_utc
from aoc_bingo.core.config import settings
from aoc_bingo.core.database import SessionFactory, transaction
from aoc_bingo.core.exceptions import LeaderboardError, NotCached, ParseFailed, StorageFailed
from aoc_bingo.models.leaderboard_cache import LeaderboardCache
from aoc_bingo.repositories.leaderboard_repository import LeaderboardRepository
from aoc_bingo.schemas.leaderboard import LeaderboardData, LeaderboardSnapshot
from aoc_bingo.services import puzzle_calendar

logger = logging.getLogger(__name__)

SnapshotResult = Union[LeaderboardSnapshot, LeaderboardError, StorageFailed]


class RefreshLocks:
    """Per-(year, board) locks so concurrent refreshes of one key fetch once."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[Tuple[int, int], threading.Lock] = {}

    def for_key(self, year: int, board_id: int) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault((year, board_id), threading.Lock())


class LeaderboardMirror:

    def __init__(
        self,
        session_factory: SessionFactory,
        client,
        ttl_seconds: int = settings.LEADERBOARD_CACHE_TTL_SECONDS,
        clock: Callable[[], datetime] = utcnow,
        locks: Optional[RefreshLocks] = None
    ):
        self.session_factory = session_factory
        self.client = client
        self.ttl = timedelta(seconds=ttl_seconds)
        self.clock = clock
        self.locks = locks or RefreshLocks()
        self.repository = LeaderboardRepository()

    def get_or_refresh(self, year: int, board_id: int, session_token: Optional[str] = None) -> LeaderboardSnapshot:
        """
        Return the snapshot for (year, board_id), refreshing it if needed.

        Raises NotCached when nothing is stored and no token was given,
        FetchFailed/ParseFailed when the upstream refresh fails (the stored
        row is left untouched).
        """
        cached = self._load(year, board_id)
        if cached is not None and (self._is_fresh(cached) or not session_token):
            logger.info(
                f"Using cached leaderboard for year {year}, board {board_id}, "
                f"age {self._age(cached).total_seconds():.0f} seconds"
            )
            return cached

        if not session_token:
            raise NotCached(year, board_id)

        with self.locks.for_key(year, board_id):
            # Someone else may have refreshed while we waited for the lock
            cached = self._load(year, board_id)
            if cached is not None and self._is_fresh(cached):
                return cached

            logger.info(f"Fetching leaderboard for year {year}, board {board_id} from upstream")
            started_at = self.clock()
            data = self.client.fetch_leaderboard(year, board_id, session_token)
            return self._store(year, board_id, data, started_at)

    def get_or_refresh_range(
        self,
        years: List[int],
        board_id: int,
        session_token: Optional[str] = None
    ) -> List[SnapshotResult]:
        """Resolve each year independently; a failed year yields its error in place."""
        results: List[SnapshotResult] = []
        for year in years:
            try:
                results.append(self.get_or_refresh(year, board_id, session_token))
            except (LeaderboardError, StorageFailed) as e:
                logger.warning(f"Leaderboard {board_id} for {year} unavailable: {e}")
                results.append(e)
        return results

    def get_or_refresh_all(self, board_id: int, session_token: Optional[str] = None) -> List[SnapshotResult]:
        years = puzzle_calendar.default_years(self.clock())
        return self.get_or_refresh_range(years, board_id, session_token)

    def _age(self, snapshot: LeaderboardSnapshot) -> timedelta:
        return self.clock() - ensure_utc(snapshot.refreshed_at)

    def _is_fresh(self, snapshot: LeaderboardSnapshot) -> bool:
        return self._age(snapshot) < self.ttl

    def _load(self, year: int, board_id: int) -> Optional[LeaderboardSnapshot]:
        with transaction(self.session_factory) as db:
            row = self.repository.get(db, year, board_id)
            return to_snapshot(row) if row is not None else None

    def _store(self, year: int, board_id: int, data: LeaderboardData, refreshed_at: datetime) -> LeaderboardSnapshot:
        payload = data.model_dump_json()
        with transaction(self.session_factory) as db:
            row = self.repository.upsert(db, year, board_id, payload, refreshed_at)
            return to_snapshot(row)


def to_snapshot(row: LeaderboardCache) -> LeaderboardSnapshot:
    try:
        data = LeaderboardData.model_validate_json(row.data)
    except ValidationError as e:
        raise ParseFailed(
            f"Cached leaderboard {row.leaderboard_id} for {row.year} is corrupt: {e}"
        ) from e
    return LeaderboardSnapshot(
        year=row.year,
        board_id=row.leaderboard_id,
        data=data,
        created_at=ensure_utc(row.created_at),
        updated_at=ensure_utc(row.updated_at)
    )
