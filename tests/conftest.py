import os
from datetime import datetime, timedelta, timezone

# Keep the app's own engine off the working directory during tests
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from aoc_bingo.api.deps import get_aoc_client, get_refresh_locks, get_session_factory
from aoc_bingo.core.database import Base, configure_sqlite
from aoc_bingo.core.exceptions import FetchFailed
from aoc_bingo.models import game, game_membership, leaderboard_cache  # noqa: F401
from aoc_bingo.schemas.leaderboard import LeaderboardData
from aoc_bingo.services.leaderboard_mirror import LeaderboardMirror, RefreshLocks
from aoc_bingo.services.game_service import GameService
from main import app


class FrozenClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now = self.now + timedelta(seconds=seconds)


class FakeAocClient:
    """Serves canned leaderboards and records every fetch."""

    def __init__(self):
        self.boards = {}
        self.calls = []

    def add(self, year: int, board_id: int, data) -> None:
        self.boards[(year, board_id)] = data

    def fetch_leaderboard(self, year: int, board_id: int, session_token: str) -> LeaderboardData:
        self.calls.append((year, board_id, session_token))
        data = self.boards.get((year, board_id))
        if data is None:
            raise FetchFailed(f"Leaderboard {board_id} for {year} returned HTTP 404", status_code=404)
        if isinstance(data, Exception):
            raise data
        return data


def build_member(member_id: int, name="member", solves=None) -> dict:
    """``solves`` maps day -> {part: timestamp}."""
    solves = solves or {}
    completion = {
        str(day): {str(part): {"get_star_ts": ts, "star_index": 0} for part, ts in parts.items()}
        for day, parts in solves.items()
    }
    return {
        "id": member_id,
        "name": name,
        "local_score": 0,
        "stars": sum(len(parts) for parts in solves.values()),
        "last_star_ts": max((ts for parts in solves.values() for ts in parts.values()), default=0),
        "completion_day_level": completion,
    }


def build_leaderboard(year: int, members, owner_id: int = None) -> LeaderboardData:
    return LeaderboardData.model_validate({
        "event": str(year),
        "day1_ts": int(datetime(year, 12, 1, 5, tzinfo=timezone.utc).timestamp()),
        "owner_id": owner_id if owner_id is not None else (members[0]["id"] if members else 1),
        "num_days": 25 if year < 2025 else 12,
        "members": {str(m["id"]): m for m in members},
    })


@pytest.fixture
def session_factory(tmp_path):
    engine = configure_sqlite(create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False}
    ))
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)
    engine.dispose()


@pytest.fixture
def clock():
    return FrozenClock(datetime(2025, 1, 5, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def fake_client():
    return FakeAocClient()


@pytest.fixture
def mirror(session_factory, fake_client, clock):
    return LeaderboardMirror(session_factory, fake_client, ttl_seconds=900, clock=clock)


@pytest.fixture
def game_service(session_factory, mirror):
    return GameService(session_factory, mirror)


@pytest.fixture
def client(session_factory, fake_client):
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_aoc_client] = lambda: fake_client
    app.dependency_overrides[get_refresh_locks] = RefreshLocks
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
