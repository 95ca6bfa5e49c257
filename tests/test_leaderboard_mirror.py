import threading
import time
from unittest import mock

import pytest
from sqlalchemy.exc import OperationalError

from aoc_bingo.core.exceptions import FetchFailed, NoCredential, NotCached, StorageFailed
from aoc_bingo.schemas.leaderboard import LeaderboardSnapshot
from conftest import build_leaderboard, build_member

BOARD = 4242
TOKEN = "secret-session"


@pytest.fixture
def board_2023(fake_client):
    data = build_leaderboard(2023, [build_member(1, "alice", {1: {1: 1701410000}})])
    fake_client.add(2023, BOARD, data)
    return data


class TestLeaderboardMirror:

    def test_fetches_and_stores_on_first_request(self, mirror, fake_client, board_2023, clock):
        snapshot = mirror.get_or_refresh(2023, BOARD, TOKEN)

        assert fake_client.calls == [(2023, BOARD, TOKEN)]
        assert snapshot.year == 2023
        assert snapshot.board_id == BOARD
        assert snapshot.data == board_2023
        assert snapshot.refreshed_at == clock()
        assert snapshot.members[1].display_name == "alice"

    def test_second_call_within_ttl_uses_cache(self, mirror, fake_client, board_2023, clock):
        first = mirror.get_or_refresh(2023, BOARD, TOKEN)
        clock.advance(899)
        second = mirror.get_or_refresh(2023, BOARD, TOKEN)

        assert len(fake_client.calls) == 1
        assert second == first

    def test_stale_snapshot_is_refreshed_with_token(self, mirror, fake_client, board_2023, clock):
        first = mirror.get_or_refresh(2023, BOARD, TOKEN)
        clock.advance(900)

        updated = build_leaderboard(2023, [
            build_member(1, "alice", {1: {1: 1701410000, 2: 1701411000}})
        ])
        fake_client.add(2023, BOARD, updated)
        second = mirror.get_or_refresh(2023, BOARD, TOKEN)

        assert len(fake_client.calls) == 2
        assert second.data == updated
        assert second.refreshed_at > first.refreshed_at
        assert second.fetched_at == first.fetched_at

    def test_stale_snapshot_is_served_without_token(self, mirror, fake_client, board_2023, clock):
        first = mirror.get_or_refresh(2023, BOARD, TOKEN)
        clock.advance(86400)

        snapshot = mirror.get_or_refresh(2023, BOARD)

        assert len(fake_client.calls) == 1
        assert snapshot == first

    def test_nothing_cached_and_no_token(self, mirror, fake_client):
        with pytest.raises(NotCached) as exc_info:
            mirror.get_or_refresh(2023, BOARD)

        assert isinstance(exc_info.value, NoCredential)
        assert fake_client.calls == []

    def test_failed_refresh_keeps_cached_row(self, mirror, fake_client, board_2023, clock):
        first = mirror.get_or_refresh(2023, BOARD, TOKEN)
        clock.advance(1000)
        fake_client.add(2023, BOARD, FetchFailed("connection reset"))

        with pytest.raises(FetchFailed):
            mirror.get_or_refresh(2023, BOARD, TOKEN)

        assert mirror.get_or_refresh(2023, BOARD) == first

    def test_range_resolves_years_independently(self, mirror, fake_client, board_2023):
        fake_client.add(2021, BOARD, build_leaderboard(2021, [build_member(1)]))

        results = mirror.get_or_refresh_range([2021, 2022, 2023], BOARD, TOKEN)

        assert [r.year for r in results if isinstance(r, LeaderboardSnapshot)] == [2021, 2023]
        assert isinstance(results[1], FetchFailed)
        assert results[1].status_code == 404

    def test_storage_failure_for_one_year_keeps_the_others(self, mirror, fake_client, board_2023):
        fake_client.add(2021, BOARD, build_leaderboard(2021, [build_member(1)]))
        real_get = mirror.repository.get

        def flaky_get(db, year, board_id):
            if year == 2022:
                raise OperationalError("SELECT", {}, Exception("database is locked"))
            return real_get(db, year, board_id)

        with mock.patch.object(mirror.repository, "get", side_effect=flaky_get):
            results = mirror.get_or_refresh_range([2021, 2022, 2023], BOARD, TOKEN)

        assert [r.year for r in results if isinstance(r, LeaderboardSnapshot)] == [2021, 2023]
        assert isinstance(results[1], StorageFailed)

    def test_all_years_cover_the_default_range(self, mirror, fake_client, board_2023):
        results = mirror.get_or_refresh_all(BOARD, TOKEN)

        # The frozen clock sits in January 2025
        assert [year for year, _, _ in fake_client.calls] == list(range(2015, 2025))
        assert len(results) == 10

    def test_concurrent_cold_requests_fetch_once(self, mirror, fake_client, board_2023):
        original_fetch = fake_client.fetch_leaderboard

        def slow_fetch(*args):
            time.sleep(0.2)
            return original_fetch(*args)

        fake_client.fetch_leaderboard = slow_fetch
        results = []
        threads = [
            threading.Thread(target=lambda: results.append(mirror.get_or_refresh(2023, BOARD, TOKEN)))
            for _ in range(3)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(fake_client.calls) == 1
        assert len(results) == 3
        assert all(r.data == board_2023 for r in results)
