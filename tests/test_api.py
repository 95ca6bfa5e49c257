from datetime import datetime, timezone

from aoc_bingo.core.exceptions import ParseFailed
from conftest import build_leaderboard, build_member

BOARD = 123456
TOKEN = "abc123"
LONG_AGO = int(datetime(2015, 12, 2, tzinfo=timezone.utc).timestamp())


class TestGameAPI:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "OK"}

    def test_create_game(self, client):
        response = client.post("api/v1/games", json={"leaderboard_id": BOARD, "session_token": TOKEN})
        assert response.status_code == 200
        data = response.json()
        assert len(data["id"]) == 8
        assert data["leaderboard_id"] == BOARD
        assert "session_token" not in data

    def test_create_game_requires_token(self, client):
        response = client.post("api/v1/games", json={"leaderboard_id": BOARD, "session_token": ""})
        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_get_game(self, client):
        game = client.post("api/v1/games", json={"leaderboard_id": BOARD, "session_token": TOKEN}).json()
        response = client.get(f"api/v1/games/{game['id']}")
        assert response.status_code == 200
        assert response.json()["id"] == game["id"]

    def test_get_missing_game(self, client):
        response = client.get("api/v1/games/zzzzzzzz")
        assert response.status_code == 404
        assert response.json()["error_code"] == "GAME_NOT_FOUND"

    def test_membership_lifecycle(self, client):
        game = client.post("api/v1/games", json={"leaderboard_id": BOARD, "session_token": TOKEN}).json()
        url = f"api/v1/games/{game['id']}/memberships"

        response = client.post(url, json={"member_id": 1, "member_name": "alice"})
        assert response.status_code == 200
        assert response.json()["member_name"] == "alice"
        client.post(url, json={"member_id": 2, "member_name": "bob"})

        listed = client.get(url).json()
        assert [m["member_id"] for m in listed] == [1, 2]

        response = client.delete(f"{url}/1")
        assert response.status_code == 204
        assert [m["member_id"] for m in client.get(url).json()] == [2]

        # Deleting again is harmless
        assert client.delete(f"{url}/1").status_code == 204

    def test_membership_on_missing_game(self, client):
        url = "api/v1/games/zzzzzzzz/memberships"
        assert client.post(url, json={"member_id": 1, "member_name": "alice"}).status_code == 404
        assert client.delete(f"{url}/1").status_code == 404
        assert client.get(url).status_code == 404

    def test_possible_members(self, client, fake_client):
        fake_client.add(2015, BOARD, build_leaderboard(2015, [build_member(7, "carol"), build_member(8, "dave")]))
        game = client.post("api/v1/games", json={"leaderboard_id": BOARD, "session_token": TOKEN}).json()

        response = client.get(f"api/v1/games/{game['id']}/possible-members")

        assert response.status_code == 200
        assert response.json() == [{"id": 7, "name": "carol"}, {"id": 8, "name": "dave"}]

    def test_game_bingo_options(self, client, fake_client):
        fake_client.add(2015, BOARD, build_leaderboard(2015, [build_member(7, "carol", {1: {1: LONG_AGO}})]))
        game = client.post("api/v1/games", json={"leaderboard_id": BOARD, "session_token": TOKEN}).json()

        response = client.get(f"api/v1/games/{game['id']}/bingo-options", params={"years": [2015]})

        assert response.status_code == 200
        data = response.json()
        assert len(data) == 49
        assert data[0] == {"year": 2015, "day": 1, "part": 1, "difficulty": 1}
        assert data[1] == {"year": 2015, "day": 1, "part": 2, "difficulty": 3}


class TestLeaderboardAPI:

    def test_get_leaderboard(self, client, fake_client):
        fake_client.add(2023, BOARD, build_leaderboard(2023, [build_member(1, "alice")]))

        response = client.post("api/v1/leaderboard", json={"year": 2023, "board_id": BOARD, "session_token": TOKEN})

        assert response.status_code == 200
        data = response.json()
        assert data["year"] == 2023
        assert data["board_id"] == BOARD
        assert data["data"]["members"]["1"]["name"] == "alice"

    def test_cached_leaderboard_without_token(self, client, fake_client):
        fake_client.add(2023, BOARD, build_leaderboard(2023, [build_member(1, "alice")]))
        client.post("api/v1/leaderboard", json={"year": 2023, "board_id": BOARD, "session_token": TOKEN})

        response = client.post("api/v1/leaderboard", json={"year": 2023, "board_id": BOARD})

        assert response.status_code == 200
        assert len(fake_client.calls) == 1

    def test_not_cached_without_token(self, client):
        response = client.post("api/v1/leaderboard", json={"year": 2023, "board_id": BOARD})
        assert response.status_code == 401
        assert response.json()["error_code"] == "NO_CREDENTIAL"

    def test_upstream_failure(self, client):
        response = client.post("api/v1/leaderboard", json={"year": 2023, "board_id": BOARD, "session_token": TOKEN})
        assert response.status_code == 502
        assert response.json()["error_code"] == "UPSTREAM_FETCH_FAILED"

    def test_upstream_garbage(self, client, fake_client):
        fake_client.add(2023, BOARD, ParseFailed("not a leaderboard"))
        response = client.post("api/v1/leaderboard", json={"year": 2023, "board_id": BOARD, "session_token": TOKEN})
        assert response.status_code == 502
        assert response.json()["error_code"] == "UPSTREAM_PARSE_FAILED"

    def test_bingo_options(self, client, fake_client):
        fake_client.add(2016, BOARD, build_leaderboard(2016, [build_member(1, "alice", {1: {1: LONG_AGO + 10**8}})]))

        response = client.post("api/v1/leaderboard/bingo-options", json={
            "board_id": BOARD,
            "years": [2016],
            "session_token": TOKEN,
        })

        assert response.status_code == 200
        squares = [(s["year"], s["day"], s["part"]) for s in response.json()]
        assert (2016, 1, 1) not in squares
        assert (2016, 1, 2) in squares

    def test_no_bingo_options(self, client, fake_client):
        everything = {day: {1: LONG_AGO, 2: LONG_AGO} for day in range(1, 26)}
        fake_client.add(2016, BOARD, build_leaderboard(2016, [build_member(1, "alice", everything)]))

        response = client.post("api/v1/leaderboard/bingo-options", json={
            "board_id": BOARD,
            "years": [2016],
            "session_token": TOKEN,
        })

        assert response.status_code == 404
        assert response.json()["error_code"] == "NO_BINGO_OPTIONS"

    def test_bingo_options_invalid_year(self, client):
        response = client.post("api/v1/leaderboard/bingo-options", json={"board_id": BOARD, "years": [2010]})
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_YEAR"
