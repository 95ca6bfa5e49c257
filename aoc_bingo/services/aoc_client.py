"""
HTTP client for the upstream private leaderboard endpoint.
"""
import logging
from typing import Optional

import requests
from pydantic import ValidationError

from aoc_bingo.core.config import settings
from aoc_bingo.core.exceptions import FetchFailed, ParseFailed
from aoc_bingo.schemas.leaderboard import LeaderboardData

logger = logging.getLogger(__name__)


class AdventOfCodeClient:
    """Fetches private leaderboard JSON with a member's session cookie."""

    def __init__(
        self,
        base_url: str = settings.AOC_BASE_URL,
        timeout: float = settings.AOC_REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.http = session or requests.Session()
        self.http.headers.setdefault("User-Agent", settings.AOC_USER_AGENT)

    def leaderboard_url(self, year: int, board_id: int) -> str:
        return f"{self.base_url}/{year}/leaderboard/private/view/{board_id}.json"

    def fetch_leaderboard(self, year: int, board_id: int, session_token: str) -> LeaderboardData:
        """
        Fetch one year of a private leaderboard.

        Raises FetchFailed for transport errors, timeouts and non-2xx
        responses, ParseFailed when the body is not a leaderboard.
        """
        url = self.leaderboard_url(year, board_id)
        try:
            response = self.http.get(
                url,
                headers={"Cookie": f"session={session_token}"},
                timeout=self.timeout,
                allow_redirects=False
            )
        except requests.Timeout as e:
            raise FetchFailed(f"Timed out fetching leaderboard {board_id} for {year}") from e
        except requests.RequestException as e:
            raise FetchFailed(f"Failed to fetch leaderboard {board_id} for {year}: {e}") from e

        # An expired session is answered with a redirect to the login page
        if response.status_code != 200:
            raise FetchFailed(
                f"Leaderboard {board_id} for {year} returned HTTP {response.status_code}",
                status_code=response.status_code
            )

        try:
            return LeaderboardData.model_validate_json(response.content)
        except ValidationError as e:
            logger.debug(f"Rejected leaderboard payload from {url}: {e}")
            raise ParseFailed(f"Failed to parse leaderboard {board_id} for {year}: {e}") from e
