class BingoException(Exception):
    """Base exception for bingo-related errors."""
    pass


class InvalidYear(BingoException):
    """Raised for years before the first puzzle calendar."""

    def __init__(self, year: int):
        super().__init__(f"Year must be 2015 or later, got {year}")
        self.year = year


class LeaderboardError(BingoException):
    """Base exception for leaderboard mirror failures."""
    pass


class NoCredential(LeaderboardError):
    """Raised when a refresh is required but no session token was supplied."""
    pass


class NotCached(NoCredential):
    """Raised when nothing is cached and no session token was supplied."""

    def __init__(self, year: int, board_id: int):
        super().__init__(
            f"Leaderboard {board_id} for {year} is not cached and no session token was provided"
        )
        self.year = year
        self.board_id = board_id


class FetchFailed(LeaderboardError):
    """Raised when the upstream leaderboard request fails."""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code


class ParseFailed(LeaderboardError):
    """Raised when leaderboard data cannot be parsed."""
    pass


class StorageFailed(BingoException):
    """Raised when a query, pool checkout or transaction fails."""
    pass


class NotFound(BingoException):
    """Raised when a requested resource does not exist."""
    pass


class GameNotFound(NotFound):
    """Raised when a game is not found."""

    def __init__(self, game_id: str):
        super().__init__(f"Game {game_id} not found")
        self.game_id = game_id


class LeaderboardNotFound(NotFound):
    """Raised when no leaderboard year could be resolved for a game."""
    pass


class IdGenerationExhausted(BingoException):
    """Raised when every generated game ID collided."""

    def __init__(self, attempts: int):
        super().__init__(f"Failed to generate unique game ID after {attempts} attempts")
        self.attempts = attempts


class NoOptions(BingoException):
    """Raised when no puzzle square is eligible for bingo."""

    def __init__(self, message: str = "No valid bingo options available"):
        super().__init__(message)
