from pydantic_settings import BaseSettings
import os

class Settings(BaseSettings):
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        "sqlite:///./aoc_bingo.db"
    )
    DEBUG: bool = os.getenv("DEBUG", "False") == "True"

    # Upstream leaderboard service
    AOC_BASE_URL: str = os.getenv("AOC_BASE_URL", "https://adventofcode.com")
    AOC_REQUEST_TIMEOUT: float = float(os.getenv("AOC_REQUEST_TIMEOUT", "10"))
    AOC_USER_AGENT: str = os.getenv("AOC_USER_AGENT", "aoc-bingo/1.0")

    LEADERBOARD_CACHE_TTL_SECONDS: int = int(os.getenv("LEADERBOARD_CACHE_TTL_SECONDS", "900"))
    GAME_ID_MAX_ATTEMPTS: int = int(os.getenv("GAME_ID_MAX_ATTEMPTS", "10"))

    class Config:
        env_file = ".env"

settings = Settings()
