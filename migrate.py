"""
Database migration script to set up the initial schema.
"""
import os

from dotenv import load_dotenv
from sqlalchemy import create_engine, text

# Load environment variables
load_dotenv()

DATABASE_URL = os.getenv(
    "DATABASE_URL",
    "sqlite:///./aoc_bingo.db"
)

def run_migrations():
    """Run database migrations."""
    engine = create_engine(DATABASE_URL)

    with engine.connect() as conn:
        conn.execute(text("""
            CREATE TABLE IF NOT EXISTS leaderboard_cache (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                year INTEGER NOT NULL,
                leaderboard_id INTEGER NOT NULL,
                data TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                CONSTRAINT unique_year_leaderboard UNIQUE (year, leaderboard_id)
            )
        """))

        conn.execute(text("""
            CREATE TABLE IF NOT EXISTS games (
                id VARCHAR(8) PRIMARY KEY,
                leaderboard_id INTEGER NOT NULL,
                session_token VARCHAR NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """))

        conn.execute(text("""
            CREATE TABLE IF NOT EXISTS game_memberships (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                game_id VARCHAR(8) NOT NULL,
                member_id INTEGER NOT NULL,
                member_name VARCHAR NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                FOREIGN KEY (game_id) REFERENCES games(id) ON DELETE CASCADE
            )
        """))

        # Create indexes for performance (SQLite-compatible)
        for index_name, sql in [
            ("ix_games_leaderboard_id", "CREATE INDEX ix_games_leaderboard_id ON games (leaderboard_id);"),
            ("idx_membership_game_member", "CREATE INDEX idx_membership_game_member ON game_memberships (game_id, member_id);"),
        ]:
            result = conn.execute(
                text("SELECT name FROM sqlite_master WHERE type='index' AND name=:name"),
                {"name": index_name}
            )
            if not result.fetchone():
                conn.execute(text(sql))

        conn.commit()

    print("Database migrations completed successfully.")


if __name__ == "__main__":
    print("Starting database migration...")

    run_migrations()

    print("Migration complete!")
