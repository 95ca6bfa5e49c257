#!/usr/bin/env python3
"""
Background jobs for keeping the leaderboard mirror warm.
Run as cron jobs or scheduled tasks.

Usage:
    python scripts/background_jobs.py refresh-leaderboards
    python scripts/background_jobs.py system-stats
"""

import sys
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sqlalchemy import func

from aoc_bingo.core.database import SessionFactory, SessionLocal, transaction
from aoc_bingo.core.exceptions import LeaderboardError, StorageFailed
from aoc_bingo.models.game import Game
from aoc_bingo.models.game_membership import GameMembership
from aoc_bingo.models.leaderboard_cache import LeaderboardCache
from aoc_bingo.services import puzzle_calendar
from aoc_bingo.services.aoc_client import AdventOfCodeClient
from aoc_bingo.services.leaderboard_mirror import LeaderboardMirror

logger = logging.getLogger(__name__)


def refresh_leaderboards(
    session_factory: SessionFactory = SessionLocal,
    client=None,
    year: Optional[int] = None
) -> Dict[str, int]:
    """Refresh the current year's snapshot of every board a game is played on."""
    logger.info("=== STARTING LEADERBOARD REFRESH ===")

    year = year or puzzle_calendar.latest_open_year()
    mirror = LeaderboardMirror(session_factory, client or AdventOfCodeClient())

    with transaction(session_factory) as db:
        boards = db.query(Game.leaderboard_id, Game.session_token).distinct().all()

    stats = {"boards": 0, "refreshed": 0, "errors": 0}
    seen = set()
    for leaderboard_id, session_token in boards:
        # Several games can share a board; one working token is enough
        if leaderboard_id in seen:
            continue
        try:
            mirror.get_or_refresh(year, leaderboard_id, session_token)
        except (LeaderboardError, StorageFailed) as e:
            stats["errors"] += 1
            logger.warning(f"  Board {leaderboard_id}: {e}")
            continue
        seen.add(leaderboard_id)
        stats["refreshed"] += 1
        logger.info(f"  Board {leaderboard_id}: up to date for {year}")

    stats["boards"] = len({leaderboard_id for leaderboard_id, _ in boards})
    logger.info(
        f"Refresh completed: {stats['refreshed']}/{stats['boards']} boards, "
        f"{stats['errors']} failed attempts"
    )
    return stats


def show_system_stats(session_factory: SessionFactory = SessionLocal) -> bool:
    """Show current system statistics."""
    logger.info("=== SYSTEM STATISTICS ===")

    with transaction(session_factory) as db:
        total_games = db.query(func.count(Game.id)).scalar()
        total_memberships = db.query(func.count(GameMembership.id)).scalar()
        cache_entries = db.query(func.count(LeaderboardCache.id)).scalar()
        oldest_refresh = db.query(func.min(LeaderboardCache.updated_at)).scalar()

    logger.info(f"Games: {total_games} total, {total_memberships} memberships")
    logger.info(f"Cache: {cache_entries} leaderboard snapshots, oldest refresh {oldest_refresh or 'n/a'}")
    return True


def main():
    """Main CLI entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler('background_jobs.log'),
            logging.StreamHandler()
        ]
    )

    if len(sys.argv) != 2:
        print(__doc__)
        sys.exit(1)

    command = sys.argv[1]
    success = False

    start_time = datetime.now()

    try:
        if command == "refresh-leaderboards":
            stats = refresh_leaderboards()
            success = stats["refreshed"] == stats["boards"]
        elif command == "system-stats":
            success = show_system_stats()
        else:
            logger.error(f"Unknown command: {command}")
            print(__doc__)
            sys.exit(1)
    except Exception as e:
        logger.error(f"Job '{command}' crashed: {e}", exc_info=True)

    duration = datetime.now() - start_time
    logger.info(f"Command '{command}' completed in {duration}")

    if success:
        logger.info("Job completed successfully")
        sys.exit(0)
    else:
        logger.error("Job failed")
        sys.exit(1)


if __name__ == "__main__":
    main()
