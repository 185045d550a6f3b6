import os
import random
import tempfile

os.environ.setdefault('LOG_DIR', os.path.join(tempfile.gettempdir(), 'pokernight-test-logs'))

import pytest

from pokernight.database.database import Database
from pokernight.operations.admin_operations import AdminOperations
from pokernight.operations.seating_operations import SeatingOperations
from pokernight.services.history_service import HistoryService
from pokernight.services.leaderboard import LeaderboardService
from pokernight.services.player_stats_sync import PlayerStatsSyncService
from pokernight.services.write_lock import WriteLock


class Stack:
    """Database plus the services and operations built on it, for one test"""

    def __init__(self, database_url: str, seed: int = 7):
        self.db = Database(database_url)
        self.write_lock = WriteLock(redis_url=None)
        self.stats_sync = PlayerStatsSyncService(self.db)
        self.seating_ops = SeatingOperations(self.db, self.stats_sync, self.write_lock, rng=random.Random(seed))
        self.admin_ops = AdminOperations(self.db, self.stats_sync, self.write_lock)
        self.leaderboard = None
        self.history = None

    async def __aenter__(self):
        await self.db.initialize()
        self.leaderboard = LeaderboardService(self.db.session_factory)
        self.history = HistoryService(self.db.session_factory)
        return self

    async def __aexit__(self, *exc):
        await self.db.close()

    async def games(self):
        async with self.db.get_session() as session:
            return await self.db.get_all_games(session)

    async def stats(self):
        """Player statistics keyed by name, as plain tuples for exact comparison"""
        rows = await self.db.get_all_player_statistics()
        return {
            row.player: (
                row.games_played, row.wins, row.top3_count,
                row.total_buy_ins, row.total_winnings, row.net_profit
            )
            for row in rows
        }


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'poker.db'}"


@pytest.fixture
def make_stack(database_url):
    def factory(seed: int = 7) -> Stack:
        return Stack(database_url, seed=seed)
    return factory
