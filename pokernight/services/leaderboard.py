"""
Leaderboard service

Provides the cumulative player statistics listing, ordered by net profit.
"""

from typing import List
import logging

from sqlalchemy import select
from pokernight.services.base import BaseService
from pokernight.data_models.leaderboard import PlayerStatsEntry
from pokernight.database.models import PlayerStatistic

logger = logging.getLogger(__name__)


class LeaderboardService(BaseService):
    """Service for the player statistics listing."""
    
    async def get_stats(self) -> List[PlayerStatsEntry]:
        """Get every player's statistics, best net profit first.
        
        Ties are broken by wins, then games played, then player name so the
        order is stable between requests.
        """
        async with self.get_session() as session:
            result = await session.execute(
                select(PlayerStatistic).order_by(
                    PlayerStatistic.net_profit.desc(),
                    PlayerStatistic.wins.desc(),
                    PlayerStatistic.games_played.desc(),
                    PlayerStatistic.player.asc()
                )
            )
            rows = result.scalars().all()
        
        logger.debug(f"Loaded statistics for {len(rows)} players")
        return [
            PlayerStatsEntry(
                player=row.player,
                games_played=row.games_played,
                wins=row.wins,
                top3=row.top3_count,
                buy_ins=row.total_buy_ins,
                winnings=row.total_winnings,
                net_profit=row.net_profit,
                win_rate=row.win_rate,
                top3_rate=row.top3_rate
            )
            for row in rows
        ]
