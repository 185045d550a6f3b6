"""
Game History Service

Provides the recent game history listing with placements and payouts.
Only a fixed window of the newest games is listed; there is no pagination.
"""

from typing import List
import logging

from sqlalchemy import select
from pokernight.services.base import BaseService
from pokernight.constants import HistoryConstants
from pokernight.data_models.leaderboard import HistoryEntry
from pokernight.database.models import Game
from pokernight.utils.payouts import compute_payouts

logger = logging.getLogger(__name__)


class HistoryService(BaseService):
    """Service for the recent game history"""
    
    async def get_recent_games(self, limit: int = HistoryConstants.HISTORY_LIMIT) -> List[HistoryEntry]:
        """Get the most recent games, newest first"""
        if limit < 1:
            raise ValueError("limit must be a positive integer")
        
        async with self.get_session() as session:
            result = await session.execute(
                select(Game).order_by(Game.id.desc()).limit(limit)
            )
            games = result.scalars().all()
        
        entries = []
        for game in games:
            seating = game.seating
            entries.append(HistoryEntry(
                id=game.id,
                created_at=game.created_at,
                seating=seating,
                placements=game.placements,
                buy_in=game.buy_in,
                payouts=compute_payouts(len(seating), game.buy_in)
            ))
        return entries
