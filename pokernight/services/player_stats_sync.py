"""
Player Stats Synchronization Service

Keeps the derived player_stats table consistent with the game history.

Two paths produce the aggregates:
1. Incremental updates applied as a game is created and as its results are
   recorded (fast path, touches only the players of that game)
2. A full recompute that discards every row and replays the whole history
   (authoritative path, used after admin edits/deletes and schema migrations)

Both paths apply the same credit helpers in the same order, so for any history
built through the public operations they produce identical values, including
the floating point buy-in, winnings and net profit totals.
"""

from typing import Dict, List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pokernight.constants import PlacementConstants
from pokernight.database.models import Game, PlayerStatistic
from pokernight.utils.exceptions import StatsUpdateFailedError
from pokernight.utils.payouts import compute_payouts
from pokernight.utils.logger import setup_logger

logger = setup_logger(__name__)


def _credit_game_created(stat: PlayerStatistic, buy_in: float) -> None:
    stat.games_played += 1
    stat.total_buy_ins += buy_in
    stat.net_profit = stat.total_winnings - stat.total_buy_ins


def _credit_placement(stat: PlayerStatistic, slot: str, share: float) -> None:
    if slot == PlacementConstants.FIRST:
        stat.wins += 1
    stat.top3_count += 1
    stat.total_winnings += share
    stat.net_profit = stat.total_winnings - stat.total_buy_ins


def _placements_in_order(game: Game) -> List[tuple]:
    """(slot, player) pairs for the placements that are set, first to third"""
    placements = game.placements
    return [(slot, placements[slot]) for slot in PlacementConstants.SLOTS if placements[slot]]


class PlayerStatsSyncService:
    """Service for deriving player statistics from the game history."""

    def __init__(self, database):
        self.db = database

    async def apply_game_created(self, session: AsyncSession, seating: List[str], buy_in: float) -> None:
        """
        Credit every seated player with one game played and the buy-in.

        Rows are created zero-initialised on a player's first appearance.
        The caller owns the transaction and commits.

        Args:
            session: Database session of the enclosing game insert
            seating: Players of the new game
            buy_in: Buy-in of the new game

        Raises:
            StatsUpdateFailedError: If the statistics could not be written
        """
        try:
            existing = await self.db.get_player_statistics(session, seating)
            for player in seating:
                stat = existing.get(player)
                if stat is None:
                    stat = PlayerStatistic.zeroed(player)
                    session.add(stat)
                    existing[player] = stat
                _credit_game_created(stat, buy_in)

            await session.flush()
        except SQLAlchemyError as e:
            logger.error(f"Incremental stats update failed for new game: {e}")
            raise StatsUpdateFailedError("game creation", str(e)) from e

        logger.debug(f"Credited {len(seating)} players with a game played (buy-in {buy_in})")

    async def apply_results_recorded(self, session: AsyncSession, game: Game) -> None:
        """
        Credit the placed players of a game that just transitioned to settled.

        First gets a win and a top-3 finish, second and third a top-3 finish,
        and every placed player receives their payout share. Must be invoked
        exactly once per active -> settled transition; recording twice is
        rejected by the caller, not guarded here.

        Raises:
            StatsUpdateFailedError: If the statistics could not be written
        """
        seating = game.seating
        payouts = compute_payouts(len(seating), game.buy_in)
        placed = _placements_in_order(game)

        try:
            existing = await self.db.get_player_statistics(session, [player for _, player in placed])
            for slot, player in placed:
                stat = existing.get(player)
                if stat is None:
                    logger.warning(f"No statistics row for placed player {player} in game {game.id}, skipping")
                    continue
                _credit_placement(stat, slot, payouts.share_for(slot))

            await session.flush()
        except SQLAlchemyError as e:
            logger.error(f"Incremental stats update failed for game {game.id} results: {e}")
            raise StatsUpdateFailedError("result recording", str(e)) from e

        logger.debug(f"Credited placements for game {game.id}: {dict(placed)}")

    async def recompute_all(self, session: AsyncSession) -> int:
        """
        Rebuild every player statistic from the full game history.

        Clears the table, replays all games in creation order and writes the
        resulting rows. Running it twice in a row yields identical rows.
        Useful after admin corrections, migrations or suspected drift.

        Args:
            session: Database session (caller handles commit)

        Returns:
            Number of players with statistics

        Raises:
            StatsUpdateFailedError: If the statistics could not be rebuilt
        """
        try:
            games = await self.db.get_all_games(session)
            stats = self.replay(games)

            await self.db.clear_player_statistics(session)
            session.add_all(stats.values())
            await session.flush()
        except SQLAlchemyError as e:
            logger.error(f"Full stats recompute failed: {e}")
            raise StatsUpdateFailedError("full recompute", str(e)) from e

        logger.info(f"Recomputed statistics for {len(stats)} players from {len(games)} games")
        return len(stats)

    @staticmethod
    def replay(games: List[Game]) -> Dict[str, PlayerStatistic]:
        """Derive statistics for a game history in memory, without touching the database"""
        stats: Dict[str, PlayerStatistic] = {}

        for game in games:
            seating = game.seating
            for player in seating:
                if player not in stats:
                    stats[player] = PlayerStatistic.zeroed(player)
                _credit_game_created(stats[player], game.buy_in)

            if not game.winner:
                continue

            payouts = compute_payouts(len(seating), game.buy_in)
            for slot, player in _placements_in_order(game):
                stat: Optional[PlayerStatistic] = stats.get(player)
                if stat is None:
                    logger.warning(f"Placed player {player} of game {game.id} is not seated, skipping")
                    continue
                _credit_placement(stat, slot, payouts.share_for(slot))

        for stat in stats.values():
            stat.net_profit = stat.total_winnings - stat.total_buy_ins

        return stats
