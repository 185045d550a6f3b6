"""
Administrative Operations Module

This module provides business logic for retroactive corrections to the game
history. Corrections never patch player statistics: every edit or delete is
followed by a full recompute in the same transaction, so the derived table
always matches the history it is derived from.

Key functionality:
- delete_game(): Remove a game and rebuild statistics
- update_game(): Correct a game's placements and rebuild statistics
- recompute_statistics(): Explicit reconciliation entry point
"""

from typing import Dict, Any

from sqlalchemy.exc import SQLAlchemyError

from pokernight.operations.seating_operations import (
    SeatingOperationError, normalize_placement, validate_placements
)
from pokernight.services.player_stats_sync import PlayerStatsSyncService
from pokernight.services.write_lock import WriteLock
from pokernight.utils.exceptions import (
    PokerNightError, ConflictActiveGameError, InvalidPlacementError, NotFoundError
)
from pokernight.utils.logger import setup_logger

logger = setup_logger(__name__)

# Marks a placement argument the caller did not supply, as opposed to None (clear it)
UNCHANGED = object()


class AdminOperations:
    """
    Business logic operations for administrative game corrections.

    Access control happens before these are reached; the operations
    themselves never consult admin credentials.
    """

    def __init__(self, database, stats_sync: PlayerStatsSyncService, write_lock: WriteLock):
        self.db = database
        self.stats_sync = stats_sync
        self.write_lock = write_lock
        self.logger = logger

    async def delete_game(self, game_id: int) -> Dict[str, Any]:
        """
        Delete a game and rebuild all player statistics.

        Raises:
            NotFoundError: If the game does not exist
            StatsUpdateFailedError: If the recompute fails (the delete is rolled back)
        """
        async with self.write_lock.hold("delete_game"):
            try:
                async with self.db.transaction() as session:
                    game = await self.db.get_game(session, game_id)
                    if not game:
                        raise NotFoundError(game_id)

                    seating = game.seating
                    await self.db.delete_game(session, game)
                    player_count = await self.stats_sync.recompute_all(session)

            except PokerNightError:
                raise
            except SQLAlchemyError as e:
                self.logger.error(f"Failed to delete game {game_id}: {e}")
                raise SeatingOperationError("game deletion", str(e)) from e

        self.logger.info(f"Admin deleted game {game_id} ({', '.join(seating)}); statistics rebuilt for {player_count} players")
        return {'success': True, 'game_id': game_id, 'players': player_count}

    async def update_game(
        self,
        game_id: int,
        first=UNCHANGED,
        second=UNCHANGED,
        third=UNCHANGED
    ) -> Dict[str, Any]:
        """
        Correct the placements of a game and rebuild all player statistics.

        Seating and buy-in are immutable. Omitted placements keep their value;
        None clears one. Clearing the winner re-opens the game as active and
        clears second and third with it.

        Raises:
            NotFoundError: If the game does not exist
            InvalidPlacementError: If a placement is unseated or duplicated, or
                second or third is set on a game without a winner
            ConflictActiveGameError: If re-opening would leave two active games
            StatsUpdateFailedError: If the recompute fails (the edit is rolled back)
        """
        async with self.write_lock.hold("update_game"):
            try:
                async with self.db.transaction() as session:
                    game = await self.db.get_game(session, game_id)
                    if not game:
                        raise NotFoundError(game_id)

                    new_first = game.winner if first is UNCHANGED else normalize_placement(first)
                    new_second = game.second_place if second is UNCHANGED else normalize_placement(second)
                    new_third = game.third_place if third is UNCHANGED else normalize_placement(third)

                    if not new_first:
                        if (second is not UNCHANGED and new_second) or (third is not UNCHANGED and new_third):
                            raise InvalidPlacementError(reason="Missing winner")
                        new_second = new_third = None
                        active = await self.db.get_active_game(session)
                        if active and active.id != game.id:
                            raise ConflictActiveGameError(active.id)

                    validate_placements(game.seating, new_first, new_second, new_third, require_first=False)

                    game.winner = new_first
                    game.second_place = new_second
                    game.third_place = new_third
                    await session.flush()

                    player_count = await self.stats_sync.recompute_all(session)

            except PokerNightError:
                raise
            except SQLAlchemyError as e:
                self.logger.error(f"Failed to update game {game_id}: {e}")
                raise SeatingOperationError("game update", str(e)) from e

        self.logger.info(
            f"Admin updated game {game_id}: first={new_first}, second={new_second}, third={new_third}; "
            f"statistics rebuilt for {player_count} players"
        )
        return {
            'success': True,
            'game_id': game_id,
            'placements': {'first': new_first, 'second': new_second, 'third': new_third},
            'players': player_count
        }

    async def recompute_statistics(self) -> int:
        """Rebuild all player statistics from the game history"""
        async with self.write_lock.hold("recompute_statistics"):
            async with self.db.transaction() as session:
                player_count = await self.stats_sync.recompute_all(session)

        self.logger.info(f"Statistics recompute completed for {player_count} players")
        return player_count
