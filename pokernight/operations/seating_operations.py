"""
Seating Operations Module

This module provides the operational layer for the seating lifecycle:
- generate_seating(): uniqueness-constrained random seating for a roster
- get_active_game(): the single in-progress game, if any
- record_results(): settle the active game and credit player statistics

Invariants maintained here:
- At most one game without a winner (active) exists at any time
- No seating is ever generated twice (fingerprint uniqueness)
- A game insert and its statistics update commit together or not at all

All mutations run under the global write lock so the active-game check,
the fingerprint check and the insert form one critical section.
"""

import math
import random
from typing import List, Optional, Sequence

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from pokernight.constants import SeatingConstants
from pokernight.data_models.seating import SeatingResult, ActiveGame
from pokernight.database.models import Game
from pokernight.services.player_stats_sync import PlayerStatsSyncService
from pokernight.services.write_lock import WriteLock
from pokernight.utils.exceptions import (
    PokerNightError, InvalidInputError, InvalidPlacementError,
    ConflictActiveGameError, GameAlreadySettledError, ExhaustedAttemptsError, NotFoundError
)
from pokernight.utils.fingerprint import fingerprint_seating
from pokernight.utils.permutation import shuffle_players
from pokernight.utils.logger import setup_logger

logger = setup_logger(__name__)


class SeatingOperationError(PokerNightError):
    """Raised when a game could not be persisted"""
    def __init__(self, operation: str, details: str = None):
        super().__init__(
            f"Database error during {operation}: {details}",
            "Failed to save the game. Please try again."
        )


def normalize_roster(players) -> List[str]:
    """Strip names and reject rosters that cannot be seated."""
    if not isinstance(players, (list, tuple)):
        raise InvalidInputError("Players must be a list", "Invalid players list")

    roster = []
    for player in players:
        if not isinstance(player, str) or not player.strip():
            raise InvalidInputError(f"Invalid player name: {player!r}", "Invalid players list")
        roster.append(player.strip())

    if len(roster) < SeatingConstants.MIN_PLAYERS:
        raise InvalidInputError(
            f"Need at least {SeatingConstants.MIN_PLAYERS} players, got {len(roster)}",
            "Invalid players list"
        )

    duplicates = sorted({p for p in roster if roster.count(p) > 1})
    if duplicates:
        raise InvalidInputError(
            f"Duplicate players in roster: {', '.join(duplicates)}",
            "Invalid players list"
        )

    return roster


def validate_buy_in(buy_in) -> float:
    if buy_in is None:
        return 0.0
    if isinstance(buy_in, bool) or not isinstance(buy_in, (int, float)):
        raise InvalidInputError(f"Invalid buy-in: {buy_in!r}", "Buy-in must be a number")
    if not math.isfinite(buy_in) or buy_in < 0:
        raise InvalidInputError(f"Invalid buy-in: {buy_in!r}", "Buy-in must be zero or more")
    return float(buy_in)


def normalize_placement(player: Optional[str]) -> Optional[str]:
    """Treat blank placements as unset."""
    if player is None:
        return None
    if not isinstance(player, str):
        raise InvalidPlacementError(reason="Placements must be player names")
    return player.strip() or None


def validate_placements(
    seating: Sequence[str],
    first: Optional[str],
    second: Optional[str] = None,
    third: Optional[str] = None,
    require_first: bool = True
) -> None:
    """
    Check placements against a game's seating.

    Raises:
        InvalidPlacementError: If first is missing while required, a placement
            is not seated, or one player fills more than one slot
    """
    if require_first and not first:
        raise InvalidPlacementError(reason="Missing winner")

    placed = [p for p in (first, second, third) if p]
    for player in placed:
        if player not in seating:
            raise InvalidPlacementError(player)

    if len(set(placed)) != len(placed):
        raise InvalidPlacementError(reason="A player can only finish in one place")


class SeatingOperations:
    """
    Core service class for the seating lifecycle.

    Provides atomic, transactional operations for generating seatings and
    recording results, with statistics kept in step in the same transaction.
    """

    def __init__(
        self,
        database,
        stats_sync: PlayerStatsSyncService,
        write_lock: WriteLock,
        rng: Optional[random.Random] = None
    ):
        self.db = database
        self.stats_sync = stats_sync
        self.write_lock = write_lock
        self.rng = rng
        self.logger = logger

    async def generate_seating(self, players, buy_in=0) -> SeatingResult:
        """
        Generate a seating never generated before and start a new game with it.

        Candidates are drawn until one has an unseen fingerprint, at most
        MAX_SEATING_ATTEMPTS times. Colliding attempts write nothing.

        Args:
            players: At least two distinct player names
            buy_in: Non-negative buy-in per player (0 = no economics)

        Returns:
            SeatingResult with the seating and the new game id

        Raises:
            InvalidInputError: If the roster or buy-in is invalid
            ConflictActiveGameError: If a game is already in progress
            ExhaustedAttemptsError: If every attempt collided
            StatsUpdateFailedError: If statistics could not be updated
            SeatingOperationError: If the game could not be stored
        """
        roster = normalize_roster(players)
        buy_in = validate_buy_in(buy_in)

        async with self.write_lock.hold("generate_seating"):
            try:
                async with self.db.transaction() as session:
                    active = await self.db.get_active_game(session)
                    if active:
                        raise ConflictActiveGameError(active.id)

                    for attempt in range(1, SeatingConstants.MAX_SEATING_ATTEMPTS + 1):
                        seating = shuffle_players(roster, self.rng)
                        seating_hash = fingerprint_seating(seating)

                        if await self.db.fingerprint_exists(session, seating_hash):
                            self.logger.debug(f"Seating collision on attempt {attempt}")
                            continue

                        game = Game(seating_hash=seating_hash, buy_in=buy_in)
                        game.seating = seating
                        try:
                            await self.db.add_game(session, game)
                        except IntegrityError:
                            # Another writer stored the same fingerprint first
                            self.logger.debug(f"Seating collision on insert, attempt {attempt}")
                            continue

                        await self.stats_sync.apply_game_created(session, seating, buy_in)
                        break
                    else:
                        self.logger.warning(
                            f"Roster of {len(roster)} exhausted {SeatingConstants.MAX_SEATING_ATTEMPTS} seating attempts"
                        )
                        raise ExhaustedAttemptsError(SeatingConstants.MAX_SEATING_ATTEMPTS)

            except PokerNightError:
                raise
            except SQLAlchemyError as e:
                self.logger.error(f"Failed to store new game: {e}")
                raise SeatingOperationError("seating generation", str(e)) from e

        self.logger.info(f"Created game {game.id} with {len(seating)} players (buy-in {buy_in}) after {attempt} attempt(s)")
        return SeatingResult(seating=seating, game_id=game.id)

    async def get_active_game(self) -> Optional[ActiveGame]:
        """Get the in-progress game so a client can resume it"""
        async with self.db.get_session() as session:
            game = await self.db.get_active_game(session)
            if not game:
                return None
            return ActiveGame(game_id=game.id, seating=game.seating, buy_in=game.buy_in)

    async def record_results(
        self,
        game_id: int,
        first: Optional[str],
        second: Optional[str] = None,
        third: Optional[str] = None
    ) -> None:
        """
        Record the placements of the active game and credit statistics.

        This frees the single active-game slot.

        Raises:
            NotFoundError: If the game does not exist
            GameAlreadySettledError: If the game already has results
            InvalidPlacementError: If a placement is missing, unseated or duplicated
            StatsUpdateFailedError: If statistics could not be updated
            SeatingOperationError: If the game could not be updated
        """
        first = normalize_placement(first)
        second = normalize_placement(second)
        third = normalize_placement(third)

        async with self.write_lock.hold("record_results"):
            try:
                async with self.db.transaction() as session:
                    game = await self.db.get_game(session, game_id)
                    if not game:
                        raise NotFoundError(game_id)
                    if not game.is_active:
                        raise GameAlreadySettledError(game_id)

                    validate_placements(game.seating, first, second, third)

                    game.winner = first
                    game.second_place = second
                    game.third_place = third
                    await session.flush()

                    if game.id == await self.db.get_latest_game_id(session):
                        await self.stats_sync.apply_results_recorded(session, game)
                    else:
                        # A re-opened older game: winnings must be summed in game order
                        self.logger.info(f"Game {game_id} is not the newest game, recomputing statistics")
                        await self.stats_sync.recompute_all(session)

            except PokerNightError:
                raise
            except SQLAlchemyError as e:
                self.logger.error(f"Failed to record results for game {game_id}: {e}")
                raise SeatingOperationError("result recording", str(e)) from e

        self.logger.info(f"Recorded results for game {game_id}: first={first}, second={second}, third={third}")
