"""
Custom exceptions for the seating and statistics workflows with user-friendly error messages.

Each exception carries an internal ``message`` for logs and a ``user_message``
that the HTTP layer returns to the browser, plus the status code it maps to.
"""

class PokerNightError(Exception):
    """Base exception for seating and statistics errors."""
    status_code = 500
    
    def __init__(self, message: str, user_message: str = None):
        super().__init__(message)
        self.user_message = user_message or message

class InvalidInputError(PokerNightError):
    """Raised when a roster, buy-in or request body is malformed."""
    status_code = 400

class InvalidPlacementError(InvalidInputError):
    """Raised when a placement is missing, duplicated or not seated in the game."""
    def __init__(self, player: str = None, reason: str = None):
        if reason is None:
            reason = f"{player} is not in this game"
        super().__init__(f"Invalid placement: {reason}", reason)

class ConflictActiveGameError(PokerNightError):
    """Raised when an operation would leave more than one active game."""
    status_code = 409
    
    def __init__(self, active_game_id: int):
        super().__init__(
            f"Game {active_game_id} is still active",
            "A game is already in progress. Record its results before starting a new one."
        )
        self.active_game_id = active_game_id

class GameAlreadySettledError(PokerNightError):
    """Raised when results are recorded twice for the same game."""
    status_code = 409
    
    def __init__(self, game_id: int):
        super().__init__(
            f"Game {game_id} already has results",
            "Results for this game were already recorded."
        )
        self.game_id = game_id

class ExhaustedAttemptsError(PokerNightError):
    """Raised when every candidate seating collided with a previous one."""
    status_code = 409
    
    def __init__(self, attempts: int):
        super().__init__(
            f"Could not generate unique seating after {attempts} attempts",
            f"Could not generate a unique seating after {attempts} attempts. Try a different group of players."
        )
        self.attempts = attempts

class NotFoundError(PokerNightError):
    """Raised when a game id is unknown."""
    status_code = 404
    
    def __init__(self, game_id):
        super().__init__(f"Game {game_id} not found", "Game not found")
        self.game_id = game_id

class StatsUpdateFailedError(PokerNightError):
    """Raised when player statistics could not be written."""
    status_code = 500
    
    def __init__(self, operation: str, details: str = None):
        super().__init__(
            f"Statistics update failed during {operation}: {details}",
            "Failed to update player statistics. An admin should run a recompute."
        )

class AuthenticationError(PokerNightError):
    """Raised when an admin password or token is rejected."""
    status_code = 401
    
    def __init__(self, reason: str = "Unauthorized"):
        super().__init__(reason, reason)

class WriteLockError(PokerNightError):
    """Raised when the shared write lock could not be acquired or was lost."""
    status_code = 503
    
    def __init__(self, operation: str, details: str = None):
        super().__init__(
            f"Write lock failure during {operation}: {details}",
            "The server is busy with another change. Please try again."
        )
        self.operation = operation
