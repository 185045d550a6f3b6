"""
Service-wide constants for the poker night seating service.

This module contains the magic numbers used by the seating allocator,
the results workflow and the read models.
"""

class SeatingConstants:
    """Constants related to seating generation."""
    
    # Smallest roster that can be seated
    MIN_PLAYERS = 2
    
    # Bounded retry for fingerprint collisions. A roster that exhausts this
    # is treated as saturated rather than searched exhaustively.
    MAX_SEATING_ATTEMPTS = 50

class HistoryConstants:
    """Constants for history listings."""
    
    # Number of most recent games returned by the history endpoint
    HISTORY_LIMIT = 20

class PlacementConstants:
    """Placement slot names, in finishing order."""
    
    FIRST = "first"
    SECOND = "second"
    THIRD = "third"
    
    SLOTS = (FIRST, SECOND, THIRD)
