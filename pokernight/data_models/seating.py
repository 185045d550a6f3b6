"""
Seating data models

Immutable data transfer objects returned by the seating workflow.
"""

from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class SeatingResult:
    """A freshly generated, never-seen-before seating."""
    seating: List[str]
    game_id: int


@dataclass(frozen=True)
class ActiveGame:
    """The single in-progress game, used by clients to resume a tournament."""
    game_id: int
    seating: List[str]
    buy_in: float
