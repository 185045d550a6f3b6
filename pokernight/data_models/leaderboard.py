"""
Leaderboard and history data models

Provides immutable data transfer objects for the stats and history listings.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

from pokernight.utils.payouts import Payouts


@dataclass(frozen=True)
class PlayerStatsEntry:
    """Single stats row."""
    player: str
    games_played: int
    wins: int
    top3: int
    buy_ins: float
    winnings: float
    net_profit: float
    win_rate: int
    top3_rate: int


@dataclass(frozen=True)
class HistoryEntry:
    """Single game in the recent history listing."""
    id: int
    created_at: Optional[datetime]
    seating: List[str]
    placements: Dict[str, Optional[str]]
    buy_in: float
    payouts: Payouts
