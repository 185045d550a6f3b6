import json
from datetime import datetime, timezone
from typing import Optional, List, Dict

from sqlalchemy import Column, Integer, String, DateTime, Float, Text, Index
from sqlalchemy.orm import declarative_base

Base = declarative_base()

def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)

class Game(Base):
    """One seating / tournament record. ``winner`` unset means the game is active."""
    __tablename__ = 'games'

    id = Column(Integer, primary_key=True, autoincrement=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    # Seating, stored as a JSON list in seat order
    players = Column(Text, nullable=False)
    seating_hash = Column(String(64), unique=True, nullable=False)

    # Economics
    buy_in = Column(Float, nullable=False, default=0.0)

    # Placements
    winner = Column(String(100), nullable=True)
    second_place = Column(String(100), nullable=True)
    third_place = Column(String(100), nullable=True)

    __table_args__ = (
        Index('idx_games_winner', 'winner'),
        {'sqlite_autoincrement': True},
    )

    @property
    def seating(self) -> List[str]:
        return json.loads(self.players)

    @seating.setter
    def seating(self, value: List[str]):
        self.players = json.dumps(list(value), separators=(',', ':'), ensure_ascii=False)

    @property
    def is_active(self) -> bool:
        return not self.winner

    @property
    def placements(self) -> Dict[str, Optional[str]]:
        return {
            'first': self.winner,
            'second': self.second_place,
            'third': self.third_place,
        }

    def __repr__(self):
        return f"<Game(id={self.id}, players={self.players}, winner='{self.winner}')>"

class PlayerStatistic(Base):
    """Derived per-player aggregate. Rebuilt from the game history, never hand-edited."""
    __tablename__ = 'player_stats'

    player = Column(String(100), primary_key=True)
    games_played = Column(Integer, nullable=False, default=0)
    wins = Column(Integer, nullable=False, default=0)
    top3_count = Column(Integer, nullable=False, default=0)
    total_buy_ins = Column(Float, nullable=False, default=0.0)
    total_winnings = Column(Float, nullable=False, default=0.0)
    net_profit = Column(Float, nullable=False, default=0.0)

    @classmethod
    def zeroed(cls, player: str) -> 'PlayerStatistic':
        """Create a row with every counter initialised, before any delta is applied"""
        return cls(
            player=player,
            games_played=0,
            wins=0,
            top3_count=0,
            total_buy_ins=0.0,
            total_winnings=0.0,
            net_profit=0.0,
        )

    @property
    def win_rate(self) -> int:
        if not self.games_played:
            return 0
        return round((self.wins / self.games_played) * 100)

    @property
    def top3_rate(self) -> int:
        if not self.games_played:
            return 0
        return round((self.top3_count / self.games_played) * 100)

    def __repr__(self):
        return f"<PlayerStatistic(player='{self.player}', games={self.games_played}, wins={self.wins}, net={self.net_profit})>"
