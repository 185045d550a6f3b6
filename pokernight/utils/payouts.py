"""
Payout policy for tournament buy-ins.

Winner-take-all is the only policy in use. A future payout curve changes
``compute_payouts`` alone; the statistics engine and the API only consume
the returned shares.
"""

from dataclasses import dataclass, asdict


@dataclass(frozen=True)
class Payouts:
    """Prize distribution for a single game."""
    first: float
    second: float
    third: float
    total_pot: float
    
    def share_for(self, slot: str) -> float:
        return getattr(self, slot)
    
    def to_dict(self) -> dict:
        data = asdict(self)
        data['totalPot'] = data.pop('total_pot')
        return data


def compute_payouts(player_count: int, buy_in: float) -> Payouts:
    """Map a player count and buy-in to the prize distribution."""
    if player_count < 0:
        raise ValueError("player_count must be non-negative")
    if buy_in < 0:
        raise ValueError("buy_in must be non-negative")
    
    total_pot = float(player_count * buy_in)
    if total_pot == 0:
        return Payouts(first=0.0, second=0.0, third=0.0, total_pot=0.0)
    
    return Payouts(first=total_pot, second=0.0, third=0.0, total_pot=total_pot)
