import random
from typing import List, Optional, Sequence

def shuffle_players(players: Sequence[str], rng: Optional[random.Random] = None) -> List[str]:
    """Return a uniformly shuffled copy of ``players`` (Fisher-Yates).
    
    The caller's sequence is never mutated. Seating is a fairness mechanism,
    not a security boundary, so the non-cryptographic ``random`` module is used.
    """
    rng = rng or random
    seating = list(players)
    for i in range(len(seating) - 1, 0, -1):
        j = rng.randint(0, i)
        seating[i], seating[j] = seating[j], seating[i]
    return seating
