"""
Random seeding of participants into bracket order.
"""
import random
from typing import List, Optional


def make_rng(seed: Optional[int] = None) -> random.Random:
    """Create a random source; a fixed seed makes the draw reproducible."""
    return random.Random(seed)


def shuffle(participants: List, rng: Optional[random.Random] = None) -> List:
    """
    Return a shuffled copy of participants.

    The input list is left untouched. Pass an explicit rng (anything with a
    random.Random-style shuffle method) to get a reproducible order.
    """
    if rng is None:
        rng = make_rng()
    shuffled = list(participants)
    rng.shuffle(shuffled)
    return shuffled
