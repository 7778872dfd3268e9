"""
Rival profiles, mood modifiers and interest scoring.

This module provides the static side of a rival, before any auction starts:
- RivalProfile: Base budget, patience, wishlist, strategy and mood
- MoodModifiers, MOOD_TABLE: How mood scales starting values and decisions
- calculate_interest: Wishlist match score for an item, in [0, 1]
- make_rival_profiles: Procedural rival generation

Example:
    >>> rng = np.random.default_rng(7)
    >>> profiles = make_rival_profiles(3, rng)
    >>> calculate_interest(profiles[0].wishlist, ('JDM', 'Turbo'))
"""
from __future__ import annotations
from dataclasses import dataclass
import numpy as np
from ..house.constants import Mood, RivalStrategy

@dataclass(frozen=True)
class RivalProfile:
    """Static description of a rival.

    Attributes:
        id: Stable identifier
        name: Display name
        tier: 1 = tycoon (hardest), 2 = enthusiast, 3 = scrapper (easiest)
        budget: Base spending ceiling before mood/interest scaling
        patience: Base patience 0-100
        wishlist: Tags the rival targets
        strategy: Bidding strategy
        mood: Mood for this auction
    """
    id: str
    name: str
    budget: int
    patience: int
    strategy: RivalStrategy = RivalStrategy.PASSIVE
    mood: Mood = Mood.NORMAL
    tier: int = 3
    wishlist: tuple[str, ...] = ()

@dataclass(frozen=True)
class MoodModifiers:
    """Effect of a mood on a rival.

    Attributes:
        patience_multiplier: Scales starting patience
        budget_multiplier: Scales starting budget
        increment_multiplier: Scales every raise
        decline_below: Patience under which a low-interest rival declines (0 = never)
    """
    patience_multiplier: float = 1.0
    budget_multiplier: float = 1.0
    increment_multiplier: float = 1.0
    decline_below: int = 0

MOOD_TABLE: dict[Mood, MoodModifiers] = {
    Mood.DESPERATE: MoodModifiers(patience_multiplier=1.2, budget_multiplier=1.25, increment_multiplier=1.5),
    Mood.CAUTIOUS: MoodModifiers(patience_multiplier=0.8, budget_multiplier=0.85, increment_multiplier=0.5,
                                 decline_below=30),
    Mood.CONFIDENT: MoodModifiers(patience_multiplier=1.0, budget_multiplier=1.1, increment_multiplier=1.25),
    Mood.NORMAL: MoodModifiers(),
}

BASE_INTEREST = 0.5
INTEREST_PER_MATCH = 0.15

def mood_modifiers(mood: Mood) -> MoodModifiers:
    return MOOD_TABLE.get(mood, MOOD_TABLE[Mood.NORMAL])

def calculate_interest(wishlist: tuple[str, ...] | list[str], tags: tuple[str, ...] | list[str]) -> float:
    """Base interest plus a bonus per wishlist tag the item carries, capped at 1"""
    matches = sum(1 for tag in tags if tag in wishlist)
    return min(1.0, BASE_INTEREST + INTEREST_PER_MATCH * matches)

TAG_POOL = ('Muscle', 'Classic', 'American', 'JDM', 'Sports', 'Turbo', 'Rare', 'Original',
            'Exotic', 'Pristine', 'Project Car', 'Barn Find', 'Rust', 'Daily Driver')

def make_rival_profiles(n: int, rng: np.random.Generator,
                        budget_range: tuple[int, int] = (8000, 60000),
                        patience_range: tuple[int, int] = (30, 80),
                        wishlist_size: int = 3) -> list[RivalProfile]:
    """Create n random rivals.

    Args:
        n: Number of rivals
        rng: Random generator
        budget_range: (min, max) base budget
        patience_range: (min, max) base patience
        wishlist_size: Number of tags per wishlist

    Returns:
        Profiles with ids rival_001..rival_n; richer rivals land in lower tiers
    """
    if n < 1:
        raise ValueError("need at least one rival")
    strategies = list(RivalStrategy)
    moods = list(Mood)
    lo, hi = budget_range
    profiles = []
    for i in range(n):
        budget = int(rng.integers(lo, hi + 1))
        patience = int(rng.integers(patience_range[0], patience_range[1] + 1))
        wishlist = tuple(rng.choice(TAG_POOL, size=wishlist_size, replace=False).tolist())
        # tier follows budget: top third is tycoon
        rel = (budget - lo) / max(hi - lo, 1)
        tier = 1 if rel > 2 / 3 else (2 if rel > 1 / 3 else 3)
        profiles.append(RivalProfile(
            id=f"rival_{i + 1:03d}", name=f"Rival {i + 1}", budget=budget, patience=patience,
            strategy=strategies[int(rng.integers(len(strategies)))],
            mood=moods[int(rng.integers(len(moods)))], tier=tier, wishlist=wishlist))
    return profiles
