"""
Configuration and factory functions for creating ready-to-run auctions.

This module provides:
- ScenarioConfig: Item, rival field and rule settings for one auction
- Auction: Everything a driver needs (item, session, arena, scheduler)
- make_auction: Factory building a seeded auction from a ScenarioConfig

Example:
    >>> from gavel.config import make_auction, ScenarioConfig
    >>> auction = make_auction(ScenarioConfig(n_rivals=3), np.random.default_rng(42))
    >>> auction.state.current_price == auction.state.opening_price
    True
"""
from __future__ import annotations
from dataclasses import dataclass, field
import numpy as np
from .house import AuctionConfig, Item, SessionState, TurnScheduler, open_session
from .rivals import RivalAIConfig, RivalArena, RivalProfile, TAG_POOL, make_rival_profiles

@dataclass
class ScenarioConfig:
    """Configuration for a procedurally generated auction.

    Attributes:
        n_rivals: Number of invited rivals
        market_value_range: (min, max) market value of the item
        condition_range: (min, max) condition score of the item
        n_tags: Number of descriptive tags on the item
        budget_range: (min, max) base rival budget
        patience_range: (min, max) base rival patience
        player_funds: Money available to simulated players
        max_rival_only_turns: Rival-only turns before a stalemate end
        auction: Rule tuning
        rival_ai: Rival decision tuning
        seed: Random seed used when no generator is passed
    """
    n_rivals: int = 3
    market_value_range: tuple[int, int] = (8000, 40000)
    condition_range: tuple[int, int] = (20, 95)
    n_tags: int = 3
    budget_range: tuple[int, int] = (8000, 60000)
    patience_range: tuple[int, int] = (30, 80)
    player_funds: int = 50000
    max_rival_only_turns: int = 200
    auction: AuctionConfig = field(default_factory=AuctionConfig)
    rival_ai: RivalAIConfig = field(default_factory=RivalAIConfig)
    seed: int | None = None

    def validate(self) -> ScenarioConfig:
        if self.n_rivals < 1:
            raise ValueError("n_rivals must be at least 1")
        if self.market_value_range[0] <= 0 or self.market_value_range[0] > self.market_value_range[1]:
            raise ValueError("market_value_range must be positive and ordered")
        if not 0 <= self.n_tags <= len(TAG_POOL):
            raise ValueError(f"n_tags must be within 0..{len(TAG_POOL)}")
        if self.max_rival_only_turns < 1:
            raise ValueError("max_rival_only_turns must be at least 1")
        self.auction.validate()
        return self

@dataclass
class Auction:
    """A freshly opened auction.

    Attributes:
        item: Item under the hammer
        profiles: Static rival profiles the arena was seeded from
        arena: Live rival agents of this session
        state: Opening session state
        scheduler: Rival turn scheduler bound to the same rules
        cfg: Scenario the auction was built from
    """
    item: Item
    profiles: list[RivalProfile]
    arena: RivalArena
    state: SessionState
    scheduler: TurnScheduler
    cfg: ScenarioConfig

def make_item(cfg: ScenarioConfig, rng: np.random.Generator, item_id: str = 'item_001') -> Item:
    lo, hi = cfg.market_value_range
    tags = tuple(rng.choice(TAG_POOL, size=cfg.n_tags, replace=False).tolist()) if cfg.n_tags else ()
    return Item(id=item_id, name=f"Lot {item_id}", market_value=int(rng.integers(lo, hi + 1)),
                condition=int(rng.integers(cfg.condition_range[0], cfg.condition_range[1] + 1)),
                tags=tags)

def make_auction(cfg: ScenarioConfig | None = None, rng: np.random.Generator | None = None,
                 item: Item | None = None) -> Auction:
    """Create a seeded auction.

    Components:
    - Item: random market value, condition and tags (unless one is given)
    - Rivals: make_rival_profiles, interest scored against the item's tags
    - Session: opening price at market_value * starting_bid_multiplier
    - Scheduler: TurnScheduler with the scenario's rival-only ceiling

    Args:
        cfg: Configuration (uses defaults if None)
        rng: Random generator (seeded from cfg.seed if None)
        item: Explicit item to auction instead of a random one

    Returns:
        Configured Auction
    """
    cfg = (cfg or ScenarioConfig()).validate()
    rng = rng if rng is not None else np.random.default_rng(cfg.seed)
    item = item or make_item(cfg, rng)
    profiles = make_rival_profiles(cfg.n_rivals, rng, cfg.budget_range, cfg.patience_range)
    arena = RivalArena.from_profiles(profiles, item.tags, cfg.rival_ai)
    state = open_session(item, arena.ids, cfg.auction)
    scheduler = TurnScheduler(cfg.auction, cfg.max_rival_only_turns)
    return Auction(item=item, profiles=profiles, arena=arena, state=state,
                   scheduler=scheduler, cfg=cfg)
