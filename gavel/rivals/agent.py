"""
Rival negotiation agents.

Each invited rival gets one RivalAgent for the lifetime of an auction. The
agent owns its hidden patience and budget, answers the current price with a
BidDecision, and absorbs pressure from the player's tactics:
- on_power_bid, on_stall: patience penalty handed in by the engine
- on_kick_tires: permanent budget reduction, never negative
- on_round_passed: strategy-dependent patience decay per consulted round

Patience and budget only ever go down. Patience is clamped to 0-100; budget is
not floored, a negative budget simply guarantees withdrawal.

Agents live in a RivalArena owned by one session; nothing here is global.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Mapping
from ..house.constants import Mood, RivalStrategy, WithdrawReason
from ..house.types import BidDecision
from ..house.math_util import capped_raise, clamp, floor_scale
from .profiles import RivalProfile, calculate_interest, mood_modifiers

@dataclass
class RivalAIConfig:
    """Configuration for rival decision making.

    Attributes:
        increments: Raise per strategy (collector uses the high/low pair instead)
        collector_low_increment: Collector raise when interest is low
        collector_high_increment: Collector raise when interest is high
        patience_loss: Patience lost per consulted round, per strategy
        collector_low_loss: Collector loss per round when interest is low
        collector_high_loss: Collector loss per round when interest is high
        collector_high_interest: Interest above which a collector counts as keen
        interest_budget_weight: Budget scaling per unit of interest above/below 0.5
        low_interest: Interest under which mood-driven declines can happen (0.5 means no wishlist match)
    """
    increments: dict[RivalStrategy, int] = field(default_factory=lambda: {
        RivalStrategy.AGGRESSIVE: 500, RivalStrategy.PASSIVE: 100})
    collector_low_increment: int = 200
    collector_high_increment: int = 500
    patience_loss: dict[RivalStrategy, int] = field(default_factory=lambda: {
        RivalStrategy.AGGRESSIVE: 15, RivalStrategy.PASSIVE: 5})
    collector_low_loss: int = 10
    collector_high_loss: int = 5
    collector_high_interest: float = 0.7
    interest_budget_weight: float = 0.2
    low_interest: float = 0.6

class RivalAgent:
    """Hidden state and decision rule of one rival.

    Decision rule (decide_bid), in order:
    1. price above budget -> withdraw (budget-exceeded)
    2. patience exhausted -> withdraw (patience-exhausted)
    3. mood decline: patience under the mood's threshold and low interest -> withdraw (declined)
    4. otherwise raise by the strategy increment scaled by mood, capped to the budget

    A raise of 0 means the rival can match the current price but not beat it.

    Attributes:
        rival_id: Stable identifier
        interest: Wishlist interest in the item, 0-1
        patience: Remaining patience, 0-100
        budget: Remaining spending ceiling
        mood: Fixed mood for the auction
        strategy: Fixed bidding strategy
    """

    def __init__(self, rival_id: str, patience: int, budget: int, interest: float = 0.5,
                 mood: Mood = Mood.NORMAL, strategy: RivalStrategy = RivalStrategy.PASSIVE,
                 cfg: RivalAIConfig | None = None):
        self.rival_id = rival_id
        self.interest = float(interest)
        self.patience = clamp(int(patience), 0, 100)
        self.budget = int(budget)
        self.mood = mood
        self.strategy = strategy
        self.cfg = cfg or RivalAIConfig()

    @classmethod
    def from_profile(cls, profile: RivalProfile, interest: float,
                     cfg: RivalAIConfig | None = None) -> RivalAgent:
        """Seed an agent from a profile, applying mood and interest to the starting values."""
        cfg = cfg or RivalAIConfig()
        mods = mood_modifiers(profile.mood)
        interest_scale = 1 + cfg.interest_budget_weight * (interest - 0.5)
        return cls(
            rival_id=profile.id, interest=interest,
            patience=min(100, floor_scale(profile.patience, mods.patience_multiplier)),
            budget=floor_scale(profile.budget, mods.budget_multiplier * interest_scale),
            mood=profile.mood, strategy=profile.strategy, cfg=cfg)

    @property
    def keen(self) -> bool:
        return self.interest > self.cfg.collector_high_interest

    def base_increment(self) -> int:
        if self.strategy == RivalStrategy.COLLECTOR:
            return self.cfg.collector_high_increment if self.keen else self.cfg.collector_low_increment
        return self.cfg.increments[self.strategy]

    def decide_bid(self, current_price: int) -> BidDecision:
        if current_price > self.budget:
            return BidDecision.withdraw(WithdrawReason.BUDGET_EXCEEDED)
        if self.patience <= 0:
            return BidDecision.withdraw(WithdrawReason.PATIENCE_EXHAUSTED)
        mods = mood_modifiers(self.mood)
        if self.patience < mods.decline_below and self.interest < self.cfg.low_interest:
            return BidDecision.withdraw(WithdrawReason.DECLINED)

        amount = max(1, int(round(self.base_increment() * mods.increment_multiplier)))
        return BidDecision.raise_by(max(0, capped_raise(current_price, amount, self.budget)))

    def must_withdraw(self, current_price: int) -> WithdrawReason | None:
        if self.patience <= 0:
            return WithdrawReason.PATIENCE_EXHAUSTED
        if current_price > self.budget:
            return WithdrawReason.BUDGET_EXCEEDED
        return None

    def _lose_patience(self, amount: int) -> None:
        self.patience = clamp(self.patience - amount, 0, self.patience)

    def on_power_bid(self, penalty: int) -> None:
        self._lose_patience(penalty)

    def on_stall(self, penalty: int) -> None:
        self._lose_patience(penalty)

    def on_kick_tires(self, budget_reduction: int) -> None:
        if budget_reduction < 0:
            raise ValueError(f"budget_reduction must be non-negative, got {budget_reduction}")
        self.budget -= budget_reduction

    def on_round_passed(self) -> None:
        if self.strategy == RivalStrategy.COLLECTOR:
            loss = self.cfg.collector_high_loss if self.keen else self.cfg.collector_low_loss
        else:
            loss = self.cfg.patience_loss[self.strategy]
        self._lose_patience(loss)

    def __repr__(self) -> str:
        return (f"RivalAgent({self.rival_id!r}, patience={self.patience}, budget={self.budget}, "
                f"{self.strategy.name}/{self.mood.name})")

class RivalArena(Mapping[str, RivalAgent]):
    """Agents of one session keyed by rival id, in invitation order."""

    def __init__(self, agents: Iterable[RivalAgent] = ()):
        self._agents: dict[str, RivalAgent] = {}
        for agent in agents:
            if agent.rival_id in self._agents:
                raise ValueError(f"Duplicate rival id: {agent.rival_id}")
            self._agents[agent.rival_id] = agent

    @classmethod
    def from_profiles(cls, profiles: Iterable[RivalProfile], tags: tuple[str, ...],
                      cfg: RivalAIConfig | None = None) -> RivalArena:
        return cls(RivalAgent.from_profile(p, calculate_interest(p.wishlist, tags), cfg)
                   for p in profiles)

    def __getitem__(self, rival_id: str) -> RivalAgent: return self._agents[rival_id]
    def __iter__(self) -> Iterator[str]: return iter(self._agents)
    def __len__(self) -> int: return len(self._agents)

    @property
    def ids(self) -> tuple[str, ...]: return tuple(self._agents)
