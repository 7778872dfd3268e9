"""
Auction rules: tuning values and the gating checks built on them.

The engine reads every number from AuctionConfig so that increments, pressure
penalties and skill thresholds can be tuned independently. The gate helpers
return the failed precondition (or None) without touching any state.
"""
from __future__ import annotations
from dataclasses import dataclass
from .constants import RejectReason, Tactic
from .types import PlayerSkills, SessionState

@dataclass
class AuctionConfig:
    """Configuration for the auction rules.

    Attributes:
        starting_bid_multiplier: Opening price as a fraction of market value
        bid_increment: Raise added by a normal bid
        power_bid_increment: Raise added by a power bid
        power_bid_patience_penalty: Patience every active rival loses on a power bid
        stall_patience_penalty: Patience every active rival loses on a stall
        kick_tires_budget_reduction: Budget every active rival loses on kick tires
        required_eye_level: Minimum Eye skill for kick tires
        required_tongue_level: Minimum Tongue skill for stall
        rival_only_cap_ratio: Rival-vs-rival price ceiling as a multiple of market value
        bid_history_limit: Number of recent bids kept for display
        patience_low_threshold: Pressured rivals below this bark about it
        tactics_require_opening_bid: Block tactics until someone claimed the opening
    """
    starting_bid_multiplier: float = 0.65
    bid_increment: int = 200
    power_bid_increment: int = 500
    power_bid_patience_penalty: int = 20
    stall_patience_penalty: int = 20
    kick_tires_budget_reduction: int = 300
    required_eye_level: int = 2
    required_tongue_level: int = 2
    rival_only_cap_ratio: float = 1.05
    bid_history_limit: int = 20
    patience_low_threshold: int = 30
    tactics_require_opening_bid: bool = True

    def validate(self) -> AuctionConfig:
        if self.bid_increment <= 0 or self.power_bid_increment <= 0:
            raise ValueError("bid increments must be positive")
        if self.power_bid_increment <= self.bid_increment:
            raise ValueError("power_bid_increment must exceed bid_increment")
        if min(self.power_bid_patience_penalty, self.stall_patience_penalty,
               self.kick_tires_budget_reduction) < 0:
            raise ValueError("tactic penalties cannot be negative")
        if self.rival_only_cap_ratio <= 0 or self.starting_bid_multiplier <= 0:
            raise ValueError("price multipliers must be positive")
        if self.bid_history_limit < 1:
            raise ValueError("bid_history_limit must be at least 1")
        return self

def stall_uses_left(state: SessionState, skills: PlayerSkills) -> int:
    """Tongue level doubles as the per-auction stall cap"""
    return max(0, skills.tongue - state.uses(Tactic.STALL))

def tactic_gate(tactic: Tactic, state: SessionState, skills: PlayerSkills,
                cfg: AuctionConfig) -> RejectReason | None:
    """Return the failed precondition for using `tactic`, or None when allowed."""
    if tactic == Tactic.POWER_BID:
        return None  # gated by funds only
    if cfg.tactics_require_opening_bid and not state.has_any_bids:
        return RejectReason.OPENING_BID_REQUIRED
    if tactic == Tactic.KICK_TIRES:
        if skills.eye < cfg.required_eye_level:
            return RejectReason.SKILL_TOO_LOW
        return None
    if skills.tongue < cfg.required_tongue_level:
        return RejectReason.SKILL_TOO_LOW
    if stall_uses_left(state, skills) <= 0:
        return RejectReason.NO_USES_LEFT
    return None
