"""
Core data types for the auction house engine.

This module defines the fundamental data structures used throughout the engine:
- Identifiers (BidderId, RivalId)
- Domain objects (Item, BidDecision, BidRecord, PlayerSkills, PlayerContext)
- Transition structures (Effect, Transition)
- State containers (SessionState, ResolutionOverride, AuctionOutcome)

SessionState is treated as a value: transitions build a copy and return it,
so a state object handed to a driver is never changed behind its back.
"""
from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Any, NewType, TYPE_CHECKING
from .constants import (PLAYER_ID, EffectKind, WithdrawReason, EndReason, BarkTrigger,
                        RejectReason, Tactic)
if TYPE_CHECKING:
    from .protocols import FundsAccessor

BidderId = NewType('BidderId', str)  # 'player' or a rival id
RivalId = NewType('RivalId', str)  # unique rival id within a session

@dataclass(frozen=True)
class Item:
    """The item under the hammer.

    Attributes:
        id: Unique identifier
        name: Display name
        market_value: Market-adjusted estimate; seeds the opening price and rival-only cap
        condition: Condition score 0-100
        tags: Descriptive tags rivals match against their wishlists
    """
    id: str
    name: str
    market_value: int
    condition: int = 50
    tags: tuple[str, ...] = ()

@dataclass(frozen=True)
class BidDecision:
    """A rival's answer to the current price.

    Attributes:
        should_bid: True to raise, False to withdraw
        amount: Raise over the current price (0 when withdrawing)
        reason: Why the rival withdraws (None when bidding)
    """
    should_bid: bool
    amount: int = 0
    reason: WithdrawReason | None = None

    @classmethod
    def raise_by(cls, amount: int) -> BidDecision:
        return cls(should_bid=True, amount=amount)

    @classmethod
    def withdraw(cls, reason: WithdrawReason) -> BidDecision:
        return cls(should_bid=False, amount=0, reason=reason)

@dataclass(frozen=True)
class BidRecord:
    """One accepted bid, kept for display only"""
    bidder_id: BidderId
    price: int
    t: int

@dataclass(frozen=True)
class PlayerSkills:
    """Player skill levels gating tactics.

    Attributes:
        eye: Gates kick tires
        tongue: Gates stall; also the per-auction stall use cap
        network: Not used by the engine, carried for drivers
    """
    eye: int = 1
    tongue: int = 1
    network: int = 1

@dataclass
class PlayerContext:
    """Everything the engine needs from the player for one call.

    Attributes:
        funds: Accessor queried on every bid attempt
        skills: Current skill levels
        is_player_turn: Caller-supplied turn flag
    """
    funds: FundsAccessor
    skills: PlayerSkills = field(default_factory=PlayerSkills)
    is_player_turn: bool = True

@dataclass(frozen=True)
class Effect:
    """Generic effect emitted by a transition.

    Only the fields relevant to `kind` are set:
    - BID_RECORDED: bidder_id, price, amount, opening
    - RIVAL_DROPPED: rival_id, reason
    - AUCTION_ENDED: winner_id, price, end_reason
    - BARK_REQUESTED: speaker, trigger
    """
    kind: EffectKind
    bidder_id: BidderId | None = None
    rival_id: RivalId | None = None
    winner_id: BidderId | None = None
    price: int | None = None
    amount: int | None = None
    opening: bool = False
    reason: WithdrawReason | None = None
    end_reason: EndReason | None = None
    speaker: str | None = None
    trigger: BarkTrigger | None = None

    @classmethod
    def bid_recorded(cls, bidder_id: str, price: int, amount: int, opening: bool = False) -> Effect:
        return cls(EffectKind.BID_RECORDED, bidder_id=BidderId(bidder_id), price=price,
                   amount=amount, opening=opening)

    @classmethod
    def rival_dropped(cls, rival_id: str, reason: WithdrawReason) -> Effect:
        return cls(EffectKind.RIVAL_DROPPED, rival_id=RivalId(rival_id), reason=reason)

    @classmethod
    def auction_ended(cls, winner_id: str, price: int, reason: EndReason) -> Effect:
        return cls(EffectKind.AUCTION_ENDED, winner_id=BidderId(winner_id), price=price,
                   end_reason=reason)

    @classmethod
    def bark(cls, speaker: str, trigger: BarkTrigger) -> Effect:
        return cls(EffectKind.BARK_REQUESTED, speaker=speaker, trigger=trigger)

@dataclass(frozen=True)
class ResolutionOverride:
    """Scripted outcome from a narrative sequence.

    The override only takes part in resolution while `active` is True; the
    data deciding when it is active lives with the narrative collaborator.

    Attributes:
        winner_id: Bidder that must win
        active: Flag declaring the scripted sequence in progress
        note: Free-form label for logs
    """
    winner_id: BidderId
    active: bool = False
    note: str = ''

@dataclass
class SessionState:
    """Authoritative record of one auction in progress.

    Attributes:
        item_id: Item under auction
        opening_price: Seeded opening price (first bid claims exactly this)
        market_value: Market estimate of the item
        rival_only_cap: Price ceiling for rival-vs-rival raising
        current_price: Non-decreasing current price
        has_any_bids: Whether the opening price has been claimed
        leading_bidder_id: Current leader, or None
        active_rival_ids: Rivals still eligible to act, in invitation order
        withdrawn_rival_ids: Rivals that left, in order of leaving
        withdraw_reasons: Reason per withdrawn rival
        tactic_uses: Per-tactic use counters for this session
        power_bid_streak: Consecutive power bids by the player
        player_withdrawn: One-way latch
        bid_history: Bounded display window of recent bids
        bid_history_limit: Size of that window
        resolved: One-way latch set when a winner is known
        winner_id: Winner once resolved
        end_reason: Why the auction ended
        turn: Logical clock, incremented by every accepted transition
    """
    item_id: str
    opening_price: int
    market_value: int
    rival_only_cap: int
    current_price: int
    active_rival_ids: tuple[str, ...]
    has_any_bids: bool = False
    leading_bidder_id: BidderId | None = None
    withdrawn_rival_ids: tuple[str, ...] = ()
    withdraw_reasons: dict[str, WithdrawReason] = field(default_factory=dict)
    tactic_uses: dict[Tactic, int] = field(default_factory=dict)
    power_bid_streak: int = 0
    player_withdrawn: bool = False
    bid_history: tuple[BidRecord, ...] = ()
    bid_history_limit: int = 20
    resolved: bool = False
    winner_id: BidderId | None = None
    end_reason: EndReason | None = None
    turn: int = 0

    @property
    def player_leading(self) -> bool: return self.leading_bidder_id == PLAYER_ID
    @property
    def n_active(self) -> int: return len(self.active_rival_ids)

    def is_active(self, rival_id: str) -> bool:
        return rival_id in self.active_rival_ids

    def uses(self, tactic: Tactic) -> int:
        return self.tactic_uses.get(tactic, 0)

    def copy(self) -> SessionState:
        """Copy with fresh mutable containers, so edits never leak into self."""
        return replace(self, withdraw_reasons=dict(self.withdraw_reasons),
                       tactic_uses=dict(self.tactic_uses))

    def to_dict(self) -> dict[str, Any]:
        """Plain-data view for logs and observability payloads."""
        return {
            'item_id': self.item_id, 'current_price': self.current_price,
            'has_any_bids': self.has_any_bids, 'leading_bidder_id': self.leading_bidder_id,
            'active_rival_ids': list(self.active_rival_ids),
            'withdrawn_rival_ids': list(self.withdrawn_rival_ids),
            'player_withdrawn': self.player_withdrawn, 'resolved': self.resolved,
            'winner_id': self.winner_id,
            'end_reason': self.end_reason.value if self.end_reason else None,
            'turn': self.turn,
        }

@dataclass
class Transition:
    """Result of one engine call.

    Attributes:
        state: Next session state (the same object when rejected)
        effects: Ordered effects for the driver to render
        rejected: Failed precondition, None when the action was accepted
    """
    state: SessionState
    effects: list[Effect] = field(default_factory=list)
    rejected: RejectReason | None = None

    @property
    def accepted(self) -> bool: return self.rejected is None
    @property
    def ended(self) -> bool:
        return any(e.kind == EffectKind.AUCTION_ENDED for e in self.effects)

@dataclass(frozen=True)
class AuctionOutcome:
    """Settlement summary the driver reports once the session resolves.

    Attributes:
        winner_id: Winning bidder
        price: Final price
        reason: Why the auction ended
        player_won: Whether the player is the winner
        affordable: Whether the player can still pay at settlement (True for rival wins)
    """
    winner_id: BidderId
    price: int
    reason: EndReason
    player_won: bool
    affordable: bool = True
