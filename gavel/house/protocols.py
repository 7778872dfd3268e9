"""
Protocol definitions for the collaborators of the auction engine.

The engine talks to rivals, the player's wallet and the driver's timers only
through these interfaces. All protocols use structural subtyping (duck typing).

Protocols:
    FundsAccessor: How much money the player can spend right now
    Negotiator: Per-rival decision logic and pressure mutators
    TimerHandle / TurnTimer: Cancellable delayed calls used for pacing
    EffectSink: Consumer of transition effects
"""
from __future__ import annotations
from typing import Protocol, Callable, Mapping, TYPE_CHECKING
if TYPE_CHECKING:
    from .types import BidDecision, Effect
    from .constants import WithdrawReason

class FundsAccessor(Protocol):
    """Returns the player's currently available money.

    Queried on every bid attempt; the engine never debits it.
    """
    def __call__(self) -> int: ...

class Negotiator(Protocol):
    """Hidden per-rival state plus the decision rule.

    Methods:
        decide_bid: Pure decision against the current price
        on_power_bid / on_stall / on_kick_tires: Pressure from player tactics, sized by AuctionConfig
        on_round_passed: Per-round patience decay after being consulted
        must_withdraw: Immediate affordability/patience check after a mutation
    """
    rival_id: str
    patience: int
    budget: int

    def decide_bid(self, current_price: int) -> BidDecision:
        """Decide whether to raise the current price and by how much.

        Args:
            current_price: The session's live price

        Returns:
            A bid decision; never mutates the agent
        """
        ...

    def on_power_bid(self, penalty: int) -> None: ...
    def on_stall(self, penalty: int) -> None: ...
    def on_kick_tires(self, budget_reduction: int) -> None: ...
    def on_round_passed(self) -> None: ...
    def must_withdraw(self, current_price: int) -> WithdrawReason | None: ...

# arena of agents owned by a single session
Arena = Mapping[str, Negotiator]

class TimerHandle(Protocol):
    def cancel(self) -> None: ...

class TurnTimer(Protocol):
    """Schedules a callback after a delay and hands back a cancellable handle."""
    def call_later(self, delay_s: float, fn: Callable[[], None]) -> TimerHandle: ...

class EffectSink(Protocol):
    """Receives the ordered effects of each accepted transition."""
    def __call__(self, effects: list[Effect]) -> None: ...
