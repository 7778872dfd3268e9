"""
Paced reference driver for a live auction.

The engine and scheduler are synchronous; this module adds the pacing an
interactive front end needs around them:

    player action -> (next_turn_delay_s) -> rival turn -> (player_turn_delay_s) -> player turn

After the player withdraws, rival turns keep coming every next_turn_delay_s
until the session resolves (or the rival-only ceiling declares a stalemate).

At most one delayed call is in flight. It is cancelled whenever another one
is scheduled, when the auction ends and on close(), so a torn-down driver can
never act on a stale session.

Example:
    >>> driver = AuctionDriver(state, arena, funds=lambda: wallet.cash,
    ...                        timer=AsyncioTurnTimer(), on_effects=render)
    >>> driver.bid()
"""
from __future__ import annotations
import asyncio
from dataclasses import dataclass
from typing import Callable
import numpy as np
from .constants import PLAYER_ID, EndReason, PlayerAction
from .types import (AuctionOutcome, Effect, PlayerContext, PlayerSkills, ResolutionOverride,
                    SessionState, Transition)
from .protocols import Arena, EffectSink, FundsAccessor, TimerHandle, TurnTimer
from .rules import AuctionConfig
from .scheduler import TurnScheduler
from .resolution import apply_override, apply_player_action, end_auction
from ..observability.hooks import emit_event

@dataclass
class PacingConfig:
    """Delays between turns, in seconds.

    Attributes:
        next_turn_delay_s: Pause between a player action (or a rival-only turn) and the next rival turn
        player_turn_delay_s: Pause between a rival turn and control returning to the player
    """
    next_turn_delay_s: float = 0.65
    player_turn_delay_s: float = 0.725

    def validate(self) -> PacingConfig:
        if self.next_turn_delay_s < 0 or self.player_turn_delay_s < 0:
            raise ValueError("turn delays cannot be negative")
        return self

class AsyncioTurnTimer:
    """TurnTimer backed by an asyncio event loop (the running loop by default)."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    def call_later(self, delay_s: float, fn: Callable[[], None]) -> TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay_s, fn)

class AuctionDriver:
    """Runs one session end to end with paced, cancellable rival turns.

    Attributes:
        state: Latest session state
        arena: Rival agents of the session
        is_player_turn: Whether player actions are accepted right now
        effect_log: Every effect produced so far, in order
        last_rejected: Reason of the most recent rejected action, if any
        closed: Set by close(); a closed driver ignores timer callbacks
    """

    def __init__(self, state: SessionState, arena: Arena, funds: FundsAccessor,
                 timer: TurnTimer, skills: PlayerSkills | None = None,
                 rng: np.random.Generator | None = None, cfg: AuctionConfig | None = None,
                 pacing: PacingConfig | None = None, scheduler: TurnScheduler | None = None,
                 on_effects: EffectSink | None = None, override: ResolutionOverride | None = None):
        self.state = state
        self.arena = arena
        self.funds = funds
        self.timer = timer
        self.skills = skills or PlayerSkills()
        self.rng = rng or np.random.default_rng()
        self.cfg = cfg or AuctionConfig()
        self.pacing = (pacing or PacingConfig()).validate()
        self.scheduler = scheduler or TurnScheduler(self.cfg)
        self.on_effects = on_effects
        self.override = override
        self.is_player_turn = not state.resolved
        self.effect_log: list[Effect] = []
        self.last_rejected = None
        self.closed = False
        self._pending: TimerHandle | None = None
        self._rival_only_turns = 0

    @property
    def resolved(self) -> bool: return self.state.resolved
    @property
    def has_pending_turn(self) -> bool: return self._pending is not None

    # player actions

    def bid(self) -> Transition:
        return self.act(PlayerAction.BID)

    def power_bid(self) -> Transition:
        return self.act(PlayerAction.POWER_BID)

    def kick_tires(self) -> Transition:
        return self.act(PlayerAction.KICK_TIRES)

    def stall(self) -> Transition:
        return self.act(PlayerAction.STALL)

    def withdraw(self) -> Transition:
        return self.act(PlayerAction.WITHDRAW)

    def act(self, action: PlayerAction) -> Transition:
        """Apply a player action; an accepted one hands the turn to the rivals."""
        player = PlayerContext(funds=self.funds, skills=self.skills,
                               is_player_turn=self.is_player_turn and not self.closed)
        step = apply_player_action(self.state, self.arena, action, player, self.cfg, self.override)
        self._commit(step)
        if step.accepted and not self.state.resolved:
            self.is_player_turn = False
            self._schedule(self.pacing.next_turn_delay_s, self._rival_turn)
        return step

    # explicit ends

    def set_override(self, override: ResolutionOverride | None) -> Transition:
        """Install a scripted outcome; an active one ends the auction immediately."""
        self.override = override
        step = apply_override(self.state, override)
        self._commit(step)
        return step

    def end(self, winner_id: str, reason: EndReason = EndReason.FORCED) -> Transition:
        step = end_auction(self.state, winner_id, reason)
        self._commit(step)
        return step

    def close(self) -> None:
        """Tear down: cancel the pending turn and ignore any late callbacks."""
        self.closed = True
        self.is_player_turn = False
        self._cancel()

    def outcome(self) -> AuctionOutcome | None:
        """Settlement summary, or None while the auction is still running.

        The player's funds are queried again here: a player win that can no
        longer be paid for is reported with affordable=False.
        """
        if not self.state.resolved:
            return None
        player_won = self.state.winner_id == PLAYER_ID
        affordable = self.funds() >= self.state.current_price if player_won else True
        return AuctionOutcome(winner_id=self.state.winner_id, price=self.state.current_price,
                              reason=self.state.end_reason, player_won=player_won,
                              affordable=affordable)

    # pacing

    def _commit(self, step: Transition) -> None:
        self.last_rejected = step.rejected
        self.state = step.state
        if step.effects:
            self.effect_log += step.effects
            if self.on_effects is not None:
                self.on_effects(list(step.effects))
        if self.state.resolved:
            self.is_player_turn = False
            self._cancel()

    def _schedule(self, delay_s: float, fn: Callable[[], None]) -> None:
        self._cancel()
        if self.closed:
            return

        def fire() -> None:
            self._pending = None
            if self.closed or self.state.resolved:
                return
            fn()

        self._pending = self.timer.call_later(delay_s, fire)

    def _cancel(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _rival_turn(self) -> None:
        if self.state.player_withdrawn:
            self._rival_only_turns += 1
            if self._rival_only_turns > self.scheduler.max_rival_only_turns:
                winner = self.state.leading_bidder_id or self.state.active_rival_ids[0]
                self._commit(end_auction(self.state, winner, EndReason.STALEMATE))
                return
        self._commit(self.scheduler.run_rival_turn(self.state, self.arena, self.rng, self.override))
        if self.state.resolved:
            return
        if self.state.player_withdrawn:
            self._schedule(self.pacing.next_turn_delay_s, self._rival_turn)
        else:
            self._schedule(self.pacing.player_turn_delay_s, self._return_to_player)

    def _return_to_player(self) -> None:
        self.is_player_turn = True
        emit_event('player_turn.started', {'item_id': self.state.item_id,
                                           'price': self.state.current_price,
                                           'leading_bidder_id': self.state.leading_bidder_id})
