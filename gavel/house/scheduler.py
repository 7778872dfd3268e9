"""
Multi-rival turn scheduler.

Orders the rivals of a rival turn and walks them one at a time through the
resolution engine, so each rival decides against the live price left by the
rivals before it. The shuffle is a pure step (compute_turn_order) kept apart
from execution, which makes ordering testable without any timers.

State machine per turn:

    IDLE -> EVALUATING(0) -> ... -> EVALUATING(n-1) -> RESOLVING -> IDLE

A rival removed earlier in the same pass is skipped, not evaluated. Once the
player has withdrawn the scheduler runs in RIVAL_ONLY mode and repeats rival
turns until a single rival remains (run_rival_only).

Example:
    >>> scheduler = TurnScheduler(AuctionConfig())
    >>> step = scheduler.run_rival_turn(state, arena, np.random.default_rng(0))
"""
from __future__ import annotations
from typing import Sequence
import numpy as np
from .constants import EndReason, RejectReason, SchedulerMode, SchedulerPhase
from .types import Effect, ResolutionOverride, SessionState, Transition
from .protocols import Arena
from .rules import AuctionConfig
from .resolution import apply_rival_decision, end_auction
from ..observability.hooks import emit_event

def compute_turn_order(active_ids: Sequence[str], rng: np.random.Generator) -> list[str]:
    """Random permutation of the active rivals."""
    if not active_ids:
        return []
    return [active_ids[i] for i in rng.permutation(len(active_ids))]

def scheduler_mode(state: SessionState) -> SchedulerMode:
    return SchedulerMode.RIVAL_ONLY if state.player_withdrawn else SchedulerMode.PLAYER_PRESENT

class TurnScheduler:
    """Runs rival turns for one session.

    Attributes:
        cfg: Auction rules passed to the engine
        max_rival_only_turns: Ceiling on rival-only turns before a stalemate end
        phase: Current state machine phase
        index: Position in the current turn order while EVALUATING
        order: Turn order of the turn in progress (or the last one)
        turns_run: Rival turns run so far
    """

    def __init__(self, cfg: AuctionConfig | None = None, max_rival_only_turns: int = 200):
        self.cfg = cfg or AuctionConfig()
        self.max_rival_only_turns = max_rival_only_turns
        self.phase = SchedulerPhase.IDLE
        self.index = 0
        self.order: list[str] = []
        self.turns_run = 0

    def mode(self, state: SessionState) -> SchedulerMode:
        return scheduler_mode(state)

    def run_rival_turn(self, state: SessionState, arena: Arena, rng: np.random.Generator,
                       override: ResolutionOverride | None = None,
                       order: Sequence[str] | None = None) -> Transition:
        """Run one rival turn.

        Args:
            state: Current session state
            arena: Rival agents of this session
            rng: Random generator for the turn order
            override: Scripted outcome, honored only while active
            order: Explicit order (skips the shuffle), mainly for replays

        Returns:
            Transition with the state after every rival acted and all effects in order
        """
        if state.resolved:
            return _resolved(state)
        self.order = list(order) if order is not None else compute_turn_order(state.active_rival_ids, rng)
        effects: list[Effect] = []
        for i, rival_id in enumerate(self.order):
            self.phase, self.index = SchedulerPhase.EVALUATING, i
            if not state.is_active(rival_id) or state.leading_bidder_id == rival_id:
                continue
            decision = arena[rival_id].decide_bid(state.current_price)
            step = apply_rival_decision(state, arena, rival_id, decision, self.cfg, override)
            state = step.state
            effects += step.effects
            if state.resolved:
                break
        self.phase = SchedulerPhase.RESOLVING
        self.turns_run += 1
        emit_event('rival_turn.completed', {'item_id': state.item_id, 'order': self.order,
                                            'price': state.current_price,
                                            'active_rivals': list(state.active_rival_ids)})
        self.phase, self.index = SchedulerPhase.IDLE, 0
        return Transition(state, effects)

    def run_rival_only(self, state: SessionState, arena: Arena, rng: np.random.Generator,
                       override: ResolutionOverride | None = None) -> Transition:
        """Repeat rival turns until the session resolves.

        Hitting max_rival_only_turns ends the auction in favor of the current
        leader (or the first active rival) with STALEMATE.
        """
        if state.resolved:
            return _resolved(state)
        effects: list[Effect] = []
        for _ in range(self.max_rival_only_turns):
            step = self.run_rival_turn(state, arena, rng, override)
            state = step.state
            effects += step.effects
            if state.resolved:
                return Transition(state, effects)
        winner = state.leading_bidder_id or state.active_rival_ids[0]
        step = end_auction(state, winner, EndReason.STALEMATE)
        return Transition(step.state, effects + step.effects)

def _resolved(state: SessionState) -> Transition:
    return Transition(state, rejected=RejectReason.SESSION_RESOLVED)
