"""
Turn resolution engine: every rule of the auction as a transition function.

Each function takes the current SessionState, the session's rival arena and
the action's parameters, and returns a Transition holding the next state and
the ordered effects for the driver to render:

    (state, action) -> Transition(state', effects, rejected)

Player actions: bid, power_bid, kick_tires, stall, withdraw (apply_player_action dispatches)
Rival actions: apply_rival_decision, apply_rival_decisions, resolve_rival_turn
Explicit ends: end_auction, apply_override

A rejected action (wrong turn, insufficient funds, tactic gated out) returns
the very same state object with no effects and the failed precondition in
`rejected`; nothing is raised for ordinary gameplay conditions. Calls on a
resolved session are rejected the same way with SESSION_RESOLVED.

The input state is never edited: accepted transitions work on a copy. Rival
agents are mutated in place, they are records owned by the same session.

Example:
    >>> state = open_session(item, arena.ids)
    >>> step = bid(state, arena, PlayerContext(funds=lambda: 10_000))
    >>> step.state.current_price == state.opening_price
    True
"""
from __future__ import annotations
from typing import Callable, Iterable, Sequence
from .constants import (PLAYER_ID, AUCTIONEER_ID, BarkTrigger, EndReason, PlayerAction,
                        RejectReason, Tactic, WithdrawReason)
from .types import (BidDecision, Effect, PlayerContext, ResolutionOverride, SessionState,
                    Transition)
from .protocols import Arena, Negotiator
from .rules import AuctionConfig, tactic_gate
from .session import check_end, drop_rival, record_bid, resolve
from .math_util import capped_raise
from ..observability.hooks import emit_event

_DEFAULT_CFG = AuctionConfig()

def _reject(state: SessionState, reason: RejectReason, action: str) -> Transition:
    emit_event('auction.rejected', {'item_id': state.item_id, 'action': action,
                                    'reason': reason.value, 'turn': state.turn})
    return Transition(state=state, rejected=reason)

def _player_guard(state: SessionState, player: PlayerContext) -> RejectReason | None:
    if state.resolved:
        return RejectReason.SESSION_RESOLVED
    if state.player_withdrawn:
        return RejectReason.PLAYER_WITHDRAWN
    if not player.is_player_turn:
        return RejectReason.NOT_PLAYER_TURN
    return None

def _begin(state: SessionState) -> SessionState:
    st = state.copy()
    st.turn += 1
    return st

def _count(st: SessionState, tactic: Tactic) -> None:
    st.tactic_uses[tactic] = st.uses(tactic) + 1

def _pressure(st: SessionState, arena: Arena, cfg: AuctionConfig,
              mutate: Callable[[Negotiator], None]) -> list[Effect]:
    """Apply a tactic to every active rival, then re-check each one immediately."""
    effects: list[Effect] = []
    for rival_id in st.active_rival_ids:
        mutate(arena[rival_id])
    for rival_id in st.active_rival_ids:
        reason = arena[rival_id].must_withdraw(st.current_price)
        if reason is not None:
            effects += drop_rival(st, rival_id, reason)
    for rival_id in st.active_rival_ids:
        if 0 < arena[rival_id].patience < cfg.patience_low_threshold:
            effects.append(Effect.bark(rival_id, BarkTrigger.PATIENCE_LOW))
    return effects

# player actions

def bid(state: SessionState, arena: Arena, player: PlayerContext,
        cfg: AuctionConfig | None = None, override: ResolutionOverride | None = None) -> Transition:
    """Normal bid: claim the opening price, or add bid_increment to the current price."""
    cfg = cfg or _DEFAULT_CFG
    reason = _player_guard(state, player)
    if reason is not None:
        return _reject(state, reason, 'bid')
    target = state.current_price + (cfg.bid_increment if state.has_any_bids else 0)
    if player.funds() < target:
        return _reject(state, RejectReason.INSUFFICIENT_FUNDS, 'bid')

    st = _begin(state)
    previous = st.leading_bidder_id
    effects = [record_bid(st, PLAYER_ID, cfg.bid_increment),
               Effect.bark(AUCTIONEER_ID, BarkTrigger.PLAYER_BID)]
    st.power_bid_streak = 0
    if previous is not None and previous != PLAYER_ID and st.is_active(previous):
        effects.append(Effect.bark(previous, BarkTrigger.OUTBID))
    effects += check_end(st, override)
    return Transition(st, effects)

def power_bid(state: SessionState, arena: Arena, player: PlayerContext,
              cfg: AuctionConfig | None = None, override: ResolutionOverride | None = None) -> Transition:
    """Raise by power_bid_increment and cost every active rival patience.

    As the very first action of the auction it records the opening claim and
    then the power raise on top of it.
    """
    cfg = cfg or _DEFAULT_CFG
    reason = _player_guard(state, player)
    if reason is not None:
        return _reject(state, reason, 'power_bid')
    target = state.current_price + cfg.power_bid_increment
    if player.funds() < target:
        return _reject(state, RejectReason.INSUFFICIENT_FUNDS, 'power_bid')

    st = _begin(state)
    effects: list[Effect] = []
    if not st.has_any_bids:
        effects.append(record_bid(st, PLAYER_ID, 0))
    effects.append(record_bid(st, PLAYER_ID, cfg.power_bid_increment))
    effects.append(Effect.bark(AUCTIONEER_ID, BarkTrigger.PLAYER_POWER_BID))
    st.power_bid_streak += 1
    _count(st, Tactic.POWER_BID)
    penalty = cfg.power_bid_patience_penalty
    effects += _pressure(st, arena, cfg, lambda agent: agent.on_power_bid(penalty))
    effects += check_end(st, override)
    return Transition(st, effects)

def kick_tires(state: SessionState, arena: Arena, player: PlayerContext,
               cfg: AuctionConfig | None = None, override: ResolutionOverride | None = None,
               budget_reduction: int | None = None) -> Transition:
    """Permanently cut every active rival's budget; rivals priced out drop at once.

    Raises:
        ValueError: If budget_reduction is negative
    """
    cfg = cfg or _DEFAULT_CFG
    reason = _player_guard(state, player)
    if reason is not None:
        return _reject(state, reason, 'kick_tires')
    reason = tactic_gate(Tactic.KICK_TIRES, state, player.skills, cfg)
    if reason is not None:
        return _reject(state, reason, 'kick_tires')
    reduction = cfg.kick_tires_budget_reduction if budget_reduction is None else budget_reduction
    if reduction < 0:
        raise ValueError(f"budget_reduction must be non-negative, got {reduction}")

    st = _begin(state)
    _count(st, Tactic.KICK_TIRES)
    st.power_bid_streak = 0
    effects = [Effect.bark(AUCTIONEER_ID, BarkTrigger.KICK_TIRES)]
    effects += _pressure(st, arena, cfg, lambda agent: agent.on_kick_tires(reduction))
    effects += check_end(st, override)
    return Transition(st, effects)

def stall(state: SessionState, arena: Arena, player: PlayerContext,
          cfg: AuctionConfig | None = None, override: ResolutionOverride | None = None) -> Transition:
    """Cost every active rival patience; limited to `tongue` uses per auction."""
    cfg = cfg or _DEFAULT_CFG
    reason = _player_guard(state, player)
    if reason is not None:
        return _reject(state, reason, 'stall')
    reason = tactic_gate(Tactic.STALL, state, player.skills, cfg)
    if reason is not None:
        return _reject(state, reason, 'stall')

    st = _begin(state)
    _count(st, Tactic.STALL)
    st.power_bid_streak = 0
    effects = [Effect.bark(AUCTIONEER_ID, BarkTrigger.STALL)]
    penalty = cfg.stall_patience_penalty
    effects += _pressure(st, arena, cfg, lambda agent: agent.on_stall(penalty))
    effects += check_end(st, override)
    return Transition(st, effects)

def withdraw(state: SessionState, arena: Arena, player: PlayerContext,
             cfg: AuctionConfig | None = None, override: ResolutionOverride | None = None) -> Transition:
    """Leave the auction for good and hand it to the rivals.

    A leading player's claim is released so rivals reopen at the current
    price with no leader.
    """
    reason = _player_guard(state, player)
    if reason is not None:
        return _reject(state, reason, 'withdraw')
    st = _begin(state)
    st.player_withdrawn = True
    st.power_bid_streak = 0
    if st.player_leading:
        st.leading_bidder_id = None
        st.has_any_bids = False
    emit_event('player.withdrawn', {'item_id': st.item_id, 'price': st.current_price,
                                    'active_rivals': list(st.active_rival_ids)})
    return Transition(st, check_end(st, override))

PLAYER_ACTIONS: dict[PlayerAction, Callable[..., Transition]] = {
    PlayerAction.BID: bid,
    PlayerAction.POWER_BID: power_bid,
    PlayerAction.KICK_TIRES: kick_tires,
    PlayerAction.STALL: stall,
    PlayerAction.WITHDRAW: withdraw,
}

def apply_player_action(state: SessionState, arena: Arena, action: PlayerAction, player: PlayerContext,
                        cfg: AuctionConfig | None = None,
                        override: ResolutionOverride | None = None) -> Transition:
    return PLAYER_ACTIONS[PlayerAction(action)](state, arena, player, cfg, override)

# rival actions

def apply_rival_decision(state: SessionState, arena: Arena, rival_id: str, decision: BidDecision,
                         cfg: AuctionConfig | None = None,
                         override: ResolutionOverride | None = None) -> Transition:
    """Apply one rival's decision against the live state.

    Inactive rivals are skipped and the current leader holds (both return the
    state unchanged). A bid that is no longer affordable at the live price, or
    that cannot raise it, drops the rival instead. After the player withdrew,
    raises are clamped to the rival-only cap.
    """
    cfg = cfg or _DEFAULT_CFG
    if state.resolved:
        return _reject(state, RejectReason.SESSION_RESOLVED, 'rival_decision')
    if rival_id not in arena:
        raise KeyError(f"Rival {rival_id!r} is not part of this session's arena")
    if not state.is_active(rival_id) or state.leading_bidder_id == rival_id:
        return Transition(state)

    agent = arena[rival_id]
    st = _begin(state)
    if not decision.should_bid:
        effects = drop_rival(st, rival_id, decision.reason or WithdrawReason.DECLINED)
    else:
        opening = not st.has_any_bids
        amount = decision.amount
        if st.player_withdrawn and not opening:
            amount = capped_raise(st.current_price, amount, st.rival_only_cap)
        target = st.current_price + (0 if opening else amount)
        if target > agent.budget:
            effects = drop_rival(st, rival_id, WithdrawReason.BUDGET_EXCEEDED)
        elif not opening and amount <= 0:
            capped = st.player_withdrawn and decision.amount > 0
            effects = drop_rival(st, rival_id, WithdrawReason.DECLINED if capped
                                 else WithdrawReason.BUDGET_EXCEEDED)
        else:
            effects = [record_bid(st, rival_id, amount),
                       Effect.bark(AUCTIONEER_ID, BarkTrigger.RIVAL_BID),
                       Effect.bark(rival_id, BarkTrigger.BID)]
            agent.on_round_passed()
    effects += check_end(st, override)
    return Transition(st, effects)

def apply_rival_decisions(state: SessionState, arena: Arena,
                          decisions: Iterable[tuple[str, BidDecision]],
                          cfg: AuctionConfig | None = None,
                          override: ResolutionOverride | None = None) -> Transition:
    """Apply a precomputed batch of decisions in order, re-validating each one."""
    if state.resolved:
        return _reject(state, RejectReason.SESSION_RESOLVED, 'rival_decisions')
    effects: list[Effect] = []
    for rival_id, decision in decisions:
        step = apply_rival_decision(state, arena, rival_id, decision, cfg, override)
        state = step.state
        effects += step.effects
        if state.resolved:
            break
    return Transition(state, effects)

def resolve_rival_turn(state: SessionState, arena: Arena, order: Sequence[str],
                       cfg: AuctionConfig | None = None,
                       override: ResolutionOverride | None = None) -> Transition:
    """One rival turn: each rival in `order` decides against the live price.

    A later rival sees the bids of earlier ones in the same turn; ids removed
    earlier in the pass are skipped.
    """
    if state.resolved:
        return _reject(state, RejectReason.SESSION_RESOLVED, 'rival_turn')
    effects: list[Effect] = []
    for rival_id in order:
        if not state.is_active(rival_id) or state.leading_bidder_id == rival_id:
            continue
        decision = arena[rival_id].decide_bid(state.current_price)
        step = apply_rival_decision(state, arena, rival_id, decision, cfg, override)
        state = step.state
        effects += step.effects
        if state.resolved:
            break
    return Transition(state, effects)

# explicit ends

def end_auction(state: SessionState, winner_id: str,
                reason: EndReason = EndReason.FORCED) -> Transition:
    """Caller-requested end with a given winner."""
    if state.resolved:
        return _reject(state, RejectReason.SESSION_RESOLVED, 'end_auction')
    st = _begin(state)
    return Transition(st, resolve(st, winner_id, reason))

def apply_override(state: SessionState, override: ResolutionOverride | None) -> Transition:
    """Force the scripted winner now, only while the override is declared active."""
    if override is None or not override.active:
        return Transition(state)
    if state.resolved:
        return _reject(state, RejectReason.SESSION_RESOLVED, 'override')
    emit_event('auction.override', {'item_id': state.item_id, 'winner_id': override.winner_id,
                                    'note': override.note})
    return end_auction(state, override.winner_id, EndReason.FORCED)
