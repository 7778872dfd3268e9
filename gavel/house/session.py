"""
Auction session construction and the primitive edits transitions are built from.

The resolution engine never edits a state handed to it: it takes a working
copy (SessionState.copy), applies the primitives below to that copy, and
returns it. Each primitive returns the effects it produced so the caller can
keep them in order.

Primitives:
    record_bid: Claim the opening or raise the price
    drop_rival: Permanently remove a rival from the active set
    check_end: Apply the natural end conditions (and an active override)
    resolve: Latch the winner
"""
from __future__ import annotations
from typing import Sequence
from .constants import PLAYER_ID, AUCTIONEER_ID, BarkTrigger, EndReason, WithdrawReason
from .types import BidderId, BidRecord, Effect, Item, ResolutionOverride, SessionState
from .rules import AuctionConfig
from .math_util import floor_scale
from ..observability.hooks import emit_event

def open_session(item: Item, rival_ids: Sequence[str], cfg: AuctionConfig | None = None,
                 opening_price: int | None = None) -> SessionState:
    """Create the session for one auction.

    Args:
        item: Item under auction
        rival_ids: Invited rivals, in invitation order
        cfg: Auction rules (defaults if None)
        opening_price: Market-adjusted opening price; defaults to
            market_value * starting_bid_multiplier

    Returns:
        Fresh SessionState with no bids and every rival active
    """
    cfg = cfg or AuctionConfig()
    if item.market_value <= 0:
        raise ValueError(f"Item {item.id} needs a positive market value")
    if not rival_ids:
        raise ValueError("An auction needs at least one rival")
    if len(set(rival_ids)) != len(rival_ids) or PLAYER_ID in rival_ids:
        raise ValueError(f"Rival ids must be unique and not {PLAYER_ID!r}")

    opening = opening_price if opening_price is not None else floor_scale(
        item.market_value, cfg.starting_bid_multiplier)
    state = SessionState(
        item_id=item.id, opening_price=opening, market_value=item.market_value,
        rival_only_cap=floor_scale(item.market_value, cfg.rival_only_cap_ratio),
        current_price=opening, active_rival_ids=tuple(rival_ids),
        bid_history_limit=cfg.bid_history_limit)
    emit_event('auction.opened', {'item_id': item.id, 'opening_price': opening,
                                  'rivals': list(rival_ids)})
    return state

def record_bid(st: SessionState, bidder_id: str, raise_by: int) -> Effect:
    """Record a bid on a working copy.

    The first bid of the auction claims exactly the current (opening) price
    and ignores raise_by; later bids add raise_by.
    """
    opening = not st.has_any_bids
    amount = 0 if opening else raise_by
    st.current_price += amount
    st.has_any_bids = True
    st.leading_bidder_id = BidderId(bidder_id)
    st.bid_history = (st.bid_history + (BidRecord(BidderId(bidder_id), st.current_price, st.turn),)
                      )[-st.bid_history_limit:]
    return Effect.bid_recorded(bidder_id, st.current_price, amount, opening=opening)

def drop_rival(st: SessionState, rival_id: str, reason: WithdrawReason) -> list[Effect]:
    """Remove a rival for good; a dropped leader leaves bidding open at the current price."""
    if rival_id not in st.active_rival_ids:
        return []
    st.active_rival_ids = tuple(r for r in st.active_rival_ids if r != rival_id)
    st.withdrawn_rival_ids = st.withdrawn_rival_ids + (rival_id,)
    st.withdraw_reasons[rival_id] = reason
    if st.leading_bidder_id == rival_id:
        st.leading_bidder_id = None
        st.has_any_bids = False
    emit_event('rival.dropped', {'item_id': st.item_id, 'rival_id': rival_id,
                                 'reason': reason.value, 'price': st.current_price})
    trigger = BarkTrigger.PATIENCE_LOW if reason == WithdrawReason.PATIENCE_EXHAUSTED else BarkTrigger.OUTBID
    return [Effect.rival_dropped(rival_id, reason), Effect.bark(rival_id, trigger)]

def resolve(st: SessionState, winner_id: str, reason: EndReason) -> list[Effect]:
    st.resolved = True
    st.winner_id = BidderId(winner_id)
    st.end_reason = reason
    st.leading_bidder_id = BidderId(winner_id)
    emit_event('auction.ended', st.to_dict())
    trigger = BarkTrigger.END_PLAYER_WIN if winner_id == PLAYER_ID else BarkTrigger.END_PLAYER_LOSE
    return [Effect.auction_ended(winner_id, st.current_price, reason), Effect.bark(AUCTIONEER_ID, trigger)]

def natural_winner(st: SessionState) -> tuple[str, EndReason] | None:
    """Winner implied by the current state, if the auction is over"""
    if not st.active_rival_ids:
        return PLAYER_ID, EndReason.ALL_RIVALS_DROPPED
    if st.player_withdrawn and len(st.active_rival_ids) == 1:
        return st.active_rival_ids[0], EndReason.LAST_RIVAL_STANDING
    return None

def check_end(st: SessionState, override: ResolutionOverride | None = None) -> list[Effect]:
    """Resolve the working copy if an end condition holds.

    An active override replaces the natural winner; an inactive one is ignored.
    """
    if st.resolved:
        return []
    outcome = natural_winner(st)
    if outcome is None:
        return []
    winner_id, reason = outcome
    if override is not None and override.active and override.winner_id != winner_id:
        winner_id, reason = override.winner_id, EndReason.FORCED
    return resolve(st, winner_id, reason)
