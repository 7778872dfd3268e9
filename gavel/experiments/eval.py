"""
Evaluation utilities for player policies.

This module provides:
- play_auction: Run a player policy against the rivals of one auction, unpaced
- compare_policies: Compare multiple policies over seeded auctions
- Baseline policies: cautious, aggressive, tactician, random

Policies only see what a player at the auction could see (the public session
state and their own context), never the rivals' hidden patience or budget.

Example:
    >>> from gavel.config import make_auction, ScenarioConfig
    >>> from gavel.experiments.eval import play_auction, cautious_policy
    >>> auction = make_auction(ScenarioConfig(), np.random.default_rng(0))
    >>> result = play_auction(auction, cautious_policy(), funds=50000)
    >>> print(f"Won: {result.player_won} at {result.final_price}")
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable
import numpy as np
from ..config import Auction, ScenarioConfig, make_auction
from ..house.constants import PLAYER_ID, EndReason, PlayerAction, Tactic
from ..house.types import Effect, PlayerContext, PlayerSkills, ResolutionOverride, SessionState
from ..house.rules import AuctionConfig, tactic_gate
from ..house.resolution import apply_player_action

# Policy signature: takes (public state, player context) -> action
PlayerPolicy = Callable[[SessionState, PlayerContext], PlayerAction]

@dataclass
class AuctionRollout:
    """Results from playing one auction.

    Attributes:
        winner_id: Winning bidder
        final_price: Hammer price
        end_reason: Why the auction ended
        player_won: Whether the player won
        surplus: market_value - final_price on a player win, else 0
        turns: Player turns taken
        rejected_actions: Player actions the engine rejected
        prices: Price after every player and rival turn
        actions: Player actions in order
        effects: Every effect in order
    """
    winner_id: str
    final_price: int
    end_reason: EndReason
    player_won: bool
    surplus: int
    turns: int
    rejected_actions: int
    prices: list[int] = field(default_factory=list)
    actions: list[PlayerAction] = field(default_factory=list)
    effects: list[Effect] = field(default_factory=list)

def play_auction(auction: Auction, policy: PlayerPolicy, funds: int | None = None,
                 skills: PlayerSkills | None = None, rng: np.random.Generator | None = None,
                 max_player_turns: int = 100, override: ResolutionOverride | None = None) -> AuctionRollout:
    """Alternate player and rival turns until the auction resolves.

    A rejected action passes the turn to the rivals. Once the player withdraws
    (or runs out of turns, which withdraws them) the scheduler finishes the
    auction in rival-only mode.

    Args:
        auction: Fresh auction from make_auction
        policy: Function (state, player) -> action
        funds: Player money (defaults to the scenario's player_funds)
        skills: Player skill levels
        rng: Random generator for rival turn order
        max_player_turns: Player turns before a forced withdrawal
        override: Scripted outcome passed through to the engine

    Returns:
        AuctionRollout with the settlement and the turn-by-turn trace
    """
    cfg = auction.cfg.auction
    budget = auction.cfg.player_funds if funds is None else funds
    player = PlayerContext(funds=lambda: budget, skills=skills or PlayerSkills())
    rng = rng or np.random.default_rng()
    state, arena, scheduler = auction.state, auction.arena, auction.scheduler
    prices, actions, effects = [], [], []
    turns = rejected = 0

    while not state.resolved:
        if state.player_withdrawn:
            step = scheduler.run_rival_only(state, arena, rng, override)
            state = step.state
            effects += step.effects
            prices.append(state.current_price)
            break

        action = policy(state, player) if turns < max_player_turns else PlayerAction.WITHDRAW
        turns += 1
        actions.append(action)
        step = apply_player_action(state, arena, action, player, cfg, override)
        if step.rejected is not None:
            rejected += 1
        state = step.state
        effects += step.effects
        prices.append(state.current_price)
        if state.resolved or state.player_withdrawn:
            continue

        step = scheduler.run_rival_turn(state, arena, rng, override)
        state = step.state
        effects += step.effects
        prices.append(state.current_price)

    player_won = state.winner_id == PLAYER_ID
    return AuctionRollout(
        winner_id=state.winner_id, final_price=state.current_price, end_reason=state.end_reason,
        player_won=player_won,
        surplus=state.market_value - state.current_price if player_won else 0,
        turns=turns, rejected_actions=rejected, prices=prices, actions=actions, effects=effects)

# Baseline policies for comparison

def _next_bid(state: SessionState, cfg: AuctionConfig) -> int:
    return state.current_price + (cfg.bid_increment if state.has_any_bids else 0)

def cautious_policy(limit_ratio: float = 0.9, cfg: AuctionConfig | None = None) -> PlayerPolicy:
    """Policy that bids normally up to limit_ratio * market value, then walks away."""
    cfg = cfg or AuctionConfig()
    def policy(state: SessionState, player: PlayerContext) -> PlayerAction:
        target = _next_bid(state, cfg)
        if target > state.market_value * limit_ratio or target > player.funds():
            return PlayerAction.WITHDRAW
        return PlayerAction.BID
    return policy

def aggressive_policy(limit_ratio: float = 1.1, cfg: AuctionConfig | None = None) -> PlayerPolicy:
    """Policy that power bids while it can stay under the limit, then bids normally."""
    cfg = cfg or AuctionConfig()
    def policy(state: SessionState, player: PlayerContext) -> PlayerAction:
        limit = min(state.market_value * limit_ratio, player.funds())
        if state.current_price + cfg.power_bid_increment <= limit:
            return PlayerAction.POWER_BID
        if _next_bid(state, cfg) <= limit:
            return PlayerAction.BID
        return PlayerAction.WITHDRAW
    return policy

def tactician_policy(limit_ratio: float = 1.0, cfg: AuctionConfig | None = None) -> PlayerPolicy:
    """Policy that opens, then spends its kick tires and stalls before bidding on."""
    cfg = cfg or AuctionConfig()
    def policy(state: SessionState, player: PlayerContext) -> PlayerAction:
        if state.has_any_bids:
            if state.uses(Tactic.KICK_TIRES) == 0 and tactic_gate(
                    Tactic.KICK_TIRES, state, player.skills, cfg) is None:
                return PlayerAction.KICK_TIRES
            if tactic_gate(Tactic.STALL, state, player.skills, cfg) is None:
                return PlayerAction.STALL
        target = _next_bid(state, cfg)
        if target > state.market_value * limit_ratio or target > player.funds():
            return PlayerAction.WITHDRAW
        return PlayerAction.BID
    return policy

def random_policy(rng: np.random.Generator | None = None,
                  withdraw_prob: float = 0.05) -> PlayerPolicy:
    """Policy that picks uniformly among the non-withdraw actions."""
    rng = rng or np.random.default_rng()
    choices = [a for a in PlayerAction if a != PlayerAction.WITHDRAW]
    def policy(state: SessionState, player: PlayerContext) -> PlayerAction:
        if rng.random() < withdraw_prob:
            return PlayerAction.WITHDRAW
        return choices[int(rng.integers(len(choices)))]
    return policy

def compare_policies(policies: dict[str, PlayerPolicy], cfg: ScenarioConfig | None = None,
                     n_runs: int = 5, seed: int = 42,
                     skills: PlayerSkills | None = None) -> dict[str, dict]:
    """Compare multiple policies with statistical summary.

    Each run rebuilds the auction from seed + i, so every policy faces the
    same items and rivals.

    Args:
        policies: Dict mapping policy names to policy functions
        cfg: Scenario to generate auctions from
        n_runs: Number of auctions per policy (different seeds)
        seed: Base random seed
        skills: Player skill levels

    Returns:
        Dict mapping policy names to result dicts with mean/std statistics
    """
    cfg = cfg or ScenarioConfig()
    results = {}
    for name, policy in policies.items():
        run_results = []
        for i in range(n_runs):
            rng = np.random.default_rng(seed + i)
            auction = make_auction(cfg, rng)
            run_results.append(play_auction(auction, policy, skills=skills, rng=rng))

        won = [r for r in run_results if r.player_won]
        results[name] = {
            'win_rate': len(won) / n_runs,
            'mean_price': float(np.mean([r.final_price for r in won])) if won else 0.0,
            'mean_surplus': float(np.mean([r.surplus for r in run_results])),
            'std_surplus': float(np.std([r.surplus for r in run_results])),
            'mean_turns': float(np.mean([r.turns for r in run_results])),
        }
    return results
