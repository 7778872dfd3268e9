#!/usr/bin/env python
"""Example script demonstrating the gavel auction engine"""
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

import numpy as np
from gavel.config import make_auction, ScenarioConfig
from gavel.house import PlayerSkills, patience_band
from gavel.experiments.eval import (play_auction, compare_policies, cautious_policy,
                                    aggressive_policy, tactician_policy, random_policy)

def demo_single_auction():
    print("=" * 60)
    print("SINGLE AUCTION DEMO")
    print("=" * 60)

    rng = np.random.default_rng(7)
    auction = make_auction(ScenarioConfig(n_rivals=3), rng)
    item = auction.item
    print(f"Item: {item.name} {item.tags} market={item.market_value} "
          f"opening={auction.state.opening_price}")
    for rid, agent in auction.arena.items():
        print(f"  {rid}: {agent.strategy.name:10s} {agent.mood.name:9s} "
              f"patience={agent.patience} ({patience_band(agent.patience).value})")

    result = play_auction(auction, tactician_policy(), funds=40000,
                          skills=PlayerSkills(eye=2, tongue=2), rng=rng)
    print(f"\nWinner: {result.winner_id} at {result.final_price} ({result.end_reason.value})")
    print(f"  Player turns: {result.turns}, rejected: {result.rejected_actions}")
    print(f"  Surplus: {result.surplus}")
    print(f"  Price path: {result.prices[:12]}...")

def demo_policies():
    print("\n" + "=" * 60)
    print("POLICY COMPARISON DEMO")
    print("=" * 60)

    policies = {
        'cautious_90%': cautious_policy(0.9),
        'aggressive_110%': aggressive_policy(1.1),
        'tactician': tactician_policy(1.0),
        'random': random_policy(np.random.default_rng(0)),
    }
    results = compare_policies(policies, ScenarioConfig(n_rivals=3), n_runs=20,
                               skills=PlayerSkills(eye=2, tongue=3))

    print("\nPolicy Comparison (20 auctions):")
    print("-" * 50)
    for name, r in sorted(results.items(), key=lambda x: -x[1]['mean_surplus']):
        print(f"{name:16s} win={r['win_rate']:.2f} surplus={r['mean_surplus']:8.1f} "
              f"+/- {r['std_surplus']:7.1f}  price={r['mean_price']:8.1f}")

if __name__ == '__main__':
    demo_single_auction()
    demo_policies()
