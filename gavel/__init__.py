"""
Gavel: turn-based auction negotiation engine

An auction is modelled as: Player action -> Rival turn -> Player turn ... -> Resolution
Components:
  - house: session state, turn resolution engine, multi-rival scheduler, paced driver
  - rivals: rival profiles, moods and the negotiation agent
  - experiments: policy rollouts and comparisons

Example usage:
    from gavel.config import make_auction, ScenarioConfig
    from gavel.experiments import play_auction, cautious_policy

    auction = make_auction(ScenarioConfig(n_rivals=3, seed=7))
    result = play_auction(auction, cautious_policy(), funds=30000)
    print(f"Winner: {result.winner_id} at {result.final_price}")
"""

from .config import make_auction, make_item, Auction, ScenarioConfig
from .house import (AuctionConfig, AuctionDriver, Item, PlayerContext, PlayerSkills,
                    SessionState, Transition, TurnScheduler, open_session)
from .rivals import RivalAgent, RivalArena, RivalProfile

__all__ = [
    'make_auction', 'make_item', 'Auction', 'ScenarioConfig',
    'AuctionConfig', 'AuctionDriver', 'Item', 'PlayerContext', 'PlayerSkills',
    'SessionState', 'Transition', 'TurnScheduler', 'open_session',
    'RivalAgent', 'RivalArena', 'RivalProfile',
]
