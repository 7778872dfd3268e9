from .eval import (play_auction, AuctionRollout, PlayerPolicy, compare_policies,
                   cautious_policy, aggressive_policy, tactician_policy, random_policy)

__all__ = [
    'play_auction', 'AuctionRollout', 'PlayerPolicy', 'compare_policies',
    'cautious_policy', 'aggressive_policy', 'tactician_policy', 'random_policy',
]
