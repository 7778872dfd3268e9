"""
Constants and enumerations for the auction house engine.

This module defines the enums shared by the rival agents, the resolution
engine and the scheduler so that effects, rejections and reasons have
consistent semantics for every driver that consumes them.
"""
from enum import Enum, auto

PLAYER_ID = 'player'  # bidder id reserved for the human player
AUCTIONEER_ID = 'auctioneer'  # bark speaker id for the auctioneer

class Mood(Enum):
    """Rival mood, fixed for the whole auction.

    Attributes:
        DESPERATE: Bids big and rarely declines
        CAUTIOUS: Small bids, declines early when patience runs low
        CONFIDENT: Larger bids, moderately stubborn
        NORMAL: No modulation
    """
    DESPERATE = auto()
    CAUTIOUS = auto()
    CONFIDENT = auto()
    NORMAL = auto()

class RivalStrategy(Enum):
    """Bidding strategy of a rival.

    Attributes:
        AGGRESSIVE: Large increments, burns patience quickly
        PASSIVE: Small increments, keeps patience
        COLLECTOR: Overpays for wishlist items, passive otherwise
    """
    AGGRESSIVE = auto()
    PASSIVE = auto()
    COLLECTOR = auto()

class Tactic(Enum):
    """Player tactics with a mechanical effect beyond raising the price."""
    POWER_BID = auto()
    KICK_TIRES = auto()
    STALL = auto()

class PlayerAction(Enum):
    """Every action a player can take on their turn."""
    BID = auto()
    POWER_BID = auto()
    KICK_TIRES = auto()
    STALL = auto()
    WITHDRAW = auto()

class WithdrawReason(Enum):
    """Why a rival left the auction.

    Attributes:
        PATIENCE_EXHAUSTED: Patience reached zero
        BUDGET_EXCEEDED: Current price is above what the rival can pay
        DECLINED: Rival chose not to continue (mood or price cap)
    """
    PATIENCE_EXHAUSTED = 'patience-exhausted'
    BUDGET_EXCEEDED = 'budget-exceeded'
    DECLINED = 'declined'

class EndReason(Enum):
    """Why the auction ended.

    Attributes:
        ALL_RIVALS_DROPPED: No rival is left, the player wins
        LAST_RIVAL_STANDING: Player withdrew and a single rival remains
        FORCED: Explicit end or scripted override
        STALEMATE: Rival-only loop hit its turn ceiling
    """
    ALL_RIVALS_DROPPED = 'all-rivals-dropped'
    LAST_RIVAL_STANDING = 'last-rival-standing'
    FORCED = 'forced'
    STALEMATE = 'stalemate'

class RejectReason(Enum):
    """Which precondition failed for a rejected (no-op) action."""
    SESSION_RESOLVED = 'session-resolved'
    NOT_PLAYER_TURN = 'not-player-turn'
    PLAYER_WITHDRAWN = 'player-withdrawn'
    INSUFFICIENT_FUNDS = 'insufficient-funds'
    OPENING_BID_REQUIRED = 'opening-bid-required'
    SKILL_TOO_LOW = 'skill-too-low'
    NO_USES_LEFT = 'no-uses-left'

class EffectKind(Enum):
    """Kind of effect emitted by a transition for the driver to render."""
    BID_RECORDED = auto()
    RIVAL_DROPPED = auto()
    AUCTION_ENDED = auto()
    BARK_REQUESTED = auto()

class BarkTrigger(Enum):
    """Events that ask the driver to show a short flavor line.

    Auctioneer triggers are prefixed by who acted; rival triggers are the
    rival's own reaction.
    """
    PLAYER_BID = 'player_bid'
    PLAYER_POWER_BID = 'player_power_bid'
    RIVAL_BID = 'rival_bid'
    STALL = 'stall'
    KICK_TIRES = 'kick_tires'
    END_PLAYER_WIN = 'end_player_win'
    END_PLAYER_LOSE = 'end_player_lose'
    BID = 'bid'
    OUTBID = 'outbid'
    PATIENCE_LOW = 'patience_low'

class PatienceBand(Enum):
    """Display band of a rival's patience bar."""
    CRITICAL = 'critical'
    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'

class SchedulerPhase(Enum):
    """Scheduler state machine: IDLE -> EVALUATING(i) -> RESOLVING -> IDLE."""
    IDLE = auto()
    EVALUATING = auto()
    RESOLVING = auto()

class SchedulerMode(Enum):
    """Whether the player still takes turns.

    Attributes:
        PLAYER_PRESENT: Rivals answer, then control returns to the player
        RIVAL_ONLY: Player withdrew, rival turns repeat until one remains
    """
    PLAYER_PRESENT = auto()
    RIVAL_ONLY = auto()
