from .constants import (PLAYER_ID, AUCTIONEER_ID, Mood, RivalStrategy, Tactic, PlayerAction,
                        WithdrawReason, EndReason, RejectReason, EffectKind, BarkTrigger,
                        PatienceBand, SchedulerPhase, SchedulerMode)
from .types import (BidderId, RivalId, Item, BidDecision, BidRecord, PlayerSkills, PlayerContext,
                    Effect, ResolutionOverride, SessionState, Transition, AuctionOutcome)
from .protocols import FundsAccessor, Negotiator, Arena, TimerHandle, TurnTimer, EffectSink
from .rules import AuctionConfig, tactic_gate, stall_uses_left
from .math_util import patience_band
from .session import open_session
from .resolution import (bid, power_bid, kick_tires, stall, withdraw, apply_player_action,
                         apply_rival_decision, apply_rival_decisions, resolve_rival_turn,
                         end_auction, apply_override)
from .scheduler import TurnScheduler, compute_turn_order, scheduler_mode
from .driver import AuctionDriver, AsyncioTurnTimer, PacingConfig

__all__ = [
    'PLAYER_ID', 'AUCTIONEER_ID', 'Mood', 'RivalStrategy', 'Tactic', 'PlayerAction',
    'WithdrawReason', 'EndReason', 'RejectReason', 'EffectKind', 'BarkTrigger',
    'PatienceBand', 'SchedulerPhase', 'SchedulerMode',
    'BidderId', 'RivalId', 'Item', 'BidDecision', 'BidRecord', 'PlayerSkills', 'PlayerContext',
    'Effect', 'ResolutionOverride', 'SessionState', 'Transition', 'AuctionOutcome',
    'FundsAccessor', 'Negotiator', 'Arena', 'TimerHandle', 'TurnTimer', 'EffectSink',
    'AuctionConfig', 'tactic_gate', 'stall_uses_left', 'patience_band', 'open_session',
    'bid', 'power_bid', 'kick_tires', 'stall', 'withdraw', 'apply_player_action',
    'apply_rival_decision', 'apply_rival_decisions', 'resolve_rival_turn',
    'end_auction', 'apply_override',
    'TurnScheduler', 'compute_turn_order', 'scheduler_mode',
    'AuctionDriver', 'AsyncioTurnTimer', 'PacingConfig',
]
