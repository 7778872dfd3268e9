"""
Gymnasium-compatible wrapper for the auction engine.

Provides a standard Gym interface for RL training:
- observation_space: Box space with observable-only auction features
- action_space: Discrete(5) over PlayerAction (bid, power bid, kick tires, stall, withdraw)
- reset(), step(), render(), close() methods

Each step applies one player action and then runs the rivals' response (or,
after a withdrawal, the rival-only finish). The reward is the surplus
(market value - hammer price) as a fraction of market value on a player win,
0 otherwise, paid once when the auction ends.

Example:
    >>> from gavel.house.gym_wrapper import AuctionGymEnv
    >>> env = AuctionGymEnv(ScenarioConfig(n_rivals=3))
    >>> obs, info = env.reset(seed=0)
    >>> obs, reward, done, truncated, info = env.step(env.action_space.sample())
"""
from __future__ import annotations
from typing import Any
import numpy as np
import gymnasium as gym
from gymnasium import spaces
from ..config import Auction, ScenarioConfig, make_auction
from .constants import PLAYER_ID, PlayerAction, Tactic
from .types import PlayerContext, PlayerSkills, Transition
from .rules import stall_uses_left
from .resolution import apply_player_action
from .math_util import ratio_features

ACTIONS = list(PlayerAction)
N_FEATURES = 9

class AuctionGymEnv(gym.Env):
    """Gymnasium environment for a single auction episode.

    Observations (float32, prices scaled by market value):
    current price, opening price, player funds, next normal bid, has any bids,
    player leading, active rival share, power bid streak, stall uses left.
    Rival patience and budget stay hidden.
    """
    metadata = {'render_modes': ['ansi']}

    def __init__(self, cfg: ScenarioConfig | None = None, skills: PlayerSkills | None = None,
                 max_steps: int = 100, rejected_penalty: float = 0.0):
        self.cfg = (cfg or ScenarioConfig()).validate()
        self.skills = skills or PlayerSkills()
        self.max_steps = max_steps
        self.rejected_penalty = rejected_penalty
        self.auction: Auction | None = None
        self._t = 0
        self._last: Transition | None = None
        self._rival_rng = np.random.default_rng(self.cfg.seed)

        self.action_space = spaces.Discrete(len(ACTIONS))
        self.observation_space = spaces.Box(low=0.0, high=np.inf, shape=(N_FEATURES,), dtype=np.float32)

    @property
    def player(self) -> PlayerContext:
        funds = self.cfg.player_funds
        return PlayerContext(funds=lambda: funds, skills=self.skills)

    def _obs(self) -> np.ndarray:
        st = self.auction.state
        inc = self.cfg.auction.bid_increment if st.has_any_bids else 0
        prices = ratio_features([st.current_price, st.opening_price, self.cfg.player_funds,
                                 st.current_price + inc], st.market_value)
        flags = np.asarray([
            float(st.has_any_bids), float(st.player_leading),
            st.n_active / max(1, len(self.auction.arena)),
            float(st.power_bid_streak), float(stall_uses_left(st, self.skills)),
        ], dtype=np.float32)
        return np.concatenate([prices, flags]).astype(np.float32)

    def _info(self, rejected=None) -> dict[str, Any]:
        st = self.auction.state
        return {'price': st.current_price, 'turn': st.turn, 'resolved': st.resolved,
                'winner_id': st.winner_id, 'rejected': rejected}

    def reset(self, seed: int | None = None, options: dict | None = None) -> tuple[np.ndarray, dict]:
        super().reset(seed=seed)
        self.auction = make_auction(self.cfg, self.np_random)
        self._rival_rng = np.random.default_rng(self.np_random.integers(2**32))
        self._t = 0
        self._last = None
        return self._obs(), self._info()

    def step(self, action: int) -> tuple[np.ndarray, float, bool, bool, dict]:
        if self.auction is None:
            raise RuntimeError("call reset() before step()")
        a = self.auction
        step = apply_player_action(a.state, a.arena, ACTIONS[int(action)], self.player, self.cfg.auction)
        a.state = step.state
        self._last = step
        self._t += 1
        if not a.state.resolved:
            if a.state.player_withdrawn:
                a.state = a.scheduler.run_rival_only(a.state, a.arena, self._rival_rng).state
            else:
                a.state = a.scheduler.run_rival_turn(a.state, a.arena, self._rival_rng).state

        st = a.state
        reward = 0.0
        if step.rejected is not None:
            reward -= self.rejected_penalty
        if st.resolved and st.winner_id == PLAYER_ID:
            reward += (st.market_value - st.current_price) / st.market_value
        truncated = not st.resolved and self._t >= self.max_steps
        return self._obs(), float(reward), st.resolved, truncated, self._info(step.rejected)

    def render(self) -> str | None:
        if self.auction is None:
            return None
        st = self.auction.state
        line = (f"t={self._t} price={st.current_price} leader={st.leading_bidder_id} "
                f"active={st.n_active} stalls={st.uses(Tactic.STALL)}")
        if st.resolved:
            line += f" winner={st.winner_id} ({st.end_reason.value})"
        return line

    def close(self) -> None:
        pass

def make_env(cfg: ScenarioConfig | None = None, **kwargs) -> AuctionGymEnv:
    return AuctionGymEnv(cfg, **kwargs)
