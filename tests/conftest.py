"""Shared fixtures for the auction engine tests."""

import pytest

from gavel.house import AuctionConfig, Item, PlayerContext, PlayerSkills, open_session
from gavel.house.constants import RivalStrategy
from gavel.rivals import RivalAgent, RivalArena


def make_agent(rival_id, patience=60, budget=20_000, strategy=RivalStrategy.PASSIVE, **kwargs):
    return RivalAgent(rival_id, patience=patience, budget=budget, strategy=strategy, **kwargs)


def make_player(funds=50_000, eye=2, tongue=2, is_player_turn=True):
    return PlayerContext(
        funds=lambda: funds,
        skills=PlayerSkills(eye=eye, tongue=tongue),
        is_player_turn=is_player_turn,
    )


@pytest.fixture
def cfg():
    return AuctionConfig()


@pytest.fixture
def item():
    # opening floor(12000 * 0.65) = 7800, rival-only cap floor(12000 * 1.05) = 12600
    return Item(id="car_001", name="Test Coupe", market_value=12_000, tags=("JDM", "Turbo"))


@pytest.fixture
def duel(item, cfg):
    """Two passive rivals with opening price 8000."""
    arena = RivalArena([make_agent("rival_a"), make_agent("rival_b")])
    state = open_session(item, arena.ids, cfg, opening_price=8000)
    return state, arena


@pytest.fixture
def player():
    return make_player()
