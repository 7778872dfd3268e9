"""Tests for the paced auction driver."""

import asyncio

import numpy as np
import pytest

from gavel.house import (AsyncioTurnTimer, AuctionDriver, PacingConfig, PlayerSkills,
                         ResolutionOverride, TurnScheduler, open_session)
from gavel.house.constants import EffectKind, EndReason, RejectReason
from gavel.rivals import RivalArena

from conftest import make_agent


class FakeHandle:
    def __init__(self, delay_s, fn):
        self.delay_s = delay_s
        self.fn = fn
        self.cancelled = False
        self.fired = False

    def cancel(self):
        self.cancelled = True


class FakeTimer:
    """Manual timer: nothing runs until fire_next()."""

    def __init__(self):
        self.handles = []

    def call_later(self, delay_s, fn):
        handle = FakeHandle(delay_s, fn)
        self.handles.append(handle)
        return handle

    @property
    def live(self):
        return [h for h in self.handles if not h.cancelled and not h.fired]

    def fire_next(self):
        handle = self.live[0]
        handle.fired = True
        handle.fn()
        return handle


@pytest.fixture
def wallet():
    return {"cash": 50_000}


@pytest.fixture
def make_driver(duel, wallet):
    def build(**kwargs):
        state, arena = duel
        kwargs.setdefault("rng", np.random.default_rng(0))
        kwargs.setdefault("skills", PlayerSkills(eye=2, tongue=2))
        return AuctionDriver(state, arena, funds=lambda: wallet["cash"], timer=FakeTimer(), **kwargs)
    return build


class TestPacing:
    def test_accepted_action_hands_turn_to_rivals(self, make_driver):
        driver = make_driver()
        step = driver.bid()
        assert step.accepted
        assert not driver.is_player_turn
        assert [h.delay_s for h in driver.timer.live] == [0.65]

        driver.timer.fire_next()
        assert driver.state.leading_bidder_id != "player"
        assert [h.delay_s for h in driver.timer.live] == [0.725]
        assert not driver.is_player_turn

        driver.timer.fire_next()
        assert driver.is_player_turn
        assert driver.timer.live == []

    def test_action_out_of_turn_rejected(self, make_driver):
        driver = make_driver()
        driver.bid()
        step = driver.bid()
        assert step.rejected == RejectReason.NOT_PLAYER_TURN
        assert driver.last_rejected == RejectReason.NOT_PLAYER_TURN
        assert len(driver.timer.live) == 1

    def test_rejected_action_schedules_nothing(self, make_driver, wallet):
        wallet["cash"] = 0
        driver = make_driver()
        assert driver.bid().rejected == RejectReason.INSUFFICIENT_FUNDS
        assert driver.is_player_turn
        assert driver.timer.handles == []

    def test_custom_pacing(self, make_driver):
        driver = make_driver(pacing=PacingConfig(next_turn_delay_s=0.1, player_turn_delay_s=0.2))
        driver.bid()
        assert driver.timer.live[0].delay_s == 0.1

    def test_negative_delay_rejected(self, make_driver):
        with pytest.raises(ValueError):
            make_driver(pacing=PacingConfig(next_turn_delay_s=-1))


class TestTeardown:
    def test_close_cancels_pending_turn(self, make_driver):
        driver = make_driver()
        driver.bid()
        pending = driver.timer.live[0]
        driver.close()
        assert pending.cancelled
        assert not driver.has_pending_turn

        price = driver.state.current_price
        pending.fn()
        assert driver.state.current_price == price

    def test_end_cancels_pending_turn(self, make_driver):
        driver = make_driver()
        driver.bid()
        pending = driver.timer.live[0]
        step = driver.end("player")
        assert step.state.resolved
        assert pending.cancelled
        assert driver.timer.live == []

    def test_active_override_ends_immediately(self, make_driver):
        driver = make_driver()
        driver.bid()
        driver.set_override(ResolutionOverride(winner_id="rival_a", active=True))
        assert driver.resolved
        assert driver.state.end_reason == EndReason.FORCED
        assert driver.timer.live == []

    def test_inactive_override_keeps_playing(self, make_driver):
        driver = make_driver()
        step = driver.set_override(ResolutionOverride(winner_id="player"))
        assert not driver.resolved
        assert step.accepted


class TestRivalOnly:
    def test_withdrawal_runs_rivals_to_the_end(self, make_driver):
        driver = make_driver()
        driver.withdraw()
        while driver.timer.live:
            assert len(driver.timer.live) == 1
            handle = driver.timer.fire_next()
            assert handle.delay_s == 0.65
        assert driver.resolved
        assert driver.state.end_reason == EndReason.LAST_RIVAL_STANDING
        outcome = driver.outcome()
        assert not outcome.player_won
        assert outcome.affordable

    def test_stalemate_ceiling(self, item, wallet):
        arena = RivalArena([make_agent("a", patience=100), make_agent("b", patience=100)])
        state = open_session(item, arena.ids, opening_price=8000)
        driver = AuctionDriver(state, arena, funds=lambda: wallet["cash"], timer=FakeTimer(),
                               scheduler=TurnScheduler(max_rival_only_turns=1),
                               rng=np.random.default_rng(0))
        driver.withdraw()
        driver.timer.fire_next()
        driver.timer.fire_next()
        assert driver.resolved
        assert driver.state.end_reason == EndReason.STALEMATE


class TestOutcome:
    def test_none_while_running(self, make_driver):
        assert make_driver().outcome() is None

    def test_affordability_checked_at_settlement(self, make_driver, wallet):
        driver = make_driver()
        driver.bid()
        driver.end("player")
        assert driver.outcome().player_won
        assert driver.outcome().affordable
        wallet["cash"] = 100
        outcome = driver.outcome()
        assert outcome.price == 8000
        assert not outcome.affordable

    def test_effect_sink(self, make_driver):
        received = []
        driver = make_driver(on_effects=received.append)
        driver.bid()
        assert received[0][0].kind == EffectKind.BID_RECORDED
        assert driver.effect_log == received[0]


class TestAsyncioTimer:
    def test_runs_on_event_loop(self, duel):
        state, arena = duel

        async def play():
            driver = AuctionDriver(state, arena, funds=lambda: 50_000, timer=AsyncioTurnTimer(),
                                   pacing=PacingConfig(0.0, 0.0), rng=np.random.default_rng(0))
            driver.bid()
            await asyncio.sleep(0.05)
            return driver

        driver = asyncio.run(play())
        assert driver.is_player_turn or driver.resolved
        assert driver.state.current_price > 8000
