"""Tests for the turn resolution engine."""

import numpy as np
import pytest

from gavel.config import ScenarioConfig, make_auction
from gavel.experiments import random_policy
from gavel.house import (AuctionConfig, BidDecision, ResolutionOverride, apply_override,
                         apply_player_action, apply_rival_decision, apply_rival_decisions, bid,
                         end_auction, kick_tires, open_session, power_bid, resolve_rival_turn, stall,
                         withdraw)
from gavel.house.constants import (AUCTIONEER_ID, BarkTrigger, EffectKind, EndReason, PlayerAction,
                                   RejectReason, Tactic, WithdrawReason)
from gavel.rivals import RivalArena
from gavel.observability import EventRecorder, use_logger

from conftest import make_agent, make_player


def opened(state, arena, player=None):
    """State after the player claimed the opening price."""
    return bid(state, arena, player or make_player()).state


def barks(effects):
    return [(e.speaker, e.trigger) for e in effects if e.kind == EffectKind.BARK_REQUESTED]


class TestBid:
    def test_first_bid_claims_opening_price(self, duel, player):
        state, arena = duel
        step = bid(state, arena, player)
        assert step.accepted
        assert step.state.current_price == 8000
        assert step.state.has_any_bids
        assert step.state.leading_bidder_id == "player"
        assert step.state.turn == 1
        assert [e.kind for e in step.effects] == [EffectKind.BID_RECORDED, EffectKind.BARK_REQUESTED]

    def test_input_state_untouched(self, duel, player):
        state, arena = duel
        bid(state, arena, player)
        assert state.current_price == 8000
        assert not state.has_any_bids
        assert state.turn == 0

    def test_outbidding_a_rival(self, duel, player):
        state, arena = duel
        state = opened(state, arena)
        state = apply_rival_decision(state, arena, "rival_a", BidDecision.raise_by(100)).state
        step = bid(state, arena, player)
        assert step.state.current_price == 8300
        assert barks(step.effects) == [(AUCTIONEER_ID, BarkTrigger.PLAYER_BID),
                                       ("rival_a", BarkTrigger.OUTBID)]

    def test_insufficient_funds_is_noop(self, duel):
        state, arena = duel
        step = bid(state, arena, make_player(funds=7999))
        assert step.rejected == RejectReason.INSUFFICIENT_FUNDS
        assert step.state is state
        assert step.effects == []

    def test_exact_funds_accepted(self, duel):
        state, arena = duel
        assert bid(state, arena, make_player(funds=8000)).accepted

    def test_not_player_turn(self, duel):
        state, arena = duel
        step = bid(state, arena, make_player(is_player_turn=False))
        assert step.rejected == RejectReason.NOT_PLAYER_TURN
        assert step.state is state

    def test_rejection_is_logged(self, duel):
        state, arena = duel
        recorder = EventRecorder()
        with use_logger(recorder):
            bid(state, arena, make_player(funds=0))
        assert recorder.named("auction.rejected")[0]["reason"] == "insufficient-funds"


class TestPowerBid:
    def test_first_action_records_opening_then_raise(self, duel, player):
        state, arena = duel
        step = power_bid(state, arena, player)
        recorded = [e for e in step.effects if e.kind == EffectKind.BID_RECORDED]
        assert [(e.price, e.opening) for e in recorded] == [(8000, True), (8500, False)]
        assert step.state.current_price == 8500
        assert step.state.uses(Tactic.POWER_BID) == 1
        assert step.state.power_bid_streak == 1

    def test_costs_every_active_rival_patience(self, duel, player):
        state, arena = duel
        power_bid(state, arena, player)
        assert arena["rival_a"].patience == 40
        assert arena["rival_b"].patience == 40

    def test_patience_low_barks(self, duel, player):
        state, arena = duel
        state = power_bid(state, arena, player).state
        step = power_bid(state, arena, player)
        assert step.state.current_price == 9000
        assert step.state.power_bid_streak == 2
        assert ("rival_a", BarkTrigger.PATIENCE_LOW) in barks(step.effects)
        assert ("rival_b", BarkTrigger.PATIENCE_LOW) in barks(step.effects)

    def test_streak_reset_by_normal_bid(self, duel, player):
        state, arena = duel
        state = power_bid(state, arena, player).state
        assert bid(state, arena, player).state.power_bid_streak == 0

    def test_funds_checked_against_power_increment(self, duel):
        state, arena = duel
        step = power_bid(state, arena, make_player(funds=8499))
        assert step.rejected == RejectReason.INSUFFICIENT_FUNDS
        assert arena["rival_a"].patience == 60

    def test_knocks_out_impatient_rival(self, item, player):
        arena = RivalArena([make_agent("weak", patience=20), make_agent("strong", patience=90)])
        state = open_session(item, arena.ids, opening_price=8000)
        step = power_bid(state, arena, player)
        assert step.state.active_rival_ids == ("strong",)
        assert step.state.withdraw_reasons["weak"] == WithdrawReason.PATIENCE_EXHAUSTED

    def test_penalty_comes_from_config(self, item, player):
        cfg = AuctionConfig(power_bid_patience_penalty=40)
        arena = RivalArena([make_agent("a", patience=90), make_agent("b", patience=90)])
        state = open_session(item, arena.ids, cfg, opening_price=8000)
        power_bid(state, arena, player, cfg)
        assert arena["a"].patience == 50
        assert arena["b"].patience == 50


class TestKickTires:
    def test_requires_opening_bid(self, duel, player):
        state, arena = duel
        step = kick_tires(state, arena, player)
        assert step.rejected == RejectReason.OPENING_BID_REQUIRED

    def test_requires_eye(self, duel):
        state, arena = duel
        state = opened(state, arena)
        step = kick_tires(state, arena, make_player(eye=1))
        assert step.rejected == RejectReason.SKILL_TOO_LOW
        assert step.state is state

    def test_cuts_every_budget(self, duel, player):
        state, arena = duel
        state = opened(state, arena)
        step = kick_tires(state, arena, player)
        assert arena["rival_a"].budget == 19_700
        assert arena["rival_b"].budget == 19_700
        assert step.state.uses(Tactic.KICK_TIRES) == 1
        assert step.effects[0].trigger == BarkTrigger.KICK_TIRES
        assert step.state.current_price == 8000

    def test_custom_reduction(self, duel, player):
        state, arena = duel
        state = opened(state, arena)
        kick_tires(state, arena, player, budget_reduction=1000)
        assert arena["rival_a"].budget == 19_000

    def test_negative_reduction_raises_before_any_change(self, duel, player):
        state, arena = duel
        state = opened(state, arena)
        with pytest.raises(ValueError):
            kick_tires(state, arena, player, budget_reduction=-5000)
        assert arena["rival_a"].budget == 20_000
        assert arena["rival_b"].budget == 20_000
        assert state.uses(Tactic.KICK_TIRES) == 0


class TestStall:
    def test_costs_patience(self, duel, player):
        state, arena = duel
        state = opened(state, arena)
        step = stall(state, arena, player)
        assert step.accepted
        assert arena["rival_a"].patience == 40
        assert step.state.uses(Tactic.STALL) == 1
        assert step.state.current_price == 8000

    def test_limited_by_tongue(self, duel):
        state, arena = duel
        player = make_player(tongue=2)
        state = opened(state, arena)
        state = stall(state, arena, player).state
        state = stall(state, arena, player).state
        step = stall(state, arena, player)
        assert step.rejected == RejectReason.NO_USES_LEFT
        assert step.state.uses(Tactic.STALL) == 2

    def test_config_penalties_drive_patience(self, item, player):
        cfg = AuctionConfig(stall_patience_penalty=50, power_bid_patience_penalty=40)
        arena = RivalArena([make_agent("a", patience=90), make_agent("b", patience=90)])
        state = opened(open_session(item, arena.ids, cfg, opening_price=8000), arena, player)
        state = stall(state, arena, player, cfg).state
        assert arena["a"].patience == 40
        step = power_bid(state, arena, player, cfg)
        assert arena["a"].patience == 0
        assert arena["b"].patience == 0
        assert step.state.withdraw_reasons["a"] == WithdrawReason.PATIENCE_EXHAUSTED
        assert step.state.winner_id == "player"


class TestWithdraw:
    def test_releases_players_lead(self, duel, player):
        state, arena = duel
        state = opened(state, arena)
        step = withdraw(state, arena, player)
        assert step.state.player_withdrawn
        assert step.state.leading_bidder_id is None
        assert not step.state.has_any_bids
        assert step.state.current_price == 8000
        assert not step.state.resolved

    def test_withdrawal_is_permanent(self, duel, player):
        state, arena = duel
        state = withdraw(state, arena, player).state
        for action in PlayerAction:
            step = apply_player_action(state, arena, action, player)
            assert step.rejected == RejectReason.PLAYER_WITHDRAWN

    def test_single_rival_wins_immediately(self, item, player):
        arena = RivalArena([make_agent("solo")])
        state = open_session(item, arena.ids)
        step = withdraw(state, arena, player)
        assert step.state.resolved
        assert step.state.winner_id == "solo"
        assert step.state.end_reason == EndReason.LAST_RIVAL_STANDING
        assert step.ended


class TestRivalDecision:
    def test_rival_claims_opening(self, duel):
        state, arena = duel
        step = apply_rival_decision(state, arena, "rival_a", BidDecision.raise_by(100))
        assert step.state.current_price == 8000
        assert step.state.leading_bidder_id == "rival_a"
        assert arena["rival_a"].patience == 55
        assert barks(step.effects) == [(AUCTIONEER_ID, BarkTrigger.RIVAL_BID),
                                       ("rival_a", BarkTrigger.BID)]

    def test_leader_holds(self, duel):
        state, arena = duel
        state = apply_rival_decision(state, arena, "rival_a", BidDecision.raise_by(100)).state
        step = apply_rival_decision(state, arena, "rival_a", BidDecision.raise_by(100))
        assert step.state is state
        assert step.effects == []

    def test_inactive_rival_skipped(self, duel):
        state, arena = duel
        state = apply_rival_decision(state, arena, "rival_a",
                                     BidDecision.withdraw(WithdrawReason.DECLINED)).state
        step = apply_rival_decision(state, arena, "rival_a", BidDecision.raise_by(100))
        assert step.state is state

    def test_unknown_rival_raises(self, duel):
        state, arena = duel
        with pytest.raises(KeyError):
            apply_rival_decision(state, arena, "ghost", BidDecision.raise_by(100))

    def test_withdraw_decision_drops(self, duel):
        state, arena = duel
        step = apply_rival_decision(state, arena, "rival_b",
                                    BidDecision.withdraw(WithdrawReason.PATIENCE_EXHAUSTED))
        assert step.state.active_rival_ids == ("rival_a",)
        assert step.state.withdraw_reasons["rival_b"] == WithdrawReason.PATIENCE_EXHAUSTED

    def test_stale_decision_over_budget_drops(self, item):
        arena = RivalArena([make_agent("a", budget=8050), make_agent("b")])
        state = opened(open_session(item, arena.ids, opening_price=8000), arena)
        step = apply_rival_decision(state, arena, "a", BidDecision.raise_by(100))
        assert step.state.withdraw_reasons["a"] == WithdrawReason.BUDGET_EXCEEDED
        assert step.state.current_price == 8000

    def test_match_only_drops(self, duel):
        state, arena = duel
        state = opened(state, arena)
        step = apply_rival_decision(state, arena, "rival_a", BidDecision.raise_by(0))
        assert step.state.withdraw_reasons["rival_a"] == WithdrawReason.BUDGET_EXCEEDED

    def test_rival_only_cap(self, item, player):
        arena = RivalArena([make_agent("rival_a"), make_agent("rival_b")])
        state = open_session(item, arena.ids, opening_price=12_500)
        state = withdraw(state, arena, player).state
        state = apply_rival_decision(state, arena, "rival_b", BidDecision.raise_by(100)).state
        assert state.current_price == 12_500
        step = apply_rival_decision(state, arena, "rival_a", BidDecision.raise_by(500))
        assert step.state.current_price == 12_600
        step = apply_rival_decision(step.state, arena, "rival_b", BidDecision.raise_by(500))
        assert step.state.withdraw_reasons["rival_b"] == WithdrawReason.DECLINED
        assert step.state.winner_id == "rival_a"
        assert step.state.current_price == 12_600

    def test_batch_revalidates_each_decision(self, duel):
        state, arena = duel
        state = opened(state, arena)
        step = apply_rival_decisions(state, arena, [("rival_a", BidDecision.raise_by(100)),
                                                    ("rival_a", BidDecision.raise_by(100))])
        assert step.state.current_price == 8100

    def test_turn_sees_live_price(self, duel):
        state, arena = duel
        state = opened(state, arena)
        step = resolve_rival_turn(state, arena, ["rival_a", "rival_b"])
        assert step.state.current_price == 8200
        assert step.state.leading_bidder_id == "rival_b"


class TestExplicitEnds:
    def test_end_auction(self, duel):
        state, arena = duel
        step = end_auction(state, "rival_b")
        assert step.state.resolved
        assert step.state.winner_id == "rival_b"
        assert step.state.end_reason == EndReason.FORCED
        assert step.effects[-1].trigger == BarkTrigger.END_PLAYER_LOSE

    def test_inactive_override_is_noop(self, duel):
        state, _ = duel
        step = apply_override(state, ResolutionOverride(winner_id="player"))
        assert step.state is state
        assert apply_override(state, None).state is state

    def test_active_override_forces_winner(self, duel):
        state, _ = duel
        step = apply_override(state, ResolutionOverride(winner_id="player", active=True))
        assert step.state.winner_id == "player"
        assert step.state.end_reason == EndReason.FORCED

    def test_override_on_resolved_session_ignored(self, duel):
        state, _ = duel
        state = end_auction(state, "rival_a").state
        step = apply_override(state, ResolutionOverride(winner_id="player", active=True))
        assert step.rejected == RejectReason.SESSION_RESOLVED
        assert step.state.winner_id == "rival_a"


class TestResolutionIsTerminal:
    def test_every_call_returns_identical_state(self, duel, player):
        state, arena = duel
        state = end_auction(state, "player").state
        calls = [lambda a=a: apply_player_action(state, arena, a, player) for a in PlayerAction]
        calls += [
            lambda: apply_rival_decision(state, arena, "rival_a", BidDecision.raise_by(100)),
            lambda: resolve_rival_turn(state, arena, ["rival_a", "rival_b"]),
            lambda: end_auction(state, "rival_a"),
        ]
        for call in calls:
            step = call()
            assert step.state is state
            assert step.effects == []
            assert step.rejected == RejectReason.SESSION_RESOLVED


class TestInvariants:
    @pytest.mark.parametrize("seed", range(8))
    def test_invariants_hold_under_random_play(self, seed):
        rng = np.random.default_rng(seed)
        auction = make_auction(ScenarioConfig(n_rivals=4), rng)
        state, arena, scheduler = auction.state, auction.arena, auction.scheduler
        policy = random_policy(rng)
        player = make_player(funds=60_000, eye=2, tongue=3)
        seen = {"price": state.current_price, "gone": set(),
                "agents": {rid: (a.patience, a.budget) for rid, a in arena.items()}}

        def check(st):
            assert st.current_price >= seen["price"]
            seen["price"] = st.current_price
            for rid, agent in arena.items():
                patience, budget = seen["agents"][rid]
                assert agent.patience <= patience
                assert agent.budget <= budget
                seen["agents"][rid] = (agent.patience, agent.budget)
            assert not seen["gone"] & set(st.active_rival_ids)
            seen["gone"] |= set(st.withdrawn_rival_ids)
            assert set(st.active_rival_ids) | set(st.withdrawn_rival_ids) == set(arena.ids)
            assert st.leading_bidder_id in (None, "player") + st.active_rival_ids

        for _ in range(300):
            if state.resolved:
                break
            if not state.player_withdrawn:
                state = apply_player_action(state, arena, policy(state, player), player,
                                            auction.cfg.auction).state
                check(state)
            if not state.resolved:
                state = scheduler.run_rival_turn(state, arena, rng).state
                check(state)
        assert state.resolved
