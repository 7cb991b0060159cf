"""
Tests for turn and round sequencing.

Tests:
- Turn passing and action budget reset
- Dividend parity
- Turn order rotation (round-robin fairness)
- Game end after max_rounds
- Departures mid-round
"""

import pytest

from ..config import GameSettings
from ..engine_core.orchestrator import OrchestratorState
from ..engine_core.state import GamePhase, OwnedStock
from ..session import GameLoop, SessionManager
from .conftest import make_stock


def start_game(catalog, names, **settings):
    session = SessionManager(GameSettings(seed=11, **settings)).create_session(catalog=catalog)
    loop = GameLoop(session)
    for name in names:
        loop.join(name)
    assert loop.start_game().success
    return session


def finish_round(session):
    """Pass the turn until the round boundary; returns the last TurnAdvance."""
    orchestrator = session.orchestrator
    for _ in range(len(session.round_state.turn_order)):
        advance = orchestrator.process_round_cycle()
        if advance.round_ended:
            return advance
    raise AssertionError("round did not end")


class TestRoundOne:

    def test_opening_board_and_no_event(self, small_catalog):
        session = start_game(small_catalog, ["alice", "bob"])
        assert len(session.trading.board_stocks) == 3
        assert session.events.active_events == []
        assert session.round_state.round_number == 1
        assert session.round_state.phase == GamePhase.PLAYING

    def test_first_player_gets_actions(self, small_catalog):
        session = start_game(small_catalog, ["alice", "bob"], actions_per_turn=3)
        first = session.players.get(session.round_state.current_player)
        assert first.actions_remaining == 3

    def test_turn_order_uses_every_player(self, small_catalog):
        session = start_game(small_catalog, ["alice", "bob", "carol"])
        assert sorted(session.round_state.turn_order) == ["alice", "bob", "carol"]

    def test_opening_board_respects_board_cap(self, small_catalog):
        session = start_game(small_catalog, ["alice", "bob"], max_board_stocks=2)
        assert len(session.trading.board_stocks) == 2

        for _ in range(3):
            for stock in session.trading.board_stocks:
                session.players.get("alice").portfolio.append(OwnedStock(
                    definition=stock.definition,
                    purchase_price=1,
                    purchase_round=session.round_state.round_number,
                ))
            finish_round(session)
            assert len(session.trading.board_stocks) <= 2


class TestTurnPassing:

    def test_next_player_refreshed_outgoing_zeroed(self, small_catalog):
        session = start_game(small_catalog, ["alice", "bob"])
        first, second = session.round_state.turn_order
        session.players.get(second).actions_remaining = 0
        session.players.get(second).stock_actions = {"Alpha": None}

        advance = session.orchestrator.process_round_cycle()

        assert advance.current_player == second
        assert advance.actions_remaining == 2
        assert not advance.round_ended
        assert session.players.get(first).actions_remaining == 0
        assert session.players.get(second).stock_actions == {}

    def test_round_boundary_rotates_order_and_draws_event(self, small_catalog):
        session = start_game(small_catalog, ["alice", "bob", "carol"])
        order = list(session.round_state.turn_order)

        advance = finish_round(session)

        assert session.round_state.round_number == 2
        assert session.round_state.turn_order == order[1:] + order[:1]
        assert advance.current_player == order[1]
        assert advance.report.new_event is not None
        assert "🎲 Round 2 begins!" in advance.report.summary
        assert session.orchestrator.state == OrchestratorState.AWAITING_TURN

    def test_round_robin_fairness(self, small_catalog):
        names = ["alice", "bob", "carol"]
        session = start_game(small_catalog, names, max_rounds=6)
        order = list(session.round_state.turn_order)

        first_to_act = [session.round_state.current_player]
        for _ in range(5):
            finish_round(session)
            first_to_act.append(session.round_state.current_player)

        assert first_to_act == [order[r % 3] for r in range(6)]
        for cycle in (first_to_act[:3], first_to_act[3:]):
            assert sorted(cycle) == sorted(names)


class TestDividends:

    def test_paid_on_even_rounds_only(self, small_catalog):
        session = start_game(small_catalog, ["alice", "bob"], max_rounds=6)
        alice = session.players.get("alice")
        alice.portfolio.append(OwnedStock(
            definition=make_stock("Payer", dividend=2, sector="tech"),
            purchase_price=10,
            purchase_round=1,
        ))
        alice.portfolio.append(OwnedStock(
            definition=make_stock("Payer", dividend=2, sector="tech"),
            purchase_price=13,
            purchase_round=1,
        ))

        round_one = finish_round(session)
        assert round_one.report.dividend_payments == []
        assert alice.cash == 40

        round_two = finish_round(session)
        payments = round_two.report.dividend_payments
        assert [(p.player_name, p.total) for p in payments] == [("alice", 4)]
        assert alice.cash == 44

        round_three = finish_round(session)
        assert round_three.report.dividend_payments == []
        assert alice.cash == 44


class TestGameEnd:

    def test_six_round_two_player_game(self, small_catalog):
        session = start_game(small_catalog, ["alice", "bob"], max_rounds=6)
        session.players.get("bob").cash = 100
        orchestrator = session.orchestrator

        advances = [orchestrator.process_round_cycle() for _ in range(12)]

        assert all(a.game_over is None for a in advances[:-1])
        final = advances[-1]
        assert final.game_over is not None
        assert final.current_player is None
        assert session.round_state.round_number == 6
        assert session.round_state.phase == GamePhase.GAME_OVER
        assert orchestrator.state == OrchestratorState.GAME_ENDED

        rankings = final.game_over.rankings
        assert [s.net_worth for s in rankings] == sorted(
            (s.net_worth for s in rankings), reverse=True
        )
        assert [w.name for w in final.game_over.winners] == ["bob"]
        assert final.report.summary == final.game_over.message

    def test_no_turns_after_game_end(self, small_catalog):
        session = start_game(small_catalog, ["alice", "bob"], max_rounds=1)
        orchestrator = session.orchestrator
        orchestrator.process_round_cycle()
        summary = orchestrator.process_round_cycle().game_over
        assert summary is not None

        again = orchestrator.process_round_cycle()
        assert again.game_over is summary
        assert session.round_state.round_number == 1


class TestRemovePlayer:

    def test_removing_waiting_player_keeps_turn(self, small_catalog):
        session = start_game(small_catalog, ["alice", "bob", "carol"])
        first, _, third = session.round_state.turn_order

        assert session.orchestrator.remove_player(third) is None
        assert session.round_state.current_player == first

    def test_removing_earlier_player_keeps_current(self, small_catalog):
        session = start_game(small_catalog, ["alice", "bob", "carol"])
        first, second, _ = session.round_state.turn_order
        session.orchestrator.process_round_cycle()

        assert session.orchestrator.remove_player(first) is None
        assert session.round_state.current_player == second

    def test_removing_current_player_passes_turn(self, small_catalog):
        session = start_game(small_catalog, ["alice", "bob", "carol"])
        first, second, _ = session.round_state.turn_order

        advance = session.orchestrator.remove_player(first)

        assert advance.current_player == second
        assert session.players.get(second).actions_remaining == 2

    def test_removing_last_player_in_round_closes_it(self, small_catalog):
        session = start_game(small_catalog, ["alice", "bob", "carol"])
        first, second, third = session.round_state.turn_order
        session.orchestrator.process_round_cycle()
        session.orchestrator.process_round_cycle()

        advance = session.orchestrator.remove_player(third)

        assert advance.round_ended
        assert session.round_state.round_number == 2
        assert session.round_state.turn_order == [second, first]
        assert advance.current_player == second
