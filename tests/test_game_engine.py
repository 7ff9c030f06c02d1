"""Tests for GameEngine and GameState."""

import random

import pytest

from metattt.errors import IllegalMoveError, InvalidPathError
from metattt.game_engine import GameEngine
from metattt.models import DRAWN, IN_PROGRESS, Mark, RulesConfig, Status, WinPolicy


class TestInitialState:
    @pytest.mark.parametrize("depth", [0, 1, 2])
    def test_empty_board_at_depth(self, depth):
        state = GameEngine.initial_state(RulesConfig(depth=depth))
        assert state.depth == depth
        assert state.current_player is Mark.X
        assert state.move_count == 0
        assert state.last_move is None
        assert GameEngine.get_status(state) == IN_PROGRESS

    def test_default_rules(self):
        state = GameEngine.initial_state()
        assert state.rules == RulesConfig()
        assert state.depth == 1


class TestApplyMove:
    """Move application and validation."""

    def test_returns_successor_state(self):
        state = GameEngine.initial_state(RulesConfig(depth=1))
        after = GameEngine.apply_move(state, [4, 2])

        assert after.current_player is Mark.O
        assert after.move_count == 1
        assert after.last_move == (4, 2)
        assert after.board.cells[4].cells[2] is Mark.X
        # Old state is untouched
        assert state.board.cells[4].cells[2] is Mark.EMPTY
        assert state.move_count == 0

    def test_players_alternate(self, play_moves):
        state = play_moves([(0,), (1,), (2,)])
        assert [state.board.cells[i] for i in range(3)] == [Mark.X, Mark.O, Mark.X]
        assert state.current_player is Mark.O

    def test_occupied_cell_rejected(self, play_moves):
        state = play_moves([(4,)])
        with pytest.raises(IllegalMoveError) as excinfo:
            GameEngine.apply_move(state, (4,))
        assert excinfo.value.reason == "not_legal"

    def test_decided_sub_board_rejected(self, meta, patterns, state_factory):
        board = meta([patterns["x_won"]] + [patterns["empty"]] * 8)
        state = state_factory(board, current_player=Mark.O)
        with pytest.raises(IllegalMoveError):
            GameEngine.apply_move(state, (0, 8))

    def test_game_over_rejected(self, play_moves):
        state = play_moves([(0,), (4,), (1,), (7,), (2,)])
        with pytest.raises(IllegalMoveError) as excinfo:
            GameEngine.apply_move(state, (8,))
        assert excinfo.value.reason == "game_over"

    def test_malformed_path_rejected(self):
        state = GameEngine.initial_state(RulesConfig(depth=1))
        with pytest.raises(InvalidPathError):
            GameEngine.apply_move(state, (4,))

    def test_unvalidated_apply_still_protects_marks(self, play_moves):
        state = play_moves([(4,)])
        with pytest.raises(IllegalMoveError) as excinfo:
            GameEngine.apply_move(state, (4,), validate=False)
        assert excinfo.value.reason == "occupied"


class TestGameEnd:
    def test_winner_reported(self, play_moves):
        state = play_moves([(0,), (4,), (1,), (7,), (2,)])
        assert GameEngine.is_terminal(state)
        assert GameEngine.get_winner(state) is Mark.X
        assert GameEngine.get_valid_moves(state) == []

    def test_draw_reported(self, play_moves):
        # X O X / X O O / O X X
        state = play_moves([(0,), (1,), (2,), (4,), (3,), (5,), (7,), (6,), (8,)])
        assert GameEngine.get_status(state) == DRAWN
        assert GameEngine.get_winner(state) is None

    @pytest.mark.parametrize("policy", [WinPolicy.EAGER, WinPolicy.SETTLED])
    def test_random_games_terminate(self, policy):
        rng = random.Random(99)
        rules = RulesConfig(depth=1, win_policy=policy)
        for _ in range(5):
            state = GameEngine.initial_state(rules)
            while not state.is_terminal:
                state = GameEngine.apply_move(state, rng.choice(GameEngine.get_valid_moves(state)))
            assert state.move_count <= 81
            assert state.status.kind in (Status.won(Mark.X).kind, DRAWN.kind)
