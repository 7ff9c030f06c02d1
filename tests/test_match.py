"""Tests for match orchestration."""

import pytest

from metattt.ai.base import BaseAI
from metattt.ai.random_ai import RandomAI
from metattt.errors import IllegalMoveError, InvalidStateError
from metattt.game_engine import GameEngine
from metattt.match import Match, run_matches
from metattt.models import Mark, MatchConfig, PlayerConfig, PlayerType, RulesConfig


class ScriptedAI(BaseAI):
    """Plays a fixed list of moves and records what it saw."""

    def __init__(self, player_mark, config, moves):
        super().__init__(player_mark, config)
        self.moves = list(moves)
        self.observed = []
        self.started = 0
        self.closed = False

    def choose_move(self, game_state):
        self.move_count += 1
        return self.moves.pop(0)

    def on_game_start(self, game_state):
        self.started += 1

    def observe_move(self, game_state, move):
        self.observed.append((move, game_state.move_count))

    def close(self):
        self.closed = True


def _scripted(mark, moves, player_type=PlayerType.RANDOM):
    return ScriptedAI(mark, PlayerConfig(player_type=player_type), moves)


def _replay(rules, moves):
    state = GameEngine.initial_state(rules)
    for move in moves:
        state = GameEngine.apply_move(state, move)
    return state


class TestMatch:
    def test_scripted_win(self):
        players = {
            Mark.X: _scripted(Mark.X, [(0,), (1,), (2,)]),
            Mark.O: _scripted(Mark.O, [(3,), (4,)]),
        }
        match = Match(
            players, RulesConfig(depth=0), labels={Mark.X: "alice", Mark.O: "bob"}
        )
        result = match.play()

        assert result.winner is Mark.X
        assert result.winner_label == "alice"
        assert result.moves == [(0,), (3,), (1,), (4,), (2,)]
        assert result.duration_seconds >= 0

    def test_every_player_sees_every_move(self):
        x = _scripted(Mark.X, [(0,), (1,), (2,)])
        o = _scripted(Mark.O, [(3,), (4,)])
        Match({Mark.X: x, Mark.O: o}, RulesConfig(depth=0)).play()

        expected = [((0,), 1), ((3,), 2), ((1,), 3), ((4,), 4), ((2,), 5)]
        assert x.observed == expected
        assert o.observed == expected
        assert x.started == o.started == 1

    @pytest.mark.parametrize("depth", [0, 1])
    def test_random_game_is_legal_and_finishes(self, depth):
        rules = RulesConfig(depth=depth)
        players = {
            Mark.X: RandomAI(Mark.X, PlayerConfig(rng_seed=1)),
            Mark.O: RandomAI(Mark.O, PlayerConfig(rng_seed=2)),
        }
        result = Match(players, rules).play()

        final = _replay(rules, result.moves)
        assert final.is_terminal
        assert final.winner == result.winner
        assert result.winner_label is None

    def test_send_to_board_game_is_legal(self):
        rules = RulesConfig(depth=1, send_to_board=True)
        players = {
            Mark.X: RandomAI(Mark.X, PlayerConfig(rng_seed=3)),
            Mark.O: RandomAI(Mark.O, PlayerConfig(rng_seed=4)),
        }
        result = Match(players, rules).play()
        assert _replay(rules, result.moves).is_terminal

    def test_missing_player(self):
        with pytest.raises(InvalidStateError):
            Match({Mark.X: _scripted(Mark.X, [])})

    def test_illegal_move_from_program_is_a_bug(self):
        players = {
            Mark.X: _scripted(Mark.X, [(4,)]),
            Mark.O: _scripted(Mark.O, [(4,)]),
        }
        with pytest.raises(InvalidStateError) as excinfo:
            Match(players, RulesConfig(depth=0)).play()
        assert isinstance(excinfo.value.__cause__, IllegalMoveError)

    def test_illegal_move_from_human_propagates(self):
        players = {
            Mark.X: _scripted(Mark.X, [(4,)]),
            Mark.O: _scripted(Mark.O, [(4,)], player_type=PlayerType.HUMAN),
        }
        with pytest.raises(IllegalMoveError):
            Match(players, RulesConfig(depth=0)).play()

    def test_show_board(self):
        output = []
        players = {
            Mark.X: _scripted(Mark.X, [(0,), (1,), (2,)]),
            Mark.O: _scripted(Mark.O, [(3,), (4,)]),
        }
        Match(players, RulesConfig(depth=0), show_board=True, output_fn=output.append).play()

        assert output[0] == "---\n---\n---"
        assert output[1] == "X plays 0"
        assert output[2] == "X--\n---\n---"
        assert output[-1] == "XXX\nOO-\n---"
        assert len(output) == 1 + 2 * 5


class TestRunMatches:
    def test_counts_and_labels(self):
        config = MatchConfig(
            rules=RulesConfig(depth=0),
            num_matches=4,
            player1=PlayerConfig(name="alpha", rng_seed=10),
            player2=PlayerConfig(rng_seed=20),
        )
        summary = run_matches(config)

        assert summary.games == 4
        assert len(summary.results) == 4
        assert summary.draws + sum(summary.wins.values()) == 4
        assert set(summary.wins) <= {"alpha", "player2"}

    def test_seeded_runs_reproduce(self):
        config = MatchConfig(
            rules=RulesConfig(depth=1),
            num_matches=2,
            player1=PlayerConfig(rng_seed=5),
            player2=PlayerConfig(rng_seed=6),
        )
        first = run_matches(config)
        second = run_matches(config)
        assert [r.moves for r in first.results] == [r.moves for r in second.results]

    def test_players_are_closed(self):
        built = []

        def factory(mark, player_config):
            moves = [(0,), (1,), (2,)] if mark is Mark.X else [(3,), (4,)]
            player = ScriptedAI(mark, player_config, moves)
            built.append(player)
            return player

        config = MatchConfig(rules=RulesConfig(depth=0), num_matches=2)
        summary = run_matches(config, player_factory=factory)

        assert summary.wins == {"player1": 2}
        assert len(built) == 4
        assert all(p.closed for p in built)

    def test_players_are_closed_on_failure(self):
        built = []

        def factory(mark, player_config):
            player = ScriptedAI(mark, player_config, [(4,)])
            built.append(player)
            return player

        with pytest.raises(InvalidStateError):
            run_matches(MatchConfig(rules=RulesConfig(depth=0)), player_factory=factory)
        assert len(built) == 2
        assert all(p.closed for p in built)
