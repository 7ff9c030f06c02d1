"""Tests for human input parsing and the interactive player."""

import pytest

from metattt.ai.human_ai import HumanAI, parse_move
from metattt.errors import AIError, InvalidPathError, ParseError
from metattt.game_engine import GameEngine
from metattt.models import Mark, PlayerConfig, PlayerType, RulesConfig

HUMAN = PlayerConfig(player_type=PlayerType.HUMAN)


def _scripted(*lines):
    remaining = list(lines)
    prompts = []

    def _input(prompt):
        prompts.append(prompt)
        if not remaining:
            raise EOFError
        return remaining.pop(0)

    return _input, prompts


class TestParseMove:
    @pytest.mark.parametrize("raw", ["0 4", "0,4", "04", " 0 ,  4 ", "0;4"])
    def test_accepted_formats(self, raw):
        assert parse_move(raw, 1) == (0, 4)

    def test_single_index_at_depth_zero(self):
        assert parse_move("7", 0) == (7,)

    def test_multi_digit_string_splits(self):
        assert parse_move("123", 2) == (1, 2, 3)

    @pytest.mark.parametrize("raw", ["", "   ", "a b", "0 x", "-1 2", "\u00b2", "0 \u0664", "\u00b9\u00b2"])
    def test_parse_errors(self, raw):
        with pytest.raises(ParseError):
            parse_move(raw, 1)

    @pytest.mark.parametrize("raw", ["0", "0 4 4", "0 9", "10 1"])
    def test_invalid_paths(self, raw):
        with pytest.raises(InvalidPathError):
            parse_move(raw, 1)


class TestHumanAI:
    def test_returns_parsed_move(self):
        input_fn, prompts = _scripted("4 4")
        ai = HumanAI(Mark.X, HUMAN, input_fn=input_fn, output_fn=lambda _: None)
        state = GameEngine.initial_state(RulesConfig(depth=1))
        assert ai.choose_move(state) == (4, 4)
        assert "Player X" in prompts[0]
        assert ai.move_count == 1

    def test_reprompts_on_bad_input(self):
        input_fn, prompts = _scripted("nonsense", "9 9", "0 0")
        output = []
        ai = HumanAI(Mark.X, HUMAN, input_fn=input_fn, output_fn=output.append)
        state = GameEngine.initial_state(RulesConfig(depth=1))
        assert ai.choose_move(state) == (0, 0)
        assert len(prompts) == 3
        assert sum(line.startswith("Invalid move") for line in output) == 2

    def test_reprompts_on_illegal_move(self, play_moves):
        state = play_moves([(4,)])
        input_fn, _ = _scripted("4", "0")
        output = []
        ai = HumanAI(Mark.O, HUMAN, input_fn=input_fn, output_fn=output.append)
        assert ai.choose_move(state) == (0,)
        assert output == ["Invalid move: That cell cannot be played right now"]

    def test_help_lists_moves(self, play_moves):
        state = play_moves([(4,)])
        input_fn, _ = _scripted("?", "8")
        output = []
        ai = HumanAI(Mark.O, HUMAN, input_fn=input_fn, output_fn=output.append, max_attempts=1)
        assert ai.choose_move(state) == (8,)
        assert len(output) == 8
        assert output[0] == "0: 0"

    def test_closed_input_raises(self):
        input_fn, _ = _scripted()
        ai = HumanAI(Mark.X, HUMAN, input_fn=input_fn, output_fn=lambda _: None)
        with pytest.raises(AIError):
            ai.choose_move(GameEngine.initial_state(RulesConfig(depth=0)))

    def test_gives_up_after_max_attempts(self):
        input_fn, _ = _scripted("x", "y", "z")
        ai = HumanAI(Mark.X, HUMAN, input_fn=input_fn, output_fn=lambda _: None, max_attempts=2)
        with pytest.raises(AIError) as excinfo:
            ai.choose_move(GameEngine.initial_state(RulesConfig(depth=0)))
        assert excinfo.value.context["max_attempts"] == 2

    def test_reprompts_on_non_ascii_digits(self):
        input_fn, prompts = _scripted("²", "4")
        output = []
        ai = HumanAI(Mark.X, HUMAN, input_fn=input_fn, output_fn=output.append)
        assert ai.choose_move(GameEngine.initial_state(RulesConfig(depth=0))) == (4,)
        assert len(prompts) == 2
        assert output[0].startswith("Invalid move")
