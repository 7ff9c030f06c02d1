"""
Shared pytest fixtures for metattt tests.

Board fixtures take compact text patterns: nine characters per leaf board,
row-major, ``X``/``O`` for marks and ``-`` for empty cells. Spaces are
ignored, so ``"XXX OO- ---"`` reads as three rows.
"""

import logging
from typing import Callable, List, Optional, Sequence, Union

import pytest

from metattt.board import Board
from metattt.game_engine import GameEngine
from metattt.game_state import GameState
from metattt.models import Mark, MovePath, RulesConfig

_CHARS = {"X": Mark.X, "O": Mark.O, "-": Mark.EMPTY}

X_WON = "XXX OO- ---"
O_WON = "OOO XX- X--"
DRAWN = "XOX XOO OXX"
EMPTY = "--- --- ---"


def _leaf(pattern: str) -> Board:
    return Board(0, [_CHARS[c] for c in pattern.replace(" ", "")])


# =============================================================================
# BOARD FIXTURES
# =============================================================================


@pytest.fixture
def leaf() -> Callable[[str], Board]:
    """Factory building a depth-0 board from a text pattern."""
    return _leaf


@pytest.fixture
def meta() -> Callable[[Sequence[Union[str, Board]]], Board]:
    """Factory building a meta board from nine children (patterns or boards)."""

    def _create(children: Sequence[Union[str, Board]]) -> Board:
        nodes = [_leaf(c) if isinstance(c, str) else c for c in children]
        return Board(nodes[0].depth + 1, nodes)

    return _create


@pytest.fixture
def patterns():
    """Common leaf patterns."""
    return {"x_won": X_WON, "o_won": O_WON, "drawn": DRAWN, "empty": EMPTY}


# =============================================================================
# STATE FIXTURES
# =============================================================================


@pytest.fixture
def state_factory() -> Callable[..., GameState]:
    """Factory wrapping a board into a GameState."""

    def _create(
        board: Board,
        current_player: Mark = Mark.X,
        rules: Optional[RulesConfig] = None,
        last_move: Optional[MovePath] = None,
    ) -> GameState:
        return GameState(
            board=board,
            current_player=current_player,
            rules=rules or RulesConfig(depth=board.depth),
            last_move=last_move,
        )

    return _create


@pytest.fixture
def play_moves() -> Callable[..., GameState]:
    """Play a list of moves from the initial position, validating each."""

    def _play(moves: List[Sequence[int]], rules: Optional[RulesConfig] = None) -> GameState:
        state = GameEngine.initial_state(rules or RulesConfig(depth=len(moves[0]) - 1))
        for move in moves:
            state = GameEngine.apply_move(state, move)
        return state

    return _play


# =============================================================================
# LOGGING ISOLATION
# =============================================================================


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """Undo CLI logging setup so caplog keeps seeing package records."""
    yield
    logger = logging.getLogger("metattt")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
