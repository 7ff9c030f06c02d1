"""Core game engine.

Thin, stateless layer that the match runner and the search players use to
start games and apply moves. All board logic lives in :mod:`metattt.board`,
:mod:`metattt.resolution` and :mod:`metattt.legality`; this module only
enforces turn order and legality on top of them.
"""

from __future__ import annotations

from typing import List, Sequence

from .board import apply_mark, validate_path
from .errors import IllegalMoveError
from .game_state import GameState
from .legality import is_legal, list_legal_moves
from .models import Mark, MovePath, RulesConfig, Status


class GameEngine:
    """Python GameEngine used by players and the match runner.

    - ``initial_state`` builds an empty game at the configured depth.
    - ``get_valid_moves`` and ``apply_move`` are the primary APIs for AI
      agents; ``apply_move`` returns a new state and never touches the old
      one.
    """

    @staticmethod
    def initial_state(rules: RulesConfig | None = None) -> GameState:
        return GameState.new(rules)

    @staticmethod
    def get_status(game_state: GameState) -> Status:
        return game_state.status

    @staticmethod
    def is_terminal(game_state: GameState) -> bool:
        return game_state.is_terminal

    @staticmethod
    def get_winner(game_state: GameState) -> Mark | None:
        return game_state.winner

    @staticmethod
    def get_valid_moves(game_state: GameState) -> List[MovePath]:
        return list_legal_moves(game_state)

    @staticmethod
    def apply_move(
        game_state: GameState,
        path: Sequence[int],
        *,
        validate: bool = True,
    ) -> GameState:
        """
        Apply a move for the player to move and return the new state.

        Args:
            game_state: The current game state.
            path: Move path, one index per level.
            validate: When False the legality walk is skipped. Only for
                callers whose moves come straight from ``legal_moves``
                (rollouts, tree expansion).

        Raises:
            InvalidPathError: ``path`` is malformed.
            IllegalMoveError: the game is over, or the path enters a decided
                board or an occupied cell.
        """
        if validate:
            path = validate_path(path, game_state.depth)
            if game_state.is_terminal:
                raise IllegalMoveError(
                    "Game is already decided",
                    path=path,
                    reason="game_over",
                )
            if not is_legal(game_state, path):
                raise IllegalMoveError(
                    "Move enters a decided board, an occupied cell, or "
                    "ignores the send-to-board target",
                    path=path,
                    reason="not_legal",
                )
        else:
            path = tuple(path)

        board = apply_mark(game_state.board, path, game_state.current_player)
        return GameState(
            board=board,
            current_player=game_state.current_player.other(),
            rules=game_state.rules,
            last_move=path,
            move_count=game_state.move_count + 1,
        )
