"""Random player implementation for metattt.

This agent selects uniformly random legal moves using the per-instance RNG on
the :class:`BaseAI`. It is primarily intended for testing and baselines
rather than competitive play.
"""

from __future__ import annotations

from ..game_state import GameState
from ..models import MovePath
from .base import BaseAI


class RandomAI(BaseAI):
    """Player that selects random legal moves."""

    def choose_move(self, game_state: GameState) -> MovePath:
        """Select a random legal move for ``game_state``.

        Raises:
            NoLegalMovesError: ``game_state`` is already decided.
        """
        valid_moves = self.get_valid_moves(game_state)
        selected = self.get_random_element(valid_moves)
        self.move_count += 1
        return selected
