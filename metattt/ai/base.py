"""
Base AI Player class for metattt
Abstract base class that all player implementations inherit from
"""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from typing import Any, List, Optional

from ..errors import NoLegalMovesError
from ..game_state import GameState
from ..legality import list_legal_moves
from ..models import Mark, MovePath, PlayerConfig


def derive_seed(config: PlayerConfig, player_mark: Mark) -> int:
    """
    Derive a deterministic RNG seed when ``PlayerConfig.rng_seed`` is unset.

    Mixes the search budget and the player's mark into a 32-bit value so
    that two players of the same game never share a random stream. Callers
    that care about experiment-level control should pass ``rng_seed``
    explicitly instead of relying on this fallback.
    """
    mark_code = 1 if player_mark is Mark.X else 2
    base = (config.iterations * 1_000_003) ^ (mark_code * 97_911)
    return int(base & 0xFFFFFFFF)


class BaseAI(ABC):
    """Abstract base class for all player implementations"""

    def __init__(self, player_mark: Mark, config: PlayerConfig):
        """
        Initialize player

        Args:
            player_mark: The mark this player places (X or O)
            config: Player configuration settings
        """
        self.player_mark = player_mark
        self.config = config
        self.move_count = 0

        # Per-instance RNG used for all stochastic behaviour (random move
        # selection, rollouts). Prefer an explicit rng_seed from the config.
        if self.config.rng_seed is not None:
            self.rng_seed: int = int(self.config.rng_seed)
        else:
            self.rng_seed = derive_seed(self.config, self.player_mark)
        self.rng: random.Random = random.Random(self.rng_seed)

    @abstractmethod
    def choose_move(self, game_state: GameState) -> MovePath:
        """
        Choose a move for the current game state

        Args:
            game_state: Current game state, with ``current_player`` equal
                to this player's mark

        Returns:
            A legal move path

        Raises:
            NoLegalMovesError: ``game_state`` is already decided
        """

    def on_game_start(self, game_state: GameState) -> None:
        """Called once with the initial state before the first move."""

    def observe_move(self, game_state: GameState, move: MovePath) -> None:
        """Called after every committed move, by either player.

        Args:
            game_state: State after ``move`` was applied
            move: The move that was just played
        """

    def close(self) -> None:
        """Release background resources. Safe to call more than once."""

    def __enter__(self) -> "BaseAI":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def get_valid_moves(self, game_state: GameState) -> List[MovePath]:
        """
        Get all legal moves for the current position.

        Raises:
            NoLegalMovesError: the game is already decided
        """
        if game_state.is_terminal:
            raise NoLegalMovesError(
                "No legal moves: the game is already decided",
                context={"status": str(game_state.status)},
            )
        return list_legal_moves(game_state)

    def get_random_element(self, items: List[Any]) -> Optional[Any]:
        """
        Get random element from list using the per-instance RNG.

        Returns:
            Random item or None if list is empty
        """
        if not items:
            return None
        return self.rng.choice(items)

    def __repr__(self) -> str:
        """String representation of the player"""
        return (
            f"{self.__class__.__name__}"
            f"(mark={self.player_mark.value}, "
            f"type={self.config.player_type.value})"
        )
