"""MCTS player that keeps searching on a background thread.

The tree survives across turns: it is re-rooted after every committed move
(ours and the opponent's) and the worker keeps deepening it while the
opponent thinks. Each turn is bounded by ``PlayerConfig.think_time_ms``
of wall-clock time rather than by an iteration count.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

from ..errors import NoLegalMovesError
from ..game_state import GameState
from ..metrics import MOVE_SELECTION_LATENCY
from ..models import Mark, MovePath, PlayerConfig
from .base import BaseAI
from .mcts_ai import SearchStats
from .pondering import PonderingScheduler

logger = logging.getLogger(__name__)

# Below this a turn is dominated by thread handoff and scheduling noise.
MIN_RELIABLE_THINK_MS = 100


class PonderingMCTSAI(BaseAI):
    """Time-bounded MCTS player with continuous pondering."""

    def __init__(
        self,
        player_mark: Mark,
        config: PlayerConfig,
        *,
        handoff_timeout_s: float = 0.5,
    ):
        super().__init__(player_mark, config)
        self.think_time_s = config.think_time_ms / 1000.0
        if config.think_time_ms < MIN_RELIABLE_THINK_MS:
            logger.warning(
                f"PonderingMCTSAI({player_mark.value}): think time "
                f"{config.think_time_ms}ms is below {MIN_RELIABLE_THINK_MS}ms; "
                "move quality will be unreliable"
            )
        self.scheduler = PonderingScheduler(
            exploration=config.exploration,
            rng=self.rng,
            name=f"metattt-ponder-{player_mark.value}",
            handoff_timeout_s=handoff_timeout_s,
        )

    def on_game_start(self, game_state: GameState) -> None:
        self.scheduler.start_pondering(game_state)

    def observe_move(self, game_state: GameState, move: MovePath) -> None:
        self.scheduler.advance_tree(move, game_state)

    def choose_move(self, game_state: GameState) -> MovePath:
        """Wait out the think time and return the most visited move.

        Raises:
            NoLegalMovesError: ``game_state`` is already decided.
            AITimeoutError: the search did not hand over a move in time.
            PonderingError: the background search has stopped.
        """
        turn_start = time.monotonic()
        if game_state.is_terminal:
            raise NoLegalMovesError(
                "No legal moves: the game is already decided",
                context={"status": str(game_state.status)},
            )

        # No-op when the tree is already rooted here.
        self.scheduler.start_pondering(game_state)
        remaining = turn_start + self.think_time_s - time.monotonic()
        if remaining > 0:
            time.sleep(remaining)
        move = self.scheduler.request_move(time.monotonic())

        elapsed = time.monotonic() - turn_start
        MOVE_SELECTION_LATENCY.labels(player_type=self.config.player_type.value).observe(elapsed)
        logger.debug(
            f"PonderingMCTSAI({self.player_mark.value}): chose {move} after {elapsed:.3f}s"
        )
        self.move_count += 1
        return move

    def snapshot(self) -> Optional[SearchStats]:
        return self.scheduler.snapshot()

    def close(self) -> None:
        self.scheduler.shutdown()
