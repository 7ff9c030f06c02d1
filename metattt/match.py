"""Match orchestration.

The orchestrator owns the :class:`GameState`: it asks the player to move
for a move, validates and applies it through :class:`GameEngine`, tells
both players what happened and stops once the root board is decided.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Dict, List, Optional

from .ai.base import BaseAI
from .ai.factory import AIFactory
from .errors import IllegalMoveError, InvalidStateError
from .game_engine import GameEngine
from .game_state import GameState
from .metrics import GAME_MOVES_TOTAL, GAME_OUTCOMES
from .models import (
    Mark,
    MatchConfig,
    MatchResult,
    MatchSummary,
    MovePath,
    PlayerConfig,
    PlayerType,
    RulesConfig,
)
from .render import render_board

logger = logging.getLogger(__name__)

PlayerFactory = Callable[[Mark, PlayerConfig], BaseAI]


class Match:
    """A single game between two players.

    Args:
        players: Player per mark; must contain ``Mark.X`` and ``Mark.O``
        rules: Rule settings for the game
        show_board: Print the board after every move
        output_fn: Where boards and move lines go when ``show_board`` is set
        labels: Player identity per mark, copied into the result
    """

    def __init__(
        self,
        players: Dict[Mark, BaseAI],
        rules: Optional[RulesConfig] = None,
        *,
        show_board: bool = False,
        output_fn: Callable[[str], None] = print,
        labels: Optional[Dict[Mark, str]] = None,
    ):
        missing = [m for m in (Mark.X, Mark.O) if m not in players]
        if missing:
            raise InvalidStateError(
                "A match needs one player per mark",
                context={"missing": [m.value for m in missing]},
            )
        self.players = players
        self.rules = rules or RulesConfig()
        self.show_board = show_board
        self.output_fn = output_fn
        self.labels = labels or {}
        self.state: GameState = GameEngine.initial_state(self.rules)
        self.moves: List[MovePath] = []

    def play(self) -> MatchResult:
        """Play until the root board is won or drawn."""
        start_time = time.monotonic()
        self.state = GameEngine.initial_state(self.rules)
        self.moves = []

        for player in self.players.values():
            player.on_game_start(self.state)
        if self.show_board:
            self.output_fn(render_board(self.state.board, self.rules.win_policy))

        while not self.state.is_terminal:
            mover = self.state.current_player
            player = self.players[mover]
            move = player.choose_move(self.state)
            try:
                self.state = GameEngine.apply_move(self.state, move)
            except IllegalMoveError as e:
                # Only human input may be wrong; anything else is an engine bug.
                if player.config.player_type is PlayerType.HUMAN:
                    raise
                raise InvalidStateError(
                    f"{player!r} produced an illegal move: {e.message}",
                    context={"move": list(move), "reason": e.reason},
                ) from e

            self.moves.append(move)
            for observer in self.players.values():
                observer.observe_move(self.state, move)
            if self.show_board:
                self.output_fn(f"{mover.value} plays {' '.join(str(i) for i in move)}")
                self.output_fn(render_board(self.state.board, self.rules.win_policy))

        winner = self.state.winner
        result = MatchResult(
            winner=winner,
            winner_label=self.labels.get(winner) if winner is not None else None,
            moves=list(self.moves),
            duration_seconds=time.monotonic() - start_time,
        )

        depth = str(self.rules.depth)
        GAME_OUTCOMES.labels(depth=depth, outcome=winner.value if winner else "draw").inc()
        GAME_MOVES_TOTAL.labels(depth=depth).inc(result.num_moves)
        logger.info(
            f"Game over after {result.num_moves} moves: "
            f"{'draw' if winner is None else f'{winner.value} wins'} "
            f"({result.duration_seconds:.2f}s)"
        )
        return result


def _seeded(config: PlayerConfig, offset: int) -> PlayerConfig:
    if config.rng_seed is None:
        return config
    return config.model_copy(update={"rng_seed": config.rng_seed + offset})


def run_matches(
    config: MatchConfig,
    *,
    player_factory: Optional[PlayerFactory] = None,
    output_fn: Callable[[str], None] = print,
) -> MatchSummary:
    """Play ``config.num_matches`` games and tally the results.

    Player 1 always plays X. Players are built fresh for every game (seeds
    shifted by the game index so games differ but stay reproducible) and
    closed afterwards, even when a game fails.
    """
    factory = player_factory or AIFactory.create_from_config
    summary = MatchSummary()
    labels = {Mark.X: config.player_label(1), Mark.O: config.player_label(2)}

    for game_index in range(config.num_matches):
        players: Dict[Mark, BaseAI] = {}
        try:
            players[Mark.X] = factory(Mark.X, _seeded(config.player1, game_index))
            players[Mark.O] = factory(Mark.O, _seeded(config.player2, game_index))
            match = Match(
                players,
                config.rules,
                show_board=config.show_board,
                output_fn=output_fn,
                labels=labels,
            )
            result = match.play()
        finally:
            for player in players.values():
                player.close()

        summary.record(result)
        logger.debug(f"Match {game_index + 1}/{config.num_matches}: winner={result.winner_label}")

    return summary
