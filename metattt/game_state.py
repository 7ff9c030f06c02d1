"""Immutable game state value."""

from __future__ import annotations

from dataclasses import dataclass, field

from .board import Board, create_board
from .models import Mark, MovePath, RulesConfig, Status
from .resolution import resolve


@dataclass(frozen=True)
class GameState:
    """Root board plus whose turn it is.

    Players only ever receive a GameState; the match runner is the only
    party that produces successor states (through ``GameEngine``).
    """
    board: Board
    current_player: Mark = Mark.X
    rules: RulesConfig = field(default_factory=RulesConfig)
    last_move: MovePath | None = None
    move_count: int = 0

    @classmethod
    def new(cls, rules: RulesConfig | None = None) -> "GameState":
        rules = rules or RulesConfig()
        return cls(board=create_board(rules.depth), rules=rules)

    @property
    def depth(self) -> int:
        return self.board.depth

    @property
    def status(self) -> Status:
        return resolve(self.board, self.rules.win_policy)

    @property
    def is_terminal(self) -> bool:
        return not self.status.in_progress

    @property
    def winner(self) -> Mark | None:
        return self.status.winner
