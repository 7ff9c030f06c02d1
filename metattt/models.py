"""
Pydantic Models for metattt
Marks, statuses and the configuration surface shared by the engine,
the players and the match runner.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

# One index per nesting level, root first; length is depth + 1.
MovePath = Tuple[int, ...]

BOARD_SIZE = 3
BOARD_CELLS = BOARD_SIZE * BOARD_SIZE
MAX_DEPTH = 4


class Mark(str, Enum):
    """Cell content of a leaf board"""
    EMPTY = "-"
    X = "X"
    O = "O"  # noqa: E741

    def other(self) -> "Mark":
        if self is Mark.X:
            return Mark.O
        if self is Mark.O:
            return Mark.X
        return Mark.EMPTY

    def to_char(self) -> str:
        return self.value


class StatusKind(str, Enum):
    """Resolution outcome of a board node"""
    IN_PROGRESS = "in_progress"
    WON = "won"
    DRAWN = "drawn"


class Status(BaseModel):
    """Status of a board node.

    ``winner`` is set only for ``StatusKind.WON``. Use the module level
    ``IN_PROGRESS`` / ``DRAWN`` constants and :meth:`won` instead of
    building new instances in hot paths.
    """
    model_config = ConfigDict(frozen=True)

    kind: StatusKind
    winner: Optional[Mark] = None

    @classmethod
    def won(cls, mark: Mark) -> "Status":
        return _WON[mark]

    @property
    def in_progress(self) -> bool:
        return self.kind is StatusKind.IN_PROGRESS

    @property
    def is_won(self) -> bool:
        return self.kind is StatusKind.WON

    @property
    def is_drawn(self) -> bool:
        return self.kind is StatusKind.DRAWN

    def virtual_mark(self) -> Mark:
        """Mark this node contributes to its parent's line check."""
        if self.kind is StatusKind.WON and self.winner is not None:
            return self.winner
        return Mark.EMPTY

    def __str__(self) -> str:
        if self.kind is StatusKind.WON:
            return f"won({self.winner.value})"
        return self.kind.value


IN_PROGRESS = Status(kind=StatusKind.IN_PROGRESS)
DRAWN = Status(kind=StatusKind.DRAWN)
_WON = {
    Mark.X: Status(kind=StatusKind.WON, winner=Mark.X),
    Mark.O: Status(kind=StatusKind.WON, winner=Mark.O),
}


class WinPolicy(str, Enum):
    """When a meta board counts as won.

    EAGER: a line of decided children wins the parent at once, even if
    sibling sub-boards are still being played.
    SETTLED: the parent is only decided once all of its children are.
    """
    EAGER = "eager"
    SETTLED = "settled"


class RulesConfig(BaseModel):
    """Rule settings fixed for a whole game"""
    model_config = ConfigDict(frozen=True, extra="forbid")

    depth: int = Field(1, ge=0, le=MAX_DEPTH)
    win_policy: WinPolicy = WinPolicy.EAGER
    # Previous move (minus its first index) names the sub-board to play in.
    send_to_board: bool = False


class PlayerType(str, Enum):
    """Player type enumeration"""
    HUMAN = "human"
    RANDOM = "random"
    MCTS = "mcts"
    MCTS_ASYNC = "mcts_async"


class PlayerConfig(BaseModel):
    """Player configuration"""
    model_config = ConfigDict(frozen=True, extra="forbid")

    player_type: PlayerType = PlayerType.RANDOM
    name: Optional[str] = None
    # Sync MCTS budget per move.
    iterations: int = Field(1000, ge=1)
    # Async MCTS budget per move; values below ~100ms are unreliable.
    think_time_ms: int = Field(1000, ge=1)
    exploration: float = Field(math.sqrt(2), gt=0)
    rng_seed: Optional[int] = None


class MatchConfig(BaseModel):
    """Configuration of a run of matches"""
    model_config = ConfigDict(frozen=True, extra="forbid")

    rules: RulesConfig = Field(default_factory=RulesConfig)
    num_matches: int = Field(1, ge=1)
    player1: PlayerConfig = Field(default_factory=PlayerConfig)
    player2: PlayerConfig = Field(default_factory=PlayerConfig)
    show_board: bool = False

    def player_label(self, index: int) -> str:
        """Identity used when tallying results (1-based index)."""
        player = self.player1 if index == 1 else self.player2
        return player.name or f"player{index}"


class MatchResult(BaseModel):
    """Outcome of a single game"""
    winner: Optional[Mark] = None
    winner_label: Optional[str] = None
    moves: List[MovePath] = Field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def is_draw(self) -> bool:
        return self.winner is None

    @property
    def num_moves(self) -> int:
        return len(self.moves)


class MatchSummary(BaseModel):
    """Aggregated results over several games"""
    games: int = 0
    wins: Dict[str, int] = Field(default_factory=dict)
    draws: int = 0
    results: List[MatchResult] = Field(default_factory=list)

    def record(self, result: MatchResult) -> None:
        self.games += 1
        self.results.append(result)
        if result.winner_label is None:
            self.draws += 1
        else:
            self.wins[result.winner_label] = self.wins.get(result.winner_label, 0) + 1
