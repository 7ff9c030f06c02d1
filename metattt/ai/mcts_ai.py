"""MCTS player implementation for metattt.

This module implements the Monte Carlo Tree Search engine shared by both
search players, plus the synchronous fixed-iteration player.

Each iteration runs the four classic phases:

- Selection: descend through fully expanded nodes by UCT,
  ``mean + C * sqrt(ln(N) / n)``; ties go to the earliest child.
- Expansion: materialize one child for the first untried move, in
  ``legal_moves`` enumeration order.
- Simulation: play uniformly random legal moves until the game is decided.
- Backpropagation: every node from the new child up to the root gets one
  visit and +1 / 0 / -1 for a win / draw / loss of the player who moved
  into it.

The move handed back is the root child with the most visits. The search
object can also be re-rooted after a move (:meth:`MCTSSearch.advance`) so
the pondering player can carry statistics across turns.
"""

from __future__ import annotations

import logging
import math
import random
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

import numpy as np

from ..errors import NoLegalMovesError
from ..game_engine import GameEngine
from ..game_state import GameState
from ..legality import list_legal_moves
from ..metrics import MCTS_ITERATIONS, MCTS_TREE_REUSE, MOVE_SELECTION_LATENCY
from ..models import Mark, MovePath, PlayerConfig
from .base import BaseAI

logger = logging.getLogger(__name__)

DEFAULT_EXPLORATION = math.sqrt(2)


class MCTSNode:
    """Search tree node.

    Each node owns its own :class:`GameState` snapshot. States share board
    structure with their parent, so this costs one path of board nodes per
    tree node.
    """

    __slots__ = (
        "state",
        "parent",
        "move",
        "children",
        "untried_moves",
        "visits",
        "reward_sum",
        "player_just_moved",
    )

    def __init__(
        self,
        state: GameState,
        parent: Optional["MCTSNode"] = None,
        move: Optional[MovePath] = None,
    ) -> None:
        self.state = state
        self.parent = parent
        self.move = move
        self.children: List["MCTSNode"] = []
        # Stored reversed so pop() hands out moves in enumeration order.
        self.untried_moves: List[MovePath] = list_legal_moves(state)[::-1]
        self.visits = 0
        self.reward_sum = 0.0
        self.player_just_moved: Mark = state.current_player.other()

    @property
    def mean_reward(self) -> float:
        return self.reward_sum / self.visits if self.visits else 0.0

    def uct_select_child(self, exploration: float = DEFAULT_EXPLORATION) -> "MCTSNode":
        """Select the child maximising UCT; the first one wins ties."""
        log_visits = math.log(max(1, self.visits))

        def uct_value(child: "MCTSNode") -> float:
            if child.visits == 0:
                return math.inf
            return child.reward_sum / child.visits + exploration * math.sqrt(
                log_visits / child.visits
            )

        return max(self.children, key=uct_value)

    def add_child(self) -> "MCTSNode":
        """Expand the next untried move."""
        move = self.untried_moves.pop()
        state = GameEngine.apply_move(self.state, move, validate=False)
        child = MCTSNode(state, parent=self, move=move)
        self.children.append(child)
        return child

    def child_for(self, move: MovePath) -> Optional["MCTSNode"]:
        for child in self.children:
            if child.move == move:
                return child
        return None

    def update(self, winner: Optional[Mark]) -> None:
        """Update node stats with a rollout outcome."""
        self.visits += 1
        if winner is None:
            return
        self.reward_sum += 1.0 if winner is self.player_just_moved else -1.0


@dataclass(frozen=True)
class SearchStats:
    """Point-in-time summary of a search tree."""
    root_visits: int
    child_visits: int
    iterations_run: int
    node_count: int
    best_move: Optional[MovePath]


class MCTSSearch:
    """A search tree plus the loop that grows it.

    Not thread-safe: exactly one thread may drive a given instance.
    """

    def __init__(
        self,
        root_state: GameState,
        *,
        exploration: float = DEFAULT_EXPLORATION,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.exploration = exploration
        self.rng = rng or random.Random()
        self.root = MCTSNode(root_state)
        self.iterations_run = 0

    @property
    def root_state(self) -> GameState:
        return self.root.state

    @property
    def can_search(self) -> bool:
        return not self.root.state.is_terminal

    def run_iteration(self) -> None:
        node = self.root

        # Selection
        while not node.untried_moves and node.children:
            node = node.uct_select_child(self.exploration)

        # Expansion
        if node.untried_moves:
            node = node.add_child()

        # Simulation
        winner = self._rollout(node.state)

        # Backpropagation
        while node is not None:
            node.update(winner)
            node = node.parent

        self.iterations_run += 1

    def run(
        self,
        iterations: Optional[int] = None,
        deadline: Optional[float] = None,
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> int:
        """Run iterations until a budget is exhausted.

        Args:
            iterations: Maximum number of iterations.
            deadline: ``time.monotonic()`` value after which to stop.
            should_stop: Polled between iterations; True stops the loop.

        Returns:
            Number of iterations run by this call.
        """
        if iterations is None and deadline is None and should_stop is None:
            raise ValueError("MCTSSearch.run needs an iterations, deadline or stop budget")

        ran = 0
        while self.can_search:
            if iterations is not None and ran >= iterations:
                break
            if deadline is not None and time.monotonic() >= deadline:
                break
            if should_stop is not None and should_stop():
                break
            self.run_iteration()
            ran += 1
        return ran

    def _rollout(self, state: GameState) -> Optional[Mark]:
        rng = self.rng
        while True:
            status = state.status
            if not status.in_progress:
                return status.winner
            moves = list_legal_moves(state)
            state = GameEngine.apply_move(state, rng.choice(moves), validate=False)

    def visit_counts(self) -> np.ndarray:
        """Visit count of every root child, in expansion order."""
        return np.array([c.visits for c in self.root.children], dtype=np.int64)

    def visit_distribution(self) -> Dict[MovePath, float]:
        """Normalized root visit distribution keyed by move."""
        counts = self.visit_counts()
        total = counts.sum()
        if total == 0:
            return {}
        probs = counts / total
        return {
            child.move: float(p) for child, p in zip(self.root.children, probs)
        }

    def best_move(self) -> MovePath:
        """Root child with the most visits (first one on ties).

        Raises:
            NoLegalMovesError: the root has not been expanded, which only
                happens for decided positions or before the first iteration.
        """
        if not self.root.children:
            raise NoLegalMovesError(
                "Search tree has no root children to choose from",
                context={"terminal": self.root.state.is_terminal},
            )
        best = int(np.argmax(self.visit_counts()))
        return self.root.children[best].move  # type: ignore[return-value]

    def principal_variation(self, max_length: Optional[int] = None) -> List[MovePath]:
        """Expected line of play: follow the most visited child from the root.

        Stops at the first node without visited children, or after
        ``max_length`` moves.
        """
        line: List[MovePath] = []
        node = self.root
        while max_length is None or len(line) < max_length:
            visited = [c for c in node.children if c.visits > 0]
            if not visited:
                break
            node = max(visited, key=lambda c: c.visits)
            line.append(node.move)  # type: ignore[arg-type]
        return line

    def stats(self) -> SearchStats:
        node_count = 0
        stack = [self.root]
        while stack:
            node = stack.pop()
            node_count += 1
            stack.extend(node.children)
        return SearchStats(
            root_visits=self.root.visits,
            child_visits=sum(c.visits for c in self.root.children),
            iterations_run=self.iterations_run,
            node_count=node_count,
            best_move=self.best_move() if self.root.children else None,
        )

    def reset(self, state: GameState) -> None:
        """Drop the whole tree and start over from ``state``."""
        self.root = MCTSNode(state)

    def _reroot(self, child: MCTSNode) -> None:
        child.parent = None
        self.root = child

    def advance(self, move: MovePath, state: Optional[GameState] = None) -> bool:
        """Re-root the tree after ``move`` was committed.

        Keeps the subtree of the matching child and drops everything else.
        When the move was never expanded the tree is rebuilt from
        ``state`` (or from the root state with ``move`` applied).

        Returns:
            True if the existing subtree was kept.
        """
        move = tuple(move)
        child = self.root.child_for(move)
        if child is not None and (state is None or child.state == state):
            self._reroot(child)
            MCTS_TREE_REUSE.labels(outcome="hit").inc()
            return True

        if state is None:
            state = GameEngine.apply_move(self.root.state, move)
        self.reset(state)
        MCTS_TREE_REUSE.labels(outcome="miss").inc()
        return False

    def sync_to(self, state: GameState) -> bool:
        """Point the root at ``state``, reusing the tree where possible.

        Returns:
            True if existing statistics were kept.
        """
        if self.root.state == state:
            return True
        if state.last_move is not None:
            child = self.root.child_for(state.last_move)
            if child is not None and child.state == state:
                self._reroot(child)
                MCTS_TREE_REUSE.labels(outcome="hit").inc()
                return True
        self.reset(state)
        MCTS_TREE_REUSE.labels(outcome="miss").inc()
        return False


class MCTSAI(BaseAI):
    """Synchronous Monte Carlo Tree Search player.

    Builds a fresh tree for every move, runs exactly
    ``config.iterations`` iterations on the calling thread and throws the
    tree away afterwards. With a fixed ``rng_seed`` the chosen moves are
    reproducible.
    """

    def __init__(self, player_mark: Mark, config: PlayerConfig):
        super().__init__(player_mark, config)
        self.iterations = config.iterations
        self.exploration = config.exploration
        self.last_stats: Optional[SearchStats] = None

    def choose_move(self, game_state: GameState) -> MovePath:
        """Select the best move using MCTS."""
        if game_state.is_terminal:
            raise NoLegalMovesError(
                "No legal moves: the game is already decided",
                context={"status": str(game_state.status)},
            )

        start = time.monotonic()
        search = MCTSSearch(game_state, exploration=self.exploration, rng=self.rng)
        ran = search.run(iterations=self.iterations)
        move = search.best_move()
        elapsed = time.monotonic() - start

        MCTS_ITERATIONS.labels(mode="sync").inc(ran)
        MOVE_SELECTION_LATENCY.labels(player_type=self.config.player_type.value).observe(elapsed)
        self.last_stats = search.stats()
        self._log_stats(elapsed)
        if logger.isEnabledFor(logging.DEBUG):
            pv = " ".join("".join(str(i) for i in m) for m in search.principal_variation(8))
            logger.debug(f"MCTSAI({self.player_mark.value}): pv {pv}")
        self.move_count += 1
        return move

    def _log_stats(self, elapsed: float) -> None:
        stats = self.last_stats
        if stats is None:
            return
        logger.debug(
            f"MCTSAI({self.player_mark.value}): {stats.iterations_run} iterations "
            f"in {elapsed:.3f}s, {stats.node_count} nodes, best={stats.best_move}"
        )
