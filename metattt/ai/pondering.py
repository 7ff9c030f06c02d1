"""Background search that keeps thinking between turns.

:class:`PonderingScheduler` owns one worker thread and one
:class:`~metattt.ai.mcts_ai.MCTSSearch`. The tree lives on the worker only;
the caller talks to it through a FIFO command queue and gets answers back
through :class:`concurrent.futures.Future` objects, so the rollout loop never
takes a lock. Commands are picked up between iterations, never in the
middle of a rollout.
"""

from __future__ import annotations

import logging
import queue
import random
import threading
import time
from collections import deque
from concurrent.futures import Future
from concurrent.futures import InvalidStateError as FutureStateError
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from typing import Any, Optional, Union

from ..errors import AITimeoutError, NoLegalMovesError, PonderingError
from ..game_state import GameState
from ..metrics import MCTS_ITERATIONS
from ..models import MovePath
from .mcts_ai import DEFAULT_EXPLORATION, MCTSSearch, SearchStats

logger = logging.getLogger(__name__)

# Flush the iteration counter to metrics this often.
_REPORT_EVERY = 1024


@dataclass(frozen=True)
class _StartPondering:
    state: GameState


@dataclass(frozen=True)
class _AdvanceTree:
    move: MovePath
    state: Optional[GameState]


@dataclass(frozen=True)
class _MoveRequest:
    deadline: float
    future: Future
    min_visits: int = 1


@dataclass(frozen=True)
class _SnapshotRequest:
    future: Future


class _Shutdown:
    pass


_Command = Union[_StartPondering, _AdvanceTree, _MoveRequest, _SnapshotRequest, _Shutdown]


def _settle(future: Future, result: Any = None, error: Optional[BaseException] = None) -> None:
    if future.done():
        return
    try:
        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(result)
    except FutureStateError:
        # The requester gave up and cancelled between done() and set_*.
        pass


class PonderingScheduler:
    """Runs MCTS continuously on a background thread.

    The thread starts in the constructor and idles until the first
    :meth:`start_pondering`. Call :meth:`shutdown` (or use the scheduler as a
    context manager) to stop and join it.
    """

    def __init__(
        self,
        *,
        exploration: float = DEFAULT_EXPLORATION,
        rng: Optional[random.Random] = None,
        name: str = "metattt-ponder",
        idle_poll_s: float = 0.05,
        handoff_timeout_s: float = 0.5,
    ) -> None:
        self._exploration = exploration
        self._rng = rng or random.Random()
        self._idle_poll_s = max(0.001, float(idle_poll_s))
        self._handoff_timeout_s = max(0.0, float(handoff_timeout_s))

        self._commands: queue.Queue[_Command] = queue.Queue()
        self._stop = threading.Event()
        self._failure: Optional[BaseException] = None

        # Worker-owned; never touched from the caller's thread.
        self._search: Optional[MCTSSearch] = None
        self._pending: deque[_MoveRequest] = deque()
        self._unreported_iterations = 0

        self._thread = threading.Thread(target=self._run, name=name, daemon=True)
        self._thread.start()

    # ------------------------------------------------------------------
    # Caller side
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self._thread.is_alive() and not self._stop.is_set()

    def start_pondering(self, state: GameState) -> None:
        """Search from ``state`` from now on. Returns immediately.

        If ``state`` is the current root, or one move below it, the tree
        is kept; otherwise it is rebuilt.
        """
        self._submit(_StartPondering(state))

    def advance_tree(self, move: MovePath, state: Optional[GameState] = None) -> None:
        """Tell the search that ``move`` was committed. Returns immediately."""
        self._submit(_AdvanceTree(tuple(move), state))

    def request_move(self, deadline: float, *, min_visits: int = 1) -> MovePath:
        """Block until the worker hands over its current best move.

        The worker answers at the next iteration boundary, as soon as the
        root children hold at least ``min_visits`` visits. Past ``deadline``
        (a ``time.monotonic()`` value) a search still below that floor
        answers with whatever it has.

        Raises:
            AITimeoutError: no answer within ``handoff_timeout_s`` after the
                deadline.
            PonderingError: the worker is not running.
            NoLegalMovesError: the searched position is already decided.
        """
        future: Future = Future()
        self._submit(_MoveRequest(deadline, future, max(1, min_visits)))
        wait_s = max(0.0, deadline - time.monotonic()) + self._handoff_timeout_s
        try:
            return future.result(timeout=wait_s)
        except FutureTimeoutError:
            future.cancel()
            raise AITimeoutError(
                "Pondering task did not hand over a move in time",
                time_limit_ms=int(wait_s * 1000),
            ) from None

    def snapshot(self, timeout: Optional[float] = None) -> Optional[SearchStats]:
        """Current tree statistics, or None before the first position."""
        future: Future = Future()
        self._submit(_SnapshotRequest(future))
        wait_s = self._handoff_timeout_s if timeout is None else timeout
        try:
            return future.result(timeout=wait_s)
        except FutureTimeoutError:
            future.cancel()
            raise AITimeoutError(
                "Pondering task did not answer a snapshot request in time",
                time_limit_ms=int(wait_s * 1000),
            ) from None

    def shutdown(self, timeout: Optional[float] = 5.0) -> None:
        """Stop the worker and wait for it. Safe to call more than once."""
        if not self._stop.is_set():
            self._stop.set()
            self._commands.put(_Shutdown())
        if self._thread is not threading.current_thread():
            self._thread.join(timeout)
        if self._thread.is_alive():
            logger.warning(f"Pondering thread {self._thread.name} did not stop in time")
            return
        self._fail_outstanding(PonderingError("Pondering task has shut down"))

    def __enter__(self) -> "PonderingScheduler":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.shutdown()

    def _submit(self, command: _Command) -> None:
        if self._failure is not None:
            raise PonderingError(
                "Pondering task failed", original_error=self._failure
            )
        if not self.is_running:
            raise PonderingError("Pondering task is not running")
        self._commands.put(command)

    # ------------------------------------------------------------------
    # Worker side
    # ------------------------------------------------------------------

    def _run(self) -> None:
        try:
            while not self._stop.is_set():
                searching = self._search is not None and self._search.can_search
                if not self._drain_commands(block=not searching):
                    break
                self._answer_due_requests()

                search = self._search
                if search is not None and search.can_search:
                    search.run_iteration()
                    self._unreported_iterations += 1
                    if self._unreported_iterations >= _REPORT_EVERY:
                        self._flush_metrics()
        except Exception as e:
            logger.exception(f"Pondering worker crashed: {e}")
            self._failure = e
        finally:
            self._flush_metrics()
            error = (
                PonderingError("Pondering task failed", original_error=self._failure)
                if self._failure is not None
                else PonderingError("Pondering task has shut down")
            )
            self._fail_outstanding(error)

    def _drain_commands(self, block: bool) -> bool:
        """Handle every queued command. False once shutdown was requested."""
        wait_s: Optional[float] = self._idle_poll_s if block else None
        while True:
            try:
                if wait_s:
                    command = self._commands.get(timeout=wait_s)
                else:
                    command = self._commands.get_nowait()
            except queue.Empty:
                return True
            wait_s = None
            if isinstance(command, _Shutdown):
                return False
            self._handle(command)

    def _handle(self, command: _Command) -> None:
        if isinstance(command, _StartPondering):
            if self._search is None:
                self._search = MCTSSearch(
                    command.state, exploration=self._exploration, rng=self._rng
                )
            else:
                reused = self._search.sync_to(command.state)
                logger.debug(f"Pondering from move {command.state.move_count} (reused={reused})")
        elif isinstance(command, _AdvanceTree):
            if self._search is None:
                if command.state is not None:
                    self._search = MCTSSearch(
                        command.state, exploration=self._exploration, rng=self._rng
                    )
            else:
                reused = self._search.advance(command.move, command.state)
                logger.debug(f"Advanced tree by {command.move} (reused={reused})")
        elif isinstance(command, _MoveRequest):
            self._pending.append(command)
        elif isinstance(command, _SnapshotRequest):
            stats = self._search.stats() if self._search is not None else None
            _settle(command.future, stats)

    def _answer_due_requests(self) -> None:
        while self._pending:
            request = self._pending[0]
            if request.future.done():
                # Requester timed out and cancelled.
                self._pending.popleft()
                continue
            search = self._search
            if search is None:
                _settle(
                    request.future,
                    error=PonderingError("No position to search; call start_pondering first"),
                )
            elif not search.can_search:
                _settle(
                    request.future,
                    error=NoLegalMovesError("Searched position is already decided"),
                )
            else:
                child_visits = sum(c.visits for c in search.root.children)
                below_floor = child_visits < request.min_visits
                if child_visits == 0 or (below_floor and time.monotonic() < request.deadline):
                    # Below the reliability floor; keep searching.
                    return
                _settle(request.future, search.best_move())
                self._flush_metrics()
            self._pending.popleft()

    def _flush_metrics(self) -> None:
        if self._unreported_iterations:
            MCTS_ITERATIONS.labels(mode="async").inc(self._unreported_iterations)
            self._unreported_iterations = 0

    def _fail_outstanding(self, error: BaseException) -> None:
        while self._pending:
            _settle(self._pending.popleft().future, error=error)
        while True:
            try:
                command = self._commands.get_nowait()
            except queue.Empty:
                break
            future = getattr(command, "future", None)
            if future is not None:
                _settle(future, error=error)
