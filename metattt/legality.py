"""Legal move generation.

A move is legal when every board on its path is still in progress and the
addressed leaf cell is empty. With ``RulesConfig.send_to_board`` the
previous move additionally restricts where the next one may go: dropping
its first index leaves the path of the sub-board the opponent is sent to.
At each level the constraint holds while the targeted child is still in
progress; once it points at a decided child the mover may pick any open
child at that level and is unconstrained below it.
"""

from __future__ import annotations

from typing import Iterator, List, Sequence

from .board import Board, validate_path
from .game_state import GameState
from .models import Mark, MovePath, WinPolicy
from .resolution import resolve


class LegalMoves:
    """Lazy, restartable sequence of the legal moves of a state.

    Each iteration walks the board again, so the object can be consumed
    several times. Moves come out in enumeration order: ascending index at
    every level, root first.
    """

    __slots__ = ("_state",)

    def __init__(self, state: GameState) -> None:
        self._state = state

    def __iter__(self) -> Iterator[MovePath]:
        state = self._state
        return _iter_moves(
            state.board,
            (),
            _send_target(state),
            state.rules.win_policy,
        )

    def __bool__(self) -> bool:
        return next(iter(self), None) is not None

    def __repr__(self) -> str:
        return f"LegalMoves(move_count={self._state.move_count})"


def legal_moves(state: GameState) -> LegalMoves:
    return LegalMoves(state)


def list_legal_moves(state: GameState) -> List[MovePath]:
    return list(LegalMoves(state))


def _send_target(state: GameState) -> MovePath:
    if not state.rules.send_to_board or state.last_move is None:
        return ()
    return state.last_move[1:]


def _iter_moves(
    node: Board,
    prefix: MovePath,
    target: MovePath,
    policy: WinPolicy,
) -> Iterator[MovePath]:
    if not resolve(node, policy).in_progress:
        return
    cells = node.cells
    if node.depth == 0:
        for index, mark in enumerate(cells):
            if mark is Mark.EMPTY:
                yield prefix + (index,)
        return

    if target and resolve(cells[target[0]], policy).in_progress:  # type: ignore[arg-type]
        index = target[0]
        yield from _iter_moves(cells[index], prefix + (index,), target[1:], policy)  # type: ignore[arg-type]
        return

    for index, child in enumerate(cells):
        yield from _iter_moves(child, prefix + (index,), (), policy)  # type: ignore[arg-type]


def is_legal(state: GameState, path: Sequence[int]) -> bool:
    """Return whether ``path`` may be played in ``state``.

    Raises:
        InvalidPathError: ``path`` is malformed for the board depth.
    """
    path = validate_path(path, state.depth)
    policy = state.rules.win_policy
    target = _send_target(state)
    node = state.board

    for index in path[:-1]:
        if not resolve(node, policy).in_progress:
            return False
        if target:
            sent_to = target[0]
            if resolve(node.cells[sent_to], policy).in_progress:  # type: ignore[arg-type]
                if index != sent_to:
                    return False
                target = target[1:]
            else:
                target = ()
        node = node.cells[index]  # type: ignore[assignment]

    if not resolve(node, policy).in_progress:
        return False
    return node.cells[path[-1]] is Mark.EMPTY
