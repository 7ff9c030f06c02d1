"""Win/draw resolution over nested boards.

Leaf boards use plain tic-tac-toe rules. A meta board maps each child's
status to a "virtual mark" (the winner for won children, nothing for drawn
or unfinished ones) and runs the same line check over those nine marks.
How unfinished children interact with a completed line is governed by
:class:`~metattt.models.WinPolicy`.
"""

from __future__ import annotations

from typing import FrozenSet, Sequence

from .board import Board
from .models import DRAWN, IN_PROGRESS, Mark, Status, WinPolicy

WIN_LINES = (
    (0, 1, 2), (3, 4, 5), (6, 7, 8),  # rows
    (0, 3, 6), (1, 4, 7), (2, 5, 8),  # columns
    (0, 4, 8), (2, 4, 6),  # diagonals
)


def line_winner(marks: Sequence[Mark]) -> Mark | None:
    """First player owning a complete line, or None."""
    for a, b, c in WIN_LINES:
        mark = marks[a]
        if mark is not Mark.EMPTY and mark is marks[b] and mark is marks[c]:
            return mark
    return None


def line_owners(marks: Sequence[Mark]) -> FrozenSet[Mark]:
    """Every player owning at least one complete line."""
    owners = set()
    for a, b, c in WIN_LINES:
        mark = marks[a]
        if mark is not Mark.EMPTY and mark is marks[b] and mark is marks[c]:
            owners.add(mark)
    return frozenset(owners)


def resolve(node: Board, policy: WinPolicy = WinPolicy.EAGER) -> Status:
    """Return the status of ``node`` under ``policy``.

    The result is memoized on the node; boards never change after
    construction, so a cached status can never go stale.
    """
    cached = node._status_cache.get(policy)
    if cached is not None:
        return cached

    if node.depth == 0:
        status = _resolve_leaf(node.cells)  # type: ignore[arg-type]
    else:
        child_statuses = [resolve(child, policy) for child in node.cells]  # type: ignore[arg-type]
        if policy is WinPolicy.SETTLED:
            status = _resolve_settled(child_statuses)
        else:
            status = _resolve_eager(child_statuses)

    node._status_cache[policy] = status
    return status


def _resolve_leaf(marks: Sequence[Mark]) -> Status:
    winner = line_winner(marks)
    if winner is not None:
        return Status.won(winner)
    if Mark.EMPTY in marks:
        return IN_PROGRESS
    return DRAWN


def _resolve_eager(child_statuses: Sequence[Status]) -> Status:
    winner = line_winner([s.virtual_mark() for s in child_statuses])
    if winner is not None:
        return Status.won(winner)
    if any(s.in_progress for s in child_statuses):
        return IN_PROGRESS
    return DRAWN


def _resolve_settled(child_statuses: Sequence[Status]) -> Status:
    if any(s.in_progress for s in child_statuses):
        return IN_PROGRESS
    owners = line_owners([s.virtual_mark() for s in child_statuses])
    if len(owners) == 1:
        (winner,) = owners
        return Status.won(winner)
    # No line, or both players completed one.
    return DRAWN
