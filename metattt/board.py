"""Recursive board model.

A board of depth ``d`` holds nine cells in row-major order. Leaf boards
(``d == 0``) hold :class:`~metattt.models.Mark` values; meta boards hold nine
boards of depth ``d - 1``. Boards are immutable: every update returns a new
node that shares all untouched subtrees with the old one, so search trees
and the match runner can hand boards around without copying.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Dict, Iterator, Sequence, Tuple, Union

from .errors import IllegalMoveError, InvalidPathError, InvalidStateError
from .models import BOARD_CELLS, MAX_DEPTH, Mark, MovePath, Status, WinPolicy

Cell = Union[Mark, "Board"]


class Board:
    """Immutable board node of a fixed nesting depth."""

    __slots__ = ("depth", "cells", "_status_cache", "_hash")

    def __init__(self, depth: int, cells: Sequence[Cell]) -> None:
        cells = tuple(cells)
        if len(cells) != BOARD_CELLS:
            raise InvalidStateError(
                f"Board needs {BOARD_CELLS} cells, got {len(cells)}",
                context={"depth": depth},
            )
        for cell in cells:
            _check_cell_kind(depth, cell)
        self.depth = depth
        self.cells: Tuple[Cell, ...] = cells
        # Resolved status per win policy; valid because the node never changes.
        self._status_cache: Dict[WinPolicy, Status] = {}
        self._hash: int | None = None

    @classmethod
    def _trusted(cls, depth: int, cells: Tuple[Cell, ...]) -> "Board":
        # Skips cell validation; cells come from an already valid node.
        board = cls.__new__(cls)
        board.depth = depth
        board.cells = cells
        board._status_cache = {}
        board._hash = None
        return board

    @property
    def is_leaf(self) -> bool:
        return self.depth == 0

    def __iter__(self) -> Iterator[Cell]:
        return iter(self.cells)

    def __getitem__(self, index: int) -> Cell:
        return child_at(self, index)

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Board):
            return NotImplemented
        return self.depth == other.depth and self.cells == other.cells

    def __hash__(self) -> int:
        if self._hash is None:
            self._hash = hash((self.depth, self.cells))
        return self._hash

    def __repr__(self) -> str:
        if self.is_leaf:
            return f"Board(depth=0, '{''.join(m.value for m in self.cells)}')"
        return f"Board(depth={self.depth})"


def _check_cell_kind(depth: int, cell: Any) -> None:
    if depth == 0:
        if not isinstance(cell, Mark):
            raise InvalidStateError(
                "Leaf board cells must be marks",
                context={"cell": repr(cell)},
            )
    elif not isinstance(cell, Board) or cell.depth != depth - 1:
        raise InvalidStateError(
            f"Depth {depth} board cells must be boards of depth {depth - 1}",
            context={"cell": repr(cell)},
        )


@lru_cache(maxsize=None)
def create_board(depth: int) -> Board:
    """Return an empty board of ``depth``.

    The nine children of an empty meta board are the same empty sub-board
    object; that is safe because boards are immutable.
    """
    if not 0 <= depth <= MAX_DEPTH:
        raise InvalidStateError(
            f"Board depth must be within 0..{MAX_DEPTH}",
            context={"depth": depth},
        )
    if depth == 0:
        return Board(0, (Mark.EMPTY,) * BOARD_CELLS)
    return Board(depth, (create_board(depth - 1),) * BOARD_CELLS)


def _check_index(index: Any, path: Any = None, depth: int | None = None) -> int:
    if isinstance(index, bool) or not isinstance(index, int):
        raise InvalidPathError(
            f"Board index must be an int, got {index!r}", path=path, depth=depth
        )
    if not 0 <= index < BOARD_CELLS:
        raise InvalidPathError(
            f"Board index {index} outside 0..{BOARD_CELLS - 1}",
            path=path,
            depth=depth,
        )
    return index


def validate_path(path: Sequence[int], depth: int) -> MovePath:
    """Check ``path`` against a board of ``depth`` and return it as a tuple.

    Raises:
        InvalidPathError: wrong length or an index outside 0..8.
    """
    try:
        path = tuple(path)
    except TypeError:
        raise InvalidPathError(f"Move path must be a sequence, got {path!r}") from None
    if len(path) != depth + 1:
        raise InvalidPathError(
            f"Move path needs {depth + 1} indices for depth {depth}, got {len(path)}",
            path=list(path),
            depth=depth,
        )
    for index in path:
        _check_index(index, path=list(path), depth=depth)
    return path


def child_at(node: Board, index: int) -> Cell:
    """Return the cell (mark or sub-board) at ``index``."""
    return node.cells[_check_index(index, depth=node.depth)]


def with_child_replaced(node: Board, index: int, new_child: Cell) -> Board:
    """Return a copy of ``node`` with one cell swapped.

    ``node`` itself is left untouched, so anyone still holding it keeps a
    consistent view.
    """
    _check_index(index, depth=node.depth)
    cells = list(node.cells)
    cells[index] = new_child
    return Board(node.depth, cells)


def cell_at(node: Board, path: Sequence[int]) -> Mark:
    """Return the leaf mark addressed by a full move path."""
    path = validate_path(path, node.depth)
    current: Cell = node
    for index in path:
        current = current.cells[index]  # type: ignore[union-attr]
    return current  # type: ignore[return-value]


def apply_mark(node: Board, path: Sequence[int], mark: Mark) -> Board:
    """Place ``mark`` at the leaf addressed by ``path``.

    Args:
        node: Root of the (sub)tree to update.
        path: One index per level, root first.
        mark: ``Mark.X`` or ``Mark.O``.

    Returns:
        The new root. Only the nodes along ``path`` are rebuilt.

    Raises:
        InvalidPathError: ``path`` is malformed for ``node.depth``.
        InvalidStateError: ``mark`` is ``Mark.EMPTY``.
        IllegalMoveError: the target cell already holds a mark.
    """
    path = validate_path(path, node.depth)
    if mark is Mark.EMPTY:
        raise InvalidStateError("Cannot clear a cell; marks are permanent")
    return _place(node, path, 0, mark)


def _place(node: Board, path: MovePath, level: int, mark: Mark) -> Board:
    index = path[level]
    cells = list(node.cells)
    if node.depth == 0:
        if cells[index] is not Mark.EMPTY:
            raise IllegalMoveError(
                "Cell is already occupied", path=path, reason="occupied"
            )
        cells[index] = mark
    else:
        cells[index] = _place(cells[index], path, level + 1, mark)  # type: ignore[arg-type]
    return Board._trusted(node.depth, tuple(cells))


def iter_leaf_paths(node: Board) -> Iterator[Tuple[MovePath, Mark]]:
    """Yield every (path, mark) pair of the tree in enumeration order."""
    if node.depth == 0:
        for index, mark in enumerate(node.cells):
            yield (index,), mark  # type: ignore[misc]
        return
    for index, child in enumerate(node.cells):
        for sub_path, mark in iter_leaf_paths(child):  # type: ignore[arg-type]
            yield (index,) + sub_path, mark
