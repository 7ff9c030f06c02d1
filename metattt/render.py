"""Plain-text board rendering.

Leaf cells print as ``X``, ``O`` or ``-``. Sub-boards are laid out in a
3x3 grid separated by ``d`` blank columns and ``d`` blank rows at meta
depth ``d``, which gives square pictures of 3, 11 and 37 characters for
depths 0, 1 and 2. A won sub-board is replaced by an empty block with the
winner's mark in its four corners and its centre.
"""

from __future__ import annotations

from typing import List

from .board import Board
from .models import BOARD_SIZE, WinPolicy
from .resolution import resolve


def display_size(depth: int) -> int:
    """Side length in characters of a rendered board of ``depth``."""
    size = BOARD_SIZE
    for level in range(1, depth + 1):
        size = size * BOARD_SIZE + (BOARD_SIZE - 1) * level
    return size


def render_board(board: Board, policy: WinPolicy = WinPolicy.EAGER) -> str:
    size = display_size(board.depth)
    grid = [[" "] * size for _ in range(size)]
    _fill(grid, board, 0, 0, policy)
    return "\n".join("".join(row) for row in grid)


def _fill(grid: List[List[str]], node: Board, top: int, left: int, policy: WinPolicy) -> None:
    if node.is_leaf:
        for index, mark in enumerate(node.cells):
            row, col = divmod(index, BOARD_SIZE)
            grid[top + row][left + col] = mark.to_char()
        return

    sub_size = display_size(node.depth - 1)
    stride = sub_size + node.depth
    for index, child in enumerate(node.cells):
        row, col = divmod(index, BOARD_SIZE)
        sub_top = top + row * stride
        sub_left = left + col * stride
        status = resolve(child, policy)
        if status.is_won:
            _stamp(grid, sub_top, sub_left, sub_size, status.winner.to_char())
        else:
            _fill(grid, child, sub_top, sub_left, policy)


def _stamp(grid: List[List[str]], top: int, left: int, size: int, symbol: str) -> None:
    last = size - 1
    for row, col in ((0, 0), (0, last), (last, 0), (last, last), (size // 2, size // 2)):
        grid[top + row][left + col] = symbol
