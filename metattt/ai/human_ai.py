"""Interactive player reading moves from a text source.

Input and output are injected so the player works with a console, a test
script or any other line-based collaborator.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Optional

from ..board import validate_path
from ..errors import AIError, IllegalMoveError, InvalidPathError, ParseError
from ..game_state import GameState
from ..legality import is_legal
from ..models import Mark, MovePath, PlayerConfig
from .base import BaseAI

logger = logging.getLogger(__name__)

_SEPARATORS = re.compile(r"[\s,;]+")
_INDEX = re.compile(r"[0-9]+")
HELP_COMMANDS = frozenset({"?", "help", "moves"})


def parse_move(raw: str, depth: int) -> MovePath:
    """Turn raw text into a move path for a board of ``depth``.

    Accepts indices separated by whitespace, commas or semicolons
    (``"0 4"``, ``"0,4"``) or a bare digit string (``"04"``).

    Raises:
        ParseError: the text holds something other than indices.
        InvalidPathError: the indices do not form a path for ``depth``.
    """
    text = raw.strip()
    if not text:
        raise ParseError("Empty input", raw_input=raw)

    tokens = [t for t in _SEPARATORS.split(text) if t]
    if len(tokens) == 1 and _INDEX.fullmatch(tokens[0]):
        tokens = list(tokens[0])

    indices = []
    for token in tokens:
        if not _INDEX.fullmatch(token):
            raise ParseError(f"Not an index: {token!r}", raw_input=raw)
        indices.append(int(token))
    return validate_path(indices, depth)


class HumanAI(BaseAI):
    """Player backed by a human typing move paths."""

    def __init__(
        self,
        player_mark: Mark,
        config: PlayerConfig,
        *,
        input_fn: Callable[[str], str] = input,
        output_fn: Callable[[str], None] = print,
        max_attempts: Optional[int] = None,
    ):
        super().__init__(player_mark, config)
        self.input_fn = input_fn
        self.output_fn = output_fn
        self.max_attempts = max_attempts

    def choose_move(self, game_state: GameState) -> MovePath:
        legal = self.get_valid_moves(game_state)
        prompt = (
            f"Player {self.player_mark.value}, enter {game_state.depth + 1} "
            "indices (0-8, '?' lists moves): "
        )
        attempts = 0
        while True:
            attempts += 1
            if self.max_attempts is not None and attempts > self.max_attempts:
                raise AIError(
                    "Too many invalid inputs",
                    context={"max_attempts": self.max_attempts},
                )
            try:
                raw = self.input_fn(prompt)
            except EOFError:
                raise AIError("Input closed while waiting for a move") from None

            if raw.strip().lower() in HELP_COMMANDS:
                for index, move in enumerate(legal):
                    self.output_fn(f"{index}: {' '.join(str(i) for i in move)}")
                attempts -= 1
                continue

            try:
                path = parse_move(raw, game_state.depth)
                if not is_legal(game_state, path):
                    raise IllegalMoveError(
                        "That cell cannot be played right now",
                        path=path,
                        reason="not_legal",
                    )
            except (ParseError, InvalidPathError, IllegalMoveError) as e:
                logger.debug(f"Rejected human input {raw!r}: {e}")
                self.output_fn(f"Invalid move: {e.message}")
                continue

            self.move_count += 1
            return path
