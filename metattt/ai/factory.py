"""Player factory for metattt.

All player construction should go through this factory so that match
runners, the CLI and tests configure players the same way.

Usage:
    from metattt.ai.factory import AIFactory
    from metattt.models import Mark, PlayerConfig, PlayerType

    player = AIFactory.create(
        PlayerType.MCTS,
        Mark.X,
        PlayerConfig(player_type=PlayerType.MCTS, iterations=500),
    )

    # Register a custom implementation
    AIFactory.register("greedy", GreedyAI)
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Union

from ..errors import ConfigurationError
from ..models import Mark, PlayerConfig, PlayerType

if TYPE_CHECKING:
    from .base import BaseAI

logger = logging.getLogger(__name__)


class AIFactory:
    """Centralized factory for creating players.

    Built-in player classes are imported lazily; custom constructors can be
    registered at runtime under a string identifier.
    """

    # Maps string identifiers to callables taking (player_mark, config)
    _custom_registry: dict[str, Callable[..., BaseAI]] = {}

    # Cache for imported player classes (lazy loading)
    _class_cache: dict[PlayerType, type[BaseAI]] = {}

    @classmethod
    def register(cls, identifier: str, constructor: Callable[..., BaseAI]) -> None:
        """Register a custom player implementation.

        Args:
            identifier: Unique string identifier for the player type
            constructor: Callable accepting ``(player_mark, config)``
        """
        if identifier in cls._custom_registry:
            logger.warning(f"Overwriting existing custom player: {identifier}")
        cls._custom_registry[identifier] = constructor
        logger.debug(f"Registered custom player: {identifier}")

    @classmethod
    def unregister(cls, identifier: str) -> bool:
        """Remove a custom player. Returns True if it was registered."""
        if identifier in cls._custom_registry:
            del cls._custom_registry[identifier]
            logger.debug(f"Unregistered custom player: {identifier}")
            return True
        return False

    @classmethod
    def list_registered(cls) -> dict[str, str]:
        """Map every known identifier to a short description."""
        result = {}
        for player_type in PlayerType:
            result[player_type.value] = f"Built-in: {player_type.name}"
        for identifier, constructor in cls._custom_registry.items():
            doc = getattr(constructor, "__doc__", None) or "Custom player"
            result[identifier] = f"Custom: {doc.split(chr(10))[0]}"
        return result

    @classmethod
    def _get_ai_class(cls, player_type: PlayerType) -> type[BaseAI]:
        """Get the player class for a given type, with lazy loading.

        Raises:
            ConfigurationError: If the player type is not supported
        """
        if player_type in cls._class_cache:
            return cls._class_cache[player_type]

        # Lazy imports keep the threaded player out of plain imports
        if player_type == PlayerType.RANDOM:
            from .random_ai import RandomAI
            ai_class = RandomAI
        elif player_type == PlayerType.HUMAN:
            from .human_ai import HumanAI
            ai_class = HumanAI
        elif player_type == PlayerType.MCTS:
            from .mcts_ai import MCTSAI
            ai_class = MCTSAI
        elif player_type == PlayerType.MCTS_ASYNC:
            from .pondering_mcts_ai import PonderingMCTSAI
            ai_class = PonderingMCTSAI
        else:
            raise ConfigurationError(
                f"Unsupported player type: {player_type}",
                context={"player_type": str(player_type)},
            )

        cls._class_cache[player_type] = ai_class
        return ai_class

    @classmethod
    def create(
        cls,
        player_type: Union[PlayerType, str],
        player_mark: Mark,
        config: PlayerConfig,
        **kwargs: Any,
    ) -> BaseAI:
        """Create a player with explicit type and configuration.

        Args:
            player_type: Built-in :class:`PlayerType` or a registered identifier
            player_mark: The mark the player places
            config: Player configuration
            **kwargs: Passed through to the player constructor (e.g.
                ``input_fn`` for human players)

        Raises:
            ConfigurationError: If the player type is unknown
        """
        if isinstance(player_type, str) and player_type in cls._custom_registry:
            return cls._custom_registry[player_type](player_mark, config, **kwargs)
        try:
            resolved = PlayerType(player_type)
        except ValueError:
            raise ConfigurationError(
                f"Unknown player type: {player_type!r}",
                context={"known": sorted(cls.list_registered())},
            ) from None
        ai_class = cls._get_ai_class(resolved)
        return ai_class(player_mark, config, **kwargs)

    @classmethod
    def create_from_config(cls, player_mark: Mark, config: PlayerConfig, **kwargs: Any) -> BaseAI:
        """Create the player described by ``config.player_type``."""
        return cls.create(config.player_type, player_mark, config, **kwargs)

    @classmethod
    def clear_cache(cls) -> None:
        """Clear the class cache. Useful for testing."""
        cls._class_cache.clear()
