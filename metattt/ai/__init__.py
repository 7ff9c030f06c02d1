"""Players for metattt.

The recommended entry point is the factory:

    from metattt.ai import AIFactory
    player = AIFactory.create(PlayerType.MCTS, Mark.X, config)

Architecture:
- base.py: BaseAI abstract base class
- factory.py: AIFactory for creating players
- human_ai.py: Text input player
- random_ai.py: Uniform random baseline
- mcts_ai.py: Monte Carlo Tree Search engine and the synchronous player
- pondering.py: Background search thread with a command queue
- pondering_mcts_ai.py: Time-bounded MCTS player that ponders between turns
"""

from .base import BaseAI
from .factory import AIFactory

# Lazy-load implementations so importing the package stays cheap
_AI_CLASSES = {
    "HumanAI": "metattt.ai.human_ai",
    "RandomAI": "metattt.ai.random_ai",
    "MCTSAI": "metattt.ai.mcts_ai",
    "MCTSSearch": "metattt.ai.mcts_ai",
    "PonderingScheduler": "metattt.ai.pondering",
    "PonderingMCTSAI": "metattt.ai.pondering_mcts_ai",
}


def __getattr__(name: str):
    """Lazy loading for player implementation classes."""
    if name in _AI_CLASSES:
        import importlib
        module = importlib.import_module(_AI_CLASSES[name])
        return getattr(module, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "AIFactory",
    "BaseAI",
    "HumanAI",
    "MCTSAI",
    "MCTSSearch",
    "PonderingMCTSAI",
    "PonderingScheduler",
    "RandomAI",
]
