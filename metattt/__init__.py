"""metattt: generalized (nested) tic-tac-toe with Monte Carlo Tree Search players.

    from metattt import GameEngine, RulesConfig

    state = GameEngine.initial_state(RulesConfig(depth=1))
    state = GameEngine.apply_move(state, (4, 4))
"""

from .errors import MetaTTTError
from .game_engine import GameEngine
from .game_state import GameState
from .models import Mark, MatchConfig, PlayerConfig, PlayerType, RulesConfig, WinPolicy

__version__ = "0.1.0"

__all__ = [
    "GameEngine",
    "GameState",
    "Mark",
    "MatchConfig",
    "MetaTTTError",
    "PlayerConfig",
    "PlayerType",
    "RulesConfig",
    "WinPolicy",
    "__version__",
]
