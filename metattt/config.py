"""Run configuration loading.

A run is described by a :class:`~metattt.models.MatchConfig`. Values come
from an optional YAML file shaped like the model::

    num_matches: 10
    rules:
      depth: 2
      win_policy: settled
    player1:
      player_type: mcts
      iterations: 2000
    player2:
      player_type: mcts_async
      think_time_ms: 500

and are then overridden by nested ``overrides`` (typically built from
command-line flags). Anything pydantic rejects becomes a
:class:`~metattt.errors.ConfigurationError`.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml
from pydantic import ValidationError as PydanticValidationError

from .errors import ConfigurationError
from .models import MatchConfig

logger = logging.getLogger(__name__)


def deep_merge(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge ``overrides`` into a copy of ``base``; nested dicts merge key-wise."""
    merged: Dict[str, Any] = dict(base)
    for key, value in overrides.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_yaml_file(path: Union[str, Path]) -> Dict[str, Any]:
    """Read a YAML mapping from ``path``. An empty file is an empty mapping."""
    path = Path(path)
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigurationError(
            f"Config file not found: {path}", context={"path": str(path)}
        ) from None
    except OSError as e:
        raise ConfigurationError(
            f"Config file cannot be read: {e.strerror or e}", context={"path": str(path)}
        ) from e
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Config file is not valid YAML: {e}", context={"path": str(path)}
        ) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            "Config file must contain a mapping at the top level",
            context={"path": str(path), "found": type(data).__name__},
        )
    return data


def build_match_config(data: Mapping[str, Any]) -> MatchConfig:
    try:
        return MatchConfig.model_validate(dict(data))
    except PydanticValidationError as e:
        errors = [
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        ]
        raise ConfigurationError(
            "Invalid configuration", context={"errors": errors}
        ) from e


def load_match_config(
    path: Optional[Union[str, Path]] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> MatchConfig:
    """Load the run configuration.

    Args:
        path: Optional YAML file
        overrides: Nested values applied on top of the file

    Raises:
        ConfigurationError: unreadable file or invalid values
    """
    data: Dict[str, Any] = load_yaml_file(path) if path is not None else {}
    if overrides:
        data = deep_merge(data, overrides)
    config = build_match_config(data)
    logger.debug(f"Loaded match config: {config.model_dump(mode='json')}")
    return config
