"""Prometheus metrics for metattt.

This module centralises counters and histograms so that players and the
match runner can record lightweight telemetry without each call site
having to manage its own metric instances. Nothing is exported over the
network; callers that want to scrape them can mount
``prometheus_client.REGISTRY`` themselves.
"""

from __future__ import annotations

from typing import Final

from prometheus_client import Counter, Histogram

MCTS_ITERATIONS: Final[Counter] = Counter(
    "metattt_mcts_iterations_total",
    "Total MCTS iterations run, labeled by search mode (sync or async).",
    labelnames=("mode",),
)

MCTS_TREE_REUSE: Final[Counter] = Counter(
    "metattt_mcts_tree_reuse_total",
    (
        "Re-rooting attempts of the persistent search tree, labeled by "
        "outcome (hit when the subtree was kept, miss when rebuilt)."
    ),
    labelnames=("outcome",),
)

MOVE_SELECTION_LATENCY: Final[Histogram] = Histogram(
    "metattt_move_selection_seconds",
    "Time a player took to choose a move, labeled by player_type.",
    labelnames=("player_type",),
    buckets=(
        0.001,
        0.01,
        0.05,
        0.1,
        0.25,
        0.5,
        1.0,
        2.0,
        5.0,
        10.0,
    ),
)

GAME_OUTCOMES: Final[Counter] = Counter(
    "metattt_game_outcomes_total",
    "Total finished games, labeled by board depth and outcome.",
    labelnames=("depth", "outcome"),
)

GAME_MOVES_TOTAL: Final[Counter] = Counter(
    "metattt_game_moves_total",
    "Total moves played across all games, labeled by board depth.",
    labelnames=("depth",),
)
