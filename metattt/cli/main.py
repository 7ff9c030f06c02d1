"""Command line entry point.

Plays one or more games between two configured players and prints a
summary table.

Examples:
    # Sync MCTS against random play on a 2-level board
    metattt --depth 1 --player1 mcts --player2 random --matches 10

    # Human against the pondering player, board printed after every move
    metattt --player1 human --player2 mcts_async --think-time-ms 2000 --show-board

    # Everything from a YAML file, with one flag overridden
    metattt --config run.yaml --matches 3
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, Dict, List, Optional

from ..config import load_match_config
from ..core.logging_config import configure_third_party_loggers, setup_logging
from ..errors import ConfigurationError, MetaTTTError
from ..match import run_matches
from ..models import MAX_DEPTH, MatchConfig, MatchSummary, PlayerType, WinPolicy
from .output import print_error, print_status, print_table

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="metattt",
        description="Play generalized (nested) tic-tac-toe between two players",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    player_types = [t.value for t in PlayerType]

    parser.add_argument("--config", type=str, help="YAML config file; flags override it")
    parser.add_argument(
        "--depth", type=int, help=f"Meta levels above the leaf boards (0-{MAX_DEPTH})"
    )
    parser.add_argument("--matches", type=int, help="Number of games to play")
    parser.add_argument("--player1", choices=player_types, help="Player 1 (plays X)")
    parser.add_argument("--player2", choices=player_types, help="Player 2 (plays O)")
    parser.add_argument("--iterations", type=int, help="Sync MCTS iterations per move")
    parser.add_argument("--think-time-ms", type=int, help="Pondering MCTS time per move")
    parser.add_argument("--seed", type=int, help="Base RNG seed for both players")
    parser.add_argument(
        "--win-policy",
        choices=[p.value for p in WinPolicy],
        help="When a meta board counts as won",
    )
    parser.add_argument(
        "--send-to-board",
        action="store_true",
        default=None,
        help="The previous move picks the sub-board for the next one",
    )
    parser.add_argument(
        "--show-board", action="store_true", default=None, help="Print the board every move"
    )
    parser.add_argument("--log-level", type=str, help="Log level (default: $METATTT_LOG_LEVEL or INFO)")
    return parser


def overrides_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    """Nested config overrides for every flag that was given."""
    overrides: Dict[str, Any] = {}
    rules: Dict[str, Any] = {}
    players: Dict[str, Dict[str, Any]] = {"player1": {}, "player2": {}}

    if args.depth is not None:
        rules["depth"] = args.depth
    if args.win_policy is not None:
        rules["win_policy"] = args.win_policy
    if args.send_to_board is not None:
        rules["send_to_board"] = args.send_to_board
    if args.matches is not None:
        overrides["num_matches"] = args.matches
    if args.show_board is not None:
        overrides["show_board"] = args.show_board

    if args.player1 is not None:
        players["player1"]["player_type"] = args.player1
    if args.player2 is not None:
        players["player2"]["player_type"] = args.player2
    for offset, key in enumerate(("player1", "player2")):
        if args.iterations is not None:
            players[key]["iterations"] = args.iterations
        if args.think_time_ms is not None:
            players[key]["think_time_ms"] = args.think_time_ms
        if args.seed is not None:
            players[key]["rng_seed"] = args.seed + offset

    if rules:
        overrides["rules"] = rules
    for key, values in players.items():
        if values:
            overrides[key] = values
    return overrides


def print_summary(config: MatchConfig, summary: MatchSummary) -> None:
    rows: List[List[Any]] = []
    for index, (mark, player) in enumerate((("X", config.player1), ("O", config.player2)), 1):
        label = config.player_label(index)
        rows.append([label, mark, player.player_type.value, summary.wins.get(label, 0)])
    print_table(["Player", "Mark", "Type", "Wins"], rows)
    print_status("Draws", summary.draws)
    print_status("Games", summary.games)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        setup_logging("metattt", level=args.log_level)
    except ValueError as e:
        print_error(str(e))
        return EXIT_CONFIG_ERROR
    configure_third_party_loggers(quiet=True)

    try:
        config = load_match_config(args.config, overrides_from_args(args))
    except ConfigurationError as e:
        print_error(str(e))
        return EXIT_CONFIG_ERROR

    logger.info(
        f"Playing {config.num_matches} game(s) at depth {config.rules.depth}: "
        f"{config.player1.player_type.value} vs {config.player2.player_type.value}"
    )
    try:
        summary = run_matches(config)
    except KeyboardInterrupt:
        print_error("Interrupted")
        return EXIT_FAILURE
    except MetaTTTError as e:
        logger.error(f"Run failed: {e}")
        print_error(str(e))
        return EXIT_FAILURE

    print_summary(config, summary)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
