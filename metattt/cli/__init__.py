"""Command line interface for metattt.

Usage:
    from metattt.cli import main, print_table

    exit_code = main(["--depth", "1", "--player1", "mcts", "--matches", "5"])
"""

from .main import create_parser, main
from .output import print_error, print_status, print_success, print_table

__all__ = [
    "create_parser",
    "main",
    "print_error",
    "print_status",
    "print_success",
    "print_table",
]
