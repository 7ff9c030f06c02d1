"""Console output helpers for the command line."""

from __future__ import annotations

import sys
from typing import Any, Optional, Sequence, TextIO


def _stream(file: Optional[TextIO]) -> TextIO:
    return file if file is not None else sys.stdout


def print_status(label: str, value: Any, file: Optional[TextIO] = None) -> None:
    """Print a ``label: value`` line."""
    print(f"{label}: {value}", file=_stream(file))


def print_success(message: str, file: Optional[TextIO] = None) -> None:
    print(f"[OK] {message}", file=_stream(file))


def print_error(message: str, file: Optional[TextIO] = None) -> None:
    print(f"[ERROR] {message}", file=file if file is not None else sys.stderr)


def print_table(
    headers: Sequence[str],
    rows: Sequence[Sequence[Any]],
    file: Optional[TextIO] = None,
) -> None:
    """Print a formatted table."""
    out = _stream(file)
    if not rows:
        print("No data to display.", file=out)
        return

    # Calculate column widths
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            if i < len(widths):
                widths[i] = max(widths[i], len(str(cell)))

    header_line = " | ".join(h.ljust(widths[i]) for i, h in enumerate(headers))
    print(header_line, file=out)
    print("-" * len(header_line), file=out)
    for row in rows:
        print(" | ".join(str(c).ljust(widths[i]) for i, c in enumerate(row)), file=out)
