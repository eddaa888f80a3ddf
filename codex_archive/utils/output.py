"""Shared console output utilities."""

import json
import sys
from typing import Any

from rich.console import Console

# Shared console instance for all CLI output
console = Console(force_terminal=True, color_system="auto")


def is_non_interactive() -> bool:
    """Return True when stdin is not a TTY.

    Used to auto-confirm destructive prompts that would otherwise hang scripts.
    """
    return not sys.stdin.isatty()


def print_json(data: Any) -> None:
    """Print data as formatted JSON to stdout.

    Handles common non-serializable types like datetime by converting them to strings.
    """
    print(json.dumps(data, indent=2, default=str))


def format_size(size: int | None) -> str:
    """Human-readable byte size (``1.5 MB``); ``-`` when unknown."""
    if size is None:
        return "-"
    value = float(size)
    for unit in ("B", "KB", "MB", "GB"):
        if value < 1024 or unit == "GB":
            return f"{int(value)} {unit}" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} GB"


def truncate(text: str | None, width: int) -> str:
    if not text:
        return ""
    return text if len(text) <= width else text[: width - 1] + "…"
