"""Display helpers for configuration listings."""

from typing import Iterable, List, Tuple

COLUMN_WIDTH = 32


def format_row(key: str, value: str) -> str:
    return f"{key:<{COLUMN_WIDTH}} {value:<{COLUMN_WIDTH}}"


def format_table(rows: Iterable[Tuple[str, str]]) -> List[str]:
    """Render rows as two left-justified KEY/VALUE columns, header first."""
    lines = [format_row("KEY", "VALUE")]
    lines.extend(format_row(key, value) for key, value in rows)
    return lines
