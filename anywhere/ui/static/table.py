#!/usr/bin/env python3
# anywhere/ui/static/table.py
from __future__ import annotations

from typing import List, Optional, Sequence

from anywhere.ui.utils import strip_ansi


def _visible_len(cell: str) -> int:
    return len(strip_ansi(cell))


def _truncate(cell: str, limit: int) -> str:
    """Shorten plain cells that exceed `limit` visible characters."""
    if limit <= 0 or _visible_len(cell) <= limit:
        return cell
    plain = strip_ansi(cell)
    return plain[: max(limit - 3, 0)] + "..."


def _column_widths(rows: Sequence[Sequence[str]]) -> List[int]:
    """Compute visual widths ignoring ANSI sequences."""
    widths: List[int] = []
    for row in rows:
        for idx, cell in enumerate(row):
            if idx >= len(widths):
                widths.append(_visible_len(cell))
            else:
                widths[idx] = max(widths[idx], _visible_len(cell))
    return widths


def format_table(
    rows: Sequence[Sequence[object]],
    headers: Optional[Sequence[object]] = None,
    *,
    padding: int = 1,
    max_cell: int = 72,
) -> str:
    """Return a bordered ASCII table (ANSI-safe width calculation)."""
    body = [[_truncate(str(c), max_cell) for c in row] for row in rows]
    head = [str(h) for h in headers] if headers is not None else None
    widths = _column_widths(([head] if head else []) + body)
    if not widths:
        return ""

    pad = " " * padding
    rule = "+" + "+".join("-" * (w + 2 * padding) for w in widths) + "+"

    def render(row: Sequence[str]) -> str:
        cells = [
            f"{pad}{cell}{' ' * (widths[i] - _visible_len(cell))}{pad}"
            for i, cell in enumerate(row)
        ]
        return "|" + "|".join(cells) + "|"

    lines = [rule]
    if head:
        lines += [render(head), rule]
    lines += [render(row) for row in body]
    lines.append(rule)
    return "\n".join(lines)

