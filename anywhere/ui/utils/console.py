#!/usr/bin/env python3
# anywhere/ui/utils/console.py
from __future__ import annotations

import sys

from .ansi import strip_ansi, supports_color


def print_line(text: str = "", *, file=None, flush: bool = True) -> None:
    """
    Print one line of boot output.

    Colors are stripped when the target stream is not a terminal, so the
    container log stays plain.
    """
    stream = file if file is not None else sys.stdout
    if not supports_color(stream):
        text = strip_ansi(text)
    stream.write(f"{text}\n")
    if flush:
        stream.flush()


def print_block(lines: list[str], *, file=None) -> None:
    """Print a multi-line message in a single write."""
    print_line("\n".join(lines), file=file)
