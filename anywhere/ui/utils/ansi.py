#!/usr/bin/env python3
# anywhere/ui/utils/ansi.py
from __future__ import annotations

import os
import re
from typing import IO, Optional

# ---- SGR table --------------------------------------------------------------

_STYLES = {"reset": 0, "bold": 1, "dim": 2, "underline": 4}
_COLORS = ("black", "red", "green", "yellow", "blue", "magenta", "cyan", "white")

# Foreground 30-37, bright foreground 90-97
ANSI: dict[str, str] = {
    **{name: f"\x1b[{code}m" for name, code in _STYLES.items()},
    **{name: f"\x1b[{30 + i}m" for i, name in enumerate(_COLORS)},
    **{f"bright_{name}": f"\x1b[{90 + i}m" for i, name in enumerate(_COLORS)},
}

# CSI sequences only; the boot never emits OSC or other escapes
_CSI_RE = re.compile(r"\x1b\[[0-9;]*[A-Za-z]")


def strip_ansi(text: str) -> str:
    """Remove ANSI escape sequences from text."""
    return _CSI_RE.sub("", text)


def supports_color(stream: Optional[IO[str]]) -> bool:
    """
    Decide whether ANSI colors should be written to `stream`.

    Container runtimes capture stdout/stderr through pipes, so colors are
    normally off in the deploy log and on in an interactive `docker run -t`.
    NO_COLOR wins over FORCE_COLOR (https://no-color.org/).
    """
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("FORCE_COLOR"):
        return True
    isatty = getattr(stream, "isatty", None)
    if isatty is None:
        return False
    try:
        return bool(isatty())
    except ValueError:
        # closed stream
        return False


def colorize(text: str, *styles: str) -> str:
    """
    Wrap text in the given ANSI styles ('red', 'bold', ...) and reset after.
    Unknown style names are ignored.
    """
    prefix = "".join(ANSI.get(s, "") for s in styles)
    if not prefix:
        return text
    return f"{prefix}{text}{ANSI['reset']}"
