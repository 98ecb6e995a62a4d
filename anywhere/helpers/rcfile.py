#!/usr/bin/env python3
# anywhere/helpers/rcfile.py
from __future__ import annotations
"""
Idempotent edits to shell profile files.

A hook is a single line appended to a file the user owns (e.g. ~/.bashrc).
Each hook is identified by a sentinel string; the line is only appended when
no existing line contains the sentinel, so re-running the boot never
duplicates it and user edits elsewhere in the file are left untouched.
"""

from pathlib import Path


def has_sentinel(path: Path, sentinel: str) -> bool:
    """True if any line of `path` contains `sentinel` (missing file: False)."""
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except FileNotFoundError:
        return False
    return any(sentinel in line for line in text.splitlines())


def ensure_line(path: Path, line: str, *, sentinel: str | None = None) -> bool:
    """
    Append `line` to `path` unless a line containing `sentinel` exists.

    `sentinel` defaults to the line itself. Returns True if the file changed.
    """
    key = sentinel or line
    if has_sentinel(path, key):
        return False

    path.parent.mkdir(parents=True, exist_ok=True)
    prefix = ""
    if path.exists() and path.stat().st_size > 0:
        with path.open("rb") as fh:
            fh.seek(-1, 2)
            if fh.read(1) != b"\n":
                prefix = "\n"
    with path.open("a", encoding="utf-8") as fh:
        fh.write(f"{prefix}{line}\n")
    return True


def source_line(path: Path, home: Path) -> str:
    """Shell line that sources `path` if it exists, written relative to $HOME."""
    try:
        rel = "$HOME/" + str(path.relative_to(home))
    except ValueError:
        rel = str(path)
    return f'[ -f "{rel}" ] && source "{rel}"'


def ensure_sourced(profile: Path, target: Path, home: Path) -> bool:
    """Hook `profile` to source `target` exactly once."""
    return ensure_line(profile, source_line(target, home), sentinel=target.name)
