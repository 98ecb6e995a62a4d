#!/usr/bin/env python3
# anywhere/helpers/fs.py
from __future__ import annotations

import shutil
from pathlib import Path


def is_nonempty_dir(path: Path) -> bool:
    """True if `path` is a directory with at least one entry."""
    try:
        return path.is_dir() and any(path.iterdir())
    except OSError:
        return False


def count_subdirs(path: Path) -> int:
    """Number of immediate subdirectories of `path` (0 if missing)."""
    if not path.is_dir():
        return 0
    return sum(1 for p in path.iterdir() if p.is_dir())


def remove_path(path: Path) -> None:
    """Remove a file, symlink (valid or dangling) or directory tree."""
    if path.is_symlink() or path.is_file():
        path.unlink()
    elif path.is_dir():
        shutil.rmtree(path)
    elif path.exists():
        path.unlink()


def replace_with_symlink(link: Path, target: Path) -> None:
    """Unconditionally replace whatever is at `link` with a symlink to `target`."""
    remove_path(link)
    link.parent.mkdir(parents=True, exist_ok=True)
    link.symlink_to(target)


def copy_entries(source: Path, dest: Path) -> int:
    """Copy every top-level entry of `source` into `dest`. Returns the count."""
    count = 0
    for entry in sorted(source.iterdir()):
        target = dest / entry.name
        if entry.is_dir() and not entry.is_symlink():
            shutil.copytree(entry, target, symlinks=True)
        else:
            shutil.copy2(entry, target, follow_symlinks=False)
        count += 1
    return count
