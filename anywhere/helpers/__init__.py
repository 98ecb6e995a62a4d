#!/usr/bin/env python3
# anywhere/helpers/__init__.py
from __future__ import annotations

from .fs import (
    copy_entries,
    count_subdirs,
    is_nonempty_dir,
    remove_path,
    replace_with_symlink,
)
from .rcfile import ensure_line, ensure_sourced, has_sentinel, source_line

__all__ = [
    "copy_entries",
    "count_subdirs",
    "ensure_line",
    "ensure_sourced",
    "has_sentinel",
    "is_nonempty_dir",
    "remove_path",
    "replace_with_symlink",
    "source_line",
]
