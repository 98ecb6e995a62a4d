#!/usr/bin/env python3
# anywhere/security/secure_file.py
from __future__ import annotations
"""
Owner-only files in the managed account's home.

Notes:
- Files are created with restrictive permissions from the first byte
  (O_CREAT with the final mode), then chmod'ed in case they already existed
  with a wider mode.
- Writes truncate: every boot rebuilds these files from scratch.
"""

import os
from pathlib import Path

PRIVATE_FILE_MODE = 0o600
PRIVATE_DIR_MODE = 0o700


def ensure_private_dir(path: Path) -> Path:
    """Create `path` if needed and restrict it to the owner."""
    path.mkdir(parents=True, exist_ok=True)
    os.chmod(path, PRIVATE_DIR_MODE)
    return path


def write_private(path: Path, text: str, *, mode: int = PRIVATE_FILE_MODE) -> Path:
    """Truncate-and-write `text` to `path` with owner-only permissions."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
    with os.fdopen(fd, "w", encoding="utf-8") as fh:
        fh.write(text)
    os.chmod(path, mode)
    return path
