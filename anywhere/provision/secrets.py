#!/usr/bin/env python3
# anywhere/provision/secrets.py
from __future__ import annotations
"""
Secret export for SSH sessions.

sshd does not pass the container's environment to login shells, so the
allow-listed variables are written to an owner-only file that ~/.bashrc
sources. The file is truncated on every boot so rotated or removed tokens
do not linger.
"""

import logging
import re

from anywhere.helpers import ensure_sourced
from anywhere.security import write_private
from .base import BootContext, StageResult

log = logging.getLogger(__name__)

_NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def shell_quote(value: str) -> str:
    """Single-quote `value` for POSIX shells (' becomes '\\'')."""
    return "'" + value.replace("'", "'\\''") + "'"


def export_line(name: str, value: str) -> str:
    if not _NAME_RE.fullmatch(name):
        raise ValueError(f"Not a valid shell variable name: {name!r}")
    return f"export {name}={shell_quote(value)}"


def export_secrets(ctx: BootContext) -> StageResult:
    cfg = ctx.config

    lines: list[str] = []
    exported: list[str] = []
    for name in cfg.secret_vars:
        value = ctx.env(name)
        if not value:
            continue
        try:
            lines.append(export_line(name, value))
        except ValueError as exc:
            log.warning("Skipping secret: %s", exc)
            continue
        exported.append(name)

    write_private(cfg.secrets_file, "".join(f"{line}\n" for line in lines))
    if ensure_sourced(cfg.bashrc, cfg.secrets_file, cfg.home):
        log.info("Hooked %s into %s", cfg.secrets_file.name, cfg.bashrc)

    # Names only; values never reach the log
    log.info("Exported %d secret(s): %s", len(exported), ", ".join(exported) or "none")
    return StageResult.ok(f"{len(exported)} secret(s) exported", names=exported)
