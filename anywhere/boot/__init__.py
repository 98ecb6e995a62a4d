#!/usr/bin/env python3
# anywhere/boot/__init__.py
from __future__ import annotations
"""
Boot sequence package.

Exports:
- main: Entrypoint; loads configuration, runs every stage, hands off to sshd.
- boot_sequence: Ordered stage runner with Linux-style [  OK  ] / [FAILED] lines.
- BootState: Per-stage results collected for the boot summary.
"""


from .boot import BootState, boot_sequence, build_context, format_summary, main, run

__all__ = ["BootState", "boot_sequence", "build_context", "format_summary", "main", "run"]
