#!/usr/bin/env python3
# anywhere/boot/boot.py
from __future__ import annotations
"""
Boot sequence for Agents Anywhere.

Goals:
- Run every provisioning stage in a fixed order, once, with no retries.
- Print a Linux-style status line per stage ([  OK  ] / [ WARN ] / [FAILED]).
- Stop at the first fatal stage with its exit status; otherwise print a
  summary and hand the process over to sshd.
"""

import os
import sys
from dataclasses import dataclass, field
from typing import Mapping, Optional

from anywhere.config import load_config
from anywhere.errors import BootAborted, BootError, ConfigError
from anywhere.provision import STAGES, BootContext, Stage, StageResult, StageStatus, handoff
from anywhere.system import Kernel
from anywhere.ui import colorize, format_table, init_logger, print_line

_BADGES = {
    StageStatus.OK: ("[  OK  ]", "green"),
    StageStatus.WARN: ("[ WARN ]", "yellow"),
    StageStatus.FATAL: ("[FAILED]", "red"),
}


@dataclass(slots=True)
class BootState:
    context: BootContext
    results: list[tuple[str, StageResult]] = field(default_factory=list)

    @property
    def warnings(self) -> int:
        return sum(1 for _, r in self.results if r.status is StageStatus.WARN)


def _status_line(label: str, result: StageResult) -> str:
    badge, color = _BADGES[result.status]
    line = colorize(f"{badge} {label}", color)
    if result.message:
        line += f" - {result.message}"
    return line


def _step(label: str, stage: Stage, ctx: BootContext) -> StageResult:
    """Run a boot stage with status output."""
    try:
        result = stage(ctx)
    except Exception as exc:
        print_line(
            colorize(f"[FAILED] {label} ({type(exc).__name__}: {exc})", "red")
        )
        raise
    print_line(_status_line(label, result))
    if result.is_fatal:
        raise BootAborted(label, result.message, exit_code=result.exit_code)
    return result


def boot_sequence(ctx: BootContext) -> BootState:
    state = BootState(context=ctx)
    for label, stage in STAGES:
        state.results.append((label, _step(label, stage, ctx)))
    return state


def format_summary(state: BootState) -> str:
    rows = [
        (label, _BADGES[r.status][0].strip("[] "), r.message)
        for label, r in state.results
    ]
    return format_table(rows, headers=("Stage", "Status", "Detail"))


def build_context(environ: Optional[Mapping[str, str]] = None) -> BootContext:
    """Load configuration and wire the logger and command facade."""
    environ = os.environ if environ is None else environ
    config = load_config(environ)
    logger = init_logger("anywhere", config.log_level, config.log_file_path)
    return BootContext(
        config=config,
        kernel=Kernel(use_sudo=config.use_sudo),
        environ=environ,
        logger=logger,
    )


def run(ctx: BootContext) -> int:
    """Run all stages then hand off; return the exit status on failure."""
    try:
        state = boot_sequence(ctx)
    except BootError as exc:
        ctx.logger.error("Boot aborted: %s", exc)
        return exc.exit_code
    except OSError as exc:
        ctx.logger.error("Boot aborted: %s", exc)
        return 1

    print_line(format_summary(state))
    if state.warnings:
        ctx.logger.warning("Boot finished with %d warning(s).", state.warnings)

    try:
        handoff(ctx)
    except BootError as exc:
        ctx.logger.error("Handoff failed: %s", exc)
        return exc.exit_code
    except OSError as exc:
        ctx.logger.error("Could not start %s: %s", ctx.config.sshd_binary, exc)
        return 1
    return 0


def main(environ: Optional[Mapping[str, str]] = None) -> int:
    try:
        ctx = build_context(environ)
    except (ConfigError, OSError) as exc:
        print_line(
            colorize(f"[FAILED] Load configuration ({type(exc).__name__}: {exc})", "red"),
            file=sys.stderr,
        )
        return 1
    return run(ctx)
