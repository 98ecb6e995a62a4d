#!/usr/bin/env python3
# anywhere/provision/base.py
from __future__ import annotations
"""
Shared types for boot stages.

A stage is a callable `stage(ctx) -> StageResult`. Stages never call
sys.exit themselves: they return FATAL (policy failures) or let an
exception propagate (I/O and command failures) and the sequencer decides.
"""

import enum
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from anywhere.config import AppConfig
from anywhere.system import Kernel


class StageStatus(enum.Enum):
    OK = "ok"
    WARN = "warn"
    FATAL = "fatal"


@dataclass(slots=True)
class StageResult:
    """
    Outcome of one boot stage.

    Attributes:
        status: OK, WARN (succeeded with a warning) or FATAL (abort the boot).
        message: Short human-readable detail for the status line/summary.
        data: Optional machine-readable payload (counts, flags).
        exit_code: Process exit status used when the stage is FATAL.
    """
    status: StageStatus = StageStatus.OK
    message: str = ""
    data: dict[str, Any] = field(default_factory=dict)
    exit_code: int = 1

    @classmethod
    def ok(cls, message: str = "", **data: Any) -> "StageResult":
        return cls(StageStatus.OK, message, data)

    @classmethod
    def warn(cls, message: str, **data: Any) -> "StageResult":
        return cls(StageStatus.WARN, message, data)

    @classmethod
    def fatal(cls, message: str, *, exit_code: int = 1, **data: Any) -> "StageResult":
        return cls(StageStatus.FATAL, message, data, exit_code)

    @property
    def is_fatal(self) -> bool:
        return self.status is StageStatus.FATAL


@dataclass(slots=True)
class BootContext:
    """Everything a stage may touch: config, process facade, environment."""
    config: AppConfig
    kernel: Kernel
    environ: Mapping[str, str] = field(default_factory=lambda: os.environ)
    logger: logging.Logger = field(
        default_factory=lambda: logging.getLogger("anywhere"))
    # Facts later stages depend on (e.g. whether password auth is enabled)
    facts: dict[str, Any] = field(default_factory=dict)

    def env(self, name: str) -> str:
        """Environment value or '' when unset."""
        return self.environ.get(name, "") or ""


Stage = Callable[[BootContext], StageResult]
