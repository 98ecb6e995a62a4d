#!/usr/bin/env python3
# anywhere/errors.py
from __future__ import annotations
"""
Exception hierarchy for the boot sequence.

Every error that should end the boot derives from BootError and carries the
process exit code the entrypoint terminates with.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from anywhere.system.kernel import CommandResult


class BootError(Exception):
    """Base class for errors that abort the boot."""

    exit_code: int = 1

    def __init__(self, message: str, *, exit_code: int | None = None) -> None:
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class CommandFailed(BootError):
    """A required subprocess exited non-zero (or could not be started)."""

    def __init__(self, args: list[str], result: "CommandResult") -> None:
        detail = (result.stderr or result.stdout).strip()
        message = f"{' '.join(args)} exited with status {result.returncode}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message, exit_code=result.returncode or 1)
        self.args_list = list(args)
        self.result = result


class BootAborted(BootError):
    """A stage returned a fatal result."""

    def __init__(self, label: str, message: str, *, exit_code: int = 1) -> None:
        super().__init__(f"{label}: {message}", exit_code=exit_code)
        self.label = label


class ConfigError(ValueError):
    """Invalid configuration value."""


class InvalidPublicKey(ValueError):
    """A credential line is not a well-formed OpenSSH public key."""
