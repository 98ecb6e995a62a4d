# anywhere/system/__init__.py
from __future__ import annotations

from .kernel import CommandResult, Kernel

__all__ = ["CommandResult", "Kernel"]
