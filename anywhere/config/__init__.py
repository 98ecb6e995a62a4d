#!/usr/bin/env python3
# anywhere/config/__init__.py
from __future__ import annotations

"""
Package for boot configuration.

Provides:
- `AppConfig`: frozen, validated view of every path and knob the boot uses.
- `load_config`: layered loader (defaults < config dir files < ANYWHERE_* env).
"""


from .config import AppConfig, DEFAULTS, ENV_PREFIX, load_config

__all__ = [
    "AppConfig",
    "DEFAULTS",
    "ENV_PREFIX",
    "load_config",
]
