#!/usr/bin/env python3
# anywhere/__init__.py
from __future__ import annotations
"""
Agents Anywhere container boot.

Provisions an SSH-reachable workspace for coding agents on a container
platform: persistent volume, host identity, credentials, secrets, shell
niceties and a hardened sshd, then replaces itself with sshd.

Run with `python -m anywhere` or the `agents-anywhere-boot` script.
"""

__version__ = "0.1.0"
