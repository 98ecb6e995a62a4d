#!/usr/bin/env python3
# anywhere/provision/__init__.py
from __future__ import annotations
"""
Boot stages.

Exports:
- One function per stage, each `stage(ctx: BootContext) -> StageResult`.
- STAGES: the ordered (label, stage) pairs the sequencer runs before handoff.
- handoff: the terminal step that replaces the process with sshd.
"""


from .auth import configure_authentication
from .banner import compose_banner
from .base import BootContext, Stage, StageResult, StageStatus
from .gitcreds import setup_git_credentials
from .hostkeys import load_host_keys
from .secrets import export_secrets
from .shell import customize_shell
from .skills import mirror_skills
from .sshd import handoff, harden_daemon
from .volume import bind_volume

# Order matters: the volume must be bound before anything writes into home,
# and authentication decides whether the daemon needs fail2ban.
STAGES: tuple[tuple[str, Stage], ...] = (
    ("Bind persistent volume", bind_volume),
    ("Mirror bundled skills", mirror_skills),
    ("Load SSH host identity", load_host_keys),
    ("Configure SSH authentication", configure_authentication),
    ("Export secrets for SSH sessions", export_secrets),
    ("Configure git credential helper", setup_git_credentials),
    ("Compose welcome banner", compose_banner),
    ("Customize interactive shell", customize_shell),
    ("Harden SSH daemon", harden_daemon),
)

__all__ = [
    "STAGES",
    "BootContext",
    "Stage",
    "StageResult",
    "StageStatus",
    "bind_volume",
    "compose_banner",
    "configure_authentication",
    "customize_shell",
    "export_secrets",
    "handoff",
    "harden_daemon",
    "load_host_keys",
    "mirror_skills",
    "setup_git_credentials",
]
