#!/usr/bin/env python3
# anywhere/provision/shell.py
from __future__ import annotations
"""
Interactive shell customisation.

The generated file is owned by the boot and rewritten each time; users put
their own changes in ~/.bashrc, which only gains a single source line.
"""

import logging
import re

from anywhere.config import AppConfig
from anywhere.helpers import ensure_sourced
from .banner import agent_alias, installed_agents
from .base import BootContext, StageResult

log = logging.getLogger(__name__)

SHELL_RC_MODE = 0o644


def prompt_slug(product_name: str) -> str:
    """'Agents Anywhere' -> 'agents-anywhere'."""
    slug = re.sub(r"[^a-z0-9]+", "-", product_name.lower()).strip("-")
    return slug or "shell"


def _tmux_block(session: str) -> list[str]:
    return [
        "# Re-attach SSH logins to the persistent tmux session",
        "# (set AGENTS_NO_TMUX=1 to get a plain shell)",
        'if [ -n "$SSH_CONNECTION" ] && [ -z "$TMUX" ] && [ -z "$AGENTS_NO_TMUX" ] \\',
        '        && [ -t 0 ] && command -v tmux >/dev/null 2>&1; then',
        f"    tmux new-session -A -s {session}",
        "fi",
    ]


def render_shell_rc(cfg: AppConfig, agents: list[str]) -> str:
    slug = prompt_slug(cfg.product_name)
    lines = [
        f"# {cfg.product_name}: shell customisations (regenerated on every boot)",
        "",
        f"# Colored prompt: {slug}:/path$",
        "export PS1='\\[\\033[1;36m\\]" + slug
        + "\\[\\033[0m\\]:\\[\\033[1;34m\\]\\w\\[\\033[0m\\]\\$ '",
        "",
        "# Aliases",
        "alias ll='ls -lhF --color=auto'",
        "alias la='ls -lAhF --color=auto'",
        "alias gs='git status'",
        "alias gd='git diff'",
    ]
    for name in agents:
        alias = agent_alias(name)
        if alias:
            lines.append(f"alias {alias}='{name}'")
    lines += [
        "alias ghlogin='gh auth login && gh auth setup-git'",
        "",
        "# Re-display the welcome banner",
        "agents-info() {",
        f"    cat {cfg.motd_path}",
        "}",
        "",
    ]
    lines += _tmux_block(cfg.tmux_session)
    return "\n".join(lines) + "\n"


def customize_shell(ctx: BootContext) -> StageResult:
    cfg = ctx.config
    agents = ctx.facts.get("agents")
    if agents is None:
        agents = installed_agents(cfg.agents, ctx.kernel.which)

    cfg.shell_rc.parent.mkdir(parents=True, exist_ok=True)
    cfg.shell_rc.write_text(render_shell_rc(cfg, agents), encoding="utf-8")
    cfg.shell_rc.chmod(SHELL_RC_MODE)

    if ensure_sourced(cfg.bashrc, cfg.shell_rc, cfg.home):
        log.info("Hooked %s into %s", cfg.shell_rc.name, cfg.bashrc)
    return StageResult.ok(f"{cfg.shell_rc.name} written", agents=agents)
