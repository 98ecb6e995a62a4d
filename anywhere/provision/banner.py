#!/usr/bin/env python3
# anywhere/provision/banner.py
from __future__ import annotations
"""
Welcome banner (message of the day).

The banner is rebuilt from what is actually installed on every boot, so it
never advertises an agent the image no longer ships.
"""

import logging
from typing import Callable, Iterable, Optional

from anywhere.config import AppConfig
from anywhere.errors import CommandFailed
from anywhere.helpers import count_subdirs
from .base import BootContext, StageResult

log = logging.getLogger(__name__)

# Known agents: executable -> (description, short alias)
AGENTS: dict[str, tuple[str, str]] = {
    "claude": ("Claude Code (Anthropic)", "cc"),
    "codex": ("Codex CLI (OpenAI)", "cx"),
}

BOX_WIDTH = 45


def installed_agents(
    names: Iterable[str], which: Callable[[str], Optional[str]]
) -> list[str]:
    """Names from `names` that resolve on PATH, in the given order."""
    return [name for name in names if which(name)]


def agent_alias(name: str) -> str | None:
    entry = AGENTS.get(name)
    return entry[1] if entry else None


def _box(title: str) -> list[str]:
    return [
        "  ┌" + "─" * BOX_WIDTH + "┐",
        "  │" + title.center(BOX_WIDTH) + "│",
        "  └" + "─" * BOX_WIDTH + "┘",
    ]


def render_banner(cfg: AppConfig, agents: list[str], skills_count: int) -> str:
    lines = [""]
    lines += _box(cfg.product_name)
    lines += ["", "  Available agents:"]
    for name in agents:
        description = AGENTS.get(name, ("", ""))[0]
        lines.append(f"  {name:<15} {description}".rstrip())
    first = agents[0] if agents else None
    lines += [
        "",
        "  First time? Log in to your services:",
        "    gh auth login                 # GitHub (clone, push, PRs)",
        "",
        "  Then clone a repo and start coding:",
        f"    cd {cfg.mount_path} && git clone <repo-url> && cd <repo>",
    ]
    if first:
        lines.append(f"    {first:<29} # start {AGENTS.get(first, (first,))[0]}")
    lines += [
        "",
        f"  Skills: {skills_count} installed (agents use them automatically)",
        "",
        "  Useful commands:",
        "  agents-info                   # show this message again",
        "  ll / la                       # list files (long / all)",
        "  gs / gd                       # git status / git diff",
        "",
        f"  Storage: {cfg.mount_path} is persistent. Clone repos there.",
        "",
    ]
    return "\n".join(lines) + "\n"


def compose_banner(ctx: BootContext) -> StageResult:
    cfg = ctx.config
    agents = installed_agents(cfg.agents, ctx.kernel.which)
    skills_count = count_subdirs(cfg.skills_source)
    ctx.facts["agents"] = agents

    text = render_banner(cfg, agents, skills_count)
    try:
        ctx.kernel.write_file(cfg.motd_path, text, privileged=True)
    except (CommandFailed, OSError) as exc:
        msg = f"Could not write {cfg.motd_path}: {exc}"
        log.warning(msg)
        return StageResult.warn(msg, agents=agents, skills=skills_count)

    return StageResult.ok(
        f"{len(agents)} agent(s), {skills_count} skill(s)",
        agents=agents,
        skills=skills_count,
    )
