#!/usr/bin/env python3
# anywhere/provision/skills.py
from __future__ import annotations
"""
Skill mirror.

The mirror always matches the image that is currently deployed: the
destination is deleted and copied afresh on every boot. Edits made in place
under the mirrored directory do not survive a restart.
"""

import logging

from anywhere.helpers import copy_entries, is_nonempty_dir, remove_path
from .base import BootContext, StageResult

log = logging.getLogger(__name__)


def mirror_skills(ctx: BootContext) -> StageResult:
    src = ctx.config.skills_source
    dest = ctx.config.skills_dest

    if not is_nonempty_dir(src):
        msg = (f"No default skills found in {src}. "
               "Agents will start without bundled skills.")
        log.warning(msg)
        return StageResult.warn(msg, copied=0)

    if dest.exists() or dest.is_symlink():
        remove_path(dest)
    dest.mkdir(parents=True)
    copied = copy_entries(src, dest)

    log.info("Synced %d skills to %s.", copied, dest)
    return StageResult.ok(f"{copied} skills synced to {dest}", copied=copied)
