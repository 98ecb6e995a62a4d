#!/usr/bin/env python3
# anywhere/provision/volume.py
from __future__ import annotations
"""
Persistent volume binding.

The platform mounts the volume as root, so ownership is taken first. Each
persisted name then lives under the mount and the home directory only holds
a symlink to it. Whatever the image layer left at those home paths is
discarded: they only ever contain tool defaults, never user data.
"""

import logging

from anywhere.helpers import replace_with_symlink
from .base import BootContext, StageResult

log = logging.getLogger(__name__)


def bind_volume(ctx: BootContext) -> StageResult:
    cfg = ctx.config
    mount = cfg.mount_path

    # Fatal if it fails: nothing below can be written otherwise
    ctx.kernel.chown(mount, cfg.user)

    for name in cfg.persist_dirs:
        (mount / name).mkdir(parents=True, exist_ok=True)

    for name in cfg.persist_dirs:
        replace_with_symlink(cfg.home / name, mount / name)
        log.debug("Linked %s -> %s", cfg.home / name, mount / name)

    return StageResult.ok(
        f"{len(cfg.persist_dirs)} directories linked into {mount}",
        linked=list(cfg.persist_dirs),
    )
