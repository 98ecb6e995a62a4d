#!/usr/bin/env python3
# anywhere/provision/hostkeys.py
from __future__ import annotations
"""
SSH host identity persistence.

Without this every redeploy would present new host keys and clients would
see "Host key verification failed". Two paths:

- RESTORE: the persisted store has content -> copy it over the live keys.
- GENERATE: otherwise create a fresh key set in the live directory, copy it
  into the store and hand the store to the managed account.

There is no fallback to ephemeral keys; any failure aborts the boot.
"""

import logging

from anywhere.helpers import is_nonempty_dir
from anywhere.security import (
    generate_host_key,
    host_key_files,
    host_key_fingerprints,
    host_key_name,
    supported_types,
)
from .base import BootContext, StageResult

log = logging.getLogger(__name__)


def _restore(ctx: BootContext) -> int:
    cfg = ctx.config
    return ctx.kernel.copy_files(
        host_key_files(cfg.host_key_store), cfg.host_key_dir, privileged=True
    )


def _generate(ctx: BootContext, types: list[str]) -> int:
    cfg = ctx.config
    written = []
    for key_type in types:
        private, public = generate_host_key(key_type)
        name = host_key_name(key_type)
        ctx.kernel.write_file(
            cfg.host_key_dir / name, private, mode=0o600, privileged=True)
        ctx.kernel.write_file(
            cfg.host_key_dir / f"{name}.pub", public, mode=0o644, privileged=True)
        written += [cfg.host_key_dir / name, cfg.host_key_dir / f"{name}.pub"]

    cfg.host_key_store.mkdir(parents=True, exist_ok=True)
    ctx.kernel.copy_files(written, cfg.host_key_store, privileged=True)
    ctx.kernel.chown(cfg.host_key_store, cfg.user, recursive=True)
    return len(written)


def load_host_keys(ctx: BootContext) -> StageResult:
    cfg = ctx.config

    if is_nonempty_dir(cfg.host_key_store):
        count = _restore(ctx)
        if count == 0:
            return StageResult.fatal(
                f"{cfg.host_key_store} is not empty but holds no ssh_host_* files")
        mode = "restored"
    else:
        types = supported_types(cfg.host_key_types)
        if not types:
            return StageResult.fatal(
                f"No supported host key types in {list(cfg.host_key_types)}")
        count = _generate(ctx, types)
        mode = "generated"

    for key_type, fp in host_key_fingerprints(cfg.host_key_store):
        log.info("Host key %s %s", key_type, fp)

    return StageResult.ok(f"{count} host key files {mode}", mode=mode, files=count)
