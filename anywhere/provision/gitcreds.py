#!/usr/bin/env python3
# anywhere/provision/gitcreds.py
from __future__ import annotations
"""
Git credential helper.

When the GitHub CLI is installed and already authenticated (typically via the
exported GH_TOKEN), register it as git's credential helper so HTTPS pushes
work without further setup. Missing or unauthenticated gh is not an error.
"""

import logging

from .base import BootContext, StageResult

log = logging.getLogger(__name__)


def setup_git_credentials(ctx: BootContext) -> StageResult:
    kernel = ctx.kernel
    if not kernel.which("gh"):
        return StageResult.ok("gh not installed; skipped", configured=False)

    status = kernel.run(["gh", "auth", "status"], timeout=30)
    if not status.ok:
        log.debug("gh auth status: %s", status.stderr.strip())
        return StageResult.ok("gh not authenticated; skipped", configured=False)

    res = kernel.run(["gh", "auth", "setup-git"], timeout=30)
    if not res.ok:
        msg = f"gh auth setup-git failed: {(res.stderr or res.stdout).strip()}"
        log.warning(msg)
        return StageResult.warn(msg, configured=False)

    log.info("git uses gh as its GitHub credential helper.")
    return StageResult.ok("gh registered as git credential helper", configured=True)
