#!/usr/bin/env python3
# anywhere/provision/sshd.py
from __future__ import annotations
"""
SSH daemon configuration and the final handoff.

Drop-in files are written under sshd_config.d so the distribution's main
sshd_config stays untouched:

- 00-hardening.conf    port, root login, auth attempts, keepalives, AllowUsers
- 99-password-auth.conf  PasswordAuthentication on/off (written by the
                         authentication stage)

fail2ban only matters when password logins are possible, so the jail is
written and the service started only in that case. There is no syslog in
the container: with fail2ban running, sshd logs to SSHD_LOG_FILE (`-E`)
instead of stderr, and the jail polls that file.
"""

import logging

from anywhere.config import AppConfig
from anywhere.ui import print_line
from .base import BootContext, StageResult

log = logging.getLogger(__name__)

HARDENING_CONF = "00-hardening.conf"
PASSWORD_AUTH_CONF = "99-password-auth.conf"


def render_hardening(cfg: AppConfig) -> str:
    lines = [
        f"# Managed by {cfg.product_name}; rewritten on every boot",
        f"Port {cfg.ssh_port}",
        "PermitRootLogin no",
        f"MaxAuthTries {cfg.max_auth_tries}",
        f"ClientAliveInterval {cfg.client_alive_interval}",
        f"ClientAliveCountMax {cfg.client_alive_count_max}",
        f"AllowUsers {cfg.user}",
        "PrintMotd yes",
    ]
    return "\n".join(lines) + "\n"


def render_password_auth(enabled: bool) -> str:
    value = "yes" if enabled else "no"
    return (
        f"PasswordAuthentication {value}\n"
        "KbdInteractiveAuthentication no\n"
    )


def render_jail(cfg: AppConfig) -> str:
    lines = [
        "[sshd]",
        "enabled  = true",
        "filter   = sshd",
        f"port     = {cfg.ssh_port}",
        f"backend  = {cfg.fail2ban_backend}",
        f"logpath  = {cfg.sshd_log_file}",
        f"maxretry = {cfg.fail2ban_maxretry}",
        f"findtime = {cfg.fail2ban_findtime}",
        f"bantime  = {cfg.fail2ban_bantime}",
    ]
    return "\n".join(lines) + "\n"


def write_password_auth(ctx: BootContext, enabled: bool) -> None:
    path = ctx.config.sshd_config_dir / PASSWORD_AUTH_CONF
    ctx.kernel.write_file(path, render_password_auth(enabled), privileged=True)
    log.debug("Wrote %s (PasswordAuthentication %s)", path, "yes" if enabled else "no")


def _start_fail2ban(ctx: BootContext) -> str | None:
    """Start fail2ban, or reload it if a previous boot left it running.

    Returns an error description, or None on success.
    """
    kernel = ctx.kernel
    if kernel.run(["fail2ban-client", "ping"], privileged=True).ok:
        res = kernel.run(["fail2ban-client", "reload"], privileged=True)
    else:
        res = kernel.run(["fail2ban-client", "-x", "start"], privileged=True)
    if res.ok:
        return None
    return (res.stderr or res.stdout).strip() or f"exit status {res.returncode}"


def harden_daemon(ctx: BootContext) -> StageResult:
    cfg = ctx.config
    ctx.kernel.write_file(
        cfg.sshd_config_dir / HARDENING_CONF, render_hardening(cfg), privileged=True)

    if not ctx.facts.get("password_auth"):
        return StageResult.ok("key-only login; fail2ban not needed", fail2ban=False)

    ctx.kernel.write_file(cfg.fail2ban_jail, render_jail(cfg), privileged=True)
    # fail2ban refuses to start a jail whose logpath does not exist
    ctx.kernel.check(["mkdir", "-p", str(cfg.sshd_log_file.parent)], privileged=True)
    ctx.kernel.check(["touch", str(cfg.sshd_log_file)], privileged=True)
    error = _start_fail2ban(ctx)
    if error:
        msg = f"fail2ban did not start ({error}); password logins are not rate limited"
        log.warning(msg)
        return StageResult.warn(msg, fail2ban=False)

    ctx.facts["fail2ban"] = True
    log.info("fail2ban watching %s (maxretry=%d, bantime=%ds)",
             cfg.sshd_log_file, cfg.fail2ban_maxretry, cfg.fail2ban_bantime)
    return StageResult.ok("fail2ban watching sshd", fail2ban=True)


def handoff(ctx: BootContext) -> None:
    """Replace this process with sshd in the foreground (does not return)."""
    cfg = ctx.config
    argv = [str(cfg.sshd_binary), "-D"]
    if ctx.facts.get("fail2ban"):
        argv += ["-E", str(cfg.sshd_log_file)]
        print_line(f"sshd logs to {cfg.sshd_log_file} (watched by fail2ban).")
    else:
        argv.append("-e")
    print_line(f"Ready. SSH into this container on port {cfg.ssh_port}.")
    ctx.kernel.exec_replace(argv, privileged=True)
