#!/usr/bin/env python3
# anywhere/provision/auth.py
from __future__ import annotations
"""
SSH authentication configuration.

Public keys come from every environment variable whose name starts with the
configured prefix (SSH_PUBLIC_KEY, SSH_PUBLIC_KEY_LAPTOP, ...). Each value may
carry several keys separated by commas or newlines. Only lines that parse as
OpenSSH public keys reach authorized_keys; the file is rebuilt from scratch
on every boot.

At least one credential (a valid key or a password) must exist, otherwise the
boot stops here: a container nobody can log into is not worth starting.
"""

import logging

from anywhere.errors import InvalidPublicKey
from anywhere.security import (
    PublicKey,
    ensure_private_dir,
    holds_private_key,
    parse_public_key,
    preview,
    split_key_lines,
    write_private,
)
from anywhere.ui import colorize, print_block
from .base import BootContext, StageResult
from .sshd import write_password_auth

log = logging.getLogger(__name__)

RULE = "=" * 59


def _invalid_key_help(var: str, sample: str | None) -> list[str]:
    if sample is None:
        provided = [f"  {var} holds a PRIVATE key; its contents are not shown."]
    else:
        provided = [
            f"  You provided (first {len(sample)} chars):",
            f"    {sample}...",
        ]
    return [
        RULE,
        colorize(f"ERROR: {var} is not a valid OpenSSH public key.", "red", "bold"),
        "",
        "  Expected format:",
        "    ssh-ed25519 AAAAC3NzaC1lZDI1NTE5... user@host",
        "    ssh-rsa AAAAB3NzaC1yc2EAAAA... user@host",
        "",
        *provided,
        "",
        "  Common mistakes:",
        "    - Pasting the PRIVATE key instead of the public key",
        "    - Extra line breaks or whitespace when pasting",
        "    - Missing the key type prefix (ssh-ed25519 or ssh-rsa)",
        "",
        f"  Fix: update {var} in your service's variables with the contents of",
        "       ~/.ssh/id_ed25519.pub (on your local machine)",
        RULE,
    ]


def _no_auth_help(key_var: str, password_var: str) -> list[str]:
    return [
        RULE,
        colorize("ERROR: No valid SSH authentication configured!", "red", "bold"),
        "",
        "  You must set at least one valid auth method in your service's variables:",
        "",
        f"  {key_var:<15} valid contents of ~/.ssh/id_ed25519.pub",
        f"  {'':<15} (run: cat ~/.ssh/id_ed25519.pub)",
        "",
        f"  {password_var:<15} any strong password for SSH login",
        "",
        "  The service is restarted after the variable is set.",
        RULE,
    ]


def collect_public_keys(
    ctx: BootContext,
) -> tuple[list[PublicKey], list[str], list[tuple[str, str | None]]]:
    """
    Scan prefixed environment variables for public keys.

    A value carrying private key material is never echoed: its rejected
    lines are reported once, as (variable, None).

    Returns:
        (valid keys, names of variables with a non-blank value,
         (variable, rejected line) pairs)
    """
    prefix = ctx.config.public_key_prefix
    names = sorted(n for n in ctx.environ if n.startswith(prefix))

    valid: list[PublicKey] = []
    found: list[str] = []
    rejected: list[tuple[str, str | None]] = []

    for name in names:
        value = ctx.env(name)
        if not value.strip():
            continue
        found.append(name)
        private = holds_private_key(value)
        dropped = 0
        for line in split_key_lines(value):
            try:
                key = parse_public_key(line, ctx.kernel)
            except InvalidPublicKey as exc:
                dropped += 1
                if not private:
                    log.warning("%s: dropping invalid public key (%s): %s...",
                                name, exc, preview(line))
                    rejected.append((name, line))
                continue
            log.info("%s: accepted %s %s", name, key.key_type, key.fingerprint)
            valid.append(key)
        if private and dropped:
            log.warning("%s holds a PRIVATE key; dropped %d line(s) without showing them. "
                        "Paste the .pub file instead.", name, dropped)
            rejected.append((name, None))

    return valid, found, rejected


def configure_authentication(ctx: BootContext) -> StageResult:
    cfg = ctx.config

    ensure_private_dir(cfg.ssh_dir)
    keys, found, rejected = collect_public_keys(ctx)
    write_private(cfg.authorized_keys, "".join(f"{k.line}\n" for k in keys))

    password = ctx.env(cfg.password_var)
    weak = False
    if password:
        ctx.kernel.check(["chpasswd"], privileged=True, input=f"{cfg.user}:{password}\n")
        log.info("SSH password configured for %s.", cfg.user)
        if len(password) < cfg.min_password_length:
            weak = True
            log.warning("%s is shorter than %d characters; use a longer password.",
                        cfg.password_var, cfg.min_password_length)

    if found and not keys:
        var, line = rejected[0] if rejected else (found[0], ctx.env(found[0]))
        sample = None if line is None or holds_private_key(line) else preview(line)
        print_block(_invalid_key_help(var, sample))

    if not keys and not password:
        print_block(_no_auth_help(cfg.public_key_prefix, cfg.password_var))
        return StageResult.fatal("no valid SSH authentication configured", exit_code=1)

    write_password_auth(ctx, bool(password))
    ctx.facts["password_auth"] = bool(password)

    summary = f"{len(keys)} public key(s), password {'set' if password else 'not set'}"
    data = {"keys": len(keys), "password": bool(password), "rejected": len(rejected)}
    if weak:
        return StageResult.warn(f"{summary}; password is weak", **data)
    if rejected:
        return StageResult.warn(f"{summary}; {len(rejected)} invalid key line(s) dropped", **data)
    return StageResult.ok(summary, **data)
