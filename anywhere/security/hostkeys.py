#!/usr/bin/env python3
# anywhere/security/hostkeys.py
from __future__ import annotations
"""
SSH host identity key material.

Generates the same key set `ssh-keygen -A` would (one key per type, named
ssh_host_<type>_key / .pub) in OpenSSH format, and reads fingerprints back
from public key files.
"""

import socket
from pathlib import Path
from typing import Iterable

from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    PublicFormat,
)

from anywhere.errors import InvalidPublicKey
from .pubkeys import parse_public_key

HOST_KEY_GLOB = "ssh_host_*"

# RSA size matches ssh-keygen's current default
_RSA_BITS = 3072


def _new_private_key(key_type: str):
    if key_type == "ed25519":
        return ed25519.Ed25519PrivateKey.generate()
    if key_type == "ecdsa":
        return ec.generate_private_key(ec.SECP256R1())
    if key_type == "rsa":
        return rsa.generate_private_key(public_exponent=65537, key_size=_RSA_BITS)
    raise ValueError(f"Unsupported host key type: {key_type!r}")


def host_key_name(key_type: str) -> str:
    return f"ssh_host_{key_type}_key"


def generate_host_key(key_type: str, comment: str | None = None) -> tuple[bytes, bytes]:
    """Return (private, public) OpenSSH-encoded bytes for a fresh host key."""
    key = _new_private_key(key_type)
    private = key.private_bytes(
        Encoding.PEM, PrivateFormat.OpenSSH, NoEncryption()
    )
    public = key.public_key().public_bytes(Encoding.OpenSSH, PublicFormat.OpenSSH)
    comment = comment or f"root@{socket.gethostname()}"
    return private, public + b" " + comment.encode("utf-8") + b"\n"


def host_key_files(directory: Path) -> list[Path]:
    """Host key files (private and public) present in `directory`."""
    if not directory.is_dir():
        return []
    return sorted(p for p in directory.glob(HOST_KEY_GLOB) if p.is_file())


def host_key_fingerprints(directory: Path) -> list[tuple[str, str]]:
    """(key type, fingerprint) for each readable public host key in `directory`."""
    out: list[tuple[str, str]] = []
    for pub in host_key_files(directory):
        if pub.suffix != ".pub":
            continue
        try:
            parsed = parse_public_key(pub.read_text(encoding="utf-8"))
        except (OSError, InvalidPublicKey):
            continue
        out.append((parsed.key_type, parsed.fingerprint))
    return out


def supported_types(types: Iterable[str]) -> list[str]:
    known = {"rsa", "ecdsa", "ed25519"}
    return [t for t in types if t in known]
