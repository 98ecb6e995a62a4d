#!/usr/bin/env python3
# anywhere/security/pubkeys.py
from __future__ import annotations
"""
OpenSSH public key parsing and fingerprinting.

Lines are validated with cryptography's OpenSSH loader. Key algorithms the
library does not implement (e.g. FIDO `sk-*` keys) are handed to
`ssh-keygen -l`, which is the reference check sshd itself agrees with.
"""

import base64
import binascii
import hashlib
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator, Optional

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.serialization import load_ssh_public_key

from anywhere.errors import InvalidPublicKey

if TYPE_CHECKING:
    from anywhere.system.kernel import Kernel

# Characters shown when echoing a rejected line back to the operator
PREVIEW_CHARS = 40

_SPLIT_RE = re.compile(r"[,\r\n]+")


@dataclass(slots=True, frozen=True)
class PublicKey:
    """A validated authorized_keys line."""
    line: str
    key_type: str
    fingerprint: str
    comment: str = ""


def preview(line: str, limit: int = PREVIEW_CHARS) -> str:
    """First `limit` characters of a line, for diagnostics."""
    return line[:limit]


def holds_private_key(value: str) -> bool:
    """True if `value` carries PEM or OpenSSH private key material."""
    return "PRIVATE KEY" in value


def split_key_lines(value: str) -> Iterator[str]:
    """Yield the non-blank entries of a comma/newline separated value."""
    for part in _SPLIT_RE.split(value):
        part = part.strip()
        if part:
            yield part


def fingerprint(blob: bytes) -> str:
    """OpenSSH-style SHA256 fingerprint of a raw key blob."""
    digest = hashlib.sha256(blob).digest()
    return "SHA256:" + base64.b64encode(digest).decode("ascii").rstrip("=")


def _decode_blob(key_type: str, b64: str) -> bytes:
    try:
        blob = base64.b64decode(b64, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidPublicKey("key body is not valid base64") from exc
    # The blob starts with a length-prefixed copy of the key type
    if len(blob) < 4:
        raise InvalidPublicKey("key body is truncated")
    n = int.from_bytes(blob[:4], "big")
    if blob[4:4 + n] != key_type.encode("ascii", errors="replace"):
        raise InvalidPublicKey("key type does not match key body")
    return blob


def _check_with_ssh_keygen(line: str, kernel: "Kernel") -> None:
    res = kernel.run(["ssh-keygen", "-l", "-f", "-"], input=line + "\n")
    if not res.ok:
        raise InvalidPublicKey(res.stderr.strip() or "rejected by ssh-keygen")


def parse_public_key(line: str, kernel: Optional["Kernel"] = None) -> PublicKey:
    """
    Validate one authorized_keys line and return its parsed form.

    Raises:
        InvalidPublicKey: the line is not a well-formed OpenSSH public key.
    """
    line = line.strip()
    fields = line.split(None, 2)
    if len(fields) < 2:
        raise InvalidPublicKey("expected '<type> <base64> [comment]'")
    key_type, b64 = fields[0], fields[1]
    comment = fields[2] if len(fields) > 2 else ""

    blob = _decode_blob(key_type, b64)
    try:
        load_ssh_public_key(f"{key_type} {b64}".encode("ascii"))
    except UnsupportedAlgorithm:
        if kernel is None:
            raise InvalidPublicKey(f"unsupported key type {key_type!r}")
        _check_with_ssh_keygen(line, kernel)
    except (ValueError, UnicodeEncodeError) as exc:
        raise InvalidPublicKey(str(exc) or "malformed key") from exc

    return PublicKey(
        line=line,
        key_type=key_type,
        fingerprint=fingerprint(blob),
        comment=comment,
    )
