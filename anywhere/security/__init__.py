#!/usr/bin/env python3
# anywhere/security/__init__.py
from __future__ import annotations

"""
Package for credential material and owner-only files.

Provides:
- OpenSSH public key validation and SHA256 fingerprints (`parse_public_key`).
- Host identity key generation in OpenSSH format (`generate_host_key`).
- Truncate-and-write helpers for mode-restricted files (`write_private`).
"""


from .hostkeys import (
    HOST_KEY_GLOB,
    generate_host_key,
    host_key_files,
    host_key_fingerprints,
    host_key_name,
    supported_types,
)
from .pubkeys import (
    PublicKey,
    fingerprint,
    holds_private_key,
    parse_public_key,
    preview,
    split_key_lines,
)
from .secure_file import (
    PRIVATE_DIR_MODE,
    PRIVATE_FILE_MODE,
    ensure_private_dir,
    write_private,
)

__all__ = [
    "HOST_KEY_GLOB",
    "PRIVATE_DIR_MODE",
    "PRIVATE_FILE_MODE",
    "PublicKey",
    "ensure_private_dir",
    "fingerprint",
    "generate_host_key",
    "holds_private_key",
    "host_key_files",
    "host_key_fingerprints",
    "host_key_name",
    "parse_public_key",
    "preview",
    "split_key_lines",
    "supported_types",
    "write_private",
]
