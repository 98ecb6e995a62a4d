"""Shared fixtures for the boot sequence tests."""

from __future__ import annotations

import getpass
import logging
from pathlib import Path

import pytest
from cryptography.hazmat.primitives.asymmetric import ed25519
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    PublicFormat,
)

from anywhere.config import load_config
from anywhere.provision import BootContext
from anywhere.system import CommandResult, Kernel


def result(returncode: int = 0, stdout: str = "", stderr: str = "") -> CommandResult:
    return CommandResult(
        stdout=stdout,
        stderr=stderr,
        returncode=returncode,
        timed_out=False,
        duration_sec=0.0,
    )


class RecordingKernel(Kernel):
    """Kernel that records commands instead of spawning processes.

    `responses` maps an argv prefix (tuple) to the CommandResult returned for
    commands starting with it; everything else succeeds. `available` lists
    the executables `which` reports as installed.
    """

    def __init__(self, responses=None, available=()):
        super().__init__(use_sudo=False)
        self.responses = dict(responses or {})
        self.available = set(available)
        self.calls: list[list[str]] = []
        self.inputs: list[bytes | None] = []
        self.exec_calls: list[list[str]] = []

    def _exec(self, args, *, input, timeout, env, cwd, encoding):
        argv = list(args)
        self.calls.append(argv)
        self.inputs.append(input)
        for prefix, res in self.responses.items():
            if tuple(argv[: len(prefix)]) == tuple(prefix):
                return res
        return result()

    def which(self, executable):
        return f"/usr/bin/{executable}" if executable in self.available else None

    def exec_replace(self, args, *, privileged=False):
        self.exec_calls.append(self._argv(args, privileged))

    def ran(self, *prefix: str) -> bool:
        return any(tuple(c[: len(prefix)]) == prefix for c in self.calls)


@pytest.fixture(autouse=True)
def reset_logger():
    """init_logger() turns propagation off; undo it so caplog sees records."""
    yield
    logger = logging.getLogger("anywhere")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def base_env(tmp_path: Path) -> dict[str, str]:
    """ANYWHERE_* overrides that point every path into tmp_path."""
    home = tmp_path / "home"
    mount = tmp_path / "data"
    etc = tmp_path / "etc"
    home.mkdir()
    mount.mkdir()
    return {
        "ANYWHERE_CONFIG_DIR": str(tmp_path / "conf"),
        "ANYWHERE_USER": getpass.getuser(),
        "ANYWHERE_HOME": str(home),
        "ANYWHERE_MOUNT_PATH": str(mount),
        "ANYWHERE_SKILLS_SOURCE": str(tmp_path / "default-skills"),
        "ANYWHERE_HOST_KEY_DIR": str(etc / "ssh"),
        "ANYWHERE_HOST_KEY_TYPES": "ecdsa ed25519",
        "ANYWHERE_MOTD_PATH": str(etc / "motd"),
        "ANYWHERE_SSHD_CONFIG_DIR": str(etc / "ssh" / "sshd_config.d"),
        "ANYWHERE_FAIL2BAN_JAIL": str(etc / "fail2ban" / "jail.d" / "agents-anywhere.local"),
        "ANYWHERE_SSHD_LOG_FILE": str(tmp_path / "var" / "log" / "sshd.log"),
        "ANYWHERE_USE_SUDO": "false",
    }


@pytest.fixture
def kernel() -> RecordingKernel:
    return RecordingKernel()


@pytest.fixture
def make_ctx(base_env, kernel):
    """Build a BootContext from base_env plus extra environment variables."""

    def factory(extra=None, kernel_override=None) -> BootContext:
        environ = {**base_env, **(extra or {})}
        return BootContext(
            config=load_config(environ),
            kernel=kernel_override or kernel,
            environ=environ,
        )

    return factory


@pytest.fixture
def ctx(make_ctx) -> BootContext:
    return make_ctx()


@pytest.fixture
def new_public_key():
    """Return a factory producing fresh ed25519 authorized_keys lines."""

    def factory(comment: str = "dev@laptop") -> str:
        key = ed25519.Ed25519PrivateKey.generate()
        line = key.public_key().public_bytes(Encoding.OpenSSH, PublicFormat.OpenSSH)
        return f"{line.decode('ascii')} {comment}"

    return factory


@pytest.fixture
def private_key_pem() -> str:
    """A fresh ed25519 private key in OpenSSH format, as pasted by mistake."""
    key = ed25519.Ed25519PrivateKey.generate()
    pem = key.private_bytes(Encoding.PEM, PrivateFormat.OpenSSH, NoEncryption())
    return pem.decode("ascii")
