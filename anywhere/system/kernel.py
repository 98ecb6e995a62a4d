# anywhere/system/kernel.py
"""
Process and privilege interface for the boot sequence.

This module provides a small, well-typed facade for:
- Running commands, optionally escalated through sudo.
- The handful of privileged filesystem operations the boot needs
  (ownership transfer, writing system config files, copying key files).
- Replacing the current process image at handoff.

When the process already runs as root, or sudo is disabled in the
configuration, privileged operations are performed directly.
"""

from __future__ import annotations

import os
import shutil
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, NoReturn, Optional, Sequence, Union

from anywhere.errors import CommandFailed

# ---- Public result type -----------------------------------------------------


@dataclass(slots=True)
class CommandResult:
    """Normalized result for process execution."""
    stdout: str
    stderr: str
    returncode: int
    timed_out: bool
    duration_sec: float

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out


# ---- Kernel -----------------------------------------------------------------


class Kernel:
    """
    Thin interface to run commands and perform privileged file operations.

    Notes:
        - Avoids shell injection by passing argument lists to subprocess.
        - Secrets (passwords, key material) travel on stdin, never in argv.
    """

    SUDO = "sudo"

    def __init__(self, *, use_sudo: bool = True) -> None:
        """
        Args:
            use_sudo: Prefix privileged commands with sudo when not root.
        """
        self.use_sudo = use_sudo

    # ---- Privilege ----------------------------------------------------------

    @staticmethod
    def is_root() -> bool:
        """Return True if the current process runs with euid 0."""
        try:
            return os.geteuid() == 0
        except AttributeError:
            return False

    @property
    def sudo_required(self) -> bool:
        return self.use_sudo and not self.is_root()

    def _argv(self, args: Sequence[str], privileged: bool) -> List[str]:
        argv = [str(a) for a in args]
        if privileged and self.sudo_required:
            return [self.SUDO, *argv]
        return argv

    # ---- Runners ------------------------------------------------------------

    def run(
        self,
        args: Sequence[str],
        *,
        privileged: bool = False,
        input: Optional[Union[str, bytes]] = None,
        timeout: Optional[float] = None,
        env: Optional[dict] = None,
        cwd: Optional[str] = None,
        encoding: str = "utf-8",
    ) -> CommandResult:
        """
        Run a command and return a normalized result.

        Args:
            args: Argument list; the first element is the executable.
            privileged: Escalate through sudo when required.
            input: Data written to the child's stdin.
            timeout: Seconds before terminating.
            env: Environment overrides.
            cwd: Working directory.
            encoding: Decode stdout/stderr using this encoding.

        Returns:
            CommandResult
        """
        data = input.encode(encoding) if isinstance(input, str) else input
        return self._exec(
            self._argv(args, privileged),
            input=data,
            timeout=timeout,
            env=env,
            cwd=cwd,
            encoding=encoding,
        )

    def check(self, args: Sequence[str], **kwargs) -> CommandResult:
        """Like run(), but raise CommandFailed on a non-zero exit."""
        res = self.run(args, **kwargs)
        if not res.ok:
            raise CommandFailed(self._argv(args, kwargs.get("privileged", False)), res)
        return res

    @staticmethod
    def which(executable: str) -> Optional[str]:
        """Return the absolute path of `executable` on PATH, or None."""
        return shutil.which(executable)

    def exec_replace(self, args: Sequence[str], *, privileged: bool = False) -> NoReturn:
        """Replace the current process image with `args` (never returns)."""
        argv = self._argv(args, privileged)
        os.execvp(argv[0], argv)
        raise AssertionError("unreachable")  # pragma: no cover

    # ---- Filesystem helpers -------------------------------------------------

    def chown(
        self,
        path: Path,
        owner: str,
        group: Optional[str] = None,
        *,
        recursive: bool = False,
    ) -> None:
        """Change ownership of `path` (and its tree if recursive).

        Through sudo the group defaults to the owner's name (`chown u:u`);
        directly, only the owner changes unless a group is given.
        """
        if self.sudo_required:
            args = ["chown"]
            if recursive:
                args.append("-R")
            self.check([*args, f"{owner}:{group or owner}", str(path)], privileged=True)
            return

        shutil.chown(path, owner, group)
        if recursive and path.is_dir():
            for child in path.rglob("*"):
                if not child.is_symlink():
                    shutil.chown(child, owner, group)

    def write_file(
        self,
        path: Path,
        data: Union[str, bytes],
        *,
        mode: int = 0o644,
        privileged: bool = False,
    ) -> None:
        """Write `data` to `path` with `mode`, escalating if asked.

        The file has its final mode before any byte is written, so private
        keys are never briefly world-readable.
        """
        raw = data.encode("utf-8") if isinstance(data, str) else data
        if privileged and self.sudo_required:
            self.check(["mkdir", "-p", str(path.parent)], privileged=True)
            self.check(["install", "-m", f"{mode:o}", "/dev/null", str(path)], privileged=True)
            self.check(["tee", str(path)], privileged=True, input=raw)
            return

        path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
        with os.fdopen(fd, "wb") as fh:
            fh.write(raw)
        os.chmod(path, mode)

    def copy_files(
        self,
        sources: Iterable[Path],
        dest_dir: Path,
        *,
        privileged: bool = False,
    ) -> int:
        """Copy regular files into `dest_dir`, preserving modes and timestamps.

        Returns the number of files copied.
        """
        files = [p for p in sources if p.is_file()]
        if not files:
            return 0
        if privileged and self.sudo_required:
            self.check(["mkdir", "-p", str(dest_dir)], privileged=True)
            # Ownership is not preserved: copies belong to the escalated user
            self.check(["cp", "--preserve=mode,timestamps", *map(str, files), str(dest_dir)],
                       privileged=True)
            return len(files)

        dest_dir.mkdir(parents=True, exist_ok=True)
        for src in files:
            shutil.copy2(src, dest_dir / src.name)
        return len(files)

    # ---- Internals ----------------------------------------------------------

    def _exec(
        self,
        args: Sequence[str],
        *,
        input: Optional[bytes],
        timeout: Optional[float],
        env: Optional[dict],
        cwd: Optional[str],
        encoding: str,
    ) -> CommandResult:
        start = time.perf_counter()
        try:
            completed = subprocess.run(
                list(args),
                input=input,
                stdin=None if input is not None else subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                timeout=timeout,
                env={**os.environ, **(env or {})} if env else None,
                cwd=cwd,
                text=False,  # capture bytes; decode ourselves
            )
            duration = time.perf_counter() - start
            return CommandResult(
                stdout=completed.stdout.decode(encoding, errors="replace"),
                stderr=completed.stderr.decode(encoding, errors="replace"),
                returncode=completed.returncode,
                timed_out=False,
                duration_sec=duration,
            )
        except subprocess.TimeoutExpired as exc:
            duration = time.perf_counter() - start
            stdout = (exc.stdout or b"").decode(encoding, errors="replace")
            stderr = (exc.stderr or b"").decode(encoding, errors="replace")
            return CommandResult(
                stdout=stdout,
                stderr=stderr or "Process timed out.",
                returncode=1,
                timed_out=True,
                duration_sec=duration,
            )
        except FileNotFoundError as exc:
            # Mirror the shell's "command not found" status
            duration = time.perf_counter() - start
            return CommandResult(
                stdout="",
                stderr=str(exc),
                returncode=127,
                timed_out=False,
                duration_sec=duration,
            )
