"""Tests for the command/privilege facade."""

from __future__ import annotations

import getpass
import stat
import sys

import pytest

from anywhere.errors import CommandFailed
from anywhere.system import Kernel
from conftest import RecordingKernel, result


class TestPrivilege:
    def test_sudo_prefix_only_for_privileged_commands(self, monkeypatch):
        monkeypatch.setattr(Kernel, "is_root", staticmethod(lambda: False))
        kernel = Kernel(use_sudo=True)
        assert kernel._argv(["chpasswd"], True) == ["sudo", "chpasswd"]
        assert kernel._argv(["gh", "auth", "status"], False) == ["gh", "auth", "status"]

    def test_no_sudo_when_root(self, monkeypatch):
        monkeypatch.setattr(Kernel, "is_root", staticmethod(lambda: True))
        assert Kernel(use_sudo=True)._argv(["chpasswd"], True) == ["chpasswd"]

    def test_no_sudo_when_disabled(self, monkeypatch):
        monkeypatch.setattr(Kernel, "is_root", staticmethod(lambda: False))
        assert Kernel(use_sudo=False)._argv(["chpasswd"], True) == ["chpasswd"]


class TestRunners:
    def test_run_captures_output(self):
        res = Kernel(use_sudo=False).run(
            [sys.executable, "-c", "import sys; print('out'); print('err', file=sys.stderr)"])
        assert res.ok
        assert res.stdout.strip() == "out"
        assert res.stderr.strip() == "err"

    def test_run_passes_text_input_on_stdin(self):
        res = Kernel(use_sudo=False).run(
            [sys.executable, "-c", "import sys; print(sys.stdin.read().upper())"],
            input="secret",
        )
        assert res.stdout.strip() == "SECRET"

    def test_missing_executable_is_127(self):
        res = Kernel(use_sudo=False).run(["definitely-not-a-real-binary-xyz"])
        assert res.returncode == 127
        assert not res.ok

    def test_check_raises_with_exit_status(self):
        kernel = RecordingKernel({("chpasswd",): result(3, stderr="bad user")})
        with pytest.raises(CommandFailed) as info:
            kernel.check(["chpasswd"], privileged=True, input="user:pw\n")
        assert info.value.exit_code == 3
        assert "bad user" in str(info.value)
        assert "user:pw" not in str(info.value)


class TestFileHelpers:
    def test_write_file_creates_parents_and_sets_mode(self, tmp_path):
        target = tmp_path / "etc" / "ssh" / "key"
        Kernel(use_sudo=False).write_file(target, b"data", mode=0o600, privileged=True)
        assert target.read_bytes() == b"data"
        assert stat.S_IMODE(target.stat().st_mode) == 0o600

    def test_write_file_through_sudo_uses_tee(self, tmp_path, monkeypatch):
        monkeypatch.setattr(Kernel, "is_root", staticmethod(lambda: False))
        kernel = RecordingKernel()
        kernel.use_sudo = True
        kernel.write_file(tmp_path / "motd", "hello\n", privileged=True)
        assert ["sudo", "tee", str(tmp_path / "motd")] in kernel.calls
        assert ["sudo", "install", "-m", "644", "/dev/null", str(tmp_path / "motd")] in kernel.calls
        assert b"hello\n" in kernel.inputs

    def test_copy_files_preserves_bytes_and_mode(self, tmp_path):
        src = tmp_path / "src"
        src.mkdir()
        (src / "ssh_host_ed25519_key").write_bytes(b"private")
        (src / "ssh_host_ed25519_key").chmod(0o600)
        copied = Kernel(use_sudo=False).copy_files(
            [src / "ssh_host_ed25519_key", src / "missing"], tmp_path / "dest")
        assert copied == 1
        out = tmp_path / "dest" / "ssh_host_ed25519_key"
        assert out.read_bytes() == b"private"
        assert stat.S_IMODE(out.stat().st_mode) == 0o600

    def test_chown_to_current_user(self, tmp_path):
        (tmp_path / "a").mkdir()
        (tmp_path / "a" / "b").write_text("x")
        Kernel(use_sudo=False).chown(tmp_path / "a", getpass.getuser(), recursive=True)

    def test_chown_through_sudo(self, tmp_path, monkeypatch):
        monkeypatch.setattr(Kernel, "is_root", staticmethod(lambda: False))
        kernel = RecordingKernel()
        kernel.use_sudo = True
        kernel.chown(tmp_path, "user", recursive=True)
        assert kernel.calls == [["sudo", "chown", "-R", "user:user", str(tmp_path)]]

    def test_privileged_copy_keeps_root_ownership(self, tmp_path, monkeypatch):
        monkeypatch.setattr(Kernel, "is_root", staticmethod(lambda: False))
        (tmp_path / "ssh_host_ed25519_key").write_bytes(b"private")
        kernel = RecordingKernel()
        kernel.use_sudo = True
        kernel.copy_files([tmp_path / "ssh_host_ed25519_key"], tmp_path / "etc", privileged=True)
        cp = next(c for c in kernel.calls if c[1] == "cp")
        assert cp == ["sudo", "cp", "--preserve=mode,timestamps",
                      str(tmp_path / "ssh_host_ed25519_key"), str(tmp_path / "etc")]
        assert "-p" not in cp
