"""Tests for console helpers, logging setup and rc-file hooks."""

from __future__ import annotations

import io
import logging

from anywhere.helpers import ensure_line, ensure_sourced, source_line
from anywhere.ui import (
    ColorizingStreamHandler,
    colorize,
    format_table,
    init_logger,
    print_block,
    print_line,
    strip_ansi,
)


class TestConsole:
    def test_colors_stripped_for_pipes(self, monkeypatch):
        monkeypatch.delenv("FORCE_COLOR", raising=False)
        buf = io.StringIO()
        print_line(colorize("[  OK  ] done", "green"), file=buf)
        assert buf.getvalue() == "[  OK  ] done\n"

    def test_force_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("FORCE_COLOR", "1")
        buf = io.StringIO()
        print_line(colorize("x", "red"), file=buf)
        assert "\x1b[" in buf.getvalue()
        assert strip_ansi(buf.getvalue()) == "x\n"

    def test_block_is_written_in_one_call(self, monkeypatch):
        monkeypatch.delenv("FORCE_COLOR", raising=False)

        class Recorder(io.StringIO):
            writes = 0

            def write(self, s):
                type(self).writes += 1
                return super().write(s)

        buf = Recorder()
        print_block(["=" * 3, colorize("ERROR", "red"), "=" * 3], file=buf)
        assert buf.getvalue() == "===\nERROR\n===\n"
        assert Recorder.writes == 1

    def test_table(self):
        text = format_table([("Bind volume", "OK", "")], headers=("Stage", "Status", "Detail"))
        lines = text.splitlines()
        assert lines[0] == lines[2] == lines[-1]
        assert lines[0].startswith("+-") and lines[0].endswith("-+")
        assert "| Bind volume |" in lines[3]
        assert len({len(line) for line in lines}) == 1

    def test_table_truncates_long_cells(self):
        text = format_table([("x" * 200,)], max_cell=20)
        assert "x" * 21 not in text
        assert "..." in text


class TestLogger:
    def test_file_handler_writes_plain_text(self, tmp_path):
        logfile = tmp_path / "logs" / "boot.log"
        logger = init_logger("anywhere", "DEBUG", logfile)
        logging.getLogger("anywhere.provision.test").warning(colorize("careful", "yellow"))
        for handler in logger.handlers:
            handler.flush()
        assert "[WARNING] anywhere.provision.test: careful" in logfile.read_text()

    def test_handlers_not_duplicated(self, tmp_path):
        init_logger("anywhere", "INFO", tmp_path / "a.log")
        logger = init_logger("anywhere", "INFO", tmp_path / "a.log")
        assert len(logger.handlers) == 2

    def test_console_handler_writes_plain_records_to_pipes(self, monkeypatch):
        monkeypatch.delenv("FORCE_COLOR", raising=False)
        buf = io.StringIO()
        handler = ColorizingStreamHandler(buf)
        handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
        handler.emit(logging.makeLogRecord({"levelno": logging.WARNING,
                                            "levelname": "WARNING", "msg": "disk"}))
        assert buf.getvalue() == "[WARNING] disk\n"


class TestRcFile:
    def test_ensure_line_appends_once(self, tmp_path):
        rc = tmp_path / ".bashrc"
        assert ensure_line(rc, "export A=1") is True
        assert ensure_line(rc, "export A=1") is False
        assert rc.read_text() == "export A=1\n"

    def test_sentinel_matches_user_variants(self, tmp_path):
        rc = tmp_path / ".bashrc"
        rc.write_text(". ~/.bashrc_agents   # customised by hand\n")
        assert ensure_sourced(rc, tmp_path / ".bashrc_agents", tmp_path) is False

    def test_source_line_outside_home_is_absolute(self, tmp_path):
        assert source_line(tmp_path / "x", tmp_path / "home") == (
            f'[ -f "{tmp_path / "x"}" ] && source "{tmp_path / "x"}"')
