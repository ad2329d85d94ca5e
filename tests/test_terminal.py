"""Tests for keyline.terminal -- ProcessTerminal over a pipe."""

from __future__ import annotations

import os

import pytest

from keyline.terminal import ProcessTerminal, sequence_state


class _PipeStdin:
    def __init__(self, fd: int) -> None:
        self._fd = fd

    def fileno(self) -> int:
        return self._fd


@pytest.fixture
def pipe(monkeypatch: pytest.MonkeyPatch):
    read_fd, write_fd = os.pipe()
    monkeypatch.setattr("sys.stdin", _PipeStdin(read_fd))
    yield write_fd
    os.close(read_fd)
    try:
        os.close(write_fd)
    except OSError:
        pass


# ---------------------------------------------------------------------------
# sequence_state
# ---------------------------------------------------------------------------


class TestSequenceState:
    def test_plain_text(self):
        assert sequence_state("a") == "not-escape"

    def test_lone_escape(self):
        assert sequence_state("\x1b") == "incomplete"

    def test_partial_csi(self):
        assert sequence_state("\x1b[") == "incomplete"
        assert sequence_state("\x1b[1;5") == "incomplete"

    def test_complete_csi(self):
        assert sequence_state("\x1b[A") == "complete"
        assert sequence_state("\x1b[3~") == "complete"

    def test_ss3(self):
        assert sequence_state("\x1bO") == "incomplete"
        assert sequence_state("\x1bOA") == "complete"

    def test_meta_key(self):
        assert sequence_state("\x1bb") == "complete"


# ---------------------------------------------------------------------------
# ProcessTerminal input
# ---------------------------------------------------------------------------


class TestReadKey:
    def test_plain_keys_one_at_a_time(self, pipe):
        os.write(pipe, b"ab\r")
        terminal = ProcessTerminal()
        assert [terminal.read_key().key_id for _ in range(3)] == ["a", "b", "enter"]

    def test_escape_sequences_split(self, pipe):
        os.write(pipe, b"\x1b[A\x1b[1;5Dx")
        terminal = ProcessTerminal()
        assert terminal.read_key().key_id == "up"
        assert terminal.read_key().key_id == "ctrl+left"
        assert terminal.read_key().char == "x"

    def test_utf8_decoded(self, pipe):
        os.write(pipe, "\u00e9\u4e16".encode())
        terminal = ProcessTerminal()
        assert terminal.read_key().char == "\u00e9"
        assert terminal.read_key().char == "\u4e16"

    def test_lone_escape(self, pipe):
        os.write(pipe, b"\x1b")
        assert ProcessTerminal().read_key().key_id == "escape"

    def test_non_blocking_without_input(self, pipe):
        assert ProcessTerminal().read_key(blocking=False) is None

    def test_end_of_input(self, pipe):
        os.close(pipe)
        with pytest.raises(EOFError):
            ProcessTerminal().read_key()


class TestCursorPosition:
    def test_report_parsed(self, pipe, capsys):
        os.write(pipe, b"\x1b[5;10R")
        assert ProcessTerminal().get_cursor_position() == (9, 4)
        assert "\x1b[6n" in capsys.readouterr().out

    def test_keys_before_report_are_kept(self, pipe, capsys):
        os.write(pipe, b"q\x1b[1;1R")
        terminal = ProcessTerminal()
        assert terminal.get_cursor_position() == (0, 0)
        assert terminal.read_key().char == "q"

    def test_set_position_is_one_based(self, capsys):
        ProcessTerminal().set_cursor_position(3, 7)
        assert capsys.readouterr().out == "\x1b[8;4H"


# ---------------------------------------------------------------------------
# ProcessTerminal output
# ---------------------------------------------------------------------------


class TestOutput:
    def test_write_line_uses_crlf(self, capsys):
        ProcessTerminal().write_line("a\nb")
        assert capsys.readouterr().out == "a\r\nb\r\n"

    def test_cursor_visibility(self, capsys):
        terminal = ProcessTerminal()
        terminal.set_cursor_visible(False)
        terminal.set_cursor_visible(True)
        assert capsys.readouterr().out == "\x1b[?25l\x1b[?25h"

    def test_clear_from_cursor(self, capsys):
        ProcessTerminal().clear_from_cursor()
        assert capsys.readouterr().out == "\x1b[0J"

    def test_buffer_width_fallback(self, capsys):
        assert ProcessTerminal().buffer_width() == 80

    def test_write_log(self, capsys, tmp_path):
        log = tmp_path / "writes.log"
        terminal = ProcessTerminal(write_log=str(log))
        terminal.write("hello")
        terminal.write_line(" world")
        assert log.read_bytes() == b"hello world\r\n"
