"""Terminal abstraction for blocking raw-mode key input and cursor control.

Provides a ``Terminal`` protocol and a concrete ``ProcessTerminal``
implementation on ``sys.stdin``/``sys.stdout`` that manages raw mode, reads
one key at a time, and positions the cursor via ANSI escape sequences.
"""

from __future__ import annotations

import codecs
import logging
import os
import re
import select
import sys
import termios
import tty
from typing import Protocol

from keyline.keys import KeyEvent, parse_key_event

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# ANSI escape constants
# ---------------------------------------------------------------------------

ESC = "\x1b"

_HIDE_CURSOR = "\x1b[?25l"
_SHOW_CURSOR = "\x1b[?25h"
_CLEAR_FROM_CURSOR = "\x1b[0J"
_SET_POSITION_FMT = "\x1b[{};{}H"
_QUERY_POSITION = "\x1b[6n"

_POSITION_REPORT_RE = re.compile(r"\x1b\[(\d+);(\d+)R")

# Seconds to wait for the rest of an escape sequence.
_SEQUENCE_TIMEOUT = 0.01
# Seconds to wait for a cursor position report.
_REPORT_TIMEOUT = 1.0


# ---------------------------------------------------------------------------
# Terminal protocol
# ---------------------------------------------------------------------------


class Terminal(Protocol):
    """Interface for terminal I/O operations."""

    def start(self) -> None: ...

    def stop(self) -> None: ...

    def read_key(self, blocking: bool = True) -> KeyEvent | None: ...

    def write(self, text: str) -> None: ...

    def write_line(self, text: str = "") -> None: ...

    def get_cursor_position(self) -> tuple[int, int]: ...

    def set_cursor_position(self, column: int, row: int) -> None: ...

    def buffer_width(self) -> int: ...

    def set_cursor_visible(self, visible: bool) -> None: ...

    def clear_from_cursor(self) -> None: ...


# ---------------------------------------------------------------------------
# Escape sequence completeness
# ---------------------------------------------------------------------------


def sequence_state(data: str) -> str:
    """Classify buffered input as ``complete``, ``incomplete`` or ``not-escape``."""
    if not data.startswith(ESC):
        return "not-escape"
    if len(data) == 1:
        return "incomplete"

    after_esc = data[1:]
    if after_esc.startswith("["):
        if len(data) < 3:
            return "incomplete"
        return "complete" if 0x40 <= ord(data[-1]) <= 0x7E else "incomplete"
    if after_esc.startswith("O"):
        return "complete" if len(after_esc) >= 2 else "incomplete"
    # Meta key: ESC followed by a single character
    return "complete"


# ---------------------------------------------------------------------------
# ProcessTerminal implementation
# ---------------------------------------------------------------------------


class ProcessTerminal:
    """Concrete terminal backed by ``sys.stdin``/``sys.stdout``.

    ``start`` switches stdin to raw mode and ``stop`` restores the saved
    attributes. Output is written unbuffered; ``write_line`` emits ``\\r\\n``
    because raw mode disables output newline translation.
    """

    def __init__(self, write_log: str = "") -> None:
        self._original_termios: list | None = None
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._pending = ""
        self._write_log_path = write_log

    # -- start / stop -------------------------------------------------------

    def start(self) -> None:
        """Save the terminal attributes and enable raw mode."""
        fd = sys.stdin.fileno()
        self._original_termios = termios.tcgetattr(fd)
        tty.setraw(fd)
        logger.debug("Raw mode enabled on fd %d", fd)

    def stop(self) -> None:
        """Restore the saved terminal attributes and show the cursor."""
        self.set_cursor_visible(True)
        if self._original_termios is not None:
            termios.tcsetattr(sys.stdin.fileno(), termios.TCSADRAIN, self._original_termios)
            self._original_termios = None
            logger.debug("Terminal attributes restored")

    # -- input --------------------------------------------------------------

    def read_key(self, blocking: bool = True) -> KeyEvent | None:
        """Read one key press.

        Blocks until a key arrives unless *blocking* is false, in which case
        ``None`` is returned when nothing is waiting.

        Raises:
            EOFError: stdin was closed.
        """
        if not self._pending:
            if not blocking and not self._readable(0):
                return None
            self._pending += self._read_chunk()

        # Complete a partial escape sequence with whatever follows promptly.
        while sequence_state(self._pending) == "incomplete" and self._readable(_SEQUENCE_TIMEOUT):
            self._pending += self._read_chunk()

        data = self._take_sequence()
        return parse_key_event(data)

    def _take_sequence(self) -> str:
        """Pop one key's worth of input off the pending buffer."""
        pending = self._pending
        if not pending.startswith(ESC):
            self._pending = pending[1:]
            return pending[0]

        if len(pending) > 1 and pending[1] == "[":
            for i in range(2, len(pending)):
                if 0x40 <= ord(pending[i]) <= 0x7E:
                    self._pending = pending[i + 1 :]
                    return pending[: i + 1]
        elif len(pending) > 2 and pending[1] == "O":
            self._pending = pending[3:]
            return pending[:3]
        elif len(pending) > 1:
            self._pending = pending[2:]
            return pending[:2]

        self._pending = ""
        return pending

    def _read_chunk(self) -> str:
        fd = sys.stdin.fileno()
        while True:
            raw = os.read(fd, 1024)
            if not raw:
                raise EOFError("stdin closed")
            text = self._decoder.decode(raw)
            if text:
                return text

    def _readable(self, timeout: float) -> bool:
        ready, _, _ = select.select([sys.stdin.fileno()], [], [], timeout)
        return bool(ready)

    # -- output -------------------------------------------------------------

    def write(self, text: str) -> None:
        """Write text to stdout and optionally to the write log."""
        self._raw_write(text)

        if self._write_log_path:
            try:
                with open(self._write_log_path, "a") as f:
                    f.write(text)
            except OSError:
                logger.warning("Cannot append to write log %s", self._write_log_path)
                self._write_log_path = ""

    def write_line(self, text: str = "") -> None:
        self.write(text.replace("\r\n", "\n").replace("\n", "\r\n") + "\r\n")

    # -- cursor / screen ----------------------------------------------------

    def get_cursor_position(self) -> tuple[int, int]:
        """Ask the terminal where the cursor is. Returns 0-based ``(column, row)``.

        Key presses that arrive before the report stay queued for
        :meth:`read_key`.
        """
        self._raw_write(_QUERY_POSITION)
        buffered = ""
        while self._readable(_REPORT_TIMEOUT):
            buffered += self._read_chunk()
            match = _POSITION_REPORT_RE.search(buffered)
            if match:
                self._pending += buffered[: match.start()] + buffered[match.end() :]
                return int(match.group(2)) - 1, int(match.group(1)) - 1
        self._pending += buffered
        raise OSError("Terminal did not report the cursor position")

    def set_cursor_position(self, column: int, row: int) -> None:
        self._raw_write(_SET_POSITION_FMT.format(max(row, 0) + 1, max(column, 0) + 1))

    def buffer_width(self) -> int:
        try:
            return os.get_terminal_size(sys.stdout.fileno()).columns
        except (ValueError, OSError):
            return 80

    def set_cursor_visible(self, visible: bool) -> None:
        self._raw_write(_SHOW_CURSOR if visible else _HIDE_CURSOR)

    def clear_from_cursor(self) -> None:
        self._raw_write(_CLEAR_FROM_CURSOR)

    # -- private: raw write -------------------------------------------------

    def _raw_write(self, data: str) -> None:
        """Write directly to stdout, bypassing buffering."""
        try:
            sys.stdout.write(data)
            sys.stdout.flush()
        except OSError as e:
            logger.debug("stdout write failed: %s", e)
