"""Virtual terminal for testing -- implements the Terminal protocol in-memory.

This module provides a ``VirtualTerminal`` class that satisfies the
``keyline.terminal.Terminal`` protocol without performing any real I/O.
Keys come from a scripted queue; output lands in a character grid that
follows xterm cursor rules (autowrap with a pending-wrap state, scrolling at
the bottom row), and is also recorded verbatim for assertions.
"""

from __future__ import annotations

from collections import deque

from wcwidth import wcwidth

from keyline.keys import KeyEvent, key_event, parse_key_event


class VirtualTerminal:
    """In-memory terminal fed by a scripted key queue.

    Parameters
    ----------
    rows:
        Number of terminal rows (height).
    columns:
        Number of terminal columns (width).
    """

    def __init__(self, rows: int = 24, columns: int = 80) -> None:
        self._rows = rows
        self._columns = columns
        self._keys: deque[KeyEvent] = deque()
        self._buffer: list[str] = []
        self._grid = [[" "] * columns for _ in range(rows)]
        self._col = 0
        self._row = 0
        self._pending_wrap = False
        self._cursor_visible = True
        self._started = False

    # -- scripting ----------------------------------------------------------

    def type_text(self, text: str) -> None:
        """Queue *text* as raw input, one key per character."""
        for ch in text:
            event = parse_key_event(ch)
            if event is not None:
                self._keys.append(event)

    def press(self, *key_ids: str) -> None:
        """Queue keys by identifier, e.g. ``press("ctrl+left", "enter")``."""
        for key_id in key_ids:
            self._keys.append(key_event(key_id))

    def feed(self, data: str) -> None:
        """Queue one raw sequence (e.g. ``"\\x1b[1;5D"``) as a single key."""
        event = parse_key_event(data)
        if event is not None:
            self._keys.append(event)

    @property
    def pending_keys(self) -> int:
        return len(self._keys)

    # -- Terminal protocol: lifecycle ---------------------------------------

    def start(self) -> None:
        self._started = True

    def stop(self) -> None:
        self._started = False
        self._cursor_visible = True

    @property
    def started(self) -> bool:
        return self._started

    # -- Terminal protocol: input -------------------------------------------

    def read_key(self, blocking: bool = True) -> KeyEvent | None:
        if self._keys:
            return self._keys.popleft()
        if not blocking:
            return None
        raise RuntimeError("Key script exhausted")

    # -- Terminal protocol: output ------------------------------------------

    def write(self, text: str) -> None:
        self._buffer.append(text)
        for ch in text:
            if ch == "\r":
                self._col = 0
                self._pending_wrap = False
            elif ch == "\n":
                self._line_feed()
                self._pending_wrap = False
            else:
                self._put(ch)

    def write_line(self, text: str = "") -> None:
        self.write(text.replace("\r\n", "\n").replace("\n", "\r\n") + "\r\n")

    # -- Terminal protocol: cursor/screen -----------------------------------

    def get_cursor_position(self) -> tuple[int, int]:
        return self._col, self._row

    def set_cursor_position(self, column: int, row: int) -> None:
        self._col = max(0, min(column, self._columns - 1))
        self._row = max(0, min(row, self._rows - 1))
        self._pending_wrap = False

    def buffer_width(self) -> int:
        return self._columns

    def set_cursor_visible(self, visible: bool) -> None:
        self._cursor_visible = visible

    def clear_from_cursor(self) -> None:
        row = self._grid[self._row]
        for col in range(self._col, self._columns):
            row[col] = " "
        for r in range(self._row + 1, self._rows):
            self._grid[r] = [" "] * self._columns

    # -- grid internals -----------------------------------------------------

    def _line_feed(self) -> None:
        if self._row == self._rows - 1:
            self._grid.pop(0)
            self._grid.append([" "] * self._columns)
        else:
            self._row += 1

    def _put(self, ch: str) -> None:
        width = wcwidth(ch)
        if width <= 0:
            return
        if self._pending_wrap or self._col + width > self._columns:
            self._col = 0
            self._line_feed()
            self._pending_wrap = False
        self._grid[self._row][self._col] = ch
        for extra in range(1, width):
            self._grid[self._row][self._col + extra] = ""
        self._col += width
        if self._col >= self._columns:
            self._col = self._columns - 1
            self._pending_wrap = True

    # -- Test helpers -------------------------------------------------------

    def resize(self, columns: int) -> None:
        """Change the width; the visible content is cleared."""
        self._columns = columns
        self._grid = [[" "] * columns for _ in range(self._rows)]
        self._col = min(self._col, columns - 1)
        self._pending_wrap = False

    @property
    def cursor_visible(self) -> bool:
        return self._cursor_visible

    @property
    def output(self) -> str:
        """Return everything written to the terminal as a single string."""
        return "".join(self._buffer)

    def line(self, row: int) -> str:
        """Screen row *row* with trailing blanks removed."""
        return "".join(self._grid[row]).rstrip()

    def screen(self) -> list[str]:
        """All non-blank screen rows, top to bottom, up to the last used one."""
        lines = [self.line(r) for r in range(self._rows)]
        while lines and not lines[-1]:
            lines.pop()
        return lines
