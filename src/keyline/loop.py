"""KeyEventLoop - blocking read/edit/submit loop over a terminal."""

from __future__ import annotations

import logging
from typing import Callable, Literal

from keyline.commands import SUCCESS, CommandResult
from keyline.config import Config
from keyline.field import TextField
from keyline.history import HistoryStore
from keyline.keybindings import Action, KeyBindings, KeybindingsConfig, LineAction
from keyline.keys import KeyEvent
from keyline.terminal import Terminal
from keyline.utils import visible_width

logger = logging.getLogger(__name__)

LoopState = Literal["idle", "capturing", "dispatching"]

LineHandler = Callable[[str], CommandResult]
Completer = Callable[[str], str]


class KeyEventLoop:
    """Reads keys from a terminal into a :class:`TextField` until submit.

    :meth:`read_line` captures a single line. :meth:`run` repeats capture
    and hands every submitted line to a handler until :meth:`stop` is
    called, which is the only way the loop ends.

    The field is drawn starting at column 0 of the row the cursor was on
    when the capture began, prompt first. Every key triggers a full repaint
    of the field.
    """

    def __init__(
        self,
        terminal: Terminal,
        config: Config | None = None,
        *,
        history: HistoryStore | None = None,
        completer: Completer | None = None,
        keybindings: KeybindingsConfig | None = None,
    ) -> None:
        self.terminal = terminal
        self.config = config or Config()
        self.history = history if history is not None else HistoryStore()
        self.completer = completer
        self.prefix = f"{self.config.prompt} " if self.config.prompt else ""
        self.field = TextField(terminal.buffer_width(), visible_width(self.prefix))
        self.keybindings = KeyBindings(self._actions(), keybindings)

        self.state: LoopState = "idle"
        self.ending = False
        self._line_done = False
        self._origin_row = 0

    def _actions(self) -> dict[LineAction, Action]:
        field = self.field
        return {
            "cursorLeft": field.move_left,
            "cursorRight": field.move_right,
            "cursorWordLeft": field.move_word_left,
            "cursorWordRight": field.move_word_right,
            "cursorLineStart": field.move_line_start,
            "cursorLineEnd": field.move_line_end,
            "deleteCharBackward": field.delete_backward,
            "deleteCharForward": field.delete_forward,
            "deleteWordBackward": field.delete_word_backward,
            "deleteToLineStart": field.delete_to_line_start,
            "deleteToLineEnd": field.delete_to_line_end,
            "historyPrevious": self._history_previous,
            "historyNext": self._history_next,
            "newLine": self._new_line,
            "submit": self._submit,
            "complete": self._complete,
            "cancelLine": field.clear,
        }

    @property
    def origin_row(self) -> int:
        """Screen row the field is drawn from."""
        return self._origin_row

    # -- outer loop ---------------------------------------------------------

    def run(self, handler: LineHandler) -> int:
        """Capture and dispatch lines until :meth:`stop` is called.

        Non-zero results have their message printed below the line. Returns
        the code of the last result.
        """
        self.ending = False
        result = SUCCESS
        while not self.ending:
            line = self.read_line()
            self.history.append(line)

            self.state = "dispatching"
            try:
                result = handler(line)
            finally:
                self.state = "idle"

            if result.code != 0:
                self.terminal.write_line(result.message)
        return result.code

    def stop(self) -> None:
        """End :meth:`run` once the current line has been handled."""
        self.ending = True

    # -- line capture -------------------------------------------------------

    def read_line(self) -> str:
        """Capture one line from the terminal and return its logical text."""
        self.field.clear()
        self._line_done = False
        self.state = "capturing"

        column, row = self.terminal.get_cursor_position()
        if column != 0:
            self.terminal.write_line()
            column, row = self.terminal.get_cursor_position()
        self._origin_row = row
        self._repaint()

        while not self._line_done:
            event = self.terminal.read_key()
            if event is not None:
                self.handle_key(event)

        # Leave the cursor on the line below the whole field.
        last_line = self.field.engine.line_count(self.field.rows) - 1
        self.terminal.set_cursor_position(0, self._origin_row + last_line)
        self.terminal.write_line()
        self.state = "idle"
        return self.field.logical_text()

    def handle_key(self, event: KeyEvent) -> None:
        """Apply one key: run its bound action or insert its character."""
        action = self.keybindings.lookup(event)
        if action is not None:
            logger.debug("Key %s -> %s", event.key_id, getattr(action, "__name__", action))
            self.keybindings.run(action)
        elif event.is_printable:
            self._insert_char(event.char)
        else:
            return

        if not self._line_done:
            self._repaint()

    # -- actions ------------------------------------------------------------

    def _insert_char(self, char: str) -> None:
        if not self.config.multiline and not self.field.fits_single_row(char):
            return
        self.field.insert(char)

    def _new_line(self) -> None:
        if self.config.multiline:
            self.field.insert("\n")

    def _submit(self) -> None:
        self._line_done = True

    def _history_previous(self) -> None:
        entry = self.history.previous()
        if entry is not None:
            self.field.set_text(entry)

    def _history_next(self) -> None:
        entry = self.history.next()
        if entry is not None:
            self.field.set_text(entry)

    def _complete(self) -> None:
        if self.completer is None:
            return
        suggestion = self.completer(self.field.logical_text())
        if not suggestion:
            return
        end = len(self.field)
        if not self.config.multiline and not self.field.fits_single_row(suggestion, at=end):
            return
        self.field.insert(suggestion, at=end)
        self.field.move_to(len(self.field))

    # -- rendering ----------------------------------------------------------

    def _repaint(self) -> None:
        terminal = self.terminal
        width = terminal.buffer_width()
        if self.field.resize(width):
            logger.debug("Field reflowed for width %d", width)

        engine = self.field.engine
        rows = self.field.rows
        cursor = self.field.cursor

        terminal.set_cursor_visible(False)
        terminal.set_cursor_position(0, self._origin_row)
        terminal.clear_from_cursor()
        terminal.write(self.prefix + "\r\n".join(row.rstrip("\n") for row in rows))

        # Writing may have scrolled the screen; re-anchor on where it ended.
        total = engine.line_count(rows)
        line, column = engine.to_screen(rows, cursor.row, cursor.column)
        if line >= total:
            terminal.write("\r\n" * (line - total + 1))
            _, row = terminal.get_cursor_position()
            self._origin_row = row - line
        else:
            _, row = terminal.get_cursor_position()
            self._origin_row = row - (total - 1)

        terminal.set_cursor_position(column, self._origin_row + line)
        terminal.set_cursor_visible(True)
