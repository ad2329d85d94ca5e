"""TextField - the row-segmented buffer being edited and its cursor."""

from __future__ import annotations

from dataclasses import dataclass

from keyline.reflow import ReflowEngine
from keyline.utils import (
    grapheme_after,
    grapheme_before,
    is_punctuation_char,
    is_whitespace_char,
    visible_width,
)


@dataclass(frozen=True)
class Cursor:
    """Logical index plus the row/column it is displayed at."""

    index: int = 0
    row: int = 0
    column: int = 0


def _is_control(ch: str) -> bool:
    code = ord(ch)
    return code < 32 or code == 0x7F or 0x80 <= code <= 0x9F


def normalize_text(text: str) -> str:
    """Normalize line endings, expand tabs and drop control characters."""
    text = text.replace("\r\n", "\n").replace("\r", "\n").replace("\t", "    ")
    return "".join(ch for ch in text if ch == "\n" or not _is_control(ch))


class TextField:
    """Multi-row text buffer whose rows always match a reflow of its text.

    Every mutating method re-packs the rows (incrementally where it can)
    and recomputes the cursor row/column before returning.
    """

    def __init__(self, width: int = 80, prefix_width: int = 0) -> None:
        self._engine = ReflowEngine(width, prefix_width)
        self._text = ""
        self._rows: list[str] = [""]
        self._cursor = Cursor(0, 0, self._engine.prefix_width)

    # -- read access --------------------------------------------------------

    @property
    def engine(self) -> ReflowEngine:
        return self._engine

    @property
    def rows(self) -> tuple[str, ...]:
        return tuple(self._rows)

    @property
    def cursor(self) -> Cursor:
        return self._cursor

    @property
    def width(self) -> int:
        return self._engine.width

    @property
    def prefix_width(self) -> int:
        return self._engine.prefix_width

    def logical_text(self) -> str:
        return self._text

    def __len__(self) -> int:
        return len(self._text)

    def text_before_cursor(self) -> str:
        return self._text[: self._cursor.index]

    def fits_single_row(self, text: str, at: int | None = None) -> bool:
        """Would inserting *text* at *at* keep the whole field on one screen line?

        The cursor must still fit after the last character, so the prompt
        plus the text has to stay narrower than the terminal.
        """
        at = self._cursor.index if at is None else at
        candidate = self._text[:at] + normalize_text(text) + self._text[at:]
        if "\n" in candidate:
            return False
        return self._engine.prefix_width + visible_width(candidate) < self._engine.width

    # -- geometry -----------------------------------------------------------

    def resize(self, width: int, prefix_width: int | None = None) -> bool:
        """Re-pack every row for a new terminal width. Returns True if changed."""
        if prefix_width is None:
            prefix_width = self._engine.prefix_width
        if width == self._engine.width and prefix_width == self._engine.prefix_width:
            return False
        self._engine = ReflowEngine(width, prefix_width)
        self._rows = self._engine.reflow(self._text)
        self._place_cursor(self._cursor.index)
        return True

    # -- mutation -----------------------------------------------------------

    def insert(self, text: str, at: int | None = None) -> None:
        """Insert *text* at logical index *at* (default: the cursor).

        The cursor ends up after the inserted text when inserting at the
        cursor; an insertion before the cursor shifts it right.
        """
        at = self._cursor.index if at is None else at
        if not 0 <= at <= len(self._text):
            raise IndexError(f"insert position {at} outside 0..{len(self._text)}")
        clean = normalize_text(text)
        if not clean:
            return
        cursor = self._cursor.index
        if at <= cursor:
            cursor += len(clean)
        self._splice(at, at, clean, cursor)

    def delete_backward(self) -> None:
        """Remove the character (grapheme) before the cursor."""
        index = self._cursor.index
        if index == 0:
            return
        size = grapheme_before(self._text, index)
        self._splice(index - size, index, "", index - size)

    def delete_forward(self) -> None:
        """Remove the character (grapheme) under the cursor."""
        index = self._cursor.index
        if index >= len(self._text):
            return
        size = grapheme_after(self._text, index)
        self._splice(index, index + size, "", index)

    def delete_range(self, start: int, end: int) -> str:
        """Remove ``text[start:end]`` and return it; the cursor lands at *start*."""
        if not 0 <= start <= end <= len(self._text):
            raise IndexError(f"range {start}..{end} outside 0..{len(self._text)}")
        removed = self._text[start:end]
        if removed:
            self._splice(start, end, "", start)
        return removed

    def delete_word_backward(self) -> str:
        return self.delete_range(self.word_start(), self._cursor.index)

    def delete_to_line_start(self) -> str:
        return self.delete_range(self.line_start(), self._cursor.index)

    def delete_to_line_end(self) -> str:
        return self.delete_range(self._cursor.index, self.line_end())

    def set_text(self, text: str) -> None:
        """Replace all content; the cursor moves to the end."""
        self._text = normalize_text(text)
        self._rows = self._engine.reflow(self._text)
        self._place_cursor(len(self._text))

    def clear(self) -> None:
        self._text = ""
        self._rows = [""]
        self._place_cursor(0)

    # -- cursor movement ----------------------------------------------------

    def move_to(self, index: int) -> None:
        if not 0 <= index <= len(self._text):
            raise IndexError(f"cursor index {index} outside 0..{len(self._text)}")
        self._place_cursor(index)

    def move_by(self, amount: int) -> None:
        """Move the cursor *amount* characters, clamped to the text."""
        self._place_cursor(max(0, min(len(self._text), self._cursor.index + amount)))

    def move_left(self) -> None:
        self._place_cursor(self._cursor.index - grapheme_before(self._text, self._cursor.index))

    def move_right(self) -> None:
        self._place_cursor(self._cursor.index + grapheme_after(self._text, self._cursor.index))

    def move_word_left(self) -> None:
        self._place_cursor(self.word_start())

    def move_word_right(self) -> None:
        self._place_cursor(self.word_end())

    def move_line_start(self) -> None:
        self._place_cursor(self.line_start())

    def move_line_end(self) -> None:
        self._place_cursor(self.line_end())

    # -- boundaries ---------------------------------------------------------

    def line_start(self) -> int:
        """Start of the logical (newline-delimited) line holding the cursor."""
        return self._text.rfind("\n", 0, self._cursor.index) + 1

    def line_end(self) -> int:
        end = self._text.find("\n", self._cursor.index)
        return len(self._text) if end == -1 else end

    def word_start(self) -> int:
        """Index the cursor lands on after moving one word left."""
        text = self._text
        index = self._cursor.index
        while index > 0 and is_whitespace_char(text[index - 1]):
            index -= 1
        if index > 0 and is_punctuation_char(text[index - 1]):
            while index > 0 and is_punctuation_char(text[index - 1]):
                index -= 1
        else:
            while (
                index > 0
                and not is_whitespace_char(text[index - 1])
                and not is_punctuation_char(text[index - 1])
            ):
                index -= 1
        return index

    def word_end(self) -> int:
        """Index the cursor lands on after moving one word right."""
        text = self._text
        index = self._cursor.index
        while index < len(text) and is_whitespace_char(text[index]):
            index += 1
        if index < len(text) and is_punctuation_char(text[index]):
            while index < len(text) and is_punctuation_char(text[index]):
                index += 1
        else:
            while (
                index < len(text)
                and not is_whitespace_char(text[index])
                and not is_punctuation_char(text[index])
            ):
                index += 1
        return index

    # -- internals ----------------------------------------------------------

    def _splice(self, start: int, end: int, text: str, cursor: int) -> None:
        self._text = self._text[:start] + text + self._text[end:]
        self._rows = self._engine.carry(self._rows, self._text, start, end - start, len(text))
        self._place_cursor(cursor)

    def _place_cursor(self, index: int) -> None:
        row, column = self._engine.locate(self._rows, index)
        self._cursor = Cursor(index, row, column)
