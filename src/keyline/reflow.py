"""Row layout for the editable field.

The field's logical text is packed greedily into rows no wider than the
terminal. Words are never split: a word that does not fit in the space left
on a row moves to the next row, and a word wider than a whole row gets a row
of its own and overflows it. An explicit newline always ends its row.

Rows are exact slices of the logical text, so ``"".join(rows)`` gives the
text back. Packing only depends on where a row starts and whether it is the
first row (which loses the prompt's columns), which is what makes the
incremental :meth:`ReflowEngine.carry` produce the same rows as a full
:meth:`ReflowEngine.reflow`.
"""

from __future__ import annotations

import re
from bisect import bisect_right
from dataclasses import dataclass
from typing import Iterator, Sequence

from keyline.utils import visible_width

# A newline, a single non-newline whitespace character, or a whole word.
_TOKEN_RE = re.compile(r"\n|[^\S\n]|\S+")

# Columns kept free at the right edge so the cursor can sit after a full row.
RIGHT_MARGIN = 1


@dataclass(frozen=True)
class Layout:
    """Rows plus the row/column the target index maps to."""

    rows: tuple[str, ...]
    cursor_row: int
    cursor_col: int


def row_capacity(row: int, width: int, prefix_width: int) -> int:
    """Cells available to words on *row*."""
    used = prefix_width if row == 0 else 0
    return max(1, width - used - RIGHT_MARGIN)


def iter_row_spans(
    text: str,
    start: int = 0,
    *,
    width: int,
    prefix_width: int = 0,
    first_row: int = 0,
) -> Iterator[tuple[int, int]]:
    """Yield ``(start, end)`` spans of the rows of ``text[start:]``.

    *first_row* is the index of the row that begins at *start*; only row 0
    is charged for the prefix. The last span always ends at ``len(text)``
    and may be empty (empty text, or text ending in a newline).
    """
    row = first_row
    row_start = start
    row_width = 0
    capacity = row_capacity(row, width, prefix_width)

    for match in _TOKEN_RE.finditer(text, start):
        token = match.group()

        if token == "\n":
            yield row_start, match.end()
            row += 1
            row_start = match.end()
            row_width = 0
            capacity = row_capacity(row, width, prefix_width)
            continue

        token_width = visible_width(token)
        # Whitespace may hang into the reserved right margin; words may not.
        limit = capacity + RIGHT_MARGIN if token.isspace() else capacity
        if row_width + token_width <= limit:
            row_width += token_width
            continue

        if row_width > 0:
            yield row_start, match.start()
            row += 1
            row_start = match.start()
            capacity = row_capacity(row, width, prefix_width)
        # An oversized word lands here on an empty row and stays whole.
        row_width = token_width

    yield row_start, len(text)


def row_starts(rows: Sequence[str]) -> list[int]:
    """Logical index at which each row begins."""
    starts: list[int] = []
    offset = 0
    for row in rows:
        starts.append(offset)
        offset += len(row)
    return starts


class ReflowEngine:
    """Computes row boundaries and cursor coordinates for a given width.

    Args:
        width: Terminal column count.
        prefix_width: Cells taken by the prompt on the first row.
    """

    def __init__(self, width: int = 80, prefix_width: int = 0) -> None:
        if width < 1:
            raise ValueError(f"width must be positive, got {width}")
        self.width = width
        self.prefix_width = max(0, prefix_width)

    def reflow(self, text: str) -> list[str]:
        """Split *text* into rows from scratch."""
        return [
            text[start:end]
            for start, end in iter_row_spans(
                text, width=self.width, prefix_width=self.prefix_width
            )
        ]

    def carry(
        self,
        rows: Sequence[str],
        text: str,
        edit_start: int,
        removed: int,
        inserted: int,
    ) -> list[str]:
        """Re-pack *rows* after an edit, reusing the rows past the edit.

        *rows* must be the layout of the text before the edit, made with the
        current width. The edit replaced ``removed`` characters at
        *edit_start* with ``inserted`` characters, giving *text*. Packing
        restarts one row before the edited row (so text can be pulled back
        up) and stops at the first new row start that lines up with an old
        row start past the edit.
        """
        if not rows:
            return self.reflow(text)

        starts = row_starts(rows)
        edited_row = max(0, bisect_right(starts, edit_start) - 1)
        restart = max(0, edited_row - 1)
        delta = inserted - removed
        old_edit_end = edit_start + removed

        # Shifted old row start -> old row index, for rows wholly past the edit.
        anchors = {
            starts[i] + delta: i
            for i in range(restart + 1, len(starts))
            if starts[i] >= old_edit_end
        }

        new_rows = list(rows[:restart])
        for span_start, span_end in iter_row_spans(
            text,
            starts[restart],
            width=self.width,
            prefix_width=self.prefix_width,
            first_row=restart,
        ):
            old_index = anchors.get(span_start)
            if old_index is not None and len(new_rows) > restart:
                new_rows.extend(rows[old_index:])
                return new_rows
            new_rows.append(text[span_start:span_end])
        return new_rows

    def locate(self, rows: Sequence[str], index: int) -> tuple[int, int]:
        """Map a logical index to ``(row, column)``.

        An index on a row boundary belongs to the start of the next row; the
        end of the text belongs to the end of the last row. Columns count
        terminal cells and include the prefix on row 0.
        """
        total = sum(len(row) for row in rows)
        if not 0 <= index <= total:
            raise IndexError(f"index {index} outside 0..{total}")
        if not rows:
            return 0, self.prefix_width

        offset = 0
        for row_index, row in enumerate(rows):
            end = offset + len(row)
            if index < end or row_index == len(rows) - 1:
                prefix = self.prefix_width if row_index == 0 else 0
                return row_index, prefix + visible_width(row[: index - offset])
            offset = end
        raise AssertionError("unreachable")

    def layout(self, text: str, index: int) -> Layout:
        """Full reflow of *text* with the cursor at *index*."""
        rows = self.reflow(text)
        row, col = self.locate(rows, index)
        return Layout(tuple(rows), row, col)

    def row_lines(self, rows: Sequence[str], row: int) -> int:
        """Terminal lines row *row* occupies (an overflowing row wraps)."""
        prefix = self.prefix_width if row == 0 else 0
        cells = prefix + visible_width(rows[row])
        return max(1, -(-cells // self.width))

    def line_count(self, rows: Sequence[str]) -> int:
        """Terminal lines the whole field occupies."""
        return sum(self.row_lines(rows, i) for i in range(len(rows)))

    def to_screen(self, rows: Sequence[str], row: int, col: int) -> tuple[int, int]:
        """Map ``(row, column)`` to ``(line offset from the origin, column)``."""
        if not 0 <= row < max(1, len(rows)):
            raise IndexError(f"row {row} outside 0..{len(rows) - 1}")
        line = sum(self.row_lines(rows, i) for i in range(row))
        wrapped, column = divmod(col, self.width)
        return line + wrapped, column
