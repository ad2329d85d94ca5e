"""Submitted-line history with wraparound recall."""

from __future__ import annotations


class HistoryStore:
    """Append-only list of submitted lines.

    The recall cursor only drives up/down navigation. It rests one past the
    newest entry after every append, so the first :meth:`previous` returns
    the newest line; both directions wrap around.
    """

    def __init__(self) -> None:
        self._entries: list[str] = []
        self._index = 0

    def append(self, line: str) -> None:
        self._entries.append(line)
        self._index = len(self._entries)

    def previous(self) -> str | None:
        """Step back one entry, wrapping from the oldest to the newest."""
        if not self._entries:
            return None
        self._index = len(self._entries) - 1 if self._index == 0 else self._index - 1
        return self._entries[self._index]

    def next(self) -> str | None:
        """Step forward one entry, wrapping from the newest to the oldest."""
        if not self._entries:
            return None
        self._index = 0 if self._index >= len(self._entries) - 1 else self._index + 1
        return self._entries[self._index]

    @property
    def entries(self) -> list[str]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)
