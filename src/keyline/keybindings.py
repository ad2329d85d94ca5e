"""Key binding table for the line editor."""

from __future__ import annotations

from typing import Callable, Literal

from keyline.keys import KeyEvent, KeyId, normalize_key_id

LineAction = Literal[
    # Cursor movement
    "cursorLeft",
    "cursorRight",
    "cursorWordLeft",
    "cursorWordRight",
    "cursorLineStart",
    "cursorLineEnd",
    # Deletion
    "deleteCharBackward",
    "deleteCharForward",
    "deleteWordBackward",
    "deleteToLineStart",
    "deleteToLineEnd",
    # History
    "historyPrevious",
    "historyNext",
    # Text input
    "newLine",
    "submit",
    "complete",
    "cancelLine",
]

KeybindingsConfig = dict[LineAction, KeyId | list[KeyId]]

DEFAULT_KEYBINDINGS: dict[LineAction, KeyId | list[KeyId]] = {
    # Cursor movement
    "cursorLeft": ["left", "ctrl+b"],
    "cursorRight": ["right", "ctrl+f"],
    "cursorWordLeft": ["ctrl+left", "alt+left", "alt+b"],
    "cursorWordRight": ["ctrl+right", "alt+right", "alt+f"],
    "cursorLineStart": ["home", "ctrl+a"],
    "cursorLineEnd": ["end", "ctrl+e"],
    # Deletion
    "deleteCharBackward": "backspace",
    "deleteCharForward": ["delete", "ctrl+d"],
    "deleteWordBackward": ["ctrl+w", "alt+backspace"],
    "deleteToLineStart": "ctrl+u",
    "deleteToLineEnd": "ctrl+k",
    # History
    "historyPrevious": "up",
    "historyNext": "down",
    # Text input
    "newLine": ["shift+enter", "alt+enter"],
    "submit": "enter",
    "complete": "tab",
    "cancelLine": "ctrl+c",
}

Action = Callable[[], None]


def _as_list(keys: KeyId | list[KeyId]) -> list[KeyId]:
    return list(keys) if isinstance(keys, list) else [keys]


class KeyBindings:
    """Maps key identifiers to no-argument actions.

    Built once from named actions plus the default (or overridden) keys for
    each. Extra keys can be bound before the loop runs, but never while one
    of the bound actions is executing.
    """

    def __init__(
        self,
        actions: dict[LineAction, Action] | None = None,
        config: KeybindingsConfig | None = None,
    ) -> None:
        self._table: dict[KeyId, Action] = {}
        self._action_to_keys: dict[LineAction, list[KeyId]] = {}
        self._locked = False

        merged: dict[LineAction, list[KeyId]] = {
            action: _as_list(keys) for action, keys in DEFAULT_KEYBINDINGS.items()
        }
        for action, keys in (config or {}).items():
            merged[action] = _as_list(keys)

        for action, callback in (actions or {}).items():
            for key in merged.get(action, []):
                self.bind(key, callback)
            self._action_to_keys[action] = [normalize_key_id(k) for k in merged.get(action, [])]

    def bind(self, key: KeyId, action: Action) -> None:
        self._check_unlocked()
        self._table[normalize_key_id(key)] = action

    def unbind(self, key: KeyId) -> None:
        self._check_unlocked()
        self._table.pop(normalize_key_id(key), None)

    def lookup(self, event: KeyEvent) -> Action | None:
        return self._table.get(event.key_id)

    def get_keys(self, action: LineAction) -> list[KeyId]:
        """Keys bound to a named action when the table was built."""
        return list(self._action_to_keys.get(action, []))

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and normalize_key_id(key) in self._table

    def __len__(self) -> int:
        return len(self._table)

    # -- execution guard ----------------------------------------------------

    def run(self, action: Action) -> None:
        """Run *action* with the table locked against changes."""
        self._locked = True
        try:
            action()
        finally:
            self._locked = False

    def _check_unlocked(self) -> None:
        if self._locked:
            raise RuntimeError("Key bindings cannot change while an action is running")
