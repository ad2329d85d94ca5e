"""Keyboard input decoding for terminal applications.

Turns one complete chunk of raw terminal input (a printable character, a
control character, or an escape sequence) into a :class:`KeyEvent`. Legacy
xterm/VT sequences and the ``CSI u`` form are understood; the key identifier format
(``"ctrl+a"``, ``"shift+enter"``, ``"alt+left"``) is what the binding table
is keyed by.
"""

from __future__ import annotations

from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Type alias
# ---------------------------------------------------------------------------

KeyId = str

# ---------------------------------------------------------------------------
# Key helper object
# ---------------------------------------------------------------------------


class Key:
    """Named key constants and modifier combinators."""

    escape = "escape"
    enter = "enter"
    tab = "tab"
    space = "space"
    backspace = "backspace"
    delete = "delete"
    insert = "insert"
    home = "home"
    end = "end"
    page_up = "pageUp"
    page_down = "pageDown"
    up = "up"
    down = "down"
    left = "left"
    right = "right"

    @staticmethod
    def ctrl(key: str) -> str:
        return f"ctrl+{key}"

    @staticmethod
    def shift(key: str) -> str:
        return f"shift+{key}"

    @staticmethod
    def alt(key: str) -> str:
        return f"alt+{key}"


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MODIFIERS: dict[str, int] = {
    "shift": 1,
    "alt": 2,
    "ctrl": 4,
}

# Legacy escape sequences -> key names
LEGACY_KEY_SEQUENCES: dict[str, str] = {
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1b[C": "right",
    "\x1b[D": "left",
    "\x1b[H": "home",
    "\x1b[F": "end",
    "\x1bOA": "up",
    "\x1bOB": "down",
    "\x1bOC": "right",
    "\x1bOD": "left",
    "\x1bOH": "home",
    "\x1bOF": "end",
    "\x1b[2~": "insert",
    "\x1b[3~": "delete",
    "\x1b[5~": "pageUp",
    "\x1b[6~": "pageDown",
    "\x1b[1~": "home",
    "\x1b[4~": "end",
    "\x1b[7~": "home",
    "\x1b[8~": "end",
}

# CSI parameter form ``ESC [ 1 ; <mod> <final>`` and ``ESC [ <n> ; <mod> ~``
_CSI_FINAL_KEYS: dict[str, str] = {
    "A": "up",
    "B": "down",
    "C": "right",
    "D": "left",
    "H": "home",
    "F": "end",
}

_CSI_TILDE_KEYS: dict[int, str] = {
    1: "home",
    2: "insert",
    3: "delete",
    4: "end",
    5: "pageUp",
    6: "pageDown",
}

_CODEPOINT_KEYS: dict[int, str] = {
    9: "tab",
    13: "enter",
    27: "escape",
    32: "space",
    127: "backspace",
}

_CTRL_SYMBOLS: dict[str, str] = {
    "\x1c": "\\",
    "\x1d": "]",
    "\x1e": "^",
    "\x1f": "-",
}


# ---------------------------------------------------------------------------
# KeyEvent
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class KeyEvent:
    """One decoded key press.

    ``char`` is the text the key would insert (empty for non-printing keys),
    ``key`` the logical key name (``"a"``, ``"enter"``, ``"left"``...).
    """

    char: str
    key: str
    shift: bool = False
    alt: bool = False
    ctrl: bool = False

    @property
    def key_id(self) -> KeyId:
        prefix = ""
        if self.ctrl:
            prefix += "ctrl+"
        if self.shift:
            prefix += "shift+"
        if self.alt:
            prefix += "alt+"
        return prefix + self.key

    @property
    def is_printable(self) -> bool:
        """True when the key should be inserted as text if it is unbound."""
        if not self.char or self.ctrl or self.alt:
            return False
        return self.char.isprintable()


def key_event(key_id: KeyId) -> KeyEvent:
    """Build the :class:`KeyEvent` a key identifier describes.

    Single-character keys without ctrl/alt carry that character as their
    text, so ``key_event("a")`` is the event produced by typing ``a``.
    """
    parsed = parse_key_id(key_id)
    if parsed is None:
        raise ValueError(f"Invalid key id: {key_id!r}")
    modifiers, key = parsed
    shift = bool(modifiers & MODIFIERS["shift"])
    alt = bool(modifiers & MODIFIERS["alt"])
    ctrl = bool(modifiers & MODIFIERS["ctrl"])
    char = ""
    if key == "space":
        char = " "
    elif len(key) == 1:
        char = key
    return KeyEvent(char=char, key=key, shift=shift, alt=alt, ctrl=ctrl)


# ---------------------------------------------------------------------------
# Key ID parsing
# ---------------------------------------------------------------------------


def parse_key_id(key_id: KeyId) -> tuple[int, str] | None:
    """Split a key identifier like ``"ctrl+shift+a"`` into ``(modifiers, key)``.

    ``modifiers`` is a bitmask (shift=1, alt=2, ctrl=4). Returns ``None`` for
    an empty identifier or one that names only modifiers.
    """
    if not key_id:
        return None

    # "ctrl++" binds the plus key itself
    parts = key_id.split("+")
    modifier = 0
    key_parts: list[str] = []
    for part in parts:
        lower = part.lower()
        if lower in MODIFIERS and not key_parts:
            modifier |= MODIFIERS[lower]
        else:
            key_parts.append(part)

    key = "+".join(key_parts) if key_parts else ""
    if not key:
        return None
    return modifier, key


def normalize_key_id(key_id: KeyId) -> KeyId:
    """Return *key_id* with its modifiers in canonical ``ctrl+shift+alt`` order."""
    return key_event(key_id).key_id


# ---------------------------------------------------------------------------
# Raw input decoding
# ---------------------------------------------------------------------------


def _modifier_flags(param: int) -> tuple[bool, bool, bool]:
    mod = max(param - 1, 0)
    return (
        bool(mod & MODIFIERS["shift"]),
        bool(mod & MODIFIERS["alt"]),
        bool(mod & MODIFIERS["ctrl"]),
    )


def _decode_csi(data: str) -> KeyEvent | None:
    body = data[2:]
    if not body:
        return None
    final = body[-1]
    params = body[:-1].split(";") if len(body) > 1 else []
    try:
        numbers = [int(p) if p else 1 for p in params]
    except ValueError:
        return None

    if final in _CSI_FINAL_KEYS:
        modifier = numbers[1] if len(numbers) >= 2 else 1
        shift, alt, ctrl = _modifier_flags(modifier)
        return KeyEvent("", _CSI_FINAL_KEYS[final], shift, alt, ctrl)

    if final == "~" and numbers:
        key = _CSI_TILDE_KEYS.get(numbers[0])
        if key is None:
            return None
        modifier = numbers[1] if len(numbers) >= 2 else 1
        shift, alt, ctrl = _modifier_flags(modifier)
        return KeyEvent("", key, shift, alt, ctrl)

    if final == "Z":
        return KeyEvent("", "tab", shift=True)

    # CSI u: ESC [ <codepoint> ; <mod> u (sent for shift+enter and friends)
    if final == "u" and numbers:
        if numbers[0] > 0x10FFFF:
            return None
        key = _CODEPOINT_KEYS.get(numbers[0])
        if key is None:
            key = chr(numbers[0]).lower()
        modifier = numbers[1] if len(numbers) >= 2 else 1
        shift, alt, ctrl = _modifier_flags(modifier)
        return KeyEvent("", key, shift, alt, ctrl)

    return None


def _decode_single(ch: str) -> KeyEvent:
    if ch in ("\r", "\n"):
        return KeyEvent(ch, "enter")
    if ch == "\t":
        return KeyEvent(ch, "tab")
    if ch in ("\x7f", "\x08"):
        return KeyEvent(ch, "backspace")
    if ch == "\x1b":
        return KeyEvent(ch, "escape")
    if ch == "\x00":
        return KeyEvent(ch, "space", ctrl=True)
    if ch == " ":
        return KeyEvent(ch, "space")
    code = ord(ch)
    if 1 <= code <= 26:
        return KeyEvent(ch, chr(code + ord("a") - 1), ctrl=True)
    if ch in _CTRL_SYMBOLS:
        return KeyEvent(ch, _CTRL_SYMBOLS[ch], ctrl=True)
    return KeyEvent(ch, ch)


def parse_key_event(data: str) -> KeyEvent | None:
    """Decode one complete chunk of raw terminal input.

    Returns ``None`` for empty input. Sequences that are recognised as
    escape sequences but name no known key decode to a ``KeyEvent`` with an
    empty ``char`` and the raw sequence as ``key``, so they are never
    inserted as text.
    """
    if not data:
        return None

    if data in LEGACY_KEY_SEQUENCES:
        return KeyEvent("", LEGACY_KEY_SEQUENCES[data])

    if data.startswith("\x1b[") and len(data) > 2:
        return _decode_csi(data) or KeyEvent("", data)

    if data.startswith("\x1bO") and len(data) == 3:
        return KeyEvent("", data)

    # Alt + key (ESC prefix)
    if len(data) == 2 and data[0] == "\x1b":
        inner = _decode_single(data[1])
        if inner.key == "escape":
            return KeyEvent("", "escape", alt=True)
        if inner.ctrl or not inner.char.isprintable() or inner.char == " ":
            return KeyEvent("", inner.key, alt=True, ctrl=inner.ctrl)
        if inner.char.isupper():
            return KeyEvent("", inner.char.lower(), shift=True, alt=True)
        return KeyEvent("", inner.char, alt=True)

    if len(data) == 1:
        return _decode_single(data)

    # Multi-code-point printable text (e.g. a composed grapheme cluster)
    if data.isprintable():
        return KeyEvent(data, data)

    return KeyEvent("", data)
