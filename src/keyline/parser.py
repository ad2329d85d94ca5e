"""Splitting raw command lines into arguments.

A quote character groups everything up to the next quote into one argument,
separators included. There is no other escaping: a quoted span cannot
contain the quote character itself.
"""

from __future__ import annotations

from keyline.errors import UnterminatedQuote


def tokenize(line: str, separator: str = " ", quote: str = '"') -> list[str]:
    """Split *line* into arguments.

    Runs of *separator* outside quotes count as one boundary. A quoted span
    is glued to any unquoted text directly before or after it (``ab"c d"``
    is the single argument ``abc d``), and ``""`` on its own is an empty
    argument. A line with no arguments at all (empty, or only separators)
    gives ``[""]``.

    Raises:
        UnterminatedQuote: a quote is never closed. Nothing is returned for
            the rest of the line.
    """
    if len(separator) != 1 or len(quote) != 1:
        raise ValueError("separator and quote must be single characters")

    tokens: list[str] = []
    current: list[str] = []
    # Set when a quoted span was seen, so an empty "" still makes a token.
    pending = False
    index = 0
    length = len(line)

    while index < length:
        ch = line[index]
        if ch == quote:
            close = line.find(quote, index + 1)
            if close == -1:
                raise UnterminatedQuote(index, quote)
            current.append(line[index + 1 : close])
            pending = True
            index = close + 1
            continue
        if ch == separator:
            if current or pending:
                tokens.append("".join(current))
                current = []
                pending = False
            index += 1
            continue
        current.append(ch)
        index += 1

    if current or pending or not tokens:
        tokens.append("".join(current))
    return tokens


def split_identifier(line: str, separator: str = " ") -> tuple[str, str | None]:
    """Split off the command identifier at the first separator.

    Returns ``(identifier, rest)`` where *rest* is everything after that
    separator, verbatim, or ``None`` if the line has no separator. A line
    that starts with a separator has an empty identifier.
    """
    identifier, found, rest = line.partition(separator)
    return identifier, rest if found else None
