"""Exceptions raised by the command layer."""

from __future__ import annotations


class ParseError(Exception):
    """A raw command line could not be split into arguments."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UnterminatedQuote(ParseError):
    """A quote was opened and never closed before the end of the line."""

    def __init__(self, position: int, quote: str = '"') -> None:
        super().__init__(f"Unterminated {quote} opened at column {position + 1}")
        self.position = position
        self.quote = quote


class DuplicateIdentifier(KeyError):
    """A command with the same identifier is already registered."""

    def __init__(self, identifier: str) -> None:
        super().__init__(identifier)
        self.identifier = identifier

    def __str__(self) -> str:
        return f'Command "{self.identifier}" is already registered'
