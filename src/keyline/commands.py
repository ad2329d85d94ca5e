"""Command registry: named handlers invoked by the first word of a line."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterator

from keyline.errors import DuplicateIdentifier, ParseError
from keyline.parser import split_identifier, tokenize

logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTION = "<No description available>"
DEFAULT_HELP = "<No help available>"

UNKNOWN_COMMAND = -1
PARSE_FAILURE = -2


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CommandResult:
    """Outcome of running a command.

    ``code`` 0 is a silent success, a positive code a success whose
    ``message`` should be shown, and a negative code an error.
    """

    code: int
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.code >= 0


SUCCESS = CommandResult(0)


def unknown_command(identifier: str) -> CommandResult:
    return CommandResult(
        UNKNOWN_COMMAND, f'"{identifier}" is not recognized as a command. Try "help"'
    )


def parse_failure(error: ParseError) -> CommandResult:
    return CommandResult(PARSE_FAILURE, f"Unable to parse command: {error.message}")


Handler = Callable[[str], CommandResult | None]
Completer = Callable[[str], str]


# ---------------------------------------------------------------------------
# Command
# ---------------------------------------------------------------------------


@dataclass
class Command:
    """A registered command.

    The handler and completer both receive the raw line, identifier
    included; argument parsing is up to them.
    """

    id: str
    handler: Handler
    autocomplete: Completer | None = None
    description: str = DEFAULT_DESCRIPTION
    help: str = DEFAULT_HELP

    def run(self, line: str) -> CommandResult:
        result = self.handler(line)
        return SUCCESS if result is None else result

    def complete(self, line: str) -> str:
        if self.autocomplete is None:
            return ""
        return self.autocomplete(line) or ""


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class CommandRegistry:
    """Maps identifiers to commands, in registration order."""

    def __init__(self, separator: str = " ", quote: str = '"') -> None:
        self.separator = separator
        self.quote = quote
        self._commands: dict[str, Command] = {}

    def register(
        self,
        id: str,
        handler: Handler,
        autocomplete: Completer | None = None,
        description: str = DEFAULT_DESCRIPTION,
        help: str = DEFAULT_HELP,
    ) -> Command:
        """Create and register a command. Returns the new :class:`Command`."""
        command = Command(id, handler, autocomplete, description, help)
        self.register_command(command)
        return command

    def register_command(self, command: Command) -> None:
        """Register an existing :class:`Command`.

        Raises:
            DuplicateIdentifier: the identifier is already taken.
            ValueError: the identifier is empty or contains the separator.
        """
        if not command.id or self.separator in command.id:
            raise ValueError(f"Invalid command identifier: {command.id!r}")
        if command.id in self._commands:
            raise DuplicateIdentifier(command.id)
        self._commands[command.id] = command
        logger.debug("Registered command %r", command.id)

    def lookup(self, id: str) -> Command | None:
        return self._commands.get(id)

    def ids(self) -> list[str]:
        return list(self._commands)

    def __contains__(self, id: object) -> bool:
        return id in self._commands

    def __iter__(self) -> Iterator[Command]:
        return iter(list(self._commands.values()))

    def __len__(self) -> int:
        return len(self._commands)

    # -- completion ---------------------------------------------------------

    def prefix_complete(self, partial: str) -> str:
        """Suffix completing *partial* to the first identifier it prefixes.

        Only the leading token is completed: returns ``""`` when nothing
        matches or *partial* already holds more than one token.
        """
        try:
            tokens = tokenize(partial, self.separator, self.quote)
        except ParseError:
            return ""
        if len(tokens) > 1 or partial.startswith(self.separator):
            return ""
        for id in self._commands:
            if id.startswith(partial):
                return id[len(partial):]
        return ""

    def complete(self, line: str) -> str:
        """Completion for a whole input line.

        While the identifier is still being typed it is completed against
        the registry; once a separator follows it, the command's own
        completer decides.
        """
        try:
            tokenize(line, self.separator, self.quote)
        except ParseError:
            return ""
        identifier, rest = split_identifier(line, self.separator)
        if rest is None:
            return self.prefix_complete(line)
        command = self.lookup(identifier)
        return command.complete(line) if command is not None else ""


# ---------------------------------------------------------------------------
# Built-in commands
# ---------------------------------------------------------------------------


def register_builtins(registry: CommandRegistry, on_exit: Callable[[], None]) -> None:
    """Install ``help`` and ``exit`` on *registry*."""

    def help_handler(line: str) -> CommandResult:
        args = tokenize(line, registry.separator, registry.quote)[1:]
        args = [arg for arg in args if arg]
        if args:
            command = registry.lookup(args[0])
            if command is None:
                return unknown_command(args[0])
            return CommandResult(1, command.help)

        lines = ["Available commands:", ""]
        lines.extend(f"{command.id} : {command.description}" for command in registry)
        return CommandResult(1, "\n".join(lines))

    def help_completer(line: str) -> str:
        try:
            tokens = tokenize(line, registry.separator, registry.quote)
        except ParseError:
            return ""
        if len(tokens) > 2:
            return ""
        partial = tokens[1] if len(tokens) == 2 else ""
        if not partial and not line.endswith(registry.separator):
            return ""
        for id in registry.ids():
            if id.startswith(partial):
                return id[len(partial):]
        return ""

    def exit_handler(line: str) -> CommandResult:
        on_exit()
        return SUCCESS

    registry.register(
        "help",
        help_handler,
        help_completer,
        description="Prints the list of available commands, or provides help with the specified one.",
        help="help [command]",
    )
    registry.register(
        "exit",
        exit_handler,
        description="Ends the current process.",
        help="exit",
    )
