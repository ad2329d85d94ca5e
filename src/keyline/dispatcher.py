"""Routing a submitted line to its command."""

from __future__ import annotations

import logging

from keyline.commands import CommandRegistry, CommandResult, parse_failure, unknown_command
from keyline.errors import ParseError
from keyline.parser import split_identifier

logger = logging.getLogger(__name__)


class CommandDispatcher:
    """Looks up the identifier of a line and runs the matching handler.

    The dispatcher never writes anything itself; the caller decides how to
    show the returned :class:`CommandResult`. Parse errors raised by a
    handler come back as results. Any other exception from a handler
    propagates.
    """

    def __init__(self, registry: CommandRegistry) -> None:
        self.registry = registry

    def dispatch(self, line: str) -> CommandResult:
        identifier, _ = split_identifier(line, self.registry.separator)
        command = self.registry.lookup(identifier)
        if command is None:
            logger.debug("Unknown command %r", identifier)
            return unknown_command(identifier)

        logger.debug("Dispatching %r", identifier)
        try:
            result = command.run(line)
        except ParseError as e:
            logger.debug("Command %r failed to parse its arguments: %s", identifier, e.message)
            return parse_failure(e)
        logger.debug("Command %r returned code %d", identifier, result.code)
        return result
