"""CommandLine - a command registry driven by a key event loop."""

from __future__ import annotations

from keyline.commands import (
    DEFAULT_DESCRIPTION,
    DEFAULT_HELP,
    Command,
    CommandRegistry,
    Completer,
    Handler,
    register_builtins,
)
from keyline.config import Config
from keyline.dispatcher import CommandDispatcher
from keyline.history import HistoryStore
from keyline.keybindings import KeybindingsConfig
from keyline.loop import KeyEventLoop
from keyline.terminal import Terminal


class CommandLine:
    """Wires a :class:`KeyEventLoop` to a :class:`CommandRegistry`.

    ``help`` and ``exit`` are registered up front; ``exit`` stops the loop.
    Submitted lines go through a :class:`CommandDispatcher` and tab
    completion through :meth:`CommandRegistry.complete`.

    Example::

        cli = CommandLine(ProcessTerminal())
        cli.register("greet", lambda line: CommandResult(1, "hello"))
        code = cli.run()
    """

    def __init__(
        self,
        terminal: Terminal,
        config: Config | None = None,
        *,
        history: HistoryStore | None = None,
        keybindings: KeybindingsConfig | None = None,
    ) -> None:
        self.config = config or Config()
        self.registry = CommandRegistry(self.config.separator, self.config.quote)
        self.dispatcher = CommandDispatcher(self.registry)
        self.loop = KeyEventLoop(
            terminal,
            self.config,
            history=history,
            completer=self.registry.complete,
            keybindings=keybindings,
        )
        register_builtins(self.registry, on_exit=self.loop.stop)

    @property
    def history(self) -> HistoryStore:
        return self.loop.history

    def register(
        self,
        id: str,
        handler: Handler,
        autocomplete: Completer | None = None,
        description: str = DEFAULT_DESCRIPTION,
        help: str = DEFAULT_HELP,
    ) -> Command:
        return self.registry.register(id, handler, autocomplete, description, help)

    def run(self) -> int:
        """Run until ``exit``; returns the last command's result code."""
        return self.loop.run(self.dispatcher.dispatch)
