"""keyline: terminal line editor with a command registry on top."""

# Command layer
from keyline.commandline import CommandLine
from keyline.commands import (
    SUCCESS,
    Command,
    CommandRegistry,
    CommandResult,
    parse_failure,
    register_builtins,
    unknown_command,
)
from keyline.dispatcher import CommandDispatcher

# Configuration
from keyline.config import Config

# Errors
from keyline.errors import DuplicateIdentifier, ParseError, UnterminatedQuote

# Editing engine
from keyline.field import Cursor, TextField
from keyline.history import HistoryStore

# Keyboard input handling
from keyline.keybindings import DEFAULT_KEYBINDINGS, KeyBindings, LineAction
from keyline.keys import Key, KeyEvent, KeyId, parse_key_event
from keyline.loop import KeyEventLoop, LoopState

# Parsing
from keyline.parser import split_identifier, tokenize
from keyline.reflow import Layout, ReflowEngine

# Terminal interface and implementation
from keyline.terminal import ProcessTerminal, Terminal

# Utilities
from keyline.utils import visible_width

__all__ = [
    # Command layer
    "CommandLine",
    "SUCCESS",
    "Command",
    "CommandRegistry",
    "CommandResult",
    "parse_failure",
    "register_builtins",
    "unknown_command",
    "CommandDispatcher",
    # Configuration
    "Config",
    # Errors
    "DuplicateIdentifier",
    "ParseError",
    "UnterminatedQuote",
    # Editing engine
    "Cursor",
    "TextField",
    "HistoryStore",
    "Layout",
    "ReflowEngine",
    # Keys
    "DEFAULT_KEYBINDINGS",
    "KeyBindings",
    "LineAction",
    "Key",
    "KeyEvent",
    "KeyId",
    "parse_key_event",
    "KeyEventLoop",
    "LoopState",
    # Parsing
    "split_identifier",
    "tokenize",
    # Terminal
    "ProcessTerminal",
    "Terminal",
    # Utilities
    "visible_width",
]
