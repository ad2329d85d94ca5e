"""Configuration for the command line."""

from __future__ import annotations

import os
from dataclasses import dataclass

_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass
class Config:
    """Prompt and parsing settings."""

    prompt: str = ">"
    separator: str = " "
    quote: str = '"'
    multiline: bool = True
    write_log: str = ""

    @classmethod
    def from_env(cls) -> Config:
        """Defaults overridden by ``KEYLINE_*`` environment variables."""
        config = cls()
        prompt = os.environ.get("KEYLINE_PROMPT")
        if prompt is not None:
            config.prompt = prompt
        multiline = os.environ.get("KEYLINE_MULTILINE")
        if multiline is not None:
            config.multiline = multiline.strip().lower() not in _FALSE_VALUES
        config.write_log = os.environ.get("KEYLINE_WRITE_LOG", "")
        return config
