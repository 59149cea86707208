"""
Command parser.

Turns a submitted line into either a ``ParsedCommand`` bound to its
catalog entry or an ``UnknownCommand`` marker. Parsing never raises.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from finterm.cli.command_registry import CommandMeta, get_command


@dataclass(frozen=True)
class ParsedCommand:
    meta: CommandMeta
    text: str  # canonical line, e.g. "DES AAPL"
    argument: Optional[str] = None

    @property
    def name(self) -> str:
        return self.meta.name


@dataclass(frozen=True)
class UnknownCommand:
    text: str


ParseResult = Union[ParsedCommand, UnknownCommand]


def normalize(line: str) -> str:
    return line.strip().upper()


def parse_command(line: str) -> ParseResult:
    """Split ``line`` on the first whitespace into name and argument.

    Bare commands ignore any argument. Argument commands take the first
    token after the name as their ticker; a missing ticker is left as
    None for the orchestrator to report.
    """
    text = normalize(line)
    if not text:
        return UnknownCommand(text=text)

    parts = text.split(None, 1)
    meta = get_command(parts[0])
    if meta is None:
        return UnknownCommand(text=text)

    if not meta.takes_argument:
        return ParsedCommand(meta=meta, text=meta.name)

    argument = parts[1].split()[0] if len(parts) > 1 else None
    label = f"{meta.name} {argument}" if argument else meta.name
    return ParsedCommand(meta=meta, text=label, argument=argument)
