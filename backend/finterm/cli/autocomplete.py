"""
Command autocomplete.

Suggestions are a pure function of the input buffer and the catalog: no
ranking beyond catalog declaration order and no state between calls.
"""
from typing import Sequence, Tuple

from finterm.cli.command_registry import COMMANDS, CommandMeta


def suggest(buffer: str, catalog: Sequence[CommandMeta] = COMMANDS) -> Tuple[CommandMeta, ...]:
    """Return the commands matching ``buffer``.

    A command matches when its name starts with the buffer or its
    description contains it (case-insensitive). An empty buffer yields
    no suggestions rather than the whole catalog.
    """
    if not buffer:
        return ()
    needle = buffer.upper()
    return tuple(
        meta for meta in catalog
        if meta.name.startswith(needle) or needle in meta.description.upper()
    )
