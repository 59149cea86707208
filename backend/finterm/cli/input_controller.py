"""
Input controller.

Keystroke handlers over an immutable ``InputState``: each takes the current
state and returns the next one, so the whole input line can be exercised
without a terminal. The buffer is always stored upper-cased and the
suggestion list is always ``suggest(buffer)``, except right after TAB
accepts a completion.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

from finterm.cli.autocomplete import suggest
from finterm.cli.command_registry import CommandMeta
from finterm.cli.history import History
from finterm.cli.parser import normalize


@dataclass(frozen=True)
class InputState:
    buffer: str = ""
    suggestions: Tuple[CommandMeta, ...] = ()
    history: History = field(default_factory=History)


def _with_buffer(state: InputState, buffer: str) -> InputState:
    buffer = buffer.upper()
    return replace(state, buffer=buffer, suggestions=suggest(buffer))


def on_text_change(state: InputState, raw: str) -> InputState:
    return _with_buffer(state, raw)


def on_tab_accept(state: InputState) -> InputState:
    """Replace the buffer with the top suggestion, ready for an argument."""
    if not state.suggestions:
        return state
    name = state.suggestions[0].name
    completed = name if " " in name else name + " "
    return replace(state, buffer=completed, suggestions=())


def on_history_prev(state: InputState) -> InputState:
    history = state.history.previous()
    if history.cursor == state.history.cursor:
        return state
    return _with_buffer(replace(state, history=history), history.current() or "")


def on_history_next(state: InputState) -> InputState:
    history = state.history.next()
    return _with_buffer(replace(state, history=history), history.current() or "")


def submitted_line(state: InputState) -> Optional[str]:
    """Line ENTER would submit, or None when the buffer is blank."""
    line = normalize(state.buffer)
    return line or None


def record_submission(state: InputState, line: str) -> InputState:
    """Append ``line`` to history and reset the input line."""
    return InputState(buffer="", suggestions=(), history=state.history.append(line))
