"""
View state machine.

The ViewState is the single source of truth for what the renderer shows.
It is an immutable record; ``transition`` takes the current state and an
event and returns the next state. Only the fetch orchestrator applies
events, and only for the authoritative request.

    WELCOME --issued--> LOADING --succeeded--> DATA
                               \\--failed----> ERROR
    any --cleared--> WELCOME
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union

from finterm.core.enums import ViewMode


@dataclass(frozen=True)
class ViewState:
    mode: ViewMode = ViewMode.WELCOME
    label: str = ""  # originating command text, e.g. "DES AAPL"
    payload: Optional[Any] = None
    message: Optional[str] = None

    @property
    def is_loading(self) -> bool:
        return self.mode is ViewMode.LOADING


@dataclass(frozen=True)
class CommandIssued:
    label: str


@dataclass(frozen=True)
class CommandSucceeded:
    label: str
    payload: Any


@dataclass(frozen=True)
class CommandFailed:
    label: str
    message: str


@dataclass(frozen=True)
class Cleared:
    pass


ViewEvent = Union[CommandIssued, CommandSucceeded, CommandFailed, Cleared]

WELCOME = ViewState()


def transition(state: ViewState, event: ViewEvent) -> ViewState:
    """Return the state that follows ``state`` after ``event``."""
    if isinstance(event, Cleared):
        return WELCOME
    if isinstance(event, CommandIssued):
        return ViewState(mode=ViewMode.LOADING, label=event.label)
    if isinstance(event, CommandSucceeded):
        return ViewState(mode=ViewMode.DATA, label=event.label, payload=event.payload)
    if isinstance(event, CommandFailed):
        return ViewState(mode=ViewMode.ERROR, label=event.label, message=event.message)
    raise TypeError(f"Unsupported view event: {event!r}")
