"""
Core primitives of the dispatch pipeline.

This package contains:
- enums.py: ViewMode
- exceptions.py: Custom exceptions
- view_state.py: ViewState record and its transition function
"""

from finterm.core.enums import ViewMode
from finterm.core.exceptions import (
    TerminalError,
    ProviderError,
    ConfigurationError,
)
from finterm.core.view_state import ViewState, transition

__all__ = [
    "ViewMode",
    "TerminalError",
    "ProviderError",
    "ConfigurationError",
    "ViewState",
    "transition",
]
