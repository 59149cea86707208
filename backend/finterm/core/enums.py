"""
Core enumerations used throughout the terminal.

These enums are used by multiple components and should be imported from
here (single source of truth).
"""

from enum import Enum


class ViewMode(Enum):
    """
    Display mode of the main view.
    
    Values:
        WELCOME: Initial screen and the screen after CLEAR
        LOADING: A request was issued and has not resolved authoritatively
        DATA: The authoritative request succeeded
        ERROR: Unknown command, missing ticker or provider failure
    """
    WELCOME = "welcome"
    LOADING = "loading"
    DATA = "data"
    ERROR = "error"
