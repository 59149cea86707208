"""
Custom exceptions for the terminal.

All custom exceptions should be defined here for easy discovery
and consistent error handling throughout the application.
"""


class TerminalError(Exception):
    """Base exception for all terminal errors."""
    pass


class ProviderError(TerminalError):
    """Raised when the market data provider cannot be reached or
    returns a payload that cannot be understood."""
    pass


class ConfigurationError(TerminalError):
    """Raised when there's an error in configuration."""
    pass
