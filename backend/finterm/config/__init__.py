"""
Configuration module
"""
from finterm.config.settings import settings

__all__ = ["settings"]
