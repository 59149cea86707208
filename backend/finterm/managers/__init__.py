"""Coordinators that own the terminal's mutable state."""
