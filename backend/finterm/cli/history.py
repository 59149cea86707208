"""
Command history with cursor navigation.

History is append-only. The cursor counts back from the newest entry:
-1 means "not navigating", 0 is the most recent entry and
``len(entries) - 1`` the oldest. Moving past either end clamps.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Tuple

NOT_NAVIGATING = -1


@dataclass(frozen=True)
class HistoryEntry:
    text: str
    index: int  # sequence number, 0 = first submitted line


@dataclass(frozen=True)
class History:
    entries: Tuple[HistoryEntry, ...] = ()
    cursor: int = NOT_NAVIGATING

    def __len__(self) -> int:
        return len(self.entries)

    def append(self, text: str) -> History:
        """Record a submitted line and stop navigating."""
        entry = HistoryEntry(text=text, index=len(self.entries))
        return History(entries=self.entries + (entry,), cursor=NOT_NAVIGATING)

    def previous(self) -> History:
        """Step towards older entries, staying on the oldest one."""
        if self.cursor < len(self.entries) - 1:
            return replace(self, cursor=self.cursor + 1)
        return self

    def next(self) -> History:
        """Step towards newer entries; past the newest stops navigating."""
        if self.cursor > 0:
            return replace(self, cursor=self.cursor - 1)
        return replace(self, cursor=NOT_NAVIGATING)

    def current(self) -> Optional[str]:
        """Text under the cursor, or None when not navigating."""
        if self.cursor == NOT_NAVIGATING:
            return None
        return self.entries[len(self.entries) - 1 - self.cursor].text

    def recent(self, limit: int = 50) -> Tuple[HistoryEntry, ...]:
        """The last ``limit`` entries, oldest first."""
        return self.entries[-limit:] if limit > 0 else ()
