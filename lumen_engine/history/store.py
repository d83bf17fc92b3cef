"""Linear undo/redo history of request snapshots."""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from .snapshot import Snapshot, seed_snapshot


class HistoryStore:
    """Ordered snapshots plus a cursor.

    ``entries[: cursor + 1]`` is the committed past and ``entries[cursor + 1 :]``
    the redo future. ``commit`` is the only way entries are added, and it drops
    the redo future before appending.
    """

    def __init__(self, seed: Snapshot | None = None) -> None:
        self._entries: list[Snapshot] = [seed if seed is not None else seed_snapshot()]
        self._cursor = 0

    @property
    def entries(self) -> tuple[Snapshot, ...]:
        return tuple(self._entries)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor < len(self._entries) - 1

    def __len__(self) -> int:
        return len(self._entries)

    def current(self) -> Snapshot:
        return self._entries[self._cursor]

    def commit(self, **changes: Any) -> bool:
        current = self._entries[self._cursor]
        candidate = replace(current, **changes)
        if all(_same(getattr(candidate, name), getattr(current, name)) for name in changes):
            return False
        del self._entries[self._cursor + 1 :]
        self._entries.append(candidate)
        self._cursor = len(self._entries) - 1
        return True

    def undo(self) -> bool:
        previous = self._cursor
        self._cursor = max(0, self._cursor - 1)
        return self._cursor != previous

    def redo(self) -> bool:
        previous = self._cursor
        self._cursor = min(len(self._entries) - 1, self._cursor + 1)
        return self._cursor != previous


def _same(left: Any, right: Any) -> bool:
    # Image and video tiers share names ("fast", "standard") and compare equal as str.
    return type(left) is type(right) and left == right
