"""Per-frame unique labels for repeated widget names."""

from __future__ import annotations

from dataclasses import dataclass, field

__all__ = ["UniqueNameRegistry"]


@dataclass
class _Entry:
    count: int = 0
    names: list[str] = field(default_factory=list)


class UniqueNameRegistry:
    """Hands out ``name``, then ``name#2``, ``name#3``... for repeated uses in one frame.

    Once a name has been used more than once, later frames start at ``name#1``.
    """

    def __init__(self) -> None:
        self._entries: dict[str, _Entry] = {}

    def unique_name(self, name: str) -> str:
        entry = self._entries.setdefault(name, _Entry(0, [name]))
        if len(entry.names) < entry.count + 1:
            if len(entry.names) == 1:
                entry.names = [f"{name}#1", f"{name}#2"]
            while len(entry.names) < entry.count + 1:
                entry.names.append(f"{name}#{len(entry.names) + 1}")
        entry.count += 1
        return entry.names[entry.count - 1]

    def reset(self) -> None:
        """Start a new frame: every name's use count goes back to zero."""
        for entry in self._entries.values():
            entry.count = 0