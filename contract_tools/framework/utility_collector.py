"""Deduplicating registry for helper code emitted while mapping types."""

from __future__ import annotations

from typing import Iterable

from .types import GeneratedUtility


class UtilityCollector:
    """Keeps each utility once, keyed by name, in first-insertion order.

    Adding a utility whose name is already registered is a no-op: the first
    code wins and the duplicate's imports are not recorded.
    """

    def __init__(self) -> None:
        self._utilities: dict[str, GeneratedUtility] = {}
        self._imports: dict[str, None] = {}

    def add(self, utility: GeneratedUtility) -> bool:
        """Register ``utility``; returns False if the name was already taken."""
        if utility.name in self._utilities:
            return False
        self._utilities[utility.name] = utility
        for module in utility.imports:
            self._imports.setdefault(module, None)
        return True

    def add_all(self, utilities: Iterable[GeneratedUtility]) -> None:
        for utility in utilities:
            self.add(utility)

    def has(self, name: str) -> bool:
        return name in self._utilities

    def get(self, name: str) -> GeneratedUtility | None:
        return self._utilities.get(name)

    def get_all(self) -> list[GeneratedUtility]:
        return list(self._utilities.values())

    def get_imports(self) -> list[str]:
        return list(self._imports)

    def merge(self, other: UtilityCollector) -> None:
        """Add every utility of ``other``, keeping this collector's on conflict."""
        self.add_all(other.get_all())

    def generate_code(self, separator: str = "\n\n") -> str:
        return separator.join(utility.code for utility in self._utilities.values())

    def reset(self) -> None:
        self._utilities.clear()
        self._imports.clear()

    def __len__(self) -> int:
        return len(self._utilities)

    def __contains__(self, name: object) -> bool:
        return name in self._utilities
