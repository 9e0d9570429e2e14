#!/usr/bin/env python3
"""
eras.py
--------------------
Ordered registry of era names.

Worlds with several calendars or ages list their eras in chronological
order; an era's index is its rank. Years are only meaningful within an
era, so the comparator ranks eras before it looks at years.

Rank policy:
    - value without an era      -> 0 (the first era)
    - era found in the registry -> its index
    - era not in the registry   -> -1, the lowest possible rank, with a
      warning logged once per name
"""
from __future__ import annotations

from typing import Iterable, Iterator, Optional, Set, Tuple

from lorekeeper.core.logging_manager import LorekeeperLogger, safe_logger

UNRESOLVED_ERA_RANK = -1


class EraRegistry:
    """
    Chronologically ordered era names.

    An empty registry means every date shares one implicit era and era
    names are ignored for ordering.

    Attributes:
        names: Era names in rank order (whitespace-trimmed)
    """

    def __init__(
        self,
        eras: Iterable[str] = (),
        logger: Optional[LorekeeperLogger] = None,
    ) -> None:
        names = []
        for era in eras:
            name = str(era).strip() if era is not None else ""
            if name and name not in names:
                names.append(name)
        self.names: Tuple[str, ...] = tuple(names)
        self.logger = logger
        self._ranks = {name: index for index, name in enumerate(self.names)}
        self._warned: Set[str] = set()

    @classmethod
    def from_world(
        cls, world: object, logger: Optional[LorekeeperLogger] = None
    ) -> "EraRegistry":
        """Build the registry stored on a World row (era_order column)."""
        return cls(getattr(world, "era_order", None) or (), logger=logger)

    def __len__(self) -> int:
        return len(self.names)

    def __bool__(self) -> bool:
        return bool(self.names)

    def __iter__(self) -> Iterator[str]:
        return iter(self.names)

    def __contains__(self, era: object) -> bool:
        return isinstance(era, str) and era.strip() in self._ranks

    def __repr__(self) -> str:
        return f"EraRegistry({list(self.names)!r})"

    def rank(self, era: Optional[str]) -> int:
        """
        Chronological rank of an era name.

        Args:
            era: Era name or None

        Returns:
            Index in the registry; 0 for None; UNRESOLVED_ERA_RANK for names
            the registry does not know
        """
        if era is None or not era.strip():
            return 0

        name = era.strip()
        if name in self._ranks:
            return self._ranks[name]

        if name not in self._warned:
            self._warned.add(name)
            safe_logger(self.logger).log_warning(
                "Unresolved era, ranking it first",
                {"era": name, "known_eras": list(self.names)},
            )
        return UNRESOLVED_ERA_RANK


# Shared empty registry for callers without era configuration
NO_ERAS = EraRegistry()
