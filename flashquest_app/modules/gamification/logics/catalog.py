"""Immutable achievement lookup table, injected wherever achievements are evaluated."""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Iterator, Optional

from ..schemas import AchievementDefinition


class AchievementCatalog:
    """Read-only, insertion-ordered set of achievement definitions."""

    def __init__(self, definitions: Iterable[AchievementDefinition] = ()):
        by_id = {}
        for definition in definitions:
            if definition.id in by_id:
                raise ValueError(f"Duplicate achievement id in catalog: {definition.id}")
            by_id[definition.id] = definition
        self._by_id = MappingProxyType(by_id)

    def __len__(self) -> int:
        return len(self._by_id)

    def __iter__(self) -> Iterator[AchievementDefinition]:
        return iter(self._by_id.values())

    def __contains__(self, achievement_id: object) -> bool:
        return achievement_id in self._by_id

    def get(self, achievement_id: str) -> Optional[AchievementDefinition]:
        return self._by_id.get(achievement_id)

    def excluding(self, achievement_ids: Iterable[str]) -> list[AchievementDefinition]:
        """Definitions whose id is not in ``achievement_ids``, in catalog order."""
        skip = set(achievement_ids)
        return [d for d in self._by_id.values() if d.id not in skip]

    def __repr__(self) -> str:
        return f'<AchievementCatalog {len(self)} entries>'
