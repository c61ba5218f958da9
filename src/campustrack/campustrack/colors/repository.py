from __future__ import annotations

from typing import Dict, Optional, Protocol, Sequence

from ..core.enums import EntityKind


class ColorRepository(Protocol):
    def get_indices(self, *, kind: EntityKind, entity_ids: Sequence[int], version: int) -> Dict[int, int]:
        raise NotImplementedError

    def assign(self, *, kind: EntityKind, entity_id: int, version: int) -> int:
        """Give the entity the next free index unless it already has one; return its index.

        The next index is one past the highest index of the version, across all
        entity kinds. Assigning an entity that already has an index returns the
        stored one unchanged.
        """

        raise NotImplementedError

    def get_index(self, *, kind: EntityKind, entity_id: int, version: int) -> Optional[int]:
        raise NotImplementedError
