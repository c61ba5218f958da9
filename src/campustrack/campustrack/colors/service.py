from __future__ import annotations

from typing import Dict, Iterable, Optional

from ..common.app_logging import get_logger
from ..core.enums import EntityKind
from .palette import DEFAULT_COLOR, PALETTE_VERSION, color_for_index
from .repository import ColorRepository

_logger = get_logger("campustrack.colors")


class ColorRegistry:
    """First-seen color assignment for subjects and notices.

    Once an id has an index it keeps it for the palette version; new ids take
    the next index, wrapping around the palette. Subjects and notices draw
    from one counter.

    The grid colors subjects through `colors_for`. Notice cards are rendered
    outside this service and call `color_of(notice_id, EntityKind.NOTICE)`.
    """

    def __init__(self, colors: ColorRepository, *, version: int = PALETTE_VERSION):
        self._colors = colors
        self._version = int(version)

    def color_of(self, entity_id: Optional[int], kind: EntityKind = EntityKind.SUBJECT) -> str:
        if entity_id is None:
            return DEFAULT_COLOR
        index = self._colors.get_index(kind=kind, entity_id=entity_id, version=self._version)
        if index is None:
            index = self._colors.assign(kind=kind, entity_id=entity_id, version=self._version)
            _logger.debug("color assigned", extra={"kind": kind.value, "entity_id": entity_id, "index": index})
        return color_for_index(index)

    def colors_for(self, entity_ids: Iterable[int], kind: EntityKind = EntityKind.SUBJECT) -> Dict[int, str]:
        """Bulk lookup; ids without a color are assigned in the order given."""

        ids = list(dict.fromkeys(int(i) for i in entity_ids))
        known = self._colors.get_indices(kind=kind, entity_ids=ids, version=self._version)
        result: Dict[int, str] = {}
        for entity_id in ids:
            index = known.get(entity_id)
            if index is None:
                index = self._colors.assign(kind=kind, entity_id=entity_id, version=self._version)
            result[entity_id] = color_for_index(index)
        return result
