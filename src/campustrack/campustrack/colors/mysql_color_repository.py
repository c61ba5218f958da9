from __future__ import annotations

from typing import Dict, Optional, Sequence

from ..core.enums import EntityKind
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .repository import ColorRepository


class MySQLColorRepository(ColorRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_index(self, *, kind: EntityKind, entity_id: int, version: int) -> Optional[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT color_index FROM color_assignments
                WHERE entity_kind=%s AND entity_id=%s AND palette_version=%s
                """,
                (kind.value, int(entity_id), int(version)),
            )
            r = fetchone(cur)
            return int(r["color_index"]) if r else None

    def get_indices(self, *, kind: EntityKind, entity_ids: Sequence[int], version: int) -> Dict[int, int]:
        if not entity_ids:
            return {}
        ids = [int(i) for i in entity_ids]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT entity_id, color_index FROM color_assignments
                WHERE entity_kind=%s AND palette_version=%s AND entity_id IN ({in_clause(ids)})
                """,
                (kind.value, int(version), *ids),
            )
            return {int(r["entity_id"]): int(r["color_index"]) for r in fetchall(cur)}

    def assign(self, *, kind: EntityKind, entity_id: int, version: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            # Single statement: a concurrent assignment of the same id loses on the primary key
            # and both callers then read back the same stored index.
            cur.execute(
                """
                INSERT IGNORE INTO color_assignments(entity_kind, entity_id, color_index, palette_version)
                SELECT %s, %s, COALESCE(MAX(color_index), -1) + 1, %s
                FROM color_assignments
                WHERE palette_version=%s
                """,
                (kind.value, int(entity_id), int(version), int(version)),
            )
            cur.execute(
                """
                SELECT color_index FROM color_assignments
                WHERE entity_kind=%s AND entity_id=%s AND palette_version=%s
                """,
                (kind.value, int(entity_id), int(version)),
            )
            r = fetchone(cur)
            return int(r["color_index"])
