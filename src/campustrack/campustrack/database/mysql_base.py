from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Sequence

import mysql.connector
from mysql.connector import errorcode

from ..common.app_logging import get_logger
from ..core.exceptions import StoreUnavailableError
from .connection import DatabaseConnection

_logger = get_logger("campustrack.db")


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Open a connection and cursor for one transaction.

    Commits when the block exits cleanly and rolls back otherwise. Integrity
    errors are re-raised untouched so repositories can translate them; any
    other driver error surfaces as StoreUnavailableError.
    """

    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as exc:
        _logger.error("database connection failed", extra={"error": str(exc)})
        raise StoreUnavailableError("Database temporarily unavailable") from exc

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.IntegrityError:
        conn.rollback()
        raise
    except mysql.connector.Error as exc:
        conn.rollback()
        _logger.error("database operation failed", extra={"error": str(exc)})
        raise StoreUnavailableError("Database temporarily unavailable") from exc
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def is_duplicate_key(exc: mysql.connector.IntegrityError) -> bool:
    return getattr(exc, "errno", None) == errorcode.ER_DUP_ENTRY


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def in_clause(values: Sequence[Any]) -> str:
    """Placeholder list for an IN (...) filter; callers guarantee `values` is non-empty."""

    return ", ".join(["%s"] * len(values))
