from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence

import mysql.connector

from ..core.exceptions import StoreError
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True) -> Iterator:
    """One connection + cursor, committed on success and rolled back on error.

    Driver errors surface as ``StoreError`` with the driver's message; they
    are never retried.
    """
    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as e:
        logger.error("Database connection failed: %s", e)
        raise StoreError(str(e)) from e

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.Error as e:
        conn.rollback()
        logger.error("Database error: %s", e)
        raise StoreError(str(e)) from e
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def in_clause(values: Sequence[Any]) -> str:
    """Placeholders for ``IN (...)``; callers must not pass an empty sequence."""
    return ",".join(["%s"] * len(values))


def update_clause(updates: Dict[str, Any]) -> str:
    """``col=%s, ...`` for an UPDATE; keys come from code, never from the client."""
    return ", ".join(f"{column}=%s" for column in updates)
