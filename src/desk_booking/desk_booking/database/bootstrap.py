"""Schema and demo data setup, used by ``create_app`` and ``scripts/``."""
from __future__ import annotations

import logging
import re
from contextlib import closing
from pathlib import Path
from typing import Iterable, Optional

from werkzeug.security import generate_password_hash

from ..core.enums import CellType, Role, RoomRole
from .connection import DatabaseConnection, DBConfig

logger = logging.getLogger(__name__)

DEMO_USERS = (
    # full_name, username, password, role
    ("Super Admin", "admin", "admin123", Role.SUPER_ADMIN),
    ("Demo Member", "member", "member123", Role.MEMBER),
)
DEMO_ROOM = ("Open Space", "Demo room with a row of desks", 8, 6)
DEMO_OFFICE = ("Meeting Office 1", "First floor")


def _connect(db_config: dict, *, with_database: bool = True):
    return DatabaseConnection(DBConfig.from_dict(db_config)).connect(with_database=with_database)


def _strip_create_db_and_use(sql: str) -> str:
    # schema.sql works whatever the configured database is called.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def iter_sql_statements(sql: str) -> Iterable[str]:
    """Split a script on ``;`` outside quotes; ``--`` line comments are dropped."""
    sql = re.sub(r"(?m)^\s*--.*$", "", sql)
    buf: list[str] = []
    quote: Optional[str] = None
    escape = False

    for ch in sql:
        if escape:
            buf.append(ch)
            escape = False
            continue
        if ch == "\\":
            buf.append(ch)
            escape = True
            continue
        if ch in ("'", '"'):
            if quote is None:
                quote = ch
            elif quote == ch:
                quote = None
        if ch == ";" and quote is None:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue
        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(db_config: dict) -> None:
    name = DBConfig.from_dict(db_config).database
    with closing(_connect(db_config, with_database=False)) as conn:
        cur = conn.cursor()
        cur.execute(f"CREATE DATABASE IF NOT EXISTS `{name}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci")
        conn.commit()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    sql = _strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8"))

    with closing(_connect(db_config)) as conn:
        cur = conn.cursor()
        for stmt in iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    logger.info("Schema applied from %s", schema_path)


def ensure_demo_data(db_config: dict) -> None:
    """Idempotent demo content: users, one room with desks, one shared office."""
    with closing(_connect(db_config)) as conn:
        cur = conn.cursor(dictionary=True)

        def upsert_user(full_name: str, username: str, password: str, role: Role) -> int:
            password_hash = generate_password_hash(password)
            cur.execute("SELECT user_id FROM users WHERE username=%s", (username,))
            existing = cur.fetchone()
            if existing:
                cur.execute(
                    "UPDATE users SET full_name=%s, password_hash=%s, role=%s, is_active=1 WHERE username=%s",
                    (full_name, password_hash, role.value, username),
                )
                return int(existing["user_id"])
            cur.execute(
                "INSERT INTO users (full_name, username, password_hash, role) VALUES (%s, %s, %s, %s)",
                (full_name, username, password_hash, role.value),
            )
            return int(cur.lastrowid)

        user_ids = [upsert_user(*u) for u in DEMO_USERS]
        admin_id, member_id = user_ids

        name, description, width, height = DEMO_ROOM
        cur.execute("SELECT room_id FROM rooms WHERE name=%s", (name,))
        if not cur.fetchone():
            cur.execute(
                "INSERT INTO rooms (name, description, grid_width, grid_height, created_by) VALUES (%s,%s,%s,%s,%s)",
                (name, description, width, height, admin_id),
            )
            room_id = int(cur.lastrowid)
            cur.executemany(
                "INSERT INTO room_access (room_id, user_id, role) VALUES (%s,%s,%s)",
                [(room_id, admin_id, RoomRole.ADMIN.value), (room_id, member_id, RoomRole.MEMBER.value)],
            )
            cur.executemany(
                "INSERT INTO room_cells (room_id, x, y, type, label) VALUES (%s,%s,%s,%s,%s)",
                [(room_id, x, 1, CellType.DESK.value, f"D{x + 1}") for x in range(4)],
            )

        office_name, location = DEMO_OFFICE
        cur.execute("SELECT office_id FROM offices WHERE name=%s", (office_name,))
        if not cur.fetchone():
            cur.execute(
                "INSERT INTO offices (name, location, is_shared, created_by) VALUES (%s,%s,1,%s)",
                (office_name, location, admin_id),
            )

        conn.commit()
    logger.info("Demo data ready")


def list_tables(db_config: dict) -> list[str]:
    with closing(_connect(db_config)) as conn:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
