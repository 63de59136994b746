from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .repository import ConfigRepository


class MySQLConfigRepository(ConfigRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_value(self, key: str) -> Optional[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT `value` FROM app_config WHERE `key`=%s", (key,))
            r = fetchone(cur)
            return str(r["value"]) if r else None

    def set_value(self, key: str, value: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO app_config (`key`, `value`) VALUES (%s, %s)
                ON DUPLICATE KEY UPDATE `value`=VALUES(`value`)
                """,
                (key, value),
            )
