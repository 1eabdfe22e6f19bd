import json
import sqlite3
from typing import Any

from src.domain.entities import SINGLETON_ID, SystemConfig


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    d = {}
    for idx, col in enumerate(cursor.description):
        d[col[0]] = row[idx]
    return d


class SQLiteConfigRepo:
    """SQLite adapter for SystemConfig (single-row table, flat JSON record)."""

    def __init__(self, db_path: str):
        self.db_path = db_path

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        return conn

    def get(self) -> SystemConfig | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM system_config WHERE id = ?", (SINGLETON_ID,)
            ).fetchone()
            if not row:
                return None
            return self._map_row(row)
        finally:
            conn.close()

    def save(self, config: SystemConfig) -> SystemConfig:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO system_config (id, record, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    record=excluded.record,
                    updated_at=excluded.updated_at
            """,
                (
                    SINGLETON_ID,
                    json.dumps(config.to_record(), sort_keys=True),
                    config.updated_at.isoformat(),
                ),
            )
            conn.commit()
            return config
        finally:
            conn.close()

    def _map_row(self, row: dict[str, Any]) -> SystemConfig:
        return SystemConfig.from_record(json.loads(row["record"]))
