import logging
import sqlite3
from pathlib import Path

logger = logging.getLogger(__name__)

DOWN_MARKER = "-- Down"


def up_section(script: str) -> str:
    """The forward part of a migration script (everything before ``-- Down``)."""
    return script.split(DOWN_MARKER, 1)[0]


class SQLiteMigrator:
    """Applies ``NNNN_name.sql`` files from a directory in filename order."""

    def __init__(self, db_path: str, migrations_dir: str):
        self.db_path = db_path
        self.migrations_dir = Path(migrations_dir)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.execute(
            "CREATE TABLE IF NOT EXISTS _migrations ("
            " filename TEXT PRIMARY KEY,"
            " applied_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP)"
        )
        return conn

    def pending_migrations(self) -> list[str]:
        conn = self._connect()
        try:
            done = {row[0] for row in conn.execute("SELECT filename FROM _migrations")}
        finally:
            conn.close()
        return [p.name for p in sorted(self.migrations_dir.glob("*.sql")) if p.name not in done]

    def run_migrations(self) -> list[str]:
        """Apply pending migrations and return the filenames applied."""
        pending = self.pending_migrations()
        if not pending:
            logger.debug("Config store schema is up to date")
            return []

        conn = self._connect()
        try:
            for filename in pending:
                logger.info("Applying migration %s", filename)
                script = up_section((self.migrations_dir / filename).read_text())
                try:
                    conn.executescript(script)
                    conn.execute("INSERT INTO _migrations (filename) VALUES (?)", (filename,))
                    conn.commit()
                except sqlite3.Error as e:
                    conn.rollback()
                    raise RuntimeError(f"Migration {filename} failed: {e}") from e
        finally:
            conn.close()
        return pending
