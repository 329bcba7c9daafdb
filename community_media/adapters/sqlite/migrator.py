import logging
import sqlite3
from pathlib import Path
from typing import NamedTuple

logger = logging.getLogger(__name__)

DOWN_MARKER = "-- Down"


class Migration(NamedTuple):
    name: str
    up: str
    down: str


def parse_migration(path: Path) -> Migration:
    """Split a ``.sql`` file into its Up part and the rollback after ``-- Down``."""
    content = path.read_text()
    up, _, down = content.partition(DOWN_MARKER)
    return Migration(name=path.name, up=up, down=down)


class SQLiteMigrator:
    def __init__(self, db_path: str, migrations_dir: str):
        self.db_path = db_path
        self.migrations_dir = Path(migrations_dir)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.execute("PRAGMA foreign_keys = ON;")
        conn.execute("""
            CREATE TABLE IF NOT EXISTS _migrations (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                filename TEXT UNIQUE NOT NULL,
                applied_at DATETIME DEFAULT CURRENT_TIMESTAMP
            );
        """)
        return conn

    def discover(self) -> list[Migration]:
        return [parse_migration(p) for p in sorted(self.migrations_dir.glob("*.sql"))]

    def applied(self) -> list[str]:
        conn = self._connect()
        try:
            rows = conn.execute("SELECT filename FROM _migrations ORDER BY id").fetchall()
            return [r[0] for r in rows]
        finally:
            conn.close()

    def pending(self) -> list[Migration]:
        done = set(self.applied())
        return [m for m in self.discover() if m.name not in done]

    def run_migrations(self) -> list[str]:
        """Apply pending migrations in file-name order; returns their names."""
        names = []
        conn = self._connect()
        try:
            for migration in self.pending():
                logger.info("Applying migration %s", migration.name)
                self._execute(conn, migration.name, migration.up, record=True)
                names.append(migration.name)
        finally:
            conn.close()
        if not names:
            logger.debug("Schema at %s is up to date", self.db_path)
        return names

    def rollback_last(self) -> str | None:
        """Run the Down part of the most recent migration."""
        history = self.applied()
        if not history:
            return None
        name = history[-1]
        migration = parse_migration(self.migrations_dir / name)
        if not migration.down.strip():
            raise RuntimeError(f"Migration {name} has no {DOWN_MARKER} section")

        conn = self._connect()
        try:
            logger.info("Rolling back migration %s", name)
            self._execute(conn, name, migration.down, record=False)
        finally:
            conn.close()
        return name

    def _execute(self, conn: sqlite3.Connection, name: str, script: str, *, record: bool) -> None:
        try:
            conn.executescript(script)
            if record:
                conn.execute("INSERT INTO _migrations (filename) VALUES (?)", (name,))
            else:
                conn.execute("DELETE FROM _migrations WHERE filename = ?", (name,))
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise RuntimeError(f"Migration {name} failed: {e}") from e
