"""
Database connection management and schema initialization.
"""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from .schema import run_migrations


class DatabaseConnection:
    """Manages database connection and schema."""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    @contextmanager
    def conn(self) -> Iterator[sqlite3.Connection]:
        """Get database connection with row factory.

        Changes are committed when the block exits normally and rolled back
        if it raises.
        """
        connection = sqlite3.connect(self.db_path)
        connection.row_factory = sqlite3.Row
        connection.execute("PRAGMA foreign_keys = ON")
        try:
            yield connection
            connection.commit()
        except BaseException:
            connection.rollback()
            raise
        finally:
            connection.close()

    def _init_schema(self):
        """Enable WAL and apply pending migrations."""
        with self.conn() as connection:
            connection.execute("PRAGMA journal_mode = WAL")
            run_migrations(connection)

    def migrate(self) -> list[int]:
        """Apply pending migrations. Returns the versions applied."""
        with self.conn() as connection:
            return run_migrations(connection)
