"""Database manager for SQLite connections and path management."""

import sqlite3
from contextlib import contextmanager
from config import Config, get_migrations_dir


def configure_connection(conn: sqlite3.Connection) -> sqlite3.Connection:
    """Apply the per-connection settings every category query relies on.

    SQLite does not persist the foreign key setting, so it has to be turned
    on for each new connection.
    """
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


class DatabaseManager:
    """Manages database connections and paths.

    Args:
        config: Application configuration object.
    """

    def __init__(self, config: Config):
        self.config = config

    @contextmanager
    def connect(self):
        """Get a database connection with automatic cleanup.

        Yields:
            sqlite3.Connection: Database connection with foreign keys enabled.
        """
        db_path = self.config.db_path
        db_path.parent.mkdir(parents=True, exist_ok=True)

        conn = configure_connection(sqlite3.connect(db_path))
        try:
            yield conn
        finally:
            conn.close()

    def get_db_path(self):
        return self.config.db_path

    def get_migrations_dir(self):
        return get_migrations_dir()
