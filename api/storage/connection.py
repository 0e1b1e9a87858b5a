import sqlite3
import logging
from pathlib import Path

from config import default_config

logger = logging.getLogger(__name__)


class DatabaseConnection:
    """Manages the SQLite connection used for mutations and sync reads.

    The connection runs in autocommit mode (isolation_level=None);
    atomic sequences open their own BEGIN IMMEDIATE via storage.transaction.
    """

    def __init__(self, config=default_config.database):
        self.config = config
        self.conn = None

    def connect(self) -> sqlite3.Connection:
        """Establish database connection"""
        self._ensure_parent_dir()
        self.conn = self._create_connection()
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA foreign_keys = ON")
        # WAL lets searches read while a writer holds the lock
        self.conn.execute("PRAGMA journal_mode=WAL")
        self.conn.execute(f"PRAGMA busy_timeout={int(self.config.busy_timeout_ms)}")
        return self.conn

    def _create_connection(self) -> sqlite3.Connection:
        """Create SQLite connection"""
        return sqlite3.connect(
            self.config.path,
            check_same_thread=self.config.check_same_thread,
            isolation_level=None
        )

    def _ensure_parent_dir(self):
        if self.config.path == ":memory:":
            return
        Path(self.config.path).parent.mkdir(parents=True, exist_ok=True)

    def close(self):
        """Close connection"""
        if self.conn:
            self.conn.close()
            self.conn = None
