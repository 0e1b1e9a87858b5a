"""
Async database connection management.

Searches run on their own aiosqlite connection so they never wait on the
sync writer: under WAL a reader sees the last committed state without
taking the write lock.
"""

import aiosqlite
from config import default_config


class AsyncDatabaseConnection:
    """Manages a read-only async SQLite connection.

    Single responsibility: Database connection lifecycle
    """

    def __init__(self, config=default_config.database):
        self.config = config
        self.conn = None

    async def connect(self) -> aiosqlite.Connection:
        """Establish async database connection"""
        self.conn = await self._create_connection()
        self.conn.row_factory = aiosqlite.Row
        await self.conn.execute(f"PRAGMA busy_timeout={int(self.config.busy_timeout_ms)}")
        await self.conn.execute("PRAGMA query_only = ON")
        return self.conn

    async def _create_connection(self) -> aiosqlite.Connection:
        """Create async SQLite connection"""
        return await aiosqlite.connect(
            self.config.path,
            check_same_thread=False  # aiosqlite handles threading
        )

    async def close(self):
        """Close connection"""
        if self.conn:
            await self.conn.close()
            self.conn = None
