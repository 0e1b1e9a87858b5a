"""
Transaction helper for atomic mutation sequences.

BEGIN IMMEDIATE takes SQLite's write lock up front, so every sequence that
reads and then writes a counter or an edge set runs serialized against the
other writers. Storage failures roll back and surface as
TransactionAbortedError; domain errors roll back and propagate unchanged.
"""
import contextlib
import logging
import sqlite3
from typing import Generator

from errors import TransactionAbortedError

logger = logging.getLogger(__name__)


@contextlib.contextmanager
def transaction(conn: sqlite3.Connection, label: str = "transaction") -> Generator[sqlite3.Connection, None, None]:
    """Run the enclosed block as one atomic unit.

    Nested use joins the outer transaction; only the outermost block
    commits or rolls back.

    Raises:
        TransactionAbortedError: storage failure (already rolled back)
    """
    if conn.in_transaction:
        yield conn
        return

    try:
        conn.execute("BEGIN IMMEDIATE")
    except sqlite3.Error as e:
        raise TransactionAbortedError(f"{label} could not start: {e}") from e

    try:
        yield conn
    except sqlite3.Error as e:
        _rollback(conn, label)
        raise TransactionAbortedError(f"{label} failed: {e}") from e
    except BaseException:
        _rollback(conn, label)
        raise

    try:
        conn.execute("COMMIT")
    except sqlite3.Error as e:
        _rollback(conn, label)
        raise TransactionAbortedError(f"{label} could not commit: {e}") from e


def _rollback(conn: sqlite3.Connection, label: str):
    if not conn.in_transaction:
        return
    try:
        conn.execute("ROLLBACK")
        logger.debug(f"{label} rolled back")
    except sqlite3.Error as e:
        logger.error(f"{label} rollback failed: {e}")
