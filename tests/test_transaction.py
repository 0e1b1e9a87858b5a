"""
Tests for the transaction helper
"""
import sqlite3

import pytest

from errors import NotFoundError, TransactionAbortedError
from storage.transaction import transaction


def _count(conn):
    return conn.execute("SELECT COUNT(*) FROM archive_records").fetchone()[0]


class TestTransaction:
    def test_commits_on_success(self, conn):
        with transaction(conn):
            conn.execute("INSERT INTO archive_records (title) VALUES ('a')")
        assert _count(conn) == 1
        assert not conn.in_transaction

    def test_storage_error_rolls_back_and_wraps(self, conn):
        with pytest.raises(TransactionAbortedError) as exc:
            with transaction(conn, "two inserts"):
                conn.execute("INSERT INTO archive_records (title) VALUES ('a')")
                conn.execute("INSERT INTO archive_records (title) VALUES (NULL)")

        assert isinstance(exc.value.__cause__, sqlite3.IntegrityError)
        assert _count(conn) == 0
        assert not conn.in_transaction

    def test_domain_error_propagates_unchanged(self, conn):
        with pytest.raises(NotFoundError):
            with transaction(conn):
                conn.execute("INSERT INTO archive_records (title) VALUES ('a')")
                raise NotFoundError("Record", 1)
        assert _count(conn) == 0

    def test_nested_joins_outer(self, conn):
        with pytest.raises(RuntimeError):
            with transaction(conn):
                with transaction(conn):
                    conn.execute("INSERT INTO archive_records (title) VALUES ('inner')")
                assert conn.in_transaction
                raise RuntimeError("outer fails")
        assert _count(conn) == 0

    def test_write_lock_timeout_aborts(self, conn, db_config):
        """A second writer waiting past busy_timeout gets TransactionAbortedError"""
        from config import DatabaseConfig
        from storage.connection import DatabaseConnection

        other = DatabaseConnection(DatabaseConfig(path=db_config.path, busy_timeout_ms=50)).connect()
        try:
            with transaction(conn):
                with pytest.raises(TransactionAbortedError):
                    with transaction(other):
                        pass
        finally:
            other.close()
