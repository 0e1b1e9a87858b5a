import logging
import sqlite3
from typing import List, Optional

from domain_models import ArchiveRecord
from errors import InvalidInputError, NotFoundError
from signature.path_codec import decode_path_list, encode_path_list

logger = logging.getLogger(__name__)

_COLUMNS = "id, title, active, descriptive_signatures, created_on, modified_on"


def record_from_row(row) -> ArchiveRecord:
    """Build a record; stored path text that no longer parses is logged and read as empty"""
    try:
        paths = decode_path_list(row['descriptive_signatures'])
    except InvalidInputError as e:
        logger.warning(f"Record {row['id']}: {e}")
        paths = []
    return ArchiveRecord(
        id=row['id'],
        title=row['title'],
        active=bool(row['active']),
        descriptive_signatures=paths,
        created_on=row['created_on'],
        modified_on=row['modified_on']
    )


class RecordRepository:
    """CRUD operations for archive_records table.

    Single Responsibility: Persist records and their signature paths.
    Paths are validated and written in canonical text form.
    """

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def add(self, title: str, descriptive_signatures: List[List[int]] = None, active: bool = True) -> int:
        """Insert record and return its ID

        Raises:
            InvalidInputError: a path is not a list of positive ints
        """
        encoded = encode_path_list(descriptive_signatures or [])
        cursor = self.conn.execute(
            "INSERT INTO archive_records (title, active, descriptive_signatures) VALUES (?, ?, ?)",
            (title, 1 if active else 0, encoded)
        )
        return cursor.lastrowid

    def get(self, record_id: int) -> Optional[ArchiveRecord]:
        row = self.conn.execute(
            f"SELECT {_COLUMNS} FROM archive_records WHERE id = ?", (record_id,)
        ).fetchone()
        return record_from_row(row) if row else None

    def set_signatures(self, record_id: int, descriptive_signatures: List[List[int]]):
        """Replace the record's signature paths"""
        encoded = encode_path_list(descriptive_signatures)
        cursor = self.conn.execute(
            "UPDATE archive_records SET descriptive_signatures = ?, modified_on = CURRENT_TIMESTAMP WHERE id = ?",
            (encoded, record_id)
        )
        if cursor.rowcount == 0:
            raise NotFoundError("Record", record_id)

    def set_active(self, record_id: int, active: bool):
        cursor = self.conn.execute(
            "UPDATE archive_records SET active = ?, modified_on = CURRENT_TIMESTAMP WHERE id = ?",
            (1 if active else 0, record_id)
        )
        if cursor.rowcount == 0:
            raise NotFoundError("Record", record_id)

    def delete(self, record_id: int) -> bool:
        cursor = self.conn.execute("DELETE FROM archive_records WHERE id = ?", (record_id,))
        return cursor.rowcount > 0
