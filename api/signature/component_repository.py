import sqlite3
from typing import List, Optional

from domain_models import IndexType, SignatureComponent

_COLUMNS = "id, name, description, index_count, index_type, created_on, modified_on"


class ComponentRepository:
    """CRUD operations for signature_components table.

    Single Responsibility: Manage component rows and their counters.
    Callers own the transaction boundary.
    """

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def add(self, name: str, index_type: IndexType, description: str = None) -> int:
        """Insert component with a zeroed counter and return its ID"""
        cursor = self.conn.execute(
            "INSERT INTO signature_components (name, description, index_type, index_count) VALUES (?, ?, ?, 0)",
            (name, description, index_type.value)
        )
        return cursor.lastrowid

    def get(self, component_id: int) -> Optional[SignatureComponent]:
        """Get component by ID"""
        row = self.conn.execute(
            f"SELECT {_COLUMNS} FROM signature_components WHERE id = ?",
            (component_id,)
        ).fetchone()
        return SignatureComponent.from_row(row) if row else None

    def find_by_name(self, name: str) -> Optional[SignatureComponent]:
        """Get component by its unique name"""
        row = self.conn.execute(
            f"SELECT {_COLUMNS} FROM signature_components WHERE name = ?",
            (name,)
        ).fetchone()
        return SignatureComponent.from_row(row) if row else None

    def list_all(self) -> List[SignatureComponent]:
        """All components ordered by name"""
        rows = self.conn.execute(
            f"SELECT {_COLUMNS} FROM signature_components ORDER BY name COLLATE NOCASE, id"
        ).fetchall()
        return [SignatureComponent.from_row(row) for row in rows]

    def exists(self, component_id: int) -> bool:
        row = self.conn.execute(
            "SELECT 1 FROM signature_components WHERE id = ?", (component_id,)
        ).fetchone()
        return row is not None

    def update_fields(self, component_id: int, fields: dict) -> int:
        """Update the given columns; returns number of rows touched.

        Only name, description and index_type are writable here.
        """
        allowed = {k: v for k, v in fields.items() if k in ('name', 'description', 'index_type')}
        if not allowed:
            return 1 if self.exists(component_id) else 0

        if isinstance(allowed.get('index_type'), IndexType):
            allowed['index_type'] = allowed['index_type'].value

        assignments = ", ".join(f"{column} = ?" for column in allowed)
        cursor = self.conn.execute(
            f"UPDATE signature_components SET {assignments}, modified_on = CURRENT_TIMESTAMP WHERE id = ?",
            (*allowed.values(), component_id)
        )
        return cursor.rowcount

    def delete(self, component_id: int) -> int:
        """Delete component; elements and their parent edges cascade"""
        cursor = self.conn.execute(
            "DELETE FROM signature_components WHERE id = ?", (component_id,)
        )
        return cursor.rowcount

    def increment_counter(self, component_id: int) -> Optional[int]:
        """Atomically bump the counter and return the new value (None if missing)"""
        rows = self.conn.execute(
            "UPDATE signature_components SET index_count = index_count + 1 WHERE id = ? RETURNING index_count",
            (component_id,)
        ).fetchall()
        return rows[0][0] if rows else None

    def set_counter(self, component_id: int, value: int) -> int:
        cursor = self.conn.execute(
            "UPDATE signature_components SET index_count = ?, modified_on = CURRENT_TIMESTAMP WHERE id = ?",
            (value, component_id)
        )
        return cursor.rowcount

    def reset_counter(self, component_id: int) -> int:
        return self.set_counter(component_id, 0)
