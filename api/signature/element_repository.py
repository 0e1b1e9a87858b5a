import sqlite3
from typing import Dict, Iterable, List, Optional, Tuple

from domain_models import SignatureElement

_COLUMNS = 'e.id, e.component_id, e.name, e."index", e.description, e.created_on, e.modified_on'


class ElementRepository:
    """CRUD operations for signature_elements and signature_element_parents.

    Single Responsibility: Manage element rows and parent edges.
    Invariant checks (existence, self-parent, cycles) live in ElementService.
    """

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def add(self, component_id: int, name: str, index: Optional[str], description: str = None) -> int:
        """Insert element and return its ID"""
        cursor = self.conn.execute(
            'INSERT INTO signature_elements (component_id, name, "index", description) VALUES (?, ?, ?, ?)',
            (component_id, name, index, description)
        )
        return cursor.lastrowid

    def get(self, element_id: int) -> Optional[SignatureElement]:
        """Get element by ID with its parent ids"""
        row = self.conn.execute(
            f"SELECT {_COLUMNS} FROM signature_elements e WHERE e.id = ?",
            (element_id,)
        ).fetchone()
        if not row:
            return None
        return SignatureElement.from_row(row, self.get_parent_ids(element_id))

    def find_many(self, element_ids: Iterable[int]) -> Dict[int, SignatureElement]:
        """Batch lookup keyed by id; unknown ids are simply absent"""
        ids = sorted(set(element_ids))
        if not ids:
            return {}
        placeholders = ",".join("?" * len(ids))
        rows = self.conn.execute(
            f"SELECT {_COLUMNS} FROM signature_elements e WHERE e.id IN ({placeholders})",
            ids
        ).fetchall()
        parents = self.parent_ids_for(ids)
        return {
            row['id']: SignatureElement.from_row(row, parents.get(row['id'], []))
            for row in rows
        }

    def list_by_component(self, component_id: int) -> List[SignatureElement]:
        """Elements of one component ordered by name (case-insensitive), then id"""
        rows = self.conn.execute(
            f"""SELECT {_COLUMNS} FROM signature_elements e
                WHERE e.component_id = ?
                ORDER BY e.name COLLATE NOCASE, e.id""",
            (component_id,)
        ).fetchall()
        return self._with_parents(rows)

    def existing_ids(self, element_ids: Iterable[int]) -> set:
        ids = sorted(set(element_ids))
        if not ids:
            return set()
        placeholders = ",".join("?" * len(ids))
        rows = self.conn.execute(
            f"SELECT id FROM signature_elements WHERE id IN ({placeholders})", ids
        ).fetchall()
        return {row[0] for row in rows}

    def update_fields(self, element_id: int, fields: dict) -> int:
        """Update name/description/index; returns number of rows touched"""
        allowed = {k: v for k, v in fields.items() if k in ('name', 'description', 'index')}
        if not allowed:
            return 1 if self.existing_ids([element_id]) else 0

        assignments = ", ".join(f'"{column}" = ?' for column in allowed)
        cursor = self.conn.execute(
            f"UPDATE signature_elements SET {assignments}, modified_on = CURRENT_TIMESTAMP WHERE id = ?",
            (*allowed.values(), element_id)
        )
        return cursor.rowcount

    def update_index(self, element_id: int, index: str) -> int:
        cursor = self.conn.execute(
            'UPDATE signature_elements SET "index" = ?, modified_on = CURRENT_TIMESTAMP WHERE id = ?',
            (index, element_id)
        )
        return cursor.rowcount

    def delete(self, element_id: int) -> int:
        """Delete element; edges on either side cascade"""
        cursor = self.conn.execute("DELETE FROM signature_elements WHERE id = ?", (element_id,))
        return cursor.rowcount

    # Parent edges

    def get_parent_ids(self, element_id: int) -> List[int]:
        rows = self.conn.execute(
            "SELECT parent_id FROM signature_element_parents WHERE child_id = ? ORDER BY parent_id",
            (element_id,)
        ).fetchall()
        return [row[0] for row in rows]

    def parent_ids_for(self, element_ids: List[int]) -> Dict[int, List[int]]:
        if not element_ids:
            return {}
        placeholders = ",".join("?" * len(element_ids))
        rows = self.conn.execute(
            f"""SELECT child_id, parent_id FROM signature_element_parents
                WHERE child_id IN ({placeholders})
                ORDER BY child_id, parent_id""",
            list(element_ids)
        ).fetchall()
        result: Dict[int, List[int]] = {}
        for child_id, parent_id in rows:
            result.setdefault(child_id, []).append(parent_id)
        return result

    def _with_parents(self, rows) -> List[SignatureElement]:
        parents = self.parent_ids_for([row['id'] for row in rows])
        return [SignatureElement.from_row(row, parents.get(row['id'], [])) for row in rows]

    def get_parents(self, element_id: int) -> List[SignatureElement]:
        rows = self.conn.execute(
            f"""SELECT {_COLUMNS} FROM signature_elements e
                JOIN signature_element_parents p ON p.parent_id = e.id
                WHERE p.child_id = ?
                ORDER BY e.name COLLATE NOCASE, e.id""",
            (element_id,)
        ).fetchall()
        return self._with_parents(rows)

    def get_children(self, element_id: int) -> List[SignatureElement]:
        rows = self.conn.execute(
            f"""SELECT {_COLUMNS} FROM signature_elements e
                JOIN signature_element_parents p ON p.child_id = e.id
                WHERE p.parent_id = ?
                ORDER BY e.name COLLATE NOCASE, e.id""",
            (element_id,)
        ).fetchall()
        return self._with_parents(rows)

    def replace_parents(self, element_id: int, parent_ids: Iterable[int]):
        """Replace the whole parent set of an element"""
        self.conn.execute("DELETE FROM signature_element_parents WHERE child_id = ?", (element_id,))
        self.add_parents(element_id, parent_ids)

    def add_parents(self, element_id: int, parent_ids: Iterable[int]):
        self.conn.executemany(
            "INSERT OR IGNORE INTO signature_element_parents (child_id, parent_id) VALUES (?, ?)",
            [(element_id, parent_id) for parent_id in sorted(set(parent_ids))]
        )

    def all_edges(self) -> List[Tuple[int, int]]:
        """Every (child_id, parent_id) edge"""
        rows = self.conn.execute(
            "SELECT child_id, parent_id FROM signature_element_parents"
        ).fetchall()
        return [(row[0], row[1]) for row in rows]
