import sqlite3


class SchemaManager:
    """Manages database schema"""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def create_schema(self):
        """Create all required tables (existing data preserved)"""
        self._create_components_table()
        self._create_elements_table()
        self._create_element_parents_table()
        self._create_archive_records_table()

    def _create_components_table(self):
        """Create signature components table"""
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS signature_components (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL UNIQUE,
                description TEXT,
                index_count INTEGER NOT NULL DEFAULT 0 CHECK (index_count >= 0),
                index_type TEXT NOT NULL DEFAULT 'decimal',
                created_on TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
                modified_on TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
            )
        """)

    def _create_elements_table(self):
        """Create signature elements table; "index" is quoted (reserved word)"""
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS signature_elements (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                component_id INTEGER NOT NULL,
                name TEXT NOT NULL,
                description TEXT,
                "index" TEXT,
                created_on TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
                modified_on TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
                FOREIGN KEY (component_id)
                    REFERENCES signature_components(id)
                    ON DELETE CASCADE
            )
        """)
        self.conn.execute("CREATE INDEX IF NOT EXISTS idx_elements_component ON signature_elements(component_id)")
        self.conn.execute("CREATE INDEX IF NOT EXISTS idx_elements_name ON signature_elements(name COLLATE NOCASE)")

    def _create_element_parents_table(self):
        """Create the parent DAG edge set keyed by (child_id, parent_id)"""
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS signature_element_parents (
                child_id INTEGER NOT NULL,
                parent_id INTEGER NOT NULL,
                PRIMARY KEY (child_id, parent_id),
                CHECK (child_id != parent_id),
                FOREIGN KEY (child_id) REFERENCES signature_elements(id) ON DELETE CASCADE,
                FOREIGN KEY (parent_id) REFERENCES signature_elements(id) ON DELETE CASCADE
            )
        """)
        self.conn.execute("CREATE INDEX IF NOT EXISTS idx_parents_parent ON signature_element_parents(parent_id)")

    def _create_archive_records_table(self):
        """Create archive records table; descriptive_signatures holds a JSON array of paths"""
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS archive_records (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                title TEXT NOT NULL,
                active BOOLEAN NOT NULL DEFAULT 1,
                descriptive_signatures TEXT NOT NULL DEFAULT '[]',
                created_on TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
                modified_on TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
            )
        """)
        self.conn.execute("CREATE INDEX IF NOT EXISTS idx_records_active ON archive_records(active)")
