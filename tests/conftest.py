"""
Pytest configuration and shared fixtures

Common fixtures used across multiple test files are defined here.
Every database fixture is a fresh SQLite file under tmp_path.
"""
import sys
from pathlib import Path

import pytest

# Add api directory to path for imports
# Detect if running in Docker (./api:/app mount) vs host (./api exists)
api_path = Path(__file__).parent.parent / "api"
if not api_path.exists():
    # Running in Docker where api contents are at /app directly
    api_path = Path(__file__).parent.parent
sys.path.insert(0, str(api_path))


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture
def db_config(tmp_path):
    """DatabaseConfig pointing at a temporary file"""
    from config import DatabaseConfig
    return DatabaseConfig(path=str(tmp_path / "archive.db"), busy_timeout_ms=1000)


@pytest.fixture
def conn(db_config):
    """Connected sqlite3 connection with the full schema"""
    from storage.connection import DatabaseConnection
    from storage.schema import SchemaManager

    database = DatabaseConnection(db_config)
    connection = database.connect()
    SchemaManager(connection).create_schema()
    yield connection
    database.close()


@pytest.fixture
def components(conn):
    from signature.component_service import ComponentService
    return ComponentService(conn)


@pytest.fixture
def elements(conn):
    from signature.element_service import ElementService
    return ElementService(conn)


@pytest.fixture
def reindexer(conn):
    from operations.component_reindexer import ComponentReindexer
    return ComponentReindexer(conn)


@pytest.fixture
def records(conn):
    from archive.record_repository import RecordRepository
    return RecordRepository(conn)


@pytest.fixture
def make_element(elements):
    """Factory: make_element(component_id, name, **fields) -> SignatureElement"""
    def _make(component_id, name, **fields):
        return elements.create({'component_id': component_id, 'name': name, **fields})
    return _make
