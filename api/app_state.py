from archive.record_repository import RecordRepository
from archive.record_search import AsyncRecordSearch, RecordSearch, record_compiler
from config import default_config
from operations.component_reindexer import ComponentReindexer
from signature.component_service import ComponentService
from signature.element_search import ElementSearch, element_compiler
from signature.element_service import ElementService
from storage.async_connection import AsyncDatabaseConnection
from storage.connection import DatabaseConnection
from storage.schema import SchemaManager


class StorageServices:
    """Database connections

    The sync connection carries every mutation; the async connection is
    read-only and serves searches.
    """

    def __init__(self):
        self.database = None
        self.async_database = None

    @property
    def conn(self):
        return self.database.conn if self.database else None

    @property
    def async_conn(self):
        return self.async_database.conn if self.async_database else None


class SignatureServices:
    """Component/element stores and the re-indexer"""

    def __init__(self):
        self.components = None
        self.elements = None
        self.reindexer = None
        self.element_search = None


class ArchiveServices:
    """Signature-bearing records"""

    def __init__(self):
        self.records = None
        self.record_search = None
        self.async_record_search = None


class AppState:
    """Application state container

    Composes focused service groups; callers go through the delegation
    methods instead of reaching into the groups.
    """

    def __init__(self, config=default_config):
        self.config = config
        self.storage = StorageServices()
        self.signature = SignatureServices()
        self.archive = ArchiveServices()

    # === Lifecycle ===

    def open(self):
        """Connect, create the schema and wire the sync services"""
        self.storage.database = DatabaseConnection(self.config.database)
        conn = self.storage.database.connect()
        SchemaManager(conn).create_schema()

        case_sensitive = self.config.search.fragment_case_sensitive
        self.signature.components = ComponentService(conn)
        self.signature.elements = ElementService(conn)
        self.signature.reindexer = ComponentReindexer(conn)
        self.signature.element_search = ElementSearch(conn, element_compiler(case_sensitive))

        self.archive.records = RecordRepository(conn)
        self.archive.record_search = RecordSearch(conn, record_compiler(case_sensitive))
        return self

    async def open_async(self):
        """Open the read-only search connection (schema must already exist)"""
        self.storage.async_database = AsyncDatabaseConnection(self.config.database)
        async_conn = await self.storage.async_database.connect()
        self.archive.async_record_search = AsyncRecordSearch(
            async_conn, record_compiler(self.config.search.fragment_case_sensitive)
        )
        return self

    def close(self):
        if self.storage.database:
            self.storage.database.close()
            self.storage.database = None

    async def close_all_resources(self):
        if self.storage.async_database:
            await self.storage.async_database.close()
            self.storage.async_database = None
        self.close()

    # === Service Access Delegation ===

    def get_component_service(self) -> ComponentService:
        return self.signature.components

    def get_element_service(self) -> ElementService:
        return self.signature.elements

    def get_reindexer(self) -> ComponentReindexer:
        return self.signature.reindexer

    def get_element_search(self) -> ElementSearch:
        return self.signature.element_search

    def get_record_repository(self) -> RecordRepository:
        return self.archive.records

    def get_record_search(self) -> RecordSearch:
        return self.archive.record_search

    def get_async_record_search(self) -> AsyncRecordSearch:
        return self.archive.async_record_search
