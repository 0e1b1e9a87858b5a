"""
Archive record search.

Records are filtered with the generic compiler; `descriptiveSignatures`
matches the stored path array (EQ / STARTS_WITH / CONTAINS_SEQUENCE / ANY_OF).
Result rows carry the decoded paths and their human-readable labels. Label
lookups are batched per page.
"""
import logging
import sqlite3
from typing import Dict, Iterable, List, Optional

import aiosqlite

from archive.record_repository import record_from_row
from domain_models import SignatureElement
from models import SearchRequest, SearchResponse
from search.field_handlers import SignaturePathHandler
from search.query_compiler import QueryCompiler
from search.query_executor import AsyncSearchExecutor, SearchExecutor
from signature.element_repository import ElementRepository
from signature.path_codec import format_path_label

RECORD_FIELDS = ('id', 'title', 'active', 'created_on', 'modified_on')

logger = logging.getLogger(__name__)

_ELEMENT_COLUMNS = 'id, component_id, name, "index", description, created_on, modified_on'


def record_compiler(fragment_case_sensitive: Optional[bool] = None) -> QueryCompiler:
    handlers = {
        'descriptiveSignatures': SignaturePathHandler('descriptive_signatures'),
    }
    return QueryCompiler(
        'archive_records', RECORD_FIELDS, handlers,
        primary_key='id', alias='r',
        fragment_case_sensitive=fragment_case_sensitive
    )


def _to_record(row: dict) -> dict:
    record = record_from_row(row)
    return {
        'id': record.id,
        'title': record.title,
        'active': record.active,
        'descriptive_signatures': record.descriptive_signatures,
        'created_on': record.created_on,
        'modified_on': record.modified_on,
    }


def _referenced_ids(records: List[dict]) -> set:
    return {i for record in records for path in record['descriptive_signatures'] for i in path}


def _attach_labels(records: List[dict], elements: Dict[int, SignatureElement]):
    for missing in sorted(_referenced_ids(records) - set(elements)):
        logger.warning(f"Signature element {missing} referenced by a record no longer exists")
    for record in records:
        record['signature_labels'] = [
            format_path_label(path, elements)
            for path in record['descriptive_signatures']
        ]


class RecordSearch:
    """Sync record search on the main connection"""

    def __init__(self, conn: sqlite3.Connection, compiler: QueryCompiler = None):
        self.elements = ElementRepository(conn)
        self.executor = SearchExecutor(conn, compiler or record_compiler(), _to_record)

    def search(self, request: SearchRequest) -> SearchResponse:
        response = self.executor.execute(request)
        _attach_labels(response.data, self.elements.find_many(_referenced_ids(response.data)))
        return response


class AsyncRecordSearch:
    """Async record search on a read-only aiosqlite connection"""

    def __init__(self, conn: aiosqlite.Connection, compiler: QueryCompiler = None):
        self.conn = conn
        self.executor = AsyncSearchExecutor(conn, compiler or record_compiler(), _to_record)

    async def search(self, request: SearchRequest) -> SearchResponse:
        response = await self.executor.execute(request)
        elements = await self._find_elements(_referenced_ids(response.data))
        _attach_labels(response.data, elements)
        return response

    async def _find_elements(self, element_ids: Iterable[int]) -> Dict[int, SignatureElement]:
        ids = sorted(set(element_ids))
        if not ids:
            return {}
        placeholders = ",".join("?" * len(ids))
        async with self.conn.execute(
            f"SELECT {_ELEMENT_COLUMNS} FROM signature_elements WHERE id IN ({placeholders})", ids
        ) as cursor:
            rows = await cursor.fetchall()
        return {row['id']: SignatureElement.from_row(row) for row in rows}
