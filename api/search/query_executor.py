import math
import logging
import sqlite3
from typing import Any, Callable, Dict, List, Optional

import aiosqlite

from errors import SearchFailedError
from models import SearchRequest, SearchResponse
from search.query_compiler import CompiledSearch, QueryCompiler

logger = logging.getLogger(__name__)

RowTransformer = Callable[[Dict[str, Any]], Any]


def total_pages(total_size: int, page_size: int) -> int:
    """ceil(total / page_size); a single page when unbounded"""
    if page_size <= 0:
        return 1
    return math.ceil(total_size / page_size)


class SearchExecutor:
    """Runs compiled searches on the sync sqlite3 connection"""

    def __init__(self, conn: sqlite3.Connection, compiler: QueryCompiler,
                 transform: Optional[RowTransformer] = None):
        self.conn = conn
        self.compiler = compiler
        self.transform = transform

    def execute(self, request: SearchRequest) -> SearchResponse:
        """Run data then count query for one request

        Raises:
            SearchFailedError: either query failed; no partial result
        """
        compiled = self.compiler.compile(request)
        try:
            rows = self.conn.execute(compiled.data.sql, compiled.data.params).fetchall()
            total = self.conn.execute(compiled.count.sql, compiled.count.params).fetchone()[0]
        except (sqlite3.Error, OverflowError) as e:
            logger.error(f"Search on {self.compiler.table_name} failed: {e}")
            raise SearchFailedError(f"Search on {self.compiler.table_name} failed: {e}") from e
        return _format(compiled, rows, total, self.transform)


class AsyncSearchExecutor:
    """Runs compiled searches on a read-only aiosqlite connection

    Reads never take the write lock, so searches proceed while a
    mutation transaction is open on the sync connection.
    """

    def __init__(self, conn: aiosqlite.Connection, compiler: QueryCompiler,
                 transform: Optional[RowTransformer] = None):
        self.conn = conn
        self.compiler = compiler
        self.transform = transform

    async def execute(self, request: SearchRequest) -> SearchResponse:
        compiled = self.compiler.compile(request)
        try:
            async with self.conn.execute(compiled.data.sql, compiled.data.params) as cursor:
                rows = await cursor.fetchall()
            async with self.conn.execute(compiled.count.sql, compiled.count.params) as cursor:
                total = (await cursor.fetchone())[0]
        except (aiosqlite.Error, OverflowError) as e:
            logger.error(f"Search on {self.compiler.table_name} failed: {e}")
            raise SearchFailedError(f"Search on {self.compiler.table_name} failed: {e}") from e
        return _format(compiled, rows, total, self.transform)


def _format(compiled: CompiledSearch, rows: List, total: int,
            transform: Optional[RowTransformer]) -> SearchResponse:
    """Build the response page from raw rows"""
    data = [dict(row) for row in rows]
    if transform is not None:
        data = [transform(row) for row in data]
    return SearchResponse(
        data=data,
        page=compiled.page,
        page_size=compiled.page_size,
        total_pages=total_pages(total, compiled.page_size),
        total_size=total
    )
