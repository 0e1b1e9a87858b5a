"""
Search query compiler.

Translates a SearchRequest into a parameterized data query and a count
query. Fields are resolved against the table's allow-list first, then
against its custom field handlers. Predicates that cannot be compiled are
skipped with a QueryCompileWarning; compiling never fails because of client
input.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from config import default_config
from errors import QueryCompileWarning
from models import SearchQueryElement, SearchRequest, SortDirection
from search.field_handlers import FieldHandler
from search.sql_predicates import SQLITE_MAX_INTEGER, column_predicate, qualified, quote_identifier

logger = logging.getLogger(__name__)


@dataclass
class CompiledQuery:
    sql: str
    params: List[Any] = field(default_factory=list)


@dataclass
class CompiledSearch:
    """Data and count statements sharing identical JOIN/WHERE text and params"""
    data: CompiledQuery
    count: CompiledQuery
    page: int
    page_size: int
    warnings: List[QueryCompileWarning] = field(default_factory=list)


class QueryCompiler:
    """Compiles search requests for one table

    Args:
        table: Table to search
        allowed_fields: Plain columns clients may filter and sort on
        handlers: Custom field name -> FieldHandler
        primary_key: Column used for COUNT(DISTINCT ...) and default order
        alias: SQL alias of the table inside the statements
        fragment_case_sensitive: FRAGMENT/STARTS_WITH mode for plain columns
    """

    def __init__(self, table: str, allowed_fields: Iterable[str],
                 handlers: Optional[Dict[str, FieldHandler]] = None,
                 primary_key: str = "id", alias: str = "t",
                 fragment_case_sensitive: Optional[bool] = None):
        self.table_name = table
        self.table = quote_identifier(table)
        self.allowed_fields = frozenset(allowed_fields)
        self.handlers = dict(handlers or {})
        self.primary_key = primary_key
        self.alias = alias
        if fragment_case_sensitive is None:
            fragment_case_sensitive = default_config.search.fragment_case_sensitive
        self.fragment_case_sensitive = fragment_case_sensitive

    def compile(self, request: SearchRequest) -> CompiledSearch:
        warnings: List[QueryCompileWarning] = []
        joins: List[str] = []
        conditions: List[str] = []
        params: List[Any] = []

        for element in request.query:
            resolved = self._resolve(element, warnings)
            if resolved is None:
                continue
            join_clause, where, where_params = resolved
            if join_clause and join_clause not in joins:
                joins.append(join_clause)
            conditions.append(f"({where})")
            params.extend(where_params)

        from_clause = f"FROM {self.table} {quote_identifier(self.alias)}"
        if joins:
            from_clause += " " + " ".join(joins)
        where_clause = f" WHERE {' AND '.join(conditions)}" if conditions else ""

        pk = qualified(self.alias, self.primary_key)
        count = CompiledQuery(
            f"SELECT COUNT(DISTINCT {pk}) {from_clause}{where_clause}",
            list(params)
        )

        data_sql = (
            f"SELECT DISTINCT {quote_identifier(self.alias)}.* {from_clause}{where_clause}"
            f" ORDER BY {self._order_by(request, warnings)}"
        )
        data_params = list(params)
        if not request.unbounded:
            data_sql += " LIMIT ? OFFSET ?"
            # pages past the integer range are simply past the end of any result
            limit = min(request.page_size, SQLITE_MAX_INTEGER)
            offset = min((request.page - 1) * request.page_size, SQLITE_MAX_INTEGER)
            data_params.extend([limit, offset])

        for warning in warnings:
            logger.warning(f"{self.table_name}: {warning}")

        return CompiledSearch(
            data=CompiledQuery(data_sql, data_params),
            count=count,
            page=request.page,
            page_size=request.page_size,
            warnings=warnings
        )

    def _resolve(self, element: SearchQueryElement,
                 warnings: List[QueryCompileWarning]) -> Optional[Tuple[Optional[str], str, List[Any]]]:
        """(join_clause, where, params) for one element, or None when skipped"""
        condition = element.condition.value

        if element.field in self.allowed_fields:
            predicate = column_predicate(
                qualified(self.alias, element.field), element, self.fragment_case_sensitive
            )
            if predicate is None:
                warnings.append(QueryCompileWarning(
                    element.field, condition, f"unsupported value {element.value!r} for a plain column"
                ))
                return None
            return None, predicate[0], predicate[1]

        handler = self.handlers.get(element.field)
        if handler is None:
            warnings.append(QueryCompileWarning(element.field, condition, "unknown field"))
            return None

        result = handler.resolve(element, self.alias)
        if result is None:
            warnings.append(QueryCompileWarning(
                element.field, condition, f"not supported by {type(handler).__name__}"
            ))
            return None
        return result.join_clause, result.where_condition, list(result.params)

    def _order_by(self, request: SearchRequest, warnings: List[QueryCompileWarning]) -> str:
        pk = qualified(self.alias, self.primary_key)
        sort = request.sort
        if sort is None:
            return f"{pk} ASC"
        if sort.field not in self.allowed_fields:
            warnings.append(QueryCompileWarning(sort.field, "SORT", "field is not sortable"))
            return f"{pk} ASC"
        direction = "DESC" if sort.direction is SortDirection.DESC else "ASC"
        # ties ordered by primary key
        return f"{qualified(self.alias, sort.field)} {direction}, {pk} {direction}"


def build_search_queries(table: str, request: SearchRequest, allowed_fields: Iterable[str],
                         handlers: Optional[Dict[str, FieldHandler]] = None,
                         primary_key: str = "id", alias: str = "t") -> CompiledSearch:
    """One-shot compile without keeping a QueryCompiler around"""
    return QueryCompiler(table, allowed_fields, handlers, primary_key, alias).compile(request)
