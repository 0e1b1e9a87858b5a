"""Field handlers for search fields that are not a plain column.

A handler receives one query element and the SQL alias of the searched
table. It returns a HandlerResult merged into the outer query, or None when
it does not recognize the condition/value combination (the compiler then
skips the predicate with a warning).
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, List, Optional

from errors import InvalidInputError
from models import SearchCondition, SearchQueryElement
from search.sql_predicates import (
    SQLITE_MAX_INTEGER, column_predicate, constant, negate, qualified, quote_identifier
)
from signature.path_codec import decode_path, encode_path, is_valid_path

logger = logging.getLogger(__name__)


@dataclass
class HandlerResult:
    where_condition: str
    params: List[Any] = field(default_factory=list)
    join_clause: Optional[str] = None


class FieldHandler(ABC):
    """Interface for custom search fields.

    Contract:
        - resolve() never raises for bad client input; it returns None
          or a guaranteed (non-)match predicate instead
        - negation of the element is applied inside the returned condition
    """

    @abstractmethod
    def resolve(self, element: SearchQueryElement, alias: str) -> Optional[HandlerResult]:
        """Translate one query element into SQL.

        Args:
            element: Query element whose field this handler is registered for
            alias: SQL alias of the searched table

        Returns:
            HandlerResult, or None when the condition is not supported
        """
        pass


class ColumnAliasHandler(FieldHandler):
    """Exposes a column under a different field name (e.g. componentId -> component_id)"""

    def __init__(self, column: str, case_sensitive: bool = False):
        self.column = column
        self.case_sensitive = case_sensitive

    def resolve(self, element: SearchQueryElement, alias: str) -> Optional[HandlerResult]:
        predicate = column_predicate(qualified(alias, self.column), element, self.case_sensitive)
        if predicate is None:
            return None
        return HandlerResult(*predicate)


class JoinedColumnHandler(FieldHandler):
    """Matches a column of a LEFT JOINed table (e.g. componentName)"""

    def __init__(self, table: str, join_alias: str, local_key: str, column: str,
                 remote_key: str = "id", case_sensitive: bool = False):
        self.table = table
        self.join_alias = join_alias
        self.local_key = local_key
        self.remote_key = remote_key
        self.column = column
        self.case_sensitive = case_sensitive

    def join_clause(self, alias: str) -> str:
        return (
            f"LEFT JOIN {quote_identifier(self.table)} {quote_identifier(self.join_alias)} "
            f"ON {qualified(self.join_alias, self.remote_key)} = {qualified(alias, self.local_key)}"
        )

    def resolve(self, element: SearchQueryElement, alias: str) -> Optional[HandlerResult]:
        predicate = column_predicate(
            qualified(self.join_alias, self.column), element, self.case_sensitive
        )
        if predicate is None:
            return None
        where, params = predicate
        return HandlerResult(where, params, self.join_clause(alias))


def _positive_ids(value) -> Optional[List[int]]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return None
    if not all(isinstance(v, int) and not isinstance(v, bool) and 0 < v <= SQLITE_MAX_INTEGER
               for v in value):
        return None
    return list(value)


class LinkedIdsHandler(FieldHandler):
    """Matches rows linked to any of the given ids through a link table (e.g. parentIds)"""

    def __init__(self, link_table: str, owner_column: str, linked_column: str, primary_key: str = "id"):
        self.link_table = link_table
        self.owner_column = owner_column
        self.linked_column = linked_column
        self.primary_key = primary_key

    def resolve(self, element: SearchQueryElement, alias: str) -> Optional[HandlerResult]:
        if element.condition not in (SearchCondition.EQ, SearchCondition.ANY_OF):
            return None
        ids = _positive_ids(element.value)
        if ids is None:
            return None
        if not ids:
            return HandlerResult(constant(False, element.negate))

        placeholders = ", ".join("?" * len(ids))
        exists = (
            f"EXISTS (SELECT 1 FROM {quote_identifier(self.link_table)} lnk "
            f"WHERE lnk.{quote_identifier(self.owner_column)} = {qualified(alias, self.primary_key)} "
            f"AND lnk.{quote_identifier(self.linked_column)} IN ({placeholders}))"
        )
        return HandlerResult(negate(exists, element.negate), ids)


class HasLinksHandler(FieldHandler):
    """Boolean field: true when the row owns at least one link (e.g. hasParents)"""

    def __init__(self, link_table: str, owner_column: str, primary_key: str = "id"):
        self.link_table = link_table
        self.owner_column = owner_column
        self.primary_key = primary_key

    def resolve(self, element: SearchQueryElement, alias: str) -> Optional[HandlerResult]:
        if element.condition not in (SearchCondition.EQ, SearchCondition.NEQ):
            return None
        if not isinstance(element.value, bool):
            return None

        wanted = element.value if element.condition is SearchCondition.EQ else not element.value
        exists = (
            f"EXISTS (SELECT 1 FROM {quote_identifier(self.link_table)} lnk "
            f"WHERE lnk.{quote_identifier(self.owner_column)} = {qualified(alias, self.primary_key)})"
        )
        where = exists if wanted else f"NOT {exists}"
        return HandlerResult(negate(where, element.negate))


class SignaturePathHandler(FieldHandler):
    """Matches signature paths stored as a JSON array of paths in one column.

    Each stored path is compared through its canonical text, so the prefix
    and sub-sequence checks anchor on the brackets and commas between ids:
    STARTS_WITH [1,2] never matches [1,20] and CONTAINS_SEQUENCE [2,3]
    never matches [1,23].
    """

    SUPPORTED = (
        SearchCondition.EQ,
        SearchCondition.STARTS_WITH,
        SearchCondition.CONTAINS_SEQUENCE,
        SearchCondition.ANY_OF,
    )

    def __init__(self, column: str):
        self.column = column

    def resolve(self, element: SearchQueryElement, alias: str) -> Optional[HandlerResult]:
        if element.condition not in self.SUPPORTED:
            return None

        paths = self._query_paths(element.value)
        if not paths:
            logger.warning(
                f"Invalid signature path for '{element.field}' ({element.condition.value}): "
                f"{element.value!r}; matching nothing"
            )
            return HandlerResult(constant(False, element.negate))

        clauses = []
        params = []
        for path in paths:
            clause, clause_params = self._path_clause(element.condition, encode_path(path))
            clauses.append(clause)
            params.extend(clause_params)

        column = qualified(alias, self.column)
        exists = (
            f"EXISTS (SELECT 1 FROM json_each("
            f"CASE WHEN json_valid({column}) THEN {column} ELSE '[]' END) je "
            f"WHERE je.type = 'array' AND ({' OR '.join(clauses)}))"
        )
        return HandlerResult(negate(exists, element.negate), params)

    @staticmethod
    def _path_clause(condition: SearchCondition, encoded: str):
        inner = encoded[1:-1]
        if condition is SearchCondition.EQ:
            return "je.value = ?", [encoded]
        if condition is SearchCondition.CONTAINS_SEQUENCE:
            return (
                "(je.value = ? OR je.value LIKE ? OR je.value LIKE ? OR je.value LIKE ?)",
                [encoded, f"[{inner},%", f"%,{inner},%", f"%,{inner}]"]
            )
        # STARTS_WITH and each ANY_OF entry: exact path also counts as a prefix
        return "(je.value = ? OR je.value LIKE ?)", [encoded, f"[{inner},%"]

    @staticmethod
    def _query_paths(value) -> List[List[int]]:
        """Normalize the element value to a list of non-empty paths.

        Accepts one path, a list of paths, or canonical path text.
        Returns [] when anything in the value is malformed.
        """
        if isinstance(value, str):
            try:
                value = decode_path(value)
            except InvalidInputError:
                return []
        if is_valid_path(value, allow_empty=False):
            return [list(value)]
        if isinstance(value, (list, tuple)) and value \
                and all(is_valid_path(p, allow_empty=False) for p in value):
            return [list(p) for p in value]
        return []
