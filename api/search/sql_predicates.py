"""SQL predicate building blocks shared by the compiler and field handlers.

Every function returns statement text plus a parameter list; values are
never interpolated into the SQL.
"""
import re
from typing import Any, List, Optional, Tuple

from models import SearchCondition, SearchQueryElement

Predicate = Tuple[str, List[Any]]

MATCH_NOTHING = "1=0"
MATCH_EVERYTHING = "1=1"

# SQLite INTEGER is a signed 64-bit value
SQLITE_MAX_INTEGER = 2 ** 63 - 1
SQLITE_MIN_INTEGER = -(2 ** 63)

_COMPARISON_OPERATORS = {
    SearchCondition.EQ: "=",
    SearchCondition.NEQ: "!=",
    SearchCondition.GT: ">",
    SearchCondition.LT: "<",
    SearchCondition.GTE: ">=",
    SearchCondition.LTE: "<=",
}

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def quote_identifier(name: str) -> str:
    """Quote a table/column/alias name; rejects anything that is not a plain identifier"""
    if not _IDENTIFIER.match(name or ""):
        raise ValueError(f"Invalid SQL identifier: {name!r}")
    return f'"{name}"'


def qualified(alias: str, column: str) -> str:
    return f"{quote_identifier(alias)}.{quote_identifier(column)}"


def escape_like(value: str) -> str:
    r"""Escape LIKE wildcards; pair with ESCAPE '\'"""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def constant(matches: bool, negate: bool = False) -> str:
    """Guaranteed match / non-match, flipped under negation"""
    return MATCH_EVERYTHING if matches != negate else MATCH_NOTHING


def negate(sql: str, flag: bool) -> str:
    """Invert a predicate exactly: rows where it is NULL count as non-matching"""
    if not flag:
        return sql
    if sql in (MATCH_NOTHING, MATCH_EVERYTHING):
        return MATCH_EVERYTHING if sql == MATCH_NOTHING else MATCH_NOTHING
    return f"NOT COALESCE(({sql}), 0)"


def fits_integer(value: int) -> bool:
    return SQLITE_MIN_INTEGER <= value <= SQLITE_MAX_INTEGER


def _is_scalar(value) -> bool:
    if isinstance(value, int):
        return fits_integer(value)
    return value is None or isinstance(value, (str, float))


def column_predicate(column_sql: str, element: SearchQueryElement,
                     case_sensitive: bool = False) -> Optional[Predicate]:
    """Predicate for a plain column, or None when the condition/value pair is unsupported

    Args:
        column_sql: Already-qualified column reference
        element: Query element (negation is applied here)
        case_sensitive: FRAGMENT/STARTS_WITH matching mode
    """
    condition = element.condition
    value = element.value

    if condition in _COMPARISON_OPERATORS:
        if not _is_scalar(value):
            return None
        if value is None:
            if condition is SearchCondition.EQ:
                return negate(f"{column_sql} IS NULL", element.negate), []
            if condition is SearchCondition.NEQ:
                return negate(f"{column_sql} IS NOT NULL", element.negate), []
            return None
        operator = _COMPARISON_OPERATORS[condition]
        return negate(f"{column_sql} {operator} ?", element.negate), [value]

    if condition is SearchCondition.FRAGMENT:
        if value is None or not _is_scalar(value):
            return None
        text = str(value)
        if case_sensitive:
            return negate(f"instr({column_sql}, ?) > 0", element.negate), [text]
        return negate(f"{column_sql} LIKE ? ESCAPE '\\'", element.negate), [f"%{escape_like(text)}%"]

    if condition is SearchCondition.STARTS_WITH:
        if value is None or not _is_scalar(value):
            return None
        text = str(value)
        if case_sensitive:
            return negate(f"instr({column_sql}, ?) = 1", element.negate), [text]
        return negate(f"{column_sql} LIKE ? ESCAPE '\\'", element.negate), [f"{escape_like(text)}%"]

    if condition is SearchCondition.ANY_OF:
        if not isinstance(value, (list, tuple)) or not all(_is_scalar(v) and v is not None for v in value):
            return None
        if not value:
            return constant(False, element.negate), []
        placeholders = ", ".join("?" * len(value))
        return negate(f"{column_sql} IN ({placeholders})", element.negate), list(value)

    # CONTAINS_SEQUENCE only has meaning for path columns
    return None
