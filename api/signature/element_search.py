"""Search over signature elements"""
import sqlite3
from typing import Optional

from config import default_config
from domain_models import SignatureElement
from models import SearchRequest, SearchResponse
from search.field_handlers import (
    ColumnAliasHandler, HasLinksHandler, JoinedColumnHandler, LinkedIdsHandler
)
from search.query_compiler import QueryCompiler
from search.query_executor import SearchExecutor
from signature.element_repository import ElementRepository

ELEMENT_FIELDS = ('id', 'component_id', 'name', 'index', 'description', 'created_on', 'modified_on')


def element_compiler(fragment_case_sensitive: Optional[bool] = None) -> QueryCompiler:
    """Compiler for signature_elements with its custom fields:

    componentId    -> component_id column
    componentName  -> name of the owning component (LEFT JOIN)
    parentIds      -> elements having any of the given parents (EQ / ANY_OF)
    hasParents     -> elements with / without parents (EQ / NEQ bool)
    """
    if fragment_case_sensitive is None:
        fragment_case_sensitive = default_config.search.fragment_case_sensitive
    handlers = {
        'componentId': ColumnAliasHandler('component_id'),
        'componentName': JoinedColumnHandler(
            'signature_components', 'sc', 'component_id', 'name',
            case_sensitive=fragment_case_sensitive
        ),
        'parentIds': LinkedIdsHandler('signature_element_parents', 'child_id', 'parent_id'),
        'hasParents': HasLinksHandler('signature_element_parents', 'child_id'),
    }
    return QueryCompiler(
        'signature_elements', ELEMENT_FIELDS, handlers,
        primary_key='id', alias='e',
        fragment_case_sensitive=fragment_case_sensitive
    )


class ElementSearch:
    """Paginated element search; rows come back as element dicts with parent_ids"""

    def __init__(self, conn: sqlite3.Connection, compiler: QueryCompiler = None):
        self.repository = ElementRepository(conn)
        self.executor = SearchExecutor(conn, compiler or element_compiler())

    def search(self, request: SearchRequest) -> SearchResponse:
        response = self.executor.execute(request)
        parents = self.repository.parent_ids_for([row['id'] for row in response.data])
        response.data = [
            SignatureElement.from_row(row, parents.get(row['id'], [])).to_dict()
            for row in response.data
        ]
        return response
