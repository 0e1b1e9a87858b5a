"""
Tests for search execution and pagination
"""
import pytest

from archive.record_search import record_compiler
from errors import SearchFailedError
from models import SearchRequest
from search.query_compiler import QueryCompiler
from search.query_executor import SearchExecutor, total_pages
from signature.element_search import ElementSearch, element_compiler

ACTIVE = {'field': 'active', 'condition': 'EQ', 'value': True, 'not': False}


@pytest.fixture
def active_records(records):
    """25 active and 5 inactive records"""
    for i in range(30):
        records.add(f"Record {i:02d}", active=i < 25)


@pytest.fixture
def executor(conn):
    return SearchExecutor(conn, record_compiler(fragment_case_sensitive=False))


class TestPagination:
    def test_active_filter_counts(self, executor, active_records):
        response = executor.execute(SearchRequest(query=[ACTIVE], page=1, pageSize=10))

        assert response.total_size == 25
        assert response.total_pages == 3
        assert len(response.data) == 10

    def test_last_page_is_partial(self, executor, active_records):
        response = executor.execute(SearchRequest(query=[ACTIVE], page=3, pageSize=10))
        assert len(response.data) == 5
        assert all(row['active'] for row in response.data)

    def test_pages_do_not_overlap(self, executor, active_records):
        seen = []
        for page in (1, 2, 3):
            response = executor.execute(SearchRequest(query=[ACTIVE], page=page, pageSize=10))
            seen.extend(row['id'] for row in response.data)
        assert len(seen) == len(set(seen)) == 25

    def test_unbounded(self, executor, active_records):
        response = executor.execute(SearchRequest(query=[], pageSize=-1))
        assert len(response.data) == 30
        assert response.total_pages == 1
        assert response.page_size == -1

    def test_page_past_end(self, executor, active_records):
        response = executor.execute(SearchRequest(query=[ACTIVE], page=9, pageSize=10))
        assert response.data == []
        assert response.total_size == 25

    def test_response_aliases(self, executor, active_records):
        dumped = executor.execute(SearchRequest(query=[ACTIVE], pageSize=10)).model_dump(by_alias=True)
        assert dumped['totalSize'] == 25
        assert dumped['totalPages'] == 3
        assert dumped['pageSize'] == 10

    def test_sort_descending(self, executor, active_records):
        request = SearchRequest(query=[ACTIVE], pageSize=3, sort={'field': 'title', 'direction': 'desc'})
        titles = [row['title'] for row in executor.execute(request).data]
        assert titles == ["Record 24", "Record 23", "Record 22"]

    @pytest.mark.parametrize("total,size,expected", [(0, 10, 0), (1, 10, 1), (10, 10, 1), (11, 10, 2), (5, -1, 1)])
    def test_total_pages(self, total, size, expected):
        assert total_pages(total, size) == expected

    def test_invalid_page_size(self):
        with pytest.raises(ValueError):
            SearchRequest(pageSize=0)


class TestFailures:
    def test_storage_error_becomes_search_failed(self, conn):
        compiler = QueryCompiler('missing_table', ['id'], fragment_case_sensitive=False)
        with pytest.raises(SearchFailedError):
            SearchExecutor(conn, compiler).execute(SearchRequest())

    def test_transformer_applied(self, conn, active_records):
        executor = SearchExecutor(conn, record_compiler(False), transform=lambda row: row['title'])
        response = executor.execute(SearchRequest(query=[ACTIVE], pageSize=2))
        assert response.data == ["Record 00", "Record 01"]

    def test_page_beyond_integer_range(self, executor, active_records):
        response = executor.execute(SearchRequest(query=[ACTIVE], page=10 ** 18, pageSize=100))
        assert response.data == []
        assert response.total_size == 25
        assert response.page == 10 ** 18

    def test_huge_page_size(self, executor, active_records):
        response = executor.execute(SearchRequest(query=[ACTIVE], pageSize=2 ** 64))
        assert len(response.data) == 25
        assert response.total_pages == 1

    @pytest.mark.parametrize("condition,value", [("EQ", 2 ** 64), ("ANY_OF", [1, 2 ** 64]), ("LT", -(2 ** 64))])
    def test_out_of_range_integer_is_skipped(self, executor, active_records, condition, value):
        """The predicate is dropped with a warning instead of failing the search"""
        request = SearchRequest(query=[{'field': 'id', 'condition': condition, 'value': value}])

        compiled = executor.compiler.compile(request)
        response = executor.execute(request)

        assert [w.field for w in compiled.warnings] == ['id']
        assert response.total_size == 30


class TestElementSearch:
    @pytest.fixture
    def tree(self, components, make_element):
        fonds = components.create("Fonds", index_type="roman")
        series = components.create("Series")
        root = make_element(fonds.id, "Root")
        other = make_element(fonds.id, "Other")
        child = make_element(series.id, "Child", parent_ids=[root.id])
        both = make_element(series.id, "Both", parent_ids=[root.id, other.id])
        return {'fonds': fonds, 'series': series, 'root': root, 'other': other, 'child': child, 'both': both}

    def _names(self, conn, *query):
        search = ElementSearch(conn, element_compiler(fragment_case_sensitive=False))
        response = search.search(SearchRequest(query=list(query), pageSize=-1))
        return {row['name'] for row in response.data}

    def test_parent_ids(self, conn, tree):
        assert self._names(conn, {'field': 'parentIds', 'condition': 'ANY_OF', 'value': [tree['other'].id]}) == {"Both"}
        assert self._names(conn, {'field': 'parentIds', 'condition': 'ANY_OF', 'value': [tree['root'].id]}) == {"Child", "Both"}

    def test_has_parents(self, conn, tree):
        assert self._names(conn, {'field': 'hasParents', 'condition': 'EQ', 'value': False}) == {"Root", "Other"}
        assert self._names(conn, {'field': 'hasParents', 'condition': 'EQ', 'value': True, 'not': True}) == {"Root", "Other"}

    def test_component_name_join(self, conn, tree):
        assert self._names(conn, {'field': 'componentName', 'condition': 'FRAGMENT', 'value': 'seri'}) == {"Child", "Both"}

    def test_parent_ids_out_of_range_skipped(self, conn, tree):
        names = self._names(conn, {'field': 'parentIds', 'condition': 'ANY_OF', 'value': [2 ** 64]})
        assert names == {"Root", "Other", "Child", "Both"}

    def test_component_id_alias(self, conn, tree):
        assert self._names(conn, {'field': 'componentId', 'condition': 'EQ', 'value': tree['fonds'].id}) == {"Root", "Other"}

    def test_rows_include_parent_ids(self, conn, tree):
        search = ElementSearch(conn)
        request = SearchRequest(query=[{'field': 'name', 'condition': 'EQ', 'value': 'Both'}])
        row = search.search(request).data[0]
        assert row['parent_ids'] == sorted([tree['root'].id, tree['other'].id])
        assert row['index'] == "2"

    def test_parent_ids_loaded_once_per_page(self, conn, tree):
        statements = []
        conn.set_trace_callback(statements.append)
        try:
            response = ElementSearch(conn).search(SearchRequest(pageSize=-1))
        finally:
            conn.set_trace_callback(None)

        assert len(response.data) == 4
        assert sum("signature_element_parents" in sql for sql in statements) == 1
        by_name = {row['name']: row['parent_ids'] for row in response.data}
        assert by_name["Root"] == []
        assert by_name["Child"] == [tree['root'].id]

    def test_index_column_filter(self, conn, tree):
        assert self._names(conn, {'field': 'index', 'condition': 'EQ', 'value': 'II'}) == {"Other"}
