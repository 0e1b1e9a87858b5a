"""
Tests for signature path matching against stored JSON path arrays
"""
import logging

import pytest

from archive.record_search import RecordSearch, record_compiler
from models import SearchRequest


@pytest.fixture
def stored(records):
    """One record per stored path, keyed by its canonical text"""
    paths = {
        "[1,2]": [[1, 2]],
        "[1,2,3]": [[1, 2, 3]],
        "[1,20]": [[1, 20]],
        "[10,2]": [[10, 2]],
        "[1,2,3,4]": [[1, 2, 3, 4]],
        "[2,3]": [[2, 3]],
        "[5,2,3]": [[5, 2, 3]],
        "[1,23]": [[1, 23]],
        "none": [],
        "multi": [[7], [9, 1, 2]],
    }
    return {key: records.add(key, value) for key, value in paths.items()}


@pytest.fixture
def search(conn):
    return RecordSearch(conn, record_compiler(fragment_case_sensitive=False))


def _titles(search, condition, value, negate=False):
    request = SearchRequest(
        query=[{'field': 'descriptiveSignatures', 'condition': condition, 'value': value, 'not': negate}],
        pageSize=-1
    )
    return {row['title'] for row in search.search(request).data}


class TestExact:
    def test_eq_matches_whole_path_only(self, search, stored):
        assert _titles(search, "EQ", [1, 2]) == {"[1,2]"}

    def test_eq_with_several_paths(self, search, stored):
        assert _titles(search, "EQ", [[2, 3], [7]]) == {"[2,3]", "multi"}

    def test_eq_accepts_canonical_text(self, search, stored):
        assert _titles(search, "EQ", "[1,20]") == {"[1,20]"}


class TestStartsWith:
    def test_prefix_lands_on_id_boundary(self, search, stored):
        assert _titles(search, "STARTS_WITH", [1, 2]) == {"[1,2]", "[1,2,3]", "[1,2,3,4]"}

    def test_negated(self, search, stored):
        assert _titles(search, "STARTS_WITH", [1, 2], negate=True) == set(stored) - {"[1,2]", "[1,2,3]", "[1,2,3,4]"}


class TestContainsSequence:
    def test_all_positions(self, search, stored):
        assert _titles(search, "CONTAINS_SEQUENCE", [2, 3]) == {"[1,2,3]", "[1,2,3,4]", "[2,3]", "[5,2,3]"}

    def test_sequence_in_second_path_of_record(self, search, stored):
        assert "multi" in _titles(search, "CONTAINS_SEQUENCE", [1, 2])

    def test_single_id(self, search, stored):
        assert _titles(search, "CONTAINS_SEQUENCE", [20]) == {"[1,20]"}


class TestAnyOf:
    def test_prefixes_or_combined(self, search, stored):
        assert _titles(search, "ANY_OF", [[10], [5, 2]]) == {"[10,2]", "[5,2,3]"}

    def test_not_applied_after_or(self, search, stored):
        matched = {"[10,2]", "[5,2,3]"}
        assert _titles(search, "ANY_OF", [[10], [5, 2]], negate=True) == set(stored) - matched


class TestInvalidPaths:
    @pytest.mark.parametrize("value", [[], [[]], "garbage", [0], [[1], "x"], None, {"a": 1}])
    def test_invalid_matches_nothing(self, search, stored, value, caplog):
        with caplog.at_level(logging.WARNING):
            assert _titles(search, "STARTS_WITH", value) == set()
        assert "Invalid signature path" in caplog.text

    @pytest.mark.parametrize("value", [[], "garbage"])
    def test_invalid_matches_everything_when_negated(self, search, stored, value):
        assert _titles(search, "EQ", value, negate=True) == set(stored)

    def test_unsupported_condition_is_ignored(self, search, stored):
        """GT has no path meaning: predicate skipped, every record returned"""
        assert _titles(search, "GT", [1]) == set(stored)


class TestResultRows:
    def test_rows_carry_decoded_paths_and_labels(self, search, components, make_element, records):
        fonds = components.create("Fonds", index_type="roman")
        a = make_element(fonds.id, "A")
        b = make_element(fonds.id, "B")
        record_id = records.add("Letter", [[a.id, b.id], [a.id, 999]])

        request = SearchRequest(query=[{'field': 'id', 'condition': 'EQ', 'value': record_id}])
        row = search.search(request).data[0]

        assert row['descriptive_signatures'] == [[a.id, b.id], [a.id, 999]]
        assert row['signature_labels'] == ["[I] A / [II] B", "[I] A / [ID:999 not found]"]

    def test_labels_stay_aligned_with_empty_paths(self, search, components, make_element, records):
        fonds = components.create("Fonds", index_type="roman")
        a = make_element(fonds.id, "A")
        record_id = records.add("Letter", [[], [a.id]])

        request = SearchRequest(query=[{'field': 'id', 'condition': 'EQ', 'value': record_id}])
        row = search.search(request).data[0]

        assert row['descriptive_signatures'] == [[], [a.id]]
        assert row['signature_labels'] == ["", "[I] A"]

    def test_malformed_stored_text_reads_as_empty(self, search, conn):
        conn.execute("INSERT INTO archive_records (title, descriptive_signatures) VALUES ('broken', '[[1,')")
        request = SearchRequest(query=[{'field': 'title', 'condition': 'EQ', 'value': 'broken'}])
        row = search.search(request).data[0]
        assert row['descriptive_signatures'] == []
        assert row['signature_labels'] == []
        assert _titles(search, "CONTAINS_SEQUENCE", [1]) == set()


class TestRecordMutations:
    def test_set_signatures_changes_matches(self, search, records, stored):
        records.set_signatures(stored["none"], [[1, 2, 9]])

        assert records.get(stored["none"]).descriptive_signatures == [[1, 2, 9]]
        assert "none" in _titles(search, "STARTS_WITH", [1, 2])

    def test_set_signatures_rejects_invalid_path(self, records, stored):
        from errors import InvalidInputError

        with pytest.raises(InvalidInputError):
            records.set_signatures(stored["none"], [[0]])
        assert records.get(stored["none"]).descriptive_signatures == []

    def test_set_active(self, search, records, stored):
        records.set_active(stored["[2,3]"], False)

        assert records.get(stored["[2,3]"]).active is False
        request = SearchRequest(query=[{'field': 'active', 'condition': 'EQ', 'value': False}], pageSize=-1)
        assert [row['title'] for row in search.search(request).data] == ["[2,3]"]

    def test_mutating_missing_record(self, records):
        from errors import NotFoundError

        with pytest.raises(NotFoundError):
            records.set_signatures(404, [[1]])
        with pytest.raises(NotFoundError):
            records.set_active(404, True)
