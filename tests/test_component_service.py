"""
Tests for the signature component store
"""
import pytest

from domain_models import IndexType
from errors import ConflictError, InvalidInputError, NotFoundError


class TestCreate:
    def test_create_starts_counter_at_zero(self, components):
        component = components.create("Fonds", index_type="roman")

        assert component.id > 0
        assert component.name == "Fonds"
        assert component.index_type is IndexType.ROMAN
        assert component.index_count == 0

    def test_default_scheme_is_decimal(self, components):
        assert components.create("Series").index_type is IndexType.DECIMAL

    def test_legacy_scheme_alias(self, components):
        assert components.create("Files", index_type="small_char").index_type is IndexType.LOWER_ALPHA

    def test_duplicate_name_conflicts(self, components):
        components.create("Fonds")
        with pytest.raises(ConflictError):
            components.create("Fonds")
        assert len(components.list_all()) == 1

    def test_unknown_scheme_rejected(self, components):
        with pytest.raises(InvalidInputError):
            components.create("Fonds", index_type="hex")

    def test_empty_name_rejected(self, components):
        with pytest.raises(InvalidInputError):
            components.create("")


class TestRead:
    def test_get_missing(self, components):
        with pytest.raises(NotFoundError) as exc:
            components.get(404)
        assert "404" in str(exc.value)

    def test_get_by_name(self, components):
        created = components.create("Fonds")
        assert components.get_by_name("Fonds").id == created.id

    def test_list_ordered_by_name(self, components):
        for name in ("series", "Fonds", "item"):
            components.create(name)
        assert [c.name for c in components.list_all()] == ["Fonds", "item", "series"]


class TestUpdate:
    def test_patch_fields(self, components):
        component = components.create("Fonds")
        updated = components.update(component.id, {'description': "Top level", 'index_type': "upperAlpha"})

        assert updated.description == "Top level"
        assert updated.index_type is IndexType.UPPER_ALPHA
        assert updated.name == "Fonds"

    def test_rename_to_existing_conflicts(self, components):
        components.create("Fonds")
        other = components.create("Series")
        with pytest.raises(ConflictError):
            components.update(other.id, {'name': "Fonds"})
        assert components.get(other.id).name == "Series"

    def test_index_count_not_patchable(self, components):
        component = components.create("Fonds")
        with pytest.raises(InvalidInputError):
            components.update(component.id, {'index_count': 10})
        assert components.get(component.id).index_count == 0

    def test_update_missing(self, components):
        with pytest.raises(NotFoundError):
            components.update(404, {'description': "x"})


class TestCounter:
    def test_increment_returns_new_value(self, components):
        component = components.create("Fonds")
        assert components.increment_counter(component.id) == 1
        assert components.increment_counter(component.id) == 2
        assert components.get(component.id).index_count == 2

    def test_increment_missing(self, components):
        with pytest.raises(NotFoundError):
            components.increment_counter(404)

    def test_counter_only_written_by_reindex(self, components, make_element, reindexer, conn):
        """The service has no direct counter writes; re-indexing sets it to the element count"""
        assert not hasattr(components, 'set_counter')
        assert not hasattr(components, 'reset_counter')

        component = components.create("Fonds")
        first = make_element(component.id, "A")
        make_element(component.id, "B")
        conn.execute("DELETE FROM signature_elements WHERE id = ?", (first.id,))

        reindexer.reindex(component.id)

        assert components.get(component.id).index_count == 1


class TestDelete:
    def test_delete_cascades_to_elements(self, components, make_element, conn):
        component = components.create("Fonds")
        parent = make_element(component.id, "A")
        make_element(component.id, "B", parent_ids=[parent.id])

        components.delete(component.id)

        assert conn.execute("SELECT COUNT(*) FROM signature_elements").fetchone()[0] == 0
        assert conn.execute("SELECT COUNT(*) FROM signature_element_parents").fetchone()[0] == 0

    def test_delete_missing(self, components):
        with pytest.raises(NotFoundError):
            components.delete(404)
