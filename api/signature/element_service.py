"""
Signature element store.

Elements belong to one component and form a parent DAG across the whole
element set. Creating an element always bumps its component's counter; the
generated index is the counter formatted with the component's scheme unless
the caller supplies one explicitly.
"""
import logging
import sqlite3
from typing import Iterable, List, Optional, Union

from pydantic import ValidationError

from domain_models import SignatureElement
from errors import InvalidInputError, NotFoundError
from models import CreateElementInput, UpdateElementInput, validation_message
from signature.component_repository import ComponentRepository
from signature.element_repository import ElementRepository
from signature.index_formatter import format_index
from signature.parent_graph import ParentGraph
from signature.path_codec import PathLabelResolver
from storage.transaction import transaction

logger = logging.getLogger(__name__)

POPULATE_OPTIONS = ('component', 'parents')


class ElementService:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self.repository = ElementRepository(conn)
        self.components = ComponentRepository(conn)
        self.labels = PathLabelResolver(self.repository.find_many)

    def create(self, data: Union[CreateElementInput, dict]) -> SignatureElement:
        """Insert an element, bump the component counter and attach parents atomically.

        Raises:
            NotFoundError: component or a parent does not exist (counter untouched)
            InvalidInputError: payload does not validate
        """
        data = self._validate(CreateElementInput, data)

        with transaction(self.conn, "create element"):
            component = self.components.get(data.component_id)
            if component is None:
                raise NotFoundError("Component", data.component_id)
            self._require_parents(data.parent_ids)

            new_count = self.components.increment_counter(component.id)
            index = data.index if data.index is not None else format_index(new_count, component.index_type)

            element_id = self.repository.add(component.id, data.name, index, data.description)
            self.repository.add_parents(element_id, data.parent_ids)
            element = self.repository.get(element_id)

        logger.info(f"Created element {element_id} '{data.name}' [{index}] in component {component.id}")
        return element

    def update(self, element_id: int, patch: Union[UpdateElementInput, dict]) -> SignatureElement:
        """Partial update; parent_ids, when present, replaces the whole parent set.

        The component counter is never touched here.

        Raises:
            NotFoundError: element or a parent does not exist
            InvalidInputError: self-parent, cycle, or invalid payload
        """
        patch = self._validate(UpdateElementInput, patch)
        fields = patch.model_dump(exclude_unset=True)
        parent_ids = fields.pop('parent_ids', None)
        if 'name' in fields and fields['name'] is None:
            raise InvalidInputError("Element name cannot be null")

        with transaction(self.conn, "update element"):
            if self.repository.update_fields(element_id, fields) == 0:
                raise NotFoundError("Element", element_id)

            if parent_ids is not None:
                self._check_parent_set(element_id, parent_ids)
                self.repository.replace_parents(element_id, parent_ids)

            element = self.repository.get(element_id)

        logger.info(f"Updated element {element_id}: {sorted(patch.model_dump(exclude_unset=True))}")
        return element

    def delete(self, element_id: int):
        """Delete an element; edges where it is parent or child go with it"""
        with transaction(self.conn, "delete element"):
            if self.repository.delete(element_id) == 0:
                raise NotFoundError("Element", element_id)
        logger.info(f"Deleted element {element_id}")

    def get(self, element_id: int, populate: Iterable[str] = ()) -> SignatureElement:
        element = self.repository.get(element_id)
        if element is None:
            raise NotFoundError("Element", element_id)

        for option in populate:
            if option == 'component':
                element.component = self.components.get(element.component_id)
            elif option == 'parents':
                element.parents = self.repository.get_parents(element_id)
            else:
                raise InvalidInputError(
                    f"Unknown populate option '{option}', expected one of {POPULATE_OPTIONS}"
                )
        return element

    def list_by_component(self, component_id: int) -> List[SignatureElement]:
        if not self.components.exists(component_id):
            raise NotFoundError("Component", component_id)
        return self.repository.list_by_component(component_id)

    def list_parents(self, element_id: int) -> List[SignatureElement]:
        self._require_element(element_id)
        return self.repository.get_parents(element_id)

    def list_children(self, element_id: int) -> List[SignatureElement]:
        self._require_element(element_id)
        return self.repository.get_children(element_id)

    def list_ancestors(self, element_id: int) -> List[SignatureElement]:
        """Every transitive parent, ordered by name"""
        self._require_element(element_id)
        ancestor_ids = ParentGraph(self.repository.all_edges()).ancestors(element_id)
        ancestors = self.repository.find_many(ancestor_ids).values()
        return sorted(ancestors, key=lambda e: (e.name.lower(), e.id))

    def resolve_path(self, path: List[int]) -> Optional[str]:
        """Human-readable label for one signature path"""
        return self.labels.resolve(path)

    def resolve_paths(self, paths) -> List[str]:
        """Labels for several paths with one element lookup; invalid entries are skipped"""
        return self.labels.resolve_many(paths)

    def _require_element(self, element_id: int):
        if not self.repository.existing_ids([element_id]):
            raise NotFoundError("Element", element_id)

    def _require_parents(self, parent_ids: Iterable[int]):
        wanted = set(parent_ids)
        missing = sorted(wanted - self.repository.existing_ids(wanted))
        if missing:
            raise NotFoundError("Parent element", missing[0])

    def _check_parent_set(self, element_id: int, parent_ids: List[int]):
        if element_id in parent_ids:
            raise InvalidInputError(f"Element {element_id} cannot be its own parent")
        self._require_parents(parent_ids)

        offending = ParentGraph(self.repository.all_edges()).creates_cycle(element_id, parent_ids)
        if offending:
            raise InvalidInputError(
                f"Parent {offending[0]} is a descendant of element {element_id}; the edge would create a cycle"
            )

    @staticmethod
    def _validate(model, data):
        if isinstance(data, model):
            return data
        try:
            return model(**data)
        except ValidationError as e:
            raise InvalidInputError(validation_message(e)) from None
