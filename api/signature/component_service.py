"""
Signature component store.

Components are named classification axes; each owns a numbering scheme and
the counter used to generate element indices.
"""
import logging
import sqlite3
from typing import List, Union

from pydantic import ValidationError

from domain_models import IndexType, SignatureComponent
from errors import ConflictError, InvalidInputError, NotFoundError
from models import CreateComponentInput, UpdateComponentInput, validation_message
from signature.component_repository import ComponentRepository
from storage.transaction import transaction

logger = logging.getLogger(__name__)


class ComponentService:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self.repository = ComponentRepository(conn)

    def create(self, name: str, description: str = None,
               index_type: Union[IndexType, str] = IndexType.DECIMAL) -> SignatureComponent:
        """Create a component with index_count = 0.

        Raises:
            ConflictError: name already taken
            InvalidInputError: bad name or unknown index type
        """
        try:
            data = CreateComponentInput(name=name, description=description, index_type=index_type)
        except ValidationError as e:
            raise InvalidInputError(validation_message(e)) from None

        with transaction(self.conn, "create component"):
            try:
                component_id = self.repository.add(data.name, data.index_type, data.description)
            except sqlite3.IntegrityError:
                raise ConflictError(f"Component name '{data.name}' already exists") from None
            component = self.repository.get(component_id)

        logger.info(f"Created component {component_id} '{data.name}' ({data.index_type.value})")
        return component

    def get(self, component_id: int) -> SignatureComponent:
        component = self.repository.get(component_id)
        if component is None:
            raise NotFoundError("Component", component_id)
        return component

    def get_by_name(self, name: str) -> SignatureComponent:
        component = self.repository.find_by_name(name)
        if component is None:
            raise NotFoundError("Component", name)
        return component

    def list_all(self) -> List[SignatureComponent]:
        return self.repository.list_all()

    def update(self, component_id: int, patch: Union[UpdateComponentInput, dict]) -> SignatureComponent:
        """Apply a partial update. index_count is not part of the patch model.

        Raises:
            NotFoundError: no such component
            ConflictError: new name already taken
            InvalidInputError: patch does not validate
        """
        if isinstance(patch, dict):
            try:
                patch = UpdateComponentInput(**patch)
            except ValidationError as e:
                raise InvalidInputError(validation_message(e)) from None

        fields = patch.model_dump(exclude_unset=True)
        if 'name' in fields and fields['name'] is None:
            raise InvalidInputError("Component name cannot be null")
        if 'index_type' in fields and fields['index_type'] is None:
            raise InvalidInputError("Component index type cannot be null")

        with transaction(self.conn, "update component"):
            try:
                touched = self.repository.update_fields(component_id, fields)
            except sqlite3.IntegrityError:
                raise ConflictError(f"Component name '{fields.get('name')}' already exists") from None
            if touched == 0:
                raise NotFoundError("Component", component_id)
            component = self.repository.get(component_id)

        logger.info(f"Updated component {component_id}: {sorted(fields)}")
        return component

    def delete(self, component_id: int):
        """Delete a component together with its elements and their edges"""
        with transaction(self.conn, "delete component"):
            if self.repository.delete(component_id) == 0:
                raise NotFoundError("Component", component_id)
        logger.info(f"Deleted component {component_id}")

    def increment_counter(self, component_id: int) -> int:
        """Atomic +1 on the component counter; returns the new value"""
        new_count = self.repository.increment_counter(component_id)
        if new_count is None:
            raise NotFoundError("Component", component_id)
        return new_count
