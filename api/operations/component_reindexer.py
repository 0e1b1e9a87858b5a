"""Component re-indexing service

Rebuilds the display indices of every element in a component from a
deterministic ordering (name, case-insensitive, then id).
"""
import logging
import sqlite3
from dataclasses import dataclass, field
from typing import List, Optional

from errors import NotFoundError, TransactionAbortedError
from signature.component_repository import ComponentRepository
from signature.element_repository import ElementRepository
from signature.index_formatter import format_index
from storage.transaction import transaction

logger = logging.getLogger(__name__)


@dataclass
class IndexAssignment:
    """Index given to a single element"""
    element_id: int
    name: str
    index: str
    previous_index: Optional[str] = None

    @property
    def changed(self) -> bool:
        return self.index != self.previous_index


@dataclass
class ReindexSummary:
    """Summary of a component re-index"""
    component_id: int
    final_count: int
    dry_run: bool
    assignments: List[IndexAssignment] = field(default_factory=list)
    message: str = ""

    @property
    def changed_count(self) -> int:
        return sum(1 for a in self.assignments if a.changed)


class ComponentReindexer:
    """Service to reassign indices 1..n to the elements of one component

    Runs as a single transaction: on any failure nothing is written and the
    counter keeps its previous value.
    """

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self.components = ComponentRepository(conn)
        self.elements = ElementRepository(conn)

    def reindex(self, component_id: int, dry_run: bool = False) -> ReindexSummary:
        """Re-index all elements of a component

        Args:
            component_id: Component to rebuild
            dry_run: If True, report the assignments without writing them

        Returns:
            ReindexSummary with the assigned indices

        Raises:
            NotFoundError: component does not exist
            TransactionAbortedError: an element vanished or storage failed
        """
        if dry_run:
            return self.preview(component_id)

        with transaction(self.conn, f"reindex component {component_id}"):
            component = self._get_component(component_id)
            elements = self.elements.list_by_component(component_id)

            self.components.reset_counter(component_id)
            assignments = []
            for element in elements:
                position = self.components.increment_counter(component_id)
                index = format_index(position, component.index_type)
                if self.elements.update_index(element.id, index) == 0:
                    raise TransactionAbortedError(
                        f"Element {element.id} disappeared while re-indexing component {component_id}"
                    )
                assignments.append(IndexAssignment(element.id, element.name, index, element.index))

            self.components.set_counter(component_id, len(assignments))

        summary = self._summary(component_id, assignments, dry_run)
        logger.info(summary.message)
        return summary

    def preview(self, component_id: int) -> ReindexSummary:
        """Assignments a re-index would make; plain reads, no write lock"""
        component = self._get_component(component_id)
        assignments = [
            IndexAssignment(e.id, e.name, format_index(position, component.index_type), e.index)
            for position, e in enumerate(self.elements.list_by_component(component_id), start=1)
        ]
        return self._summary(component_id, assignments, dry_run=True)

    def _get_component(self, component_id: int):
        component = self.components.get(component_id)
        if component is None:
            raise NotFoundError("Component", component_id)
        return component

    @staticmethod
    def _summary(component_id: int, assignments: List[IndexAssignment], dry_run: bool) -> ReindexSummary:
        action = "Would re-index" if dry_run else "Re-indexed"
        changed = sum(1 for a in assignments if a.changed)
        return ReindexSummary(
            component_id=component_id,
            final_count=len(assignments),
            dry_run=dry_run,
            assignments=assignments,
            message=f"{action} {len(assignments)} elements of component {component_id} ({changed} changed)"
        )
