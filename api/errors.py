"""
Error taxonomy for the archive signature core.

NotFound / Conflict / InvalidInput are user-actionable and surface as-is.
TransactionAborted wraps storage failures inside an atomic sequence; the
sequence has already been rolled back when it is raised.
SearchFailed is the single failure a search caller sees.
"""
from dataclasses import dataclass
from typing import Any


class ArchiveCoreError(Exception):
    """Base class for all errors raised by the core"""


class NotFoundError(ArchiveCoreError):
    """Referenced component, element or parent does not exist"""

    def __init__(self, entity: str, entity_id: Any):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} with ID {entity_id} not found")


class ConflictError(ArchiveCoreError):
    """Unique constraint violated (e.g. duplicate component name)"""


class InvalidInputError(ArchiveCoreError):
    """Malformed path, unknown numbering scheme, self-parent or cycle"""


class TransactionAbortedError(ArchiveCoreError):
    """A step inside an atomic sequence failed and everything was rolled back"""


class SearchFailedError(ArchiveCoreError):
    """Data or count query failed; no partial result is returned"""


@dataclass(frozen=True)
class QueryCompileWarning:
    """Non-fatal compile problem: the predicate was skipped.

    Never raised. Collected on the compiled search and logged.
    """
    field: str
    condition: str
    reason: str

    def __str__(self) -> str:
        return f"Ignoring predicate on '{self.field}' ({self.condition}): {self.reason}"
