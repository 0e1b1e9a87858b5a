"""Domain models for the signature indexing engine"""
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Optional, List, Dict, Any

from errors import InvalidInputError


class IndexType(str, Enum):
    """Numbering scheme of a signature component"""
    DECIMAL = "decimal"
    ROMAN = "roman"
    LOWER_ALPHA = "lowerAlpha"
    UPPER_ALPHA = "upperAlpha"

    @classmethod
    def parse(cls, value) -> 'IndexType':
        """Parse a scheme name, accepting the legacy names stored by older versions"""
        if isinstance(value, cls):
            return value
        legacy = _LEGACY_INDEX_TYPES.get(value)
        if legacy is not None:
            return legacy
        try:
            return cls(value)
        except ValueError:
            raise InvalidInputError(f"Unknown index type: {value!r}") from None


_LEGACY_INDEX_TYPES = {
    "dec": IndexType.DECIMAL,
    "small_char": IndexType.LOWER_ALPHA,
    "capital_char": IndexType.UPPER_ALPHA,
}


@dataclass
class SignatureComponent:
    """A named classification axis with its own numbering scheme and counter"""
    id: int
    name: str
    index_type: IndexType
    index_count: int = 0
    description: Optional[str] = None
    created_on: Optional[str] = None
    modified_on: Optional[str] = None

    @classmethod
    def from_row(cls, row) -> 'SignatureComponent':
        """Build from a signature_components row (sqlite3.Row or mapping)"""
        return cls(
            id=row['id'],
            name=row['name'],
            description=row['description'],
            index_count=row['index_count'],
            index_type=IndexType.parse(row['index_type']),
            created_on=row['created_on'],
            modified_on=row['modified_on']
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['index_type'] = self.index_type.value
        return data


@dataclass
class SignatureElement:
    """A node of one component; may have several parent elements (DAG)"""
    id: int
    component_id: int
    name: str
    index: Optional[str] = None
    description: Optional[str] = None
    created_on: Optional[str] = None
    modified_on: Optional[str] = None
    parent_ids: List[int] = field(default_factory=list)

    # Optional, populated on request
    component: Optional[SignatureComponent] = None
    parents: Optional[List['SignatureElement']] = None

    @classmethod
    def from_row(cls, row, parent_ids: Optional[List[int]] = None) -> 'SignatureElement':
        """Build from a signature_elements row (sqlite3.Row or mapping)"""
        return cls(
            id=row['id'],
            component_id=row['component_id'],
            name=row['name'],
            index=row['index'],
            description=row['description'],
            created_on=row['created_on'],
            modified_on=row['modified_on'],
            parent_ids=list(parent_ids or [])
        )

    @property
    def label(self) -> str:
        """Display label: "[index] name", or just the name when unindexed"""
        return f"[{self.index}] {self.name}" if self.index else self.name

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'id': self.id,
            'component_id': self.component_id,
            'name': self.name,
            'index': self.index,
            'description': self.description,
            'created_on': self.created_on,
            'modified_on': self.modified_on,
            'parent_ids': list(self.parent_ids),
        }
        if self.component is not None:
            data['component'] = self.component.to_dict()
        if self.parents is not None:
            data['parents'] = [p.to_dict() for p in self.parents]
        return data


@dataclass
class ArchiveRecord:
    """Archival record carrying descriptive signature paths"""
    id: int
    title: str
    active: bool = True
    descriptive_signatures: List[List[int]] = field(default_factory=list)
    created_on: Optional[str] = None
    modified_on: Optional[str] = None
