from enum import Enum
from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, ValidationError, field_validator

from config import default_config
from domain_models import IndexType
from errors import InvalidInputError

T = TypeVar("T")


class SearchCondition(str, Enum):
    EQ = "EQ"
    NEQ = "NEQ"
    GT = "GT"
    LT = "LT"
    GTE = "GTE"
    LTE = "LTE"
    FRAGMENT = "FRAGMENT"
    ANY_OF = "ANY_OF"
    STARTS_WITH = "STARTS_WITH"
    CONTAINS_SEQUENCE = "CONTAINS_SEQUENCE"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class SearchQueryElement(BaseModel):
    """One predicate of an abstract search query"""
    model_config = ConfigDict(populate_by_name=True)

    field: str = Field(..., min_length=1, description="Column or custom field name")
    condition: SearchCondition
    value: Any = None
    negate: bool = Field(default=False, alias="not", description="Negate the resolved predicate")


class SortSpec(BaseModel):
    field: str = Field(..., min_length=1)
    direction: SortDirection = SortDirection.ASC


class SearchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    query: List[SearchQueryElement] = Field(default_factory=list)
    page: int = Field(default=1, ge=1)
    page_size: int = Field(
        default_factory=lambda: default_config.search.default_page_size,
        alias="pageSize",
        description="-1 means unbounded"
    )
    sort: Optional[SortSpec] = None

    @field_validator("page_size")
    @classmethod
    def check_page_size(cls, value: int) -> int:
        if value == -1 or value >= 1:
            return value
        raise ValueError("pageSize must be -1 (unbounded) or a positive integer")

    @property
    def unbounded(self) -> bool:
        return self.page_size == -1


class SearchResponse(BaseModel, Generic[T]):
    model_config = ConfigDict(populate_by_name=True)

    data: List[T]
    page: int
    page_size: int = Field(..., alias="pageSize")
    total_pages: int = Field(..., alias="totalPages")
    total_size: int = Field(..., alias="totalSize")


def _parse_index_type(value):
    if value is None:
        return value
    try:
        return IndexType.parse(value)
    except InvalidInputError as e:
        raise ValueError(str(e)) from None


class CreateComponentInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    index_type: IndexType = IndexType.DECIMAL

    normalize_index_type = field_validator("index_type", mode="before")(_parse_index_type)


class UpdateComponentInput(BaseModel):
    """PATCH payload; index_count is managed internally and is not accepted here"""
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    index_type: Optional[IndexType] = None

    normalize_index_type = field_validator("index_type", mode="before")(_parse_index_type)


class CreateElementInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    component_id: PositiveInt
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    index: Optional[str] = Field(default=None, max_length=255, description="Explicit index; generated when omitted")
    parent_ids: List[PositiveInt] = Field(default_factory=list)


class UpdateElementInput(BaseModel):
    """PATCH payload; unset fields are left untouched, parent_ids replaces the whole set"""
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    index: Optional[str] = Field(default=None, max_length=255)
    parent_ids: Optional[List[PositiveInt]] = None


def validation_message(error: ValidationError) -> str:
    """Flatten a pydantic ValidationError into one line"""
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc']) or 'input'}: {err['msg']}"
        for err in error.errors()
    )
