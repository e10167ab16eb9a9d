"""
Tag schemas.
"""
from datetime import datetime
from enum import Enum
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from app.core.exceptions import InvalidQueryParametersError


class _CaseInsensitiveEnum(str, Enum):
    """String enum that accepts any casing of its values."""

    @classmethod
    def _missing_(cls, value: Any):
        if isinstance(value, str):
            lowered = value.strip().lower()
            for member in cls:
                if member.value.lower() == lowered:
                    return member
        return None


class SortBy(_CaseInsensitiveEnum):
    """Sort key for tag queries."""
    NAME = "Name"
    PERCENTAGE = "Percentage"


class SortOrder(_CaseInsensitiveEnum):
    """Sort direction for tag queries."""
    ASC = "Asc"
    DESC = "Desc"


class TagRecord(BaseModel):
    """One tag and its question count as reported by StackExchange."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    count: int = Field(..., ge=0)


class StackExchangeTagsPage(BaseModel):
    """Subset of the StackExchange ``/tags`` response wrapper we rely on."""
    model_config = ConfigDict(extra="ignore")

    items: List[TagRecord]
    has_more: bool = False
    quota_remaining: Optional[int] = None


class Snapshot(BaseModel):
    """
    Full imported tag universe at one point in time.

    Immutable: an import builds a new snapshot and swaps it into the store.
    """
    model_config = ConfigDict(frozen=True)

    tags: Tuple[TagRecord, ...] = ()
    imported_at: datetime
    pages_fetched: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.tags


class RankedTag(BaseModel):
    """Tag annotated with its share of total usage."""
    name: str
    percentage: float = Field(..., description="Share of total usage, rounded to 5 decimals")


class TagQueryRequest(BaseModel):
    """Paging and sorting options for a tag query."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    page_number: int = Field(1, ge=1, alias="pageNumber")
    page_size: int = Field(10, ge=1, alias="pageSize")
    sort_by: SortBy = Field(SortBy.NAME, alias="sortBy")
    sort_order: SortOrder = Field(SortOrder.ASC, alias="sortOrder")

    @field_validator('sort_by', mode='before')
    @classmethod
    def parse_sort_by(cls, v):
        return SortBy(v) if isinstance(v, str) else v

    @field_validator('sort_order', mode='before')
    @classmethod
    def parse_sort_order(cls, v):
        return SortOrder(v) if isinstance(v, str) else v

    @classmethod
    def from_params(
        cls,
        page_number: Optional[int] = None,
        page_size: Optional[int] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
    ) -> "TagQueryRequest":
        """
        Build a request from raw query-string values.

        Missing values fall back to the defaults. Anything out of range or
        unrecognised raises InvalidQueryParametersError.
        """
        raw = {
            "page_number": page_number,
            "page_size": page_size,
            "sort_by": sort_by,
            "sort_order": sort_order,
        }
        try:
            request = cls(**{key: value for key, value in raw.items() if value is not None})
        except ValidationError as exc:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
                for err in exc.errors()
            )
            raise InvalidQueryParametersError(f"Invalid tag query parameters: {problems}") from exc
        return request


class TagQueryResponse(BaseModel):
    """Page of ranked tags."""
    tags: List[RankedTag]

    class Config:
        json_schema_extra = {
            "example": {
                "tags": [
                    {"name": "javascript", "percentage": 8.41237},
                    {"name": "python", "percentage": 7.80211},
                ]
            }
        }


class ImportResult(BaseModel):
    """Outcome of a full tag import."""
    tag_count: int
    pages_fetched: int
    empty_pages: List[int] = Field(default_factory=list)
    imported_at: datetime
    duration_ms: float
    is_empty: bool

    @field_validator('duration_ms')
    @classmethod
    def round_duration(cls, v: float) -> float:
        return round(v, 2)


class SnapshotStatus(BaseModel):
    """Current state of the cached snapshot."""
    imported: bool
    tag_count: int = 0
    imported_at: Optional[datetime] = None
