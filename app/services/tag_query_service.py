"""
Tag query service: sorting and paging of ranked tags.
"""
from typing import List, Optional, Sequence

from app.core.config import settings
from app.core.exceptions import InvalidQueryParametersError
from app.core.logging_config import log_debug
from app.core.snapshot_store import SnapshotStore, get_snapshot_store
from app.schemas.tag import RankedTag, SortBy, SortOrder, TagQueryRequest, TagQueryResponse
from app.services.tag_metrics import derive_percentages


def sort_tags(tags: Sequence[RankedTag], sort_by: SortBy, sort_order: SortOrder) -> List[RankedTag]:
    """
    Stable sort by name (ordinal) or percentage.

    Ties keep their input order for both directions.
    """
    if sort_by == SortBy.NAME:
        key = lambda tag: tag.name
    else:
        key = lambda tag: tag.percentage

    return sorted(tags, key=key, reverse=(sort_order == SortOrder.DESC))


def paginate_tags(tags: Sequence[RankedTag], page_number: int, page_size: int) -> List[RankedTag]:
    """Return the 1-based page of ``page_size`` items; past the end is empty."""
    if page_number < 1:
        raise InvalidQueryParametersError(f"pageNumber must be at least 1, got {page_number}")
    if page_size < 1:
        raise InvalidQueryParametersError(f"pageSize must be at least 1, got {page_size}")

    skip = (page_number - 1) * page_size
    return list(tags[skip:skip + page_size])


def validate_page_size_limit(request: TagQueryRequest, max_page_size: int) -> None:
    """Reject page sizes above the configured cap."""
    if request.page_size > max_page_size:
        raise InvalidQueryParametersError(
            f"pageSize must not exceed {max_page_size}, got {request.page_size}"
        )


def query_tags(tags: Sequence[RankedTag], request: TagQueryRequest) -> List[RankedTag]:
    """Sort then page ``tags`` according to ``request``."""
    sorted_tags = sort_tags(tags, request.sort_by, request.sort_order)
    return paginate_tags(sorted_tags, request.page_number, request.page_size)


class TagQueryService:
    """Serves ranked tag pages from the cached snapshot."""

    def __init__(self, store: Optional[SnapshotStore] = None):
        self.store = store or get_snapshot_store()

    def get_paginated_tags(self, request: TagQueryRequest) -> TagQueryResponse:
        """
        Rank the current snapshot and return the requested page.

        Returns an empty page when nothing has been imported yet.
        """
        validate_page_size_limit(request, settings.query_max_page_size)

        snapshot = self.store.get()
        ranked = derive_percentages(snapshot)
        page = query_tags(ranked, request)

        log_debug(
            "Tag query served",
            page_number=request.page_number,
            page_size=request.page_size,
            sort_by=request.sort_by.value,
            sort_order=request.sort_order.value,
            total=len(ranked),
            returned=len(page),
        )
        return TagQueryResponse(tags=page)
