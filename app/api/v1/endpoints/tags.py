"""
Tag endpoints.
"""
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, status

from app.api.dependencies import get_import_service, get_query_service, get_request_id
from app.core.logging_config import log_info
from app.schemas.tag import ImportResult, TagQueryRequest, TagQueryResponse
from app.services.tag_import_service import TagImportService
from app.services.tag_query_service import TagQueryService

router = APIRouter()


@router.post(
    "/import",
    response_model=ImportResult,
    status_code=status.HTTP_200_OK,
    responses={
        502: {"description": "StackExchange API unavailable or returned a malformed body"},
        500: {"description": "Internal server error"},
    }
)
async def import_tags(
    import_service: Annotated[TagImportService, Depends(get_import_service)],
    request_id: Annotated[str, Depends(get_request_id)],
):
    """
    Re-import all tags from StackExchange.

    Replaces the cached snapshot once every page has been fetched. On failure
    the previous snapshot is kept.
    """
    log_info("Tag import requested", request_id=request_id)
    return await import_service.import_all()


@router.get(
    "",
    response_model=TagQueryResponse,
    responses={
        400: {"description": "Invalid paging or sorting parameters"},
    }
)
def get_tags(
    query_service: Annotated[TagQueryService, Depends(get_query_service)],
    page_number: Optional[int] = Query(None, alias="pageNumber", description="1-based page number (default 1)"),
    page_size: Optional[int] = Query(None, alias="pageSize", description="Tags per page (default 10)"),
    sort_by: Optional[str] = Query(None, alias="sortBy", description="Name or Percentage (default Name)"),
    sort_order: Optional[str] = Query(None, alias="sortOrder", description="Asc or Desc (default Asc)"),
):
    """
    Get a page of tags with their share of total usage.

    Returns an empty list until the first import has completed.
    """
    request = TagQueryRequest.from_params(
        page_number=page_number,
        page_size=page_size,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return query_service.get_paginated_tags(request)
