"""
Shared API dependencies.
"""
from typing import Annotated

from fastapi import Depends

from app.core.snapshot_store import SnapshotStore, get_snapshot_store
from app.middleware.request_logging import request_id_ctx
from app.services.tag_import_service import TagImportService, get_tag_import_service
from app.services.tag_query_service import TagQueryService


def get_request_id() -> str:
    """
    Dependency to get the current request ID from context.

    Returns:
        The current request ID, or 'unknown' if not in a request context.
    """
    return request_id_ctx.get()


def get_store() -> SnapshotStore:
    """Dependency returning the process-wide snapshot store."""
    return get_snapshot_store()


def get_import_service() -> TagImportService:
    """Dependency returning the process-wide import service."""
    return get_tag_import_service()


def get_query_service(store: Annotated[SnapshotStore, Depends(get_store)]) -> TagQueryService:
    """Dependency building a query service over the snapshot store."""
    return TagQueryService(store)
