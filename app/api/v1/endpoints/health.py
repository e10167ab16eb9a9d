"""
Simple health check endpoint.
"""
from typing import Annotated, Any, Dict

from fastapi import APIRouter, Depends

from app.api.dependencies import get_store
from app.core.config import settings
from app.core.snapshot_store import SnapshotStore
from app.core.time_utils import serialize_datetime, utc_now

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=Dict[str, Any],
)
async def health_check(store: Annotated[SnapshotStore, Depends(get_store)]):
    """
    Health check with snapshot status.

    Reports "degraded" until the first successful import, since every tag
    query returns an empty page until then.
    """
    snapshot_status = store.status()
    return {
        "status": "healthy" if snapshot_status.imported else "degraded",
        "timestamp": serialize_datetime(utc_now()),
        "service": settings.app_name,
        "version": settings.app_version,
        "snapshot": {
            "imported": snapshot_status.imported,
            "tag_count": snapshot_status.tag_count,
            "imported_at": serialize_datetime(snapshot_status.imported_at),
        },
    }
