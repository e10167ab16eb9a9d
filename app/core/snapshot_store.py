"""
In-process cache slot for the imported tag snapshot.

The slot holds one immutable Snapshot. Writers build a complete snapshot
first and then swap the reference, so readers always see either the previous
or the new snapshot in full.
"""
import logging
import threading
from typing import Optional

from app.core.config import SNAPSHOT_CACHE_KEY
from app.core.logging_config import LogCategory, log_info
from app.schemas.tag import Snapshot, SnapshotStatus

logger = logging.getLogger(LogCategory.APP)


class SnapshotStore:
    """
    Single named cache slot with last-writer-wins replacement.

    ``get`` returns None until the first ``set``; an empty Snapshot is a
    valid value and is reported as imported.
    """

    def __init__(self, name: str = SNAPSHOT_CACHE_KEY):
        self._name = name
        self._snapshot: Optional[Snapshot] = None
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return self._name

    def get(self) -> Optional[Snapshot]:
        """Return the current snapshot, or None if nothing was imported yet."""
        with self._lock:
            snapshot = self._snapshot

        if snapshot is None:
            logger.debug(f"Snapshot cache MISS for slot={self._name}")
        return snapshot

    def set(self, snapshot: Snapshot) -> None:
        """Replace the slot contents with ``snapshot``."""
        if not isinstance(snapshot, Snapshot):
            raise TypeError(f"Expected Snapshot, got {type(snapshot).__name__}")

        with self._lock:
            self._snapshot = snapshot

        log_info(
            f"Snapshot stored in slot={self._name}",
            tag_count=len(snapshot.tags),
            imported_at=snapshot.imported_at.isoformat(),
        )

    def clear(self) -> None:
        """Drop the cached snapshot."""
        with self._lock:
            self._snapshot = None
        log_info(f"Snapshot cleared from slot={self._name}")

    def status(self) -> SnapshotStatus:
        snapshot = self.get()
        if snapshot is None:
            return SnapshotStatus(imported=False)
        return SnapshotStatus(
            imported=True,
            tag_count=len(snapshot.tags),
            imported_at=snapshot.imported_at,
        )


# Global snapshot store instance
_snapshot_store: Optional[SnapshotStore] = None
_snapshot_store_lock = threading.Lock()


def get_snapshot_store() -> SnapshotStore:
    """
    Get or create the global snapshot store.

    Returns:
        SnapshotStore singleton instance
    """
    global _snapshot_store

    if _snapshot_store is None:
        with _snapshot_store_lock:
            if _snapshot_store is None:
                _snapshot_store = SnapshotStore()

    return _snapshot_store
