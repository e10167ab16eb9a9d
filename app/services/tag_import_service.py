"""
Tag import service.

Fetches the configured number of StackExchange tag pages, merges them and
publishes the result to the snapshot store as one atomic replace.

Failure policy: any page error aborts the whole import. Sibling fetches
still in flight are cancelled and the previously cached snapshot is kept.
"""
import asyncio
import logging
import time
from typing import List, Optional, Tuple

from app.core.config import IMPORT_STRATEGIES, settings
from app.core.exceptions import UpstreamError
from app.core.logging_config import log_import_event
from app.core.snapshot_store import SnapshotStore, get_snapshot_store
from app.core.time_utils import utc_now
from app.schemas.tag import ImportResult, Snapshot, TagRecord
from app.services.stackexchange_client import StackExchangeClient

PageResult = Tuple[int, List[TagRecord]]


class TagImportService:
    """Runs full tag imports into a SnapshotStore."""

    def __init__(
        self,
        client: Optional[StackExchangeClient] = None,
        store: Optional[SnapshotStore] = None,
        page_size: Optional[int] = None,
        page_count: Optional[int] = None,
        strategy: Optional[str] = None,
        max_concurrency: Optional[int] = None,
    ):
        self.client = client or StackExchangeClient()
        self.store = store or get_snapshot_store()
        self.page_size = settings.import_page_size if page_size is None else page_size
        self.page_count = settings.import_page_count if page_count is None else page_count
        self.strategy = settings.import_strategy if strategy is None else strategy.lower().strip()
        self.max_concurrency = (
            settings.import_max_concurrency if max_concurrency is None else max_concurrency
        )

        if self.strategy not in IMPORT_STRATEGIES:
            raise ValueError(
                f"strategy must be either 'parallel' or 'sequential'. Got: {self.strategy}"
            )
        for field, value in (
            ("page_size", self.page_size),
            ("page_count", self.page_count),
            ("max_concurrency", self.max_concurrency),
        ):
            if value <= 0:
                raise ValueError(f"{field} must be positive, got {value}")
        self._import_lock = asyncio.Lock()

    async def import_all(self) -> ImportResult:
        """
        Fetch every page, merge, and replace the cached snapshot.

        An import that yields no tags still replaces the snapshot with an
        empty one.

        Raises:
            UpstreamUnavailableError: a page returned a non-success status
            UpstreamMalformedError: a page body could not be parsed
        """
        async with self._import_lock:
            started = time.perf_counter()
            log_import_event(
                "Tag import started",
                strategy=self.strategy,
                page_count=self.page_count,
                page_size=self.page_size,
            )

            try:
                if self.strategy == "sequential":
                    pages = await self._fetch_sequential()
                else:
                    pages = await self._fetch_parallel()
            except UpstreamError as exc:
                log_import_event(
                    "Tag import aborted, keeping previous snapshot",
                    level=logging.ERROR,
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
                raise

            merged = merge_pages(pages)
            snapshot = Snapshot(
                tags=tuple(merged),
                imported_at=utc_now(),
                pages_fetched=len(pages),
            )
            self.store.set(snapshot)

            empty_pages = [page_number for page_number, items in pages if not items]
            result = ImportResult(
                tag_count=len(snapshot.tags),
                pages_fetched=len(pages),
                empty_pages=empty_pages,
                imported_at=snapshot.imported_at,
                duration_ms=(time.perf_counter() - started) * 1000,
                is_empty=snapshot.is_empty,
            )

            if result.is_empty:
                log_import_event(
                    "Tag import finished with no tags, cached snapshot is now empty",
                    level=logging.WARNING,
                    pages_fetched=result.pages_fetched,
                )
            else:
                log_import_event(
                    "Tag import completed",
                    tag_count=result.tag_count,
                    pages_fetched=result.pages_fetched,
                    empty_pages=empty_pages,
                    duration_ms=result.duration_ms,
                )
            return result

    async def _fetch_page(self, page_number: int) -> PageResult:
        items = await self.client.fetch_tags(self.page_size, page_number)
        log_import_event(
            "Tag page fetched",
            level=logging.DEBUG,
            page=page_number,
            items=len(items),
        )
        return page_number, items

    async def _fetch_sequential(self) -> List[PageResult]:
        """Fetch pages in order, stopping at the first empty page."""
        pages: List[PageResult] = []
        for page_number in range(1, self.page_count + 1):
            page = await self._fetch_page(page_number)
            pages.append(page)
            if not page[1]:
                log_import_event("Empty page reached, stopping early", page=page_number)
                break
        return pages

    async def _fetch_parallel(self) -> List[PageResult]:
        """Fetch all pages concurrently and join once they have all finished."""
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def bounded(page_number: int) -> PageResult:
            async with semaphore:
                return await self._fetch_page(page_number)

        tasks = [
            asyncio.create_task(bounded(page_number))
            for page_number in range(1, self.page_count + 1)
        ]
        try:
            results = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        return list(results)


def merge_pages(pages: List[PageResult]) -> List[TagRecord]:
    """Concatenate page items in page order."""
    merged: List[TagRecord] = []
    for _, items in sorted(pages, key=lambda page: page[0]):
        merged.extend(items)
    return merged


# Global import service instance
_tag_import_service: Optional[TagImportService] = None


def get_tag_import_service() -> TagImportService:
    """Get or create the process-wide import service."""
    global _tag_import_service
    if _tag_import_service is None:
        _tag_import_service = TagImportService()
    return _tag_import_service
