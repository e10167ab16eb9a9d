"""
StackExchange API client for fetching popular tags.
"""
import gzip
import json
import logging
import zlib
from typing import List, Optional
from urllib.parse import urlencode

import httpx
from pydantic import ValidationError

from app.core.config import settings
from app.core.exceptions import UpstreamMalformedError, UpstreamUnavailableError
from app.core.http_client import get_http_client
from app.core.logging_config import log_upstream_event
from app.schemas.tag import StackExchangeTagsPage, TagRecord

GZIP_MAGIC = b"\x1f\x8b"
# Truncation limit for upstream error bodies echoed into exceptions
MAX_ERROR_BODY_CHARS = 1000


class StackExchangeClient:
    """Fetches single pages of tags from the StackExchange ``/tags`` endpoint."""

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        base_url: Optional[str] = None,
        site: Optional[str] = None,
        key: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self._http_client = http_client
        self._base_url = base_url or settings.stackexchange_base_url
        self._site = site or settings.stackexchange_site
        self._key = key if key is not None else settings.stackexchange_key
        self._timeout = timeout or settings.http_timeout_seconds

    def build_tags_url(self, page_size: int, page_number: int) -> str:
        """Build the request URL for one page of popular tags, most used first."""
        params = {
            "site": self._site,
            "pagesize": page_size,
            "page": page_number,
            "order": "desc",
            "sort": "popular",
        }
        if self._key:
            params["key"] = self._key
        return f"{self._base_url}?{urlencode(params)}"

    async def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is not None:
            return self._http_client
        return await get_http_client()

    async def fetch_tags(self, page_size: int, page_number: int) -> List[TagRecord]:
        """
        Fetch one page of tags.

        Raises:
            UpstreamUnavailableError: non-2xx status, timeout or connection failure
            UpstreamMalformedError: body does not decompress, or is not JSON shaped
                like ``{"items": [...]}``
        """
        url = self.build_tags_url(page_size, page_number)
        client = await self._get_client()

        try:
            resp = await client.get(url, timeout=self._timeout)
        except httpx.DecodingError as e:
            raise UpstreamMalformedError(f"body could not be decoded ({e})", page=page_number) from e
        except httpx.TimeoutException as e:
            raise UpstreamUnavailableError(None, f"request timed out: {e}", page=page_number) from e
        except httpx.RequestError as e:
            raise UpstreamUnavailableError(None, f"{type(e).__name__}: {e}", page=page_number) from e

        if not resp.is_success:
            body = resp.text[:MAX_ERROR_BODY_CHARS]
            log_upstream_event(
                "StackExchange request failed",
                level=logging.WARNING,
                url=url,
                status_code=resp.status_code,
            )
            raise UpstreamUnavailableError(resp.status_code, body, page=page_number)

        page = self._parse_page(resp.content, page_number)
        log_upstream_event(
            "StackExchange page fetched",
            level=logging.DEBUG,
            page=page_number,
            items=len(page.items),
            has_more=page.has_more,
            quota_remaining=page.quota_remaining,
        )
        return list(page.items)

    @staticmethod
    def _decode_body(raw: bytes) -> bytes:
        """Inflate a gzip body the transport left compressed."""
        if raw[:2] == GZIP_MAGIC:
            return gzip.decompress(raw)
        return raw

    @classmethod
    def _parse_page(cls, raw: bytes, page_number: int) -> StackExchangeTagsPage:
        try:
            payload = json.loads(cls._decode_body(raw))
        except (OSError, EOFError, zlib.error, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise UpstreamMalformedError(f"body is not valid JSON ({e})", page=page_number) from e

        if not isinstance(payload, dict):
            raise UpstreamMalformedError(
                f"expected a JSON object, got {type(payload).__name__}", page=page_number
            )

        try:
            return StackExchangeTagsPage.model_validate(payload)
        except ValidationError as e:
            raise UpstreamMalformedError(
                f"unexpected shape: {e.error_count()} validation error(s), first: {e.errors()[0]['msg']}",
                page=page_number,
            ) from e
