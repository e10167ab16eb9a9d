"""
Shared HTTP client for upstream calls.

Provides a singleton httpx.AsyncClient so concurrent page fetches reuse one
connection pool.
"""
import asyncio
from typing import Optional

import httpx
from app.core.config import settings
from app.core.logging_config import log_info

_client: Optional[httpx.AsyncClient] = None
_client_lock: Optional[asyncio.Lock] = None

DEFAULT_HEADERS = {
    "Accept": "application/json",
    "Accept-Encoding": "gzip",
}


def _get_lock() -> asyncio.Lock:
    """Get or create the client lock."""
    global _client_lock
    if _client_lock is None:
        _client_lock = asyncio.Lock()
    return _client_lock


async def get_http_client() -> httpx.AsyncClient:
    """
    Get the shared AsyncClient instance.

    Creates a new instance if one doesn't exist or is closed. Cleanup is
    handled by the app's lifespan shutdown.
    """
    global _client
    if _client is None or _client.is_closed:
        async with _get_lock():
            if _client is None or _client.is_closed:
                _client = httpx.AsyncClient(
                    timeout=settings.http_timeout_seconds,
                    headers=DEFAULT_HEADERS,
                )
                log_info("HTTP client created", timeout=settings.http_timeout_seconds)
    return _client


async def close_http_client():
    """Close the shared client if it exists."""
    global _client
    async with _get_lock():
        if _client and not _client.is_closed:
            await _client.aclose()
            _client = None
            log_info("HTTP client closed")
