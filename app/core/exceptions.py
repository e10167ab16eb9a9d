"""
Custom application exceptions.
"""
from typing import Optional


class TagStatsAppException(Exception):
    """Base exception for the tag stats service."""
    pass


class UpstreamError(TagStatsAppException):
    """Base class for failures talking to the StackExchange API."""
    pass


class UpstreamUnavailableError(UpstreamError):
    """Raised when the upstream returns a non-success status or cannot be reached."""

    def __init__(self, status_code: Optional[int], body: str, page: Optional[int] = None):
        status = status_code if status_code is not None else "no response"
        where = f" (page {page})" if page is not None else ""
        super().__init__(f"StackExchange API request failed{where} with status {status}: {body}")
        self.status_code = status_code
        self.body = body
        self.page = page


class UpstreamMalformedError(UpstreamError):
    """Raised when the upstream body is not the expected JSON shape."""

    def __init__(self, message: str, page: Optional[int] = None):
        where = f" (page {page})" if page is not None else ""
        super().__init__(f"Malformed StackExchange response{where}: {message}")
        self.page = page


class InvalidQueryParametersError(TagStatsAppException):
    """Raised when paging or sorting parameters are out of range or unknown."""
    pass
