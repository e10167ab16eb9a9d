"""
Request logging middleware with request ID tracking.
"""
import logging
import time
import uuid
from contextvars import ContextVar

from app.core.logging_config import LogCategory, log_api_request

logger = logging.getLogger(LogCategory.REQUEST)

# Context variable for request ID propagation
request_id_ctx: ContextVar[str] = ContextVar('request_id', default='unknown')

# Default status code when response is not captured
DEFAULT_STATUS_CODE = 500
SLOW_REQUEST_MS = 10000


class RequestLoggingMiddleware:
    """
    ASGI middleware that tags each HTTP request with an ID and logs its outcome.

    - Generates a request ID and stores it in ``request_id_ctx``
    - Adds an ``x-request-id`` response header
    - Logs method, path, status and duration once the response is sent
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            # Lifespan and websocket scopes pass straight through
            await self.app(scope, receive, send)
            return

        request_id = str(uuid.uuid4())
        request_id_ctx.set(request_id)
        start_time = time.time()

        method = scope.get("method", "UNKNOWN")
        path = scope.get("path", "/")
        status_code = DEFAULT_STATUS_CODE

        async def send_wrapper(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", DEFAULT_STATUS_CODE)
                headers = list(message.get("headers", []))
                headers.append((b"x-request-id", request_id.encode()))
                message["headers"] = headers
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as e:
            logger.error(
                f"[{request_id}] Request failed with exception: {method} {path} ({type(e).__name__}: {e})",
                exc_info=True,
            )
            raise
        finally:
            duration_ms = round((time.time() - start_time) * 1000, 2)
            if duration_ms >= SLOW_REQUEST_MS:
                logger.warning(f"[{request_id}] Slow request: {method} {path} took {duration_ms}ms")
            log_api_request(method, path, status_code, duration_ms, request_id=request_id)
