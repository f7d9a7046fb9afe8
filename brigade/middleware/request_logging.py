"""
Request logging middleware with request ID tracking and structured logging.
"""
import logging
import time
import uuid
from contextvars import ContextVar

from brigade.core.logging_config import LogCategory

logger = logging.getLogger(LogCategory.REQUEST.value)

# Context variable for request ID propagation
request_id_ctx: ContextVar[str] = ContextVar('request_id', default='unknown')

DEFAULT_STATUS_CODE = 500
SLOW_REQUEST_MS = 10000


class RequestLoggingMiddleware:
    """
    Assigns each HTTP request an id, exposes it through ``request_id_ctx``
    and the ``x-request-id`` response header, and logs start, completion
    and failures.
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = str(uuid.uuid4())
        request_id_ctx.set(request_id)
        start_time = time.time()

        method = scope.get("method", "UNKNOWN")
        path = scope.get("path", "/")
        client_host = scope["client"][0] if scope.get("client") else "unknown"
        base_extra = {
            "request_id": request_id,
            "method": method,
            "path": path,
            "client_ip": client_host,
        }
        logger.info("Request started", extra={**base_extra, "event": "request_start"})

        status_code = DEFAULT_STATUS_CODE
        error_message = None

        async def send_wrapper(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", DEFAULT_STATUS_CODE)
                headers = list(message.get("headers", []))
                headers.append([b"x-request-id", request_id.encode()])
                message["headers"] = headers
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as e:
            error_message = str(e)
            logger.error(
                "Request failed with exception",
                extra={**base_extra, "error": error_message, "event": "request_exception"},
                exc_info=True
            )
            raise
        finally:
            duration_ms = round((time.time() - start_time) * 1000, 2)
            log_extra = {
                **base_extra,
                "status_code": status_code,
                "duration_ms": duration_ms,
                "event": "request_complete",
            }
            if duration_ms >= SLOW_REQUEST_MS:
                logger.warning("Slow request", extra={**log_extra, "event": "request_slow"})

            if error_message is not None:
                logger.error("Request completed with error", extra={**log_extra, "error": error_message})
            elif status_code >= 500:
                logger.error("Request completed with server error", extra=log_extra)
            elif status_code >= 400:
                logger.warning("Request completed with client error", extra=log_extra)
            else:
                logger.info("Request completed successfully", extra=log_extra)
