import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.core.logging import bind_request_context, get_logger

log = get_logger("http")


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Structured access log per request.
    - binds request_id / method / path into the structlog context
    - echoes the request id back as X-Request-ID
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.perf_counter()
        rid = bind_request_context(
            method=request.method,
            path=request.url.path,
            request_id=request.headers.get("x-request-id"),
        )
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers["X-Request-ID"] = rid
            return response
        finally:
            log.info(
                "http_access",
                status_code=status_code,
                duration_ms=round((time.perf_counter() - start) * 1000.0, 2),
            )
