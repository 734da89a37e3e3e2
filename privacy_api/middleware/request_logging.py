"""Request/response logging middleware.

Logs a one-line summary (method, path, status, duration) for every request
under the configured path prefixes. At DEBUG level the request and
response bodies are logged as well, with credentials redacted from the
headers.
"""

import logging
import time
from uuid import uuid4

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)

# Headers never written to the log
REDACTED_HEADERS = frozenset({"authorization", "cookie", "set-cookie"})

# Longest body excerpt written to the log
MAX_LOGGED_BODY = 4000


def redact_headers(headers) -> dict[str, str]:
    """Copy headers, masking credentials."""
    return {
        key: "[REDACTED]" if key.lower() in REDACTED_HEADERS else value
        for key, value in headers.items()
    }


def _excerpt(body: bytes) -> str:
    text = body.decode("utf-8", errors="replace")
    if len(text) > MAX_LOGGED_BODY:
        return text[:MAX_LOGGED_BODY] + "...(truncated)"
    return text


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log requests and responses for selected routes."""

    def __init__(
        self,
        app: ASGIApp,
        path_prefixes: tuple[str, ...] = (),
        enabled: bool = True,
    ) -> None:
        super().__init__(app)
        self.path_prefixes = path_prefixes
        self.enabled = enabled

    def _should_log(self, path: str) -> bool:
        if not self.path_prefixes:
            return True
        return any(path.startswith(prefix) for prefix in self.path_prefixes)

    async def dispatch(self, request: Request, call_next) -> Response:
        """Process request and log its summary."""
        if not self.enabled or not self._should_log(request.url.path):
            return await call_next(request)

        request_id = request.headers.get("X-Request-ID") or uuid4().hex
        log_extra = {"request_id": request_id}
        verbose = logger.isEnabledFor(logging.DEBUG)
        started = time.perf_counter()

        if verbose:
            body = await request.body()
            logger.debug(
                f"Request {request.method} {request.url.path} "
                f"headers={redact_headers(request.headers)} body={_excerpt(body)}",
                extra=log_extra,
            )

        response = await call_next(request)

        if verbose:
            # Drain the streamed body so it can be logged, then re-wrap it
            response_body = b"".join([chunk async for chunk in response.body_iterator])
            logger.debug(
                f"Response {response.status_code} "
                f"headers={redact_headers(response.headers)} body={_excerpt(response_body)}",
                extra=log_extra,
            )
            response = Response(
                content=response_body,
                status_code=response.status_code,
                headers=dict(response.headers),
                media_type=response.media_type,
            )

        duration_ms = (time.perf_counter() - started) * 1000
        logger.info(
            f"{request.method} {request.url.path} status={response.status_code} "
            f"duration_ms={duration_ms:.1f}",
            extra=log_extra,
        )

        response.headers["X-Request-ID"] = request_id
        return response
