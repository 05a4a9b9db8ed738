"""Access logging and per-request context for the blog API.

Every request gets a request id (taken from ``X-Request-ID`` or freshly
generated) bound into the log context until the response is sent. Trace
and correlation ids from upstream proxies are bound the same way.
"""

import time
from collections.abc import Awaitable, Callable, Mapping

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from src.core.context import (
    clear_context,
    set_correlation_id,
    set_request_id,
    set_trace_id,
)


logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def trace_id_from(headers: Mapping[str, str]) -> str | None:
    """Trace id from ``X-Trace-ID`` or, failing that, a W3C ``traceparent``.

    ``traceparent`` looks like ``{version}-{trace-id}-{parent-id}-{flags}``.
    """
    explicit = headers.get("x-trace-id")
    if explicit:
        return explicit

    version, _, rest = (headers.get("traceparent") or "").partition("-")
    trace_id = rest.split("-", 1)[0]
    return trace_id if version and trace_id else None


def client_address(request: Request) -> str | None:
    """Original client address, preferring the first ``X-Forwarded-For`` hop."""
    forwarded = request.headers.get("x-forwarded-for", "")
    first_hop = forwarded.split(",", 1)[0].strip()
    if first_hop:
        return first_hop
    return request.client.host if request.client else None


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind log context for each request and write an access log line.

    Paths starting with any entry of ``exclude_paths`` are served silently
    but still get their request id echoed back.
    """

    def __init__(
        self,
        app: ASGIApp,
        log_requests: bool = True,
        exclude_paths: list[str] | None = None,
    ) -> None:
        super().__init__(app)
        self.log_requests = log_requests
        self.exclude_paths = tuple(exclude_paths or ["/health"])

    def is_logged(self, path: str) -> bool:
        return self.log_requests and not path.startswith(self.exclude_paths)

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        started = time.perf_counter()
        request_id = self._bind_context(request)
        path = request.url.path
        logged = self.is_logged(path)

        if logged:
            logger.info(
                "request_started",
                method=request.method,
                path=path,
                query=str(request.query_params) or None,
                client_ip=client_address(request),
            )

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.exception(
                "request_failed",
                method=request.method,
                path=path,
                error=str(exc),
                error_type=type(exc).__name__,
                duration_ms=_elapsed_ms(started),
            )
            raise
        else:
            if logged:
                self._log_completed(request, response, _elapsed_ms(started))
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            clear_context()

    def _bind_context(self, request: Request) -> str:
        """Bind ids from the incoming headers. Returns the request id."""
        request_id = set_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id

        trace_id = trace_id_from(request.headers)
        if trace_id:
            set_trace_id(trace_id)

        correlation_id = request.headers.get("x-correlation-id")
        if correlation_id:
            set_correlation_id(correlation_id)

        return request_id

    @staticmethod
    def _log_completed(request: Request, response: Response, duration_ms: float):
        # Client and server errors stand out at warning level
        log = logger.warning if response.status_code >= 400 else logger.info
        log(
            "request_completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=duration_ms,
        )


__all__ = ["RequestContextMiddleware", "client_address", "trace_id_from"]
