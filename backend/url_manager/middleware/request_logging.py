"""Request logging middleware for tracking slug lookups and admin calls."""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from url_manager.core.logging import bind_context, clear_context, get_logger

logger = get_logger(__name__)

# Probed every few seconds by the orchestrator
QUIET_PATHS = frozenset({"/health", "/health/ready"})


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging all HTTP requests with timing and context.

    Adds request_id to all log messages during request processing, so that
    resolution warnings (dangling targets, depth exceeded) can be traced back
    to the request that hit them. Redirect responses also log where the
    visitor was sent.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        # Keep the caller's request ID when a proxy already assigned one
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        path = request.url.path
        log = logger.debug if path in QUIET_PATHS else logger.info

        # Bind context for all log messages in this request
        bind_context(
            request_id=request_id,
            method=request.method,
            path=path,
            client_ip=self._get_client_ip(request),
        )

        start_time = time.perf_counter()

        # Log request start
        log(
            "request_started",
            query_params=str(request.query_params),
            user_agent=request.headers.get("user-agent", ""),
        )

        try:
            response = await call_next(request)

            # Calculate processing time
            process_time = time.perf_counter() - start_time

            # Log request completion
            extra = {}
            if 300 <= response.status_code < 400 and "location" in response.headers:
                extra["location"] = response.headers["location"]
            log(
                "request_completed",
                status_code=response.status_code,
                process_time_ms=round(process_time * 1000, 2),
                **extra,
            )

            # Add headers
            response.headers["X-Request-ID"] = request_id
            response.headers["X-Process-Time"] = f"{process_time:.4f}"

            return response

        except Exception as exc:
            process_time = time.perf_counter() - start_time
            logger.exception(
                "request_failed",
                error=str(exc),
                process_time_ms=round(process_time * 1000, 2),
            )
            raise

        finally:
            # Clear context at end of request
            clear_context()

    def _get_client_ip(self, request: Request) -> str:
        """Extract client IP from request, handling proxies."""
        # Check for forwarded headers (when behind proxy/load balancer)
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            # Take the first IP in the chain
            return forwarded_for.split(",")[0].strip()

        real_ip = request.headers.get("x-real-ip")
        if real_ip:
            return real_ip

        # Fall back to direct client
        if request.client:
            return request.client.host

        return "unknown"
