"""Request logging middleware."""

import logging
import time
from collections.abc import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from src.shared.rate_limit.service import get_client_address

logger = logging.getLogger("src.requests")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log one line per HTTP request: method, URL and client address."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        logger.info(f"{request.method} {request.url} - IP: {get_client_address(request)}")

        started = time.perf_counter()
        response: Response = await call_next(request)
        logger.debug(f"{request.method} {request.url.path} -> {response.status_code} ({time.perf_counter() - started:.3f}s)")
        return response
