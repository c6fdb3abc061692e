"""Rate limiting middleware."""

from collections.abc import Callable

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from starlette.types import ASGIApp

from src.database.client import get_session
from src.shared.exceptions import RateLimitExceededException

from .service import RateLimitDecision, RateLimitService, get_client_address


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Reject requests over the per-address budget before any routing.

    Every HTTP request counts, authenticated or not. WebSocket traffic is
    not counted (BaseHTTPMiddleware only sees HTTP scopes).
    """

    def __init__(self, app: ASGIApp, service: RateLimitService | None = None):
        super().__init__(app)
        self.service = service or RateLimitService()

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        address = get_client_address(request)

        # The service commits the counter before the route runs
        async with get_session() as session:
            decision = await self.service.check(session, address)

        if decision is RateLimitDecision.REJECT:
            exc = RateLimitExceededException()
            return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

        response: Response = await call_next(request)
        return response
